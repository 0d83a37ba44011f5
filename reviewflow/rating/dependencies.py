import fastapi

from reviewflow import config, dependencies
from reviewflow.rating import repository, service
from reviewflow.store import dependencies as store_dependencies
from reviewflow.store import service as store_service

session_repository: repository.AbstractRatingSessionRepository | None = None


def get_rating_session_repository() -> repository.AbstractRatingSessionRepository:
    global session_repository
    if session_repository is None:
        session_repository = repository.InMemoryRatingSessionRepository()
    return session_repository


def get_rating_flow_factory(
    store: store_service.StoreService = fastapi.Depends(
        store_dependencies.get_store_service
    ),
    app_config: config.AppConfig = fastapi.Depends(dependencies.get_app_config),
):
    def create_flow(source: str | None) -> service.RatingFlow:
        return service.RatingFlow(
            store=store, settings=app_config.store, source=source
        )

    return create_flow
