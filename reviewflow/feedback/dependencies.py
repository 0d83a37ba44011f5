import fastapi

from reviewflow.feedback import service
from reviewflow.store import dependencies as store_dependencies
from reviewflow.store import service as store_service


def get_feedback_service(
    store: store_service.StoreService = fastapi.Depends(
        store_dependencies.get_store_service
    ),
) -> service.FeedbackService:
    return service.FeedbackService(store=store)
