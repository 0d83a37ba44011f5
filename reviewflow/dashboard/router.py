import fastapi

from reviewflow.dashboard import api_schemas, service
from reviewflow.store import dependencies as store_dependencies
from reviewflow.store import service as store_service

router = fastapi.APIRouter(prefix="/admin", tags=["dashboard"])


def get_dashboard_service(
    store: store_service.StoreService = fastapi.Depends(
        store_dependencies.get_store_service
    ),
) -> service.DashboardService:
    return service.DashboardService(store=store)


@router.get("/dashboard", response_model=api_schemas.DashboardResponse)
async def get_dashboard(
    dashboard_service: service.DashboardService = fastapi.Depends(
        get_dashboard_service
    ),
):
    stats = await dashboard_service.get_stats()
    return api_schemas.DashboardResponse.model_validate(stats)
