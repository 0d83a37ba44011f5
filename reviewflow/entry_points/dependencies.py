import fastapi

from reviewflow.entry_points import service
from reviewflow.store import dependencies as store_dependencies
from reviewflow.store import service as store_service


def get_entry_point_registry(
    store: store_service.StoreService = fastapi.Depends(
        store_dependencies.get_store_service
    ),
) -> service.EntryPointRegistry:
    return service.EntryPointRegistry(store=store)
