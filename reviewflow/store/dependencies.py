import logging

import fastapi

from reviewflow import config, dependencies
from reviewflow.common import event_broker, mongo
from reviewflow.store import repository, service, undo

logger = logging.getLogger(__name__)

# The store service owns the in-process write lock, so it is shared.
store_service: service.StoreService | None = None
memory_repository: repository.InMemoryStoreRepository | None = None


async def get_store_repository(
    app_config: config.AppConfig = fastapi.Depends(dependencies.get_app_config),
) -> repository.AbstractStoreRepository:
    global memory_repository
    if app_config.store.backend == "memory":
        if memory_repository is None:
            logger.info("Using in-memory store backend")
            memory_repository = repository.InMemoryStoreRepository()
        return memory_repository

    client = await mongo.get_mongo_client(app_config)
    db = await mongo.get_db(client, app_config)
    return repository.MongoStoreRepository(
        db=db,
        collection_name=app_config.mongo.collection,
        state_key=app_config.store.state_key,
        undo_key=app_config.store.undo_key,
    )


async def get_store_service(
    app_config: config.AppConfig = fastapi.Depends(dependencies.get_app_config),
) -> service.StoreService:
    global store_service
    if store_service is None:
        store_repository = await get_store_repository(app_config)
        store_service = service.StoreService(
            store_repository=store_repository,
            undo_ledger=undo.UndoLedger(store_repository),
            broker=event_broker.get_event_broker(),
        )
    return store_service
