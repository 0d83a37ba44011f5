import logging

from reviewflow.store import models, repository

logger = logging.getLogger(__name__)


class UndoLedger:
    """Single-slot ledger of the config value before the latest change.

    Every record overwrites the previous one, so at most one step can be
    reverted.
    """

    def __init__(self, store_repository: repository.AbstractStoreRepository):
        self.store_repository = store_repository

    async def record(
        self, previous: models.BusinessConfig, kind: str = "config"
    ) -> models.WriteResult:
        entry = models.UndoEntry(kind=kind, previous=previous)
        try:
            await self.store_repository.write_undo(entry)
        except models.StorageUnavailableError as e:
            logger.warning("Undo snapshot was not stored", extra={"error": str(e)})
            return models.WriteResult(
                persisted=False, warning="Undo is unavailable for this change."
            )

        logger.debug("Undo snapshot recorded", extra={"kind": kind})
        return models.WriteResult()

    async def get(self) -> models.UndoEntry | None:
        try:
            return await self.store_repository.read_undo()
        except models.StorageUnavailableError as e:
            logger.warning("Undo snapshot could not be read", extra={"error": str(e)})
            return None

    async def clear(self) -> models.WriteResult:
        try:
            await self.store_repository.clear_undo()
        except models.StorageUnavailableError as e:
            logger.warning("Undo snapshot was not cleared", extra={"error": str(e)})
            return models.WriteResult(
                persisted=False, warning="Undo snapshot could not be cleared."
            )
        return models.WriteResult()
