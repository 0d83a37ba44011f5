import asyncio
import dataclasses
import datetime
import logging
from collections.abc import Callable, Iterable
from typing import Any

from reviewflow.common import event_broker
from reviewflow.store import models, repository, seed, undo

logger = logging.getLogger(__name__)

STORAGE_WRITE_WARNING = "Changes could not be saved. They may be lost on reload."


class StoreService:
    """Single mutation entrypoint over the persisted state record.

    Every operation is a read-modify-write of the whole snapshot. Writes
    inside one process are serialized by a lock; separate processes sharing
    the same record are last-writer-wins.
    """

    def __init__(
        self,
        store_repository: repository.AbstractStoreRepository,
        undo_ledger: undo.UndoLedger,
        broker: event_broker.EventBroker,
        seed_factory: Callable[[], models.Snapshot] = seed.default_snapshot,
    ):
        self.store_repository = store_repository
        self.undo_ledger = undo_ledger
        self.broker = broker
        self.seed_factory = seed_factory
        self._lock = asyncio.Lock()

    async def load(self) -> models.Snapshot:
        try:
            snapshot = await self.store_repository.read_state()
        except models.StorageUnavailableError as e:
            logger.warning(
                "Storage unavailable, serving default dataset", extra={"error": str(e)}
            )
            return self.seed_factory()

        if snapshot is None:
            logger.info("No stored state found, seeding default dataset")
            return self.seed_factory()

        return snapshot

    async def save(
        self, snapshot: models.Snapshot, reason: str = "save"
    ) -> models.WriteResult:
        try:
            await self.store_repository.write_state(snapshot)
        except models.StorageUnavailableError as e:
            logger.warning(
                "State write was lost", extra={"reason": reason, "error": str(e)}
            )
            return models.WriteResult(persisted=False, warning=STORAGE_WRITE_WARNING)

        await self.broker.publish(
            {
                "type": event_broker.STORE_CHANGED,
                "reason": reason,
                "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            }
        )
        return models.WriteResult()

    async def subscribe(self) -> asyncio.Queue:
        return await self.broker.subscribe()

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        await self.broker.unsubscribe(queue)

    async def mutate(
        self,
        reason: str,
        change: Callable[[models.Snapshot], models.Snapshot | None],
    ) -> models.WriteResult:
        """Apply ``change`` to the current snapshot and write the result back.

        ``change`` returns None when there is nothing to write.
        """
        async with self._lock:
            snapshot = await self.load()
            updated = change(snapshot)
            if updated is None:
                return models.WriteResult()
            return await self.save(updated, reason=reason)

    async def add_event(self, event: models.RatingEvent) -> models.WriteResult:
        result = await self.mutate(
            "add_event",
            lambda s: dataclasses.replace(s, events=[event, *s.events]),
        )
        logger.info(
            "Rating event recorded",
            extra={
                "event_id": event.id,
                "stars": event.stars,
                "was_redirected": event.was_redirected,
            },
        )
        return result

    async def add_feedback(self, feedback: models.Feedback) -> models.WriteResult:
        result = await self.mutate(
            "add_feedback",
            lambda s: dataclasses.replace(s, feedbacks=[feedback, *s.feedbacks]),
        )
        logger.info(
            "Feedback recorded",
            extra={
                "feedback_id": feedback.id,
                "rating_event_id": feedback.rating_event_id,
            },
        )
        return result

    async def modify_config(
        self,
        reason: str,
        change: Callable[[models.BusinessConfig], models.BusinessConfig],
    ) -> tuple[models.BusinessConfig, models.WriteResult]:
        """Replace the config, first recording the prior value for undo.

        ``change`` may raise ValidationError, in which case nothing is written.
        """
        async with self._lock:
            return await self._replace_config(reason, change)

    async def _replace_config(
        self,
        reason: str,
        change: Callable[[models.BusinessConfig], models.BusinessConfig],
    ) -> tuple[models.BusinessConfig, models.WriteResult]:
        # Caller holds self._lock.
        snapshot = await self.load()
        previous = snapshot.config
        updated = change(previous)

        ledger_result = await self.undo_ledger.record(previous)
        result = await self.save(
            dataclasses.replace(snapshot, config=updated), reason=reason
        )

        if result.persisted and not ledger_result.persisted:
            result = ledger_result

        logger.info("Business config updated", extra={"reason": reason})
        return updated, result

    async def update_config(
        self, **changes: Any
    ) -> tuple[models.BusinessConfig, models.WriteResult]:
        return await self.modify_config(
            "update_config", lambda config: dataclasses.replace(config, **changes)
        )

    async def set_config(
        self, config: models.BusinessConfig
    ) -> tuple[models.BusinessConfig, models.WriteResult]:
        return await self.modify_config("set_config", lambda _: config)

    async def get_undo_snapshot(self) -> models.UndoEntry | None:
        return await self.undo_ledger.get()

    async def clear_undo_snapshot(self) -> models.WriteResult:
        return await self.undo_ledger.clear()

    async def undo_config_change(
        self,
    ) -> tuple[models.BusinessConfig, models.WriteResult] | None:
        """Restore the config held in the undo slot.

        The restore records the config it replaces, like set_config, so
        undoing twice swaps back rather than walking further back.
        """
        async with self._lock:
            entry = await self.undo_ledger.get()
            if entry is None or entry.kind != "config":
                return None

            logger.info(
                "Reverting last config change",
                extra={"recorded_at": str(entry.timestamp)},
            )
            return await self._replace_config(
                "undo_config", lambda _: entry.previous
            )

    async def update_feedbacks(
        self,
        reason: str,
        change: Callable[[models.Feedback], models.Feedback],
        feedback_ids: Iterable[str] | None = None,
    ) -> models.WriteResult:
        """Apply ``change`` to the selected feedback records.

        With ``feedback_ids`` of None every record is offered to ``change``.
        Ids that are not present are ignored.
        """
        wanted = None if feedback_ids is None else set(feedback_ids)

        def apply(snapshot: models.Snapshot) -> models.Snapshot | None:
            changed = False
            feedbacks = []
            for feedback in snapshot.feedbacks:
                if wanted is None or feedback.id in wanted:
                    updated = change(feedback)
                    changed = changed or updated != feedback
                    feedbacks.append(updated)
                else:
                    feedbacks.append(feedback)

            if not changed:
                return None
            return dataclasses.replace(snapshot, feedbacks=feedbacks)

        return await self.mutate(reason, apply)

    async def update_feedback(
        self, feedback_id: str, **changes: Any
    ) -> models.WriteResult:
        return await self.update_feedbacks(
            "update_feedback",
            lambda feedback: dataclasses.replace(feedback, **changes),
            feedback_ids=[feedback_id],
        )

    async def mark_all_read(self) -> models.WriteResult:
        return await self.update_feedbacks(
            "mark_all_read",
            lambda feedback: (
                dataclasses.replace(feedback, status=models.FeedbackStatus.READ)
                if feedback.status == models.FeedbackStatus.NEW
                else feedback
            ),
        )

    async def delete_feedback(self, feedback_ids: Iterable[str]) -> models.WriteResult:
        ids = set(feedback_ids)

        def apply(snapshot: models.Snapshot) -> models.Snapshot | None:
            remaining = [f for f in snapshot.feedbacks if f.id not in ids]
            if len(remaining) == len(snapshot.feedbacks):
                return None
            return dataclasses.replace(snapshot, feedbacks=remaining)

        result = await self.mutate("delete_feedback", apply)
        logger.info("Feedback deleted", extra={"requested": len(ids)})
        return result
