import dataclasses
import logging
from collections.abc import Iterable

from reviewflow.store import models
from reviewflow.store import service as store_service

logger = logging.getLogger(__name__)


def advance_status(
    feedback: models.Feedback, status: models.FeedbackStatus
) -> models.Feedback:
    """Move a record to ``status`` when the lifecycle allows it, else leave it."""
    if status == models.FeedbackStatus.REPLIED:
        msg = "Use a reply to mark feedback as replied"
        raise models.ValidationError(msg)
    if status == feedback.status:
        return feedback
    if status not in models.ALLOWED_STATUS_TRANSITIONS[feedback.status]:
        logger.debug(
            "Ignoring status change",
            extra={
                "feedback_id": feedback.id,
                "from": feedback.status.value,
                "to": status.value,
            },
        )
        return feedback
    return dataclasses.replace(feedback, status=status)


class FeedbackService:
    def __init__(self, store: store_service.StoreService):
        self.store = store

    async def list_feedback(
        self,
        status: models.FeedbackStatus | None = None,
        flagged: bool | None = None,
    ) -> list[models.Feedback]:
        snapshot = await self.store.load()
        return [
            feedback
            for feedback in snapshot.feedbacks
            if (status is None or feedback.status == status)
            and (flagged is None or feedback.flagged == flagged)
        ]

    async def get_feedback(self, feedback_id: str) -> models.Feedback | None:
        snapshot = await self.store.load()
        return snapshot.find_feedback(feedback_id)

    async def mark_read(self, feedback_ids: Iterable[str]) -> models.WriteResult:
        ids = list(feedback_ids)
        result = await self.store.update_feedbacks(
            "mark_read",
            lambda feedback: advance_status(feedback, models.FeedbackStatus.READ),
            feedback_ids=ids,
        )
        logger.info("Feedback marked as read", extra={"count": len(ids)})
        return result

    async def mark_all_read(self) -> models.WriteResult:
        result = await self.store.mark_all_read()
        logger.info("All feedback marked as read")
        return result

    async def toggle_flag(self, feedback_id: str) -> models.WriteResult:
        return await self.store.update_feedbacks(
            "toggle_flag",
            lambda feedback: dataclasses.replace(feedback, flagged=not feedback.flagged),
            feedback_ids=[feedback_id],
        )

    async def update_feedback(
        self,
        feedback_id: str,
        status: models.FeedbackStatus | None = None,
        flagged: bool | None = None,
    ) -> models.WriteResult:
        if status == models.FeedbackStatus.REPLIED:
            msg = "Use a reply to mark feedback as replied"
            raise models.ValidationError(msg)

        def apply(feedback: models.Feedback) -> models.Feedback:
            if status is not None:
                feedback = advance_status(feedback, status)
            if flagged is not None:
                feedback = dataclasses.replace(feedback, flagged=flagged)
            return feedback

        return await self.store.update_feedbacks(
            "update_feedback", apply, feedback_ids=[feedback_id]
        )

    async def reply_to_feedback(self, feedback_id: str, reply: str) -> models.WriteResult:
        """Record a reply, forcing the status to REPLIED.

        An existing reply is overwritten.
        """
        if not reply.strip():
            msg = "Reply cannot be empty"
            raise models.ValidationError(msg)

        result = await self.store.update_feedbacks(
            "reply_to_feedback",
            lambda feedback: dataclasses.replace(
                feedback, reply=reply, status=models.FeedbackStatus.REPLIED
            ),
            feedback_ids=[feedback_id],
        )
        logger.info("Feedback replied", extra={"feedback_id": feedback_id})
        return result

    async def delete(self, feedback_ids: Iterable[str]) -> models.WriteResult:
        return await self.store.delete_feedback(feedback_ids)
