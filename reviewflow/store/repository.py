import abc
import copy
import logging
from typing import Any

import pymongo.asynchronous.collection
import pymongo.asynchronous.database
import pymongo.errors

from reviewflow.store import models

logger = logging.getLogger(__name__)


class AbstractStoreRepository(abc.ABC):
    """Durable storage for the whole state record and the undo slot.

    Both records are replaced wholesale on every write.
    """

    @abc.abstractmethod
    async def read_state(self) -> models.Snapshot | None:
        """Read the full state record, or None if nothing was stored yet."""

    @abc.abstractmethod
    async def write_state(self, snapshot: models.Snapshot) -> None:
        """Atomically replace the full state record."""

    @abc.abstractmethod
    async def read_undo(self) -> models.UndoEntry | None:
        """Read the undo slot."""

    @abc.abstractmethod
    async def write_undo(self, entry: models.UndoEntry) -> None:
        """Overwrite the undo slot."""

    @abc.abstractmethod
    async def clear_undo(self) -> None:
        """Empty the undo slot."""


class MongoStoreRepository(AbstractStoreRepository):
    def __init__(
        self,
        db: pymongo.asynchronous.database.AsyncDatabase,
        collection_name: str = "state",
        state_key: str = "reviewflow_db_v1",
        undo_key: str = "reviewflow_undo_v1",
    ):
        self.db = db
        self.state: pymongo.asynchronous.collection.AsyncCollection = self.db[
            collection_name
        ]
        self.state_key = state_key
        self.undo_key = undo_key

    async def _find(self, key: str) -> dict[str, Any] | None:
        try:
            doc = await self.state.find_one({"key": key})
        except pymongo.errors.PyMongoError as e:
            msg = f"Unable to read {key} from storage"
            raise models.StorageUnavailableError(msg) from e
        return doc["value"] if doc else None

    async def _replace(self, key: str, value: dict[str, Any]) -> None:
        try:
            await self.state.replace_one(
                {"key": key}, {"key": key, "value": value}, upsert=True
            )
        except pymongo.errors.PyMongoError as e:
            msg = f"Unable to write {key} to storage"
            raise models.StorageUnavailableError(msg) from e

    async def read_state(self) -> models.Snapshot | None:
        value = await self._find(self.state_key)
        return snapshot_from_doc(value) if value else None

    async def write_state(self, snapshot: models.Snapshot) -> None:
        await self._replace(self.state_key, snapshot_to_doc(snapshot))

    async def read_undo(self) -> models.UndoEntry | None:
        value = await self._find(self.undo_key)
        return undo_from_doc(value) if value else None

    async def write_undo(self, entry: models.UndoEntry) -> None:
        await self._replace(self.undo_key, undo_to_doc(entry))

    async def clear_undo(self) -> None:
        try:
            await self.state.delete_one({"key": self.undo_key})
        except pymongo.errors.PyMongoError as e:
            msg = f"Unable to clear {self.undo_key} in storage"
            raise models.StorageUnavailableError(msg) from e


class InMemoryStoreRepository(AbstractStoreRepository):
    """Process-local storage holding serialized documents.

    Documents are deep-copied on the way in and out so callers never share
    state with the stored record.
    """

    def __init__(self):
        self.documents: dict[str, dict[str, Any]] = {}

    async def read_state(self) -> models.Snapshot | None:
        value = self.documents.get("state")
        return snapshot_from_doc(copy.deepcopy(value)) if value else None

    async def write_state(self, snapshot: models.Snapshot) -> None:
        self.documents["state"] = snapshot_to_doc(snapshot)

    async def read_undo(self) -> models.UndoEntry | None:
        value = self.documents.get("undo")
        return undo_from_doc(copy.deepcopy(value)) if value else None

    async def write_undo(self, entry: models.UndoEntry) -> None:
        self.documents["undo"] = undo_to_doc(entry)

    async def clear_undo(self) -> None:
        self.documents.pop("undo", None)


def config_to_doc(config: models.BusinessConfig) -> dict[str, Any]:
    return {
        "id": config.id,
        "name": config.name,
        "slug": config.slug,
        "min_star_threshold": config.min_star_threshold,
        "google_place_url": config.google_place_url,
        "redirect_url": config.redirect_url,
        "logo_url": config.logo_url,
        "brand_color": config.brand_color,
        "theme": {
            "brand_color": config.theme.brand_color,
            "page_bg": config.theme.page_bg,
            "admin_bg": config.theme.admin_bg,
            "card_bg": config.theme.card_bg,
        },
        "entry_points": [
            {"id": ep.id, "label": ep.label, "src": ep.src}
            for ep in config.entry_points
        ],
        "feedback_questions": [
            {
                "id": question.id,
                "question": question.question,
                "type": question.type.value,
                "options": list(question.options),
            }
            for question in config.feedback_questions
        ],
    }


def config_from_doc(doc: dict[str, Any]) -> models.BusinessConfig:
    theme_doc = doc.get("theme") or {}
    return models.BusinessConfig(
        id=doc["id"],
        name=doc["name"],
        slug=doc["slug"],
        min_star_threshold=doc["min_star_threshold"],
        google_place_url=doc.get("google_place_url"),
        redirect_url=doc.get("redirect_url"),
        logo_url=doc.get("logo_url"),
        brand_color=doc.get("brand_color") or models.DEFAULT_BRAND_COLOR,
        theme=models.Theme(
            brand_color=theme_doc.get("brand_color"),
            page_bg=theme_doc.get("page_bg"),
            admin_bg=theme_doc.get("admin_bg"),
            card_bg=theme_doc.get("card_bg"),
        ),
        entry_points=[
            models.EntryPoint(id=ep["id"], label=ep["label"], src=ep["src"])
            for ep in doc.get("entry_points") or []
        ],
        feedback_questions=[
            models.FeedbackQuestion(
                id=question["id"],
                question=question["question"],
                type=models.QuestionType(question.get("type", "single")),
                options=list(question.get("options") or []),
            )
            for question in doc.get("feedback_questions") or []
        ],
    )


def event_to_doc(event: models.RatingEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "stars": event.stars,
        "timestamp": event.timestamp,
        "source": event.source,
        "was_redirected": event.was_redirected,
    }


def event_from_doc(doc: dict[str, Any]) -> models.RatingEvent:
    return models.RatingEvent(
        id=doc["id"],
        stars=doc["stars"],
        timestamp=doc["timestamp"],
        source=doc.get("source", ""),
        was_redirected=doc["was_redirected"],
    )


def feedback_to_doc(feedback: models.Feedback) -> dict[str, Any]:
    return {
        "id": feedback.id,
        "rating_event_id": feedback.rating_event_id,
        "stars": feedback.stars,
        "text": feedback.text,
        "answers": {key: list(value) for key, value in feedback.answers.items()},
        "customer_name": feedback.customer_name,
        "customer_email": feedback.customer_email,
        "status": feedback.status.value,
        "flagged": feedback.flagged,
        "reply": feedback.reply,
        "timestamp": feedback.timestamp,
    }


def feedback_from_doc(doc: dict[str, Any]) -> models.Feedback:
    return models.Feedback(
        id=doc["id"],
        rating_event_id=doc["rating_event_id"],
        stars=doc["stars"],
        text=doc["text"],
        answers={key: list(value) for key, value in (doc.get("answers") or {}).items()},
        customer_name=doc.get("customer_name"),
        customer_email=doc.get("customer_email"),
        status=models.FeedbackStatus(doc.get("status", "NEW")),
        flagged=bool(doc.get("flagged", False)),
        reply=doc.get("reply"),
        timestamp=doc["timestamp"],
    )


def snapshot_to_doc(snapshot: models.Snapshot) -> dict[str, Any]:
    return {
        "config": config_to_doc(snapshot.config),
        "events": [event_to_doc(event) for event in snapshot.events],
        "feedbacks": [feedback_to_doc(feedback) for feedback in snapshot.feedbacks],
    }


def snapshot_from_doc(doc: dict[str, Any]) -> models.Snapshot:
    return models.Snapshot(
        config=config_from_doc(doc["config"]),
        events=[event_from_doc(event) for event in doc.get("events") or []],
        feedbacks=[
            feedback_from_doc(feedback) for feedback in doc.get("feedbacks") or []
        ],
    )


def undo_to_doc(entry: models.UndoEntry) -> dict[str, Any]:
    return {
        "type": entry.kind,
        "prev": config_to_doc(entry.previous),
        "ts": entry.timestamp,
    }


def undo_from_doc(doc: dict[str, Any]) -> models.UndoEntry:
    return models.UndoEntry(
        kind=doc.get("type", "config"),
        previous=config_from_doc(doc["prev"]),
        timestamp=doc["ts"],
    )
