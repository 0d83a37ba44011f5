import dataclasses
import datetime
import enum
import uuid

__all__ = [
    "InvalidTransitionError",
    "RatingStep",
    "Redirect",
    "SessionNotFoundError",
]


class RatingStep(str, enum.Enum):
    RATING = "RATING"
    FEEDBACK = "FEEDBACK"
    REDIRECTING = "REDIRECTING"
    THANKS = "THANKS"


TERMINAL_STEPS = frozenset({RatingStep.REDIRECTING, RatingStep.THANKS})


@dataclasses.dataclass(frozen=True, kw_only=True)
class Redirect:
    url: str
    delay_ms: int = 0
    scheduled_at: datetime.datetime = dataclasses.field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC)
    )


class InvalidTransitionError(Exception):
    pass


class SessionNotFoundError(Exception):
    pass


def new_session_id() -> uuid.UUID:
    return uuid.uuid4()
