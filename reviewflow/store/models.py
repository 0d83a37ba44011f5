import dataclasses
import datetime
import enum
import uuid

__all__ = [
    "ALLOWED_STATUS_TRANSITIONS",
    "BusinessConfig",
    "EntryPoint",
    "Feedback",
    "FeedbackQuestion",
    "FeedbackStatus",
    "NotFoundError",
    "QuestionType",
    "RatingEvent",
    "Snapshot",
    "StorageUnavailableError",
    "Theme",
    "UndoEntry",
    "ValidationError",
    "WriteResult",
    "new_id",
    "validate_stars",
]

MIN_STARS = 1
MAX_STARS = 5

DEFAULT_BRAND_COLOR = "#2563eb"
DEFAULT_PAGE_BG = "#f8fafc"
DEFAULT_CARD_BG = "#ffffff"


class ValidationError(Exception):
    """Input was rejected before any state was changed."""


class StorageUnavailableError(Exception):
    """The underlying persistence could not be reached."""


class NotFoundError(Exception):
    pass


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def validate_stars(stars: int) -> None:
    if isinstance(stars, bool) or not isinstance(stars, int):
        msg = f"Invalid stars {stars!r}. Must be an integer."
        raise ValidationError(msg)
    if not (MIN_STARS <= stars <= MAX_STARS):
        msg = f"Invalid stars {stars}. Must be between {MIN_STARS} and {MAX_STARS}."
        raise ValidationError(msg)


class FeedbackStatus(str, enum.Enum):
    NEW = "NEW"
    READ = "READ"
    REPLIED = "REPLIED"


# REPLIED is reachable from every state; nothing moves backwards.
ALLOWED_STATUS_TRANSITIONS: dict[FeedbackStatus, frozenset[FeedbackStatus]] = {
    FeedbackStatus.NEW: frozenset({FeedbackStatus.READ, FeedbackStatus.REPLIED}),
    FeedbackStatus.READ: frozenset({FeedbackStatus.REPLIED}),
    FeedbackStatus.REPLIED: frozenset({FeedbackStatus.REPLIED}),
}


class QuestionType(str, enum.Enum):
    SINGLE = "single"
    MULTI = "multi"


@dataclasses.dataclass(frozen=True, kw_only=True)
class RatingEvent:
    id: str = dataclasses.field(default_factory=lambda: new_id("evt"))
    stars: int
    source: str
    was_redirected: bool
    timestamp: datetime.datetime = dataclasses.field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        validate_stars(self.stars)


@dataclasses.dataclass(frozen=True, kw_only=True)
class Feedback:
    """Internal feedback captured after an intercepted rating.

    ``reply`` is present if and only if ``status`` is REPLIED.
    """

    id: str = dataclasses.field(default_factory=lambda: new_id("fb"))
    rating_event_id: str
    stars: int
    text: str
    answers: dict[str, list[str]] = dataclasses.field(default_factory=dict)
    customer_name: str | None = None
    customer_email: str | None = None
    status: FeedbackStatus = FeedbackStatus.NEW
    flagged: bool = False
    reply: str | None = None
    timestamp: datetime.datetime = dataclasses.field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        validate_stars(self.stars)
        if not isinstance(self.status, FeedbackStatus):
            object.__setattr__(self, "status", FeedbackStatus(self.status))
        if (self.reply is not None) != (self.status == FeedbackStatus.REPLIED):
            msg = "A reply must be present exactly when the status is REPLIED"
            raise ValidationError(msg)


@dataclasses.dataclass(frozen=True, kw_only=True)
class EntryPoint:
    id: str = dataclasses.field(default_factory=lambda: new_id("ep"))
    label: str
    src: str


@dataclasses.dataclass(frozen=True, kw_only=True)
class FeedbackQuestion:
    id: str
    question: str
    type: QuestionType = QuestionType.SINGLE
    options: list[str] = dataclasses.field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.id.strip():
            msg = "Feedback questions need a non-empty id"
            raise ValidationError(msg)
        try:
            object.__setattr__(self, "type", QuestionType(self.type))
        except ValueError:
            msg = f"Invalid question type {self.type!r} for question {self.id!r}"
            raise ValidationError(msg) from None


@dataclasses.dataclass(frozen=True, kw_only=True)
class Theme:
    brand_color: str | None = None
    page_bg: str | None = None
    admin_bg: str | None = None
    card_bg: str | None = None


@dataclasses.dataclass(frozen=True, kw_only=True)
class BusinessConfig:
    id: str
    name: str
    slug: str
    min_star_threshold: int
    google_place_url: str | None = None
    redirect_url: str | None = None
    logo_url: str | None = None
    brand_color: str = DEFAULT_BRAND_COLOR
    theme: Theme = dataclasses.field(default_factory=Theme)
    entry_points: list[EntryPoint] = dataclasses.field(default_factory=list)
    feedback_questions: list[FeedbackQuestion] = dataclasses.field(
        default_factory=list
    )

    def __post_init__(self) -> None:
        if isinstance(self.min_star_threshold, bool) or not isinstance(
            self.min_star_threshold, int
        ):
            msg = "minStarThreshold must be an integer"
            raise ValidationError(msg)
        if not (MIN_STARS <= self.min_star_threshold <= MAX_STARS):
            msg = (
                f"Invalid minStarThreshold {self.min_star_threshold}. "
                f"Must be between {MIN_STARS} and {MAX_STARS}."
            )
            raise ValidationError(msg)
        for field in ("name", "slug", "brand_color"):
            if not isinstance(getattr(self, field), str):
                msg = f"{field} must be a string"
                raise ValidationError(msg)
        if not self.name.strip():
            msg = "Business name cannot be empty"
            raise ValidationError(msg)
        if not self.slug.strip():
            msg = "Business slug cannot be empty"
            raise ValidationError(msg)

        entry_point_ids = [entry_point.id for entry_point in self.entry_points]
        if len(entry_point_ids) != len(set(entry_point_ids)):
            msg = "Entry point ids must be unique"
            raise ValidationError(msg)

        question_ids = [question.id for question in self.feedback_questions]
        if len(question_ids) != len(set(question_ids)):
            msg = "Feedback question ids must be unique"
            raise ValidationError(msg)

    def resolved_theme(self) -> Theme:
        page_bg = self.theme.page_bg or DEFAULT_PAGE_BG
        return Theme(
            brand_color=self.theme.brand_color or self.brand_color or DEFAULT_BRAND_COLOR,
            page_bg=page_bg,
            admin_bg=self.theme.admin_bg or page_bg,
            card_bg=self.theme.card_bg or DEFAULT_CARD_BG,
        )

    def question(self, question_id: str) -> FeedbackQuestion | None:
        return next((q for q in self.feedback_questions if q.id == question_id), None)


@dataclasses.dataclass(frozen=True, kw_only=True)
class Snapshot:
    config: BusinessConfig
    events: list[RatingEvent] = dataclasses.field(default_factory=list)
    feedbacks: list[Feedback] = dataclasses.field(default_factory=list)

    def find_feedback(self, feedback_id: str) -> Feedback | None:
        return next((f for f in self.feedbacks if f.id == feedback_id), None)


@dataclasses.dataclass(frozen=True, kw_only=True)
class UndoEntry:
    kind: str = "config"
    previous: BusinessConfig
    timestamp: datetime.datetime = dataclasses.field(default_factory=_utcnow)


@dataclasses.dataclass(frozen=True)
class WriteResult:
    persisted: bool = True
    warning: str | None = None
