import datetime

import pydantic
import pydantic.alias_generators

from reviewflow.store import models


class BaseRequestSchema(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        alias_generator=pydantic.alias_generators.to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ThemeSchema(BaseRequestSchema):
    brand_color: str | None = None
    page_bg: str | None = None
    admin_bg: str | None = None
    card_bg: str | None = None


class EntryPointSchema(BaseRequestSchema):
    id: str
    label: str
    src: str


class FeedbackQuestionSchema(BaseRequestSchema):
    id: str = pydantic.Field(min_length=1)
    question: str
    type: models.QuestionType = models.QuestionType.SINGLE
    options: list[str] = pydantic.Field(default_factory=list)


class BusinessConfigSchema(BaseRequestSchema):
    id: str
    name: str
    slug: str
    min_star_threshold: int = pydantic.Field(
        ge=1,
        le=5,
        description="Minimum star rating that sends the customer to the review platform",
        examples=[4],
    )
    google_place_url: str | None = None
    redirect_url: str | None = None
    logo_url: str | None = None
    brand_color: str = "#2563eb"
    theme: ThemeSchema = pydantic.Field(default_factory=ThemeSchema)
    entry_points: list[EntryPointSchema] = pydantic.Field(default_factory=list)
    feedback_questions: list[FeedbackQuestionSchema] = pydantic.Field(
        default_factory=list
    )


class ConfigUpdateRequest(BaseRequestSchema):
    """Partial config update; omitted fields keep their current value."""

    name: str | None = pydantic.Field(default=None, min_length=1)
    min_star_threshold: int | None = pydantic.Field(default=None, ge=1, le=5)
    google_place_url: str | None = None
    redirect_url: str | None = None
    logo_url: str | None = None
    brand_color: str | None = None
    theme: ThemeSchema | None = None
    feedback_questions: list[FeedbackQuestionSchema] | None = None

    # Only the URLs may be cleared; the rest can be omitted but not nulled.
    @pydantic.field_validator(
        "name", "min_star_threshold", "brand_color", "theme", "feedback_questions"
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            msg = "Field cannot be null"
            raise ValueError(msg)
        return value


class RatingEventSchema(BaseRequestSchema):
    id: str
    stars: int
    timestamp: datetime.datetime
    source: str
    was_redirected: bool


class FeedbackSchema(BaseRequestSchema):
    id: str
    rating_event_id: str
    stars: int
    text: str
    answers: dict[str, list[str]] = pydantic.Field(default_factory=dict)
    customer_name: str | None = None
    customer_email: str | None = None
    status: models.FeedbackStatus
    flagged: bool = False
    reply: str | None = None
    timestamp: datetime.datetime


class StateResponse(BaseRequestSchema):
    config: BusinessConfigSchema
    events: list[RatingEventSchema]
    feedbacks: list[FeedbackSchema]


class WriteResponse(BaseRequestSchema):
    persisted: bool = True
    warning: str | None = pydantic.Field(
        default=None,
        description="Set when the change could not be stored and may be lost",
    )


class ConfigResponse(WriteResponse):
    config: BusinessConfigSchema


class UndoSnapshotResponse(BaseRequestSchema):
    type: str
    prev: BusinessConfigSchema
    ts: datetime.datetime
