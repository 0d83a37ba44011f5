import uuid

import pydantic

from reviewflow.rating import models
from reviewflow.store.api_schemas import (
    BaseRequestSchema,
    FeedbackQuestionSchema,
    ThemeSchema,
)


class PublicProfileResponse(BaseRequestSchema):
    name: str
    slug: str
    logo_url: str | None = None
    theme: ThemeSchema
    feedback_questions: list[FeedbackQuestionSchema]


class RatingRequest(BaseRequestSchema):
    stars: int = pydantic.Field(
        ge=1, le=5, description="Star rating chosen by the customer", examples=[2]
    )


class AnswerToggleRequest(BaseRequestSchema):
    question_id: str = pydantic.Field(examples=["service_mode"])
    option: str = pydantic.Field(examples=["Dine in"])


class FeedbackSubmitRequest(BaseRequestSchema):
    text: str = pydantic.Field(
        default="",
        max_length=5000,
        description="What went wrong, in the customer's words",
    )
    customer_name: str = ""
    customer_email: str = ""


class RedirectSchema(BaseRequestSchema):
    url: str
    delay_ms: int


class RatingSessionResponse(BaseRequestSchema):
    session_id: uuid.UUID
    step: models.RatingStep
    stars: int
    source: str
    event_id: str | None = None
    feedback_id: str | None = None
    answers: dict[str, list[str]] = pydantic.Field(default_factory=dict)
    redirect: RedirectSchema | None = None
    warning: str | None = None


class ExitResponse(BaseRequestSchema):
    url: str
