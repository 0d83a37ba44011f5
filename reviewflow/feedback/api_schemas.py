import pydantic

from reviewflow.store import models
from reviewflow.store.api_schemas import BaseRequestSchema


class FeedbackUpdateRequest(BaseRequestSchema):
    status: models.FeedbackStatus | None = pydantic.Field(
        default=None,
        description="New lifecycle status. REPLIED can only be reached by replying.",
        examples=["READ"],
    )
    flagged: bool | None = None


class ReplyRequest(BaseRequestSchema):
    reply: str = pydantic.Field(
        min_length=1,
        description="Reply text recorded against the feedback",
        examples=["Sorry about that, your next soup is on us."],
    )


class DeleteFeedbackRequest(BaseRequestSchema):
    ids: list[str] = pydantic.Field(
        description="Ids of the feedback records to remove",
        examples=[["fb_1"]],
    )
