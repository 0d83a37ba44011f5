import pydantic

from reviewflow.store.api_schemas import BaseRequestSchema, RatingEventSchema


class DashboardResponse(BaseRequestSchema):
    total_reviews: int
    average_rating: str = pydantic.Field(
        description="Mean star rating rounded to one decimal", examples=["3.5"]
    )
    intercepted_count: int
    redirected_count: int
    unread_count: int
    recent_events: list[RatingEventSchema]
