import dataclasses

from reviewflow.store import models


@dataclasses.dataclass(frozen=True, kw_only=True)
class DashboardStats:
    total_reviews: int
    average_rating: str
    intercepted_count: int
    redirected_count: int
    unread_count: int
    recent_events: list[models.RatingEvent] = dataclasses.field(default_factory=list)
