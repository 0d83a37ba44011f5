from reviewflow.dashboard import models
from reviewflow.store import models as store_models
from reviewflow.store import service as store_service

RECENT_EVENTS_LIMIT = 10


def compute_stats(
    snapshot: store_models.Snapshot, recent_limit: int = RECENT_EVENTS_LIMIT
) -> models.DashboardStats:
    events = snapshot.events
    total = len(events)
    average = sum(event.stars for event in events) / total if total else 0.0
    redirected = sum(1 for event in events if event.was_redirected)

    return models.DashboardStats(
        total_reviews=total,
        average_rating=f"{average:.1f}",
        intercepted_count=total - redirected,
        redirected_count=redirected,
        unread_count=sum(
            1
            for feedback in snapshot.feedbacks
            if feedback.status == store_models.FeedbackStatus.NEW
        ),
        recent_events=list(events[:recent_limit]),
    )


class DashboardService:
    def __init__(self, store: store_service.StoreService):
        self.store = store

    async def get_stats(self) -> models.DashboardStats:
        return compute_stats(await self.store.load())
