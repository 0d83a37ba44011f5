"""Default dataset used when no persisted state exists yet."""

import datetime

from reviewflow.store import models

DEFAULT_CONFIG = models.BusinessConfig(
    id="biz_123",
    name="Bistro & Co.",
    slug="bistro-co",
    min_star_threshold=4,
    google_place_url="https://search.google.com/local/writereview?placeid=EXAMPLE",
    redirect_url="https://happycleanlawnscapes.com",
    brand_color="#2563eb",
    theme=models.Theme(
        brand_color="#2563eb",
        page_bg="#f8fafc",
        admin_bg="#f1f5f9",
        card_bg="#ffffff",
    ),
    entry_points=[
        models.EntryPoint(id="ep_table_1", label="Table 1", src="table_1"),
        models.EntryPoint(id="ep_email", label="Email Footer", src="email"),
    ],
    feedback_questions=[
        models.FeedbackQuestion(
            id="service_mode",
            question="Did you dine in, take away or get delivery?",
            type=models.QuestionType.SINGLE,
            options=["Dine in", "Takeaway", "Delivery"],
        ),
        models.FeedbackQuestion(
            id="items",
            question="What did you get?",
            type=models.QuestionType.MULTI,
            options=["Breakfast", "Brunch", "Lunch", "Dinner", "Coffee", "Drinks"],
        ),
    ],
)


def default_snapshot(now: datetime.datetime | None = None) -> models.Snapshot:
    now = now or datetime.datetime.now(datetime.UTC)
    one_day_ago = now - datetime.timedelta(days=1)
    two_days_ago = now - datetime.timedelta(days=2)

    return models.Snapshot(
        config=DEFAULT_CONFIG,
        events=[
            models.RatingEvent(
                id="evt_1",
                stars=5,
                timestamp=one_day_ago,
                source="qr-table-1",
                was_redirected=True,
            ),
            models.RatingEvent(
                id="evt_2",
                stars=2,
                timestamp=two_days_ago,
                source="link-email",
                was_redirected=False,
            ),
        ],
        feedbacks=[
            models.Feedback(
                id="fb_1",
                rating_event_id="evt_2",
                stars=2,
                text="The soup was cold and service was slow.",
                customer_name="John Doe",
                customer_email="john@example.com",
                status=models.FeedbackStatus.NEW,
                flagged=False,
                timestamp=two_days_ago,
            )
        ],
    )
