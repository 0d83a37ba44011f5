import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable

from reviewflow import config
from reviewflow.rating import models
from reviewflow.store import models as store_models
from reviewflow.store import service as store_service

logger = logging.getLogger(__name__)

Navigator = Callable[[str], Awaitable[None]]

# Scheduled redirects are never cancelled; hold references until they finish.
_redirect_tasks: set[asyncio.Task] = set()


def resolve_exit_url(
    business: store_models.BusinessConfig, settings: config.StoreConfig
) -> str:
    """Where cancel, close and done send the customer."""
    return business.redirect_url or settings.fallback_exit_url


class RatingFlow:
    """Customer-facing flow from the first star tap to redirect or thanks.

    RATING -> REDIRECTING when the stars reach the threshold, otherwise
    RATING -> FEEDBACK. While in FEEDBACK the rating stays editable and
    raising it to the threshold also redirects. Submitting the form moves
    to THANKS. REDIRECTING and THANKS are terminal.
    """

    def __init__(
        self,
        store: store_service.StoreService,
        settings: config.StoreConfig,
        source: str | None = None,
        navigator: Navigator | None = None,
        session_id: uuid.UUID | None = None,
    ):
        self.id = session_id or models.new_session_id()
        self.store = store
        self.settings = settings
        self.source = (source or "").strip() or settings.default_source
        self.navigator = navigator

        self.step = models.RatingStep.RATING
        self.stars = 0
        self.event_id: str | None = None
        self.feedback_id: str | None = None
        self.answers: dict[str, list[str]] = {}
        self.redirect: models.Redirect | None = None
        self.last_write: store_models.WriteResult | None = None
        self._busy = False

    def _require(self, *steps: models.RatingStep) -> None:
        if self._busy:
            msg = "A previous action is still being processed"
            raise models.InvalidTransitionError(msg)
        if self.step not in steps:
            msg = f"Action not allowed while in step {self.step.value}"
            raise models.InvalidTransitionError(msg)

    async def _simulated_latency(self) -> None:
        if self.settings.simulated_delay_ms:
            await asyncio.sleep(self.settings.simulated_delay_ms / 1000)

    async def _current_config(self) -> store_models.BusinessConfig:
        snapshot = await self.store.load()
        return snapshot.config

    async def select_rating(self, stars: int) -> models.RatingStep:
        self._require(models.RatingStep.RATING)
        store_models.validate_stars(stars)

        self._busy = True
        try:
            self.stars = stars
            await self._simulated_latency()

            business = await self._current_config()
            was_redirected = stars >= business.min_star_threshold
            event = store_models.RatingEvent(
                stars=stars, source=self.source, was_redirected=was_redirected
            )
            self.last_write = await self.store.add_event(event)
            self.event_id = event.id
        finally:
            self._busy = False

        if was_redirected:
            self._start_redirect(business, delay_ms=0)
        else:
            self.step = models.RatingStep.FEEDBACK

        logger.info(
            "Rating captured",
            extra={
                "session_id": str(self.id),
                "event_id": event.id,
                "stars": stars,
                "step": self.step.value,
            },
        )
        return self.step

    async def change_rating(self, stars: int) -> models.RatingStep:
        self._require(models.RatingStep.FEEDBACK)
        store_models.validate_stars(stars)

        self.stars = stars
        business = await self._current_config()
        if stars >= business.min_star_threshold:
            logger.info(
                "Rating raised to threshold inside form",
                extra={"session_id": str(self.id), "stars": stars},
            )
            self._start_redirect(
                business, delay_ms=self.settings.redirect_confirmation_delay_ms
            )
        return self.step

    async def toggle_answer(self, question_id: str, option: str) -> dict[str, list[str]]:
        self._require(models.RatingStep.FEEDBACK)

        business = await self._current_config()
        question = business.question(question_id)
        if question is None:
            msg = f"Unknown question {question_id!r}"
            raise store_models.ValidationError(msg)
        if option not in question.options:
            msg = f"Unknown option {option!r} for question {question_id!r}"
            raise store_models.ValidationError(msg)

        current = self.answers.get(question_id, [])
        if question.type == store_models.QuestionType.SINGLE:
            selected = [] if option in current else [option]
        elif option in current:
            selected = [o for o in current if o != option]
        else:
            selected = [*current, option]

        self.answers = {**self.answers, question_id: selected}
        return self.answers

    async def submit_feedback(
        self, text: str, customer_name: str, customer_email: str
    ) -> tuple[store_models.Feedback, store_models.WriteResult]:
        self._require(models.RatingStep.FEEDBACK)

        missing = [
            name
            for name, value in (
                ("text", text),
                ("customerName", customer_name),
                ("customerEmail", customer_email),
            )
            if not (value or "").strip()
        ]
        if missing:
            logger.warning(
                "Feedback submission blocked",
                extra={"session_id": str(self.id), "missing": missing},
            )
            msg = f"Missing required fields: {', '.join(missing)}"
            raise store_models.ValidationError(msg)

        self._busy = True
        try:
            await self._simulated_latency()
            feedback = store_models.Feedback(
                rating_event_id=self.event_id,
                stars=self.stars,
                text=text.strip(),
                answers={k: list(v) for k, v in self.answers.items() if v},
                customer_name=customer_name.strip(),
                customer_email=customer_email.strip(),
            )
            result = await self.store.add_feedback(feedback)
        finally:
            self._busy = False

        self.feedback_id = feedback.id
        self.last_write = result
        self.step = models.RatingStep.THANKS
        return feedback, result

    async def exit_url(self) -> str:
        return resolve_exit_url(await self._current_config(), self.settings)

    def _start_redirect(self, business: store_models.BusinessConfig, delay_ms: int) -> None:
        url = (
            business.google_place_url
            or business.redirect_url
            or self.settings.fallback_exit_url
        )
        self.step = models.RatingStep.REDIRECTING
        self.redirect = models.Redirect(url=url, delay_ms=delay_ms)

        if self.navigator is not None:
            task = asyncio.create_task(self._navigate(url, delay_ms))
            _redirect_tasks.add(task)
            task.add_done_callback(_redirect_tasks.discard)

    async def _navigate(self, url: str, delay_ms: int) -> None:
        if delay_ms:
            await asyncio.sleep(delay_ms / 1000)
        await self.navigator(url)
