import abc
import logging
import uuid

from reviewflow.rating import service

logger = logging.getLogger(__name__)


class AbstractRatingSessionRepository(abc.ABC):
    @abc.abstractmethod
    async def save(self, flow: service.RatingFlow) -> None:
        """Keep the flow so later requests can continue it."""

    @abc.abstractmethod
    async def get(self, session_id: uuid.UUID) -> service.RatingFlow | None:
        """Get a flow by its session id."""


class InMemoryRatingSessionRepository(AbstractRatingSessionRepository):
    """Live customer sessions for this process, oldest evicted first."""

    def __init__(self, max_sessions: int = 10_000):
        self.max_sessions = max_sessions
        self.sessions: dict[uuid.UUID, service.RatingFlow] = {}

    async def save(self, flow: service.RatingFlow) -> None:
        self.sessions.pop(flow.id, None)
        self.sessions[flow.id] = flow
        while len(self.sessions) > self.max_sessions:
            oldest = next(iter(self.sessions))
            del self.sessions[oldest]
            logger.debug("Evicted rating session", extra={"session_id": str(oldest)})

    async def get(self, session_id: uuid.UUID) -> service.RatingFlow | None:
        return self.sessions.get(session_id)
