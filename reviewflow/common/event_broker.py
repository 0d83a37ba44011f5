"""In-memory broker broadcasting store change notifications."""

import asyncio
import logging
from typing import Any

logger = logging.getLogger(__name__)

STORE_CHANGED = "db-update"


class EventBroker:
    """Fire-and-forget pub/sub channel shared by every consumer in the process."""

    def __init__(self):
        self._subscribers: list[asyncio.Queue] = []
        self._lock = asyncio.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self) -> asyncio.Queue:
        """Register a new consumer.

        Returns:
            An asyncio.Queue that will receive every change notification
            published after this call
        """
        queue: asyncio.Queue = asyncio.Queue()
        async with self._lock:
            self._subscribers.append(queue)
        logger.debug("Subscribed to store changes")
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        """Remove a consumer. Unknown queues are ignored.

        Args:
            queue: The queue returned by subscribe
        """
        async with self._lock:
            if queue in self._subscribers:
                self._subscribers.remove(queue)
                logger.debug("Unsubscribed from store changes")

    async def publish(self, event: dict[str, Any]) -> None:
        """Broadcast an event to all current subscribers.

        Args:
            event: The event data to publish
        """
        async with self._lock:
            subscribers = list(self._subscribers)

        logger.debug("Publishing event to %d subscribers", len(subscribers))

        for queue in subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull as e:
                logger.error("Failed to publish event to subscriber: %s", e)


# Global singleton instance
_broker: EventBroker | None = None


def get_event_broker() -> EventBroker:
    """Get the global event broker instance."""
    global _broker
    if _broker is None:
        _broker = EventBroker()
    return _broker
