import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from space_together.domain.entities import ChangeEvent, ChangeVerb

logger = logging.getLogger(__name__)


class Subscription:
    """
    One subscriber's bounded queue.

    When the queue is full the oldest undelivered event is dropped to make
    room, so publishers never wait on a slow subscriber.
    """

    def __init__(self, topic: str, maxsize: int):
        self.topic = topic
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def offer(self, event: ChangeEvent) -> bool:
        """Enqueue event; returns False when an older event had to be dropped"""
        dropped = False
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
            dropped = True
            logger.warning(
                f"Subscriber queue full on topic {self.topic}, dropped oldest event "
                f"({self.dropped} dropped so far)"
            )
        self.queue.put_nowait(event)
        return not dropped

    async def get(self) -> ChangeEvent:
        return await self.queue.get()

    def pending(self) -> int:
        return self.queue.qsize()


class IEventBus(ABC):
    """Named-topic fan-out of change events"""

    @abstractmethod
    def publish(
        self,
        topic: str,
        entity_kind: str,
        entity_id: str,
        verb: ChangeVerb,
        payload: Any = None,
    ) -> None:
        """Fire and forget; delivery happens on a detached task"""
        pass

    @abstractmethod
    def subscribe(self, topic: str) -> Subscription:
        pass

    @abstractmethod
    def unsubscribe(self, subscription: Subscription) -> None:
        pass

    @abstractmethod
    def subscriber_count(self, topic: Optional[str] = None) -> int:
        pass

    @abstractmethod
    async def close(self) -> None:
        """Abandon undelivered publications and drop every subscriber"""
        pass
