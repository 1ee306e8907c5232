"""
In-process event bus.

Publishers hand an event over and return immediately; a detached task fans it
out to the bounded queue of every subscriber of the topic. Nothing is stored:
a subscriber only sees events published after it joined.
"""

import asyncio
import copy
import logging
from collections import defaultdict
from typing import Any, Dict, Optional, Set

from space_together.app.services.event_bus import IEventBus, Subscription
from space_together.domain.entities import ChangeEvent, ChangeVerb

logger = logging.getLogger(__name__)


class InMemoryEventBus(IEventBus):
    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self.dropped = 0
        self._subscribers: Dict[str, Set[Subscription]] = defaultdict(set)
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    def publish(
        self,
        topic: str,
        entity_kind: str,
        entity_id: str,
        verb: ChangeVerb,
        payload: Any = None,
    ) -> None:
        if self._closed:
            logger.debug(f"Event bus closed, ignoring {verb} {entity_kind}/{entity_id}")
            return

        event = ChangeEvent(
            topic=topic,
            entity_kind=entity_kind,
            entity_id=entity_id,
            verb=verb,
            payload=copy.deepcopy(payload),
        )
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, dropping {verb} {entity_kind}/{entity_id}")
            return

        task = loop.create_task(self._deliver(event))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    async def _deliver(self, event: ChangeEvent) -> None:
        subscribers = list(self._subscribers.get(event.topic, ()))
        for subscription in subscribers:
            if not subscription.offer(event):
                self.dropped += 1
        logger.debug(
            f"Broadcast {event.verb.value} {event.entity_kind}/{event.entity_id} "
            f"on {event.topic} to {len(subscribers)} subscriber(s)"
        )

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Event delivery failed: {exc!r}")

    def subscribe(self, topic: str) -> Subscription:
        subscription = Subscription(topic, self.queue_size)
        self._subscribers[topic].add(subscription)
        logger.info(f"Subscriber joined topic {topic} ({len(self._subscribers[topic])} total)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.topic)
        if not subscribers or subscription not in subscribers:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscribers[subscription.topic]
        logger.info(f"Subscriber left topic {subscription.topic}")

    def subscriber_count(self, topic: Optional[str] = None) -> int:
        if topic is not None:
            return len(self._subscribers.get(topic, ()))
        return sum(len(subscribers) for subscribers in self._subscribers.values())

    @property
    def pending_publications(self) -> int:
        return len(self._tasks)

    async def close(self) -> None:
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._subscribers.clear()
        logger.info(f"Event bus closed ({len(tasks)} publication(s) abandoned)")
