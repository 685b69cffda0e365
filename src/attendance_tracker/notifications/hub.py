from __future__ import annotations

import logging
import queue
import threading
from typing import Dict, Iterable, Iterator, Optional, Set

from ..core.constants import DEFAULT_EVENT_QUEUE_SIZE
from .events import AttendanceEvent, EventPublisher

logger = logging.getLogger(__name__)


class Subscription:
    """One connected client: a bounded inbox fed by the hub."""

    def __init__(self, topics: Iterable[str], *, maxsize: int):
        self.topics = frozenset(topics)
        self._inbox: "queue.Queue[dict]" = queue.Queue(maxsize=maxsize)
        self.dropped = 0

    def offer(self, message: dict) -> bool:
        try:
            self._inbox.put_nowait(message)
            return True
        except queue.Full:
            self.dropped += 1
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[dict]:
        try:
            return self._inbox.get(timeout=timeout)
        except queue.Empty:
            return None

    def listen(self, *, keepalive: float) -> Iterator[Optional[dict]]:
        """Yield messages forever; ``None`` marks an idle ``keepalive`` period."""
        while True:
            yield self.get(timeout=keepalive)


class NotificationHub(EventPublisher):
    """Topic-based fan-out of attendance events to connected clients.

    Publishing never blocks: a subscriber whose inbox is full misses the event.
    """

    def __init__(self, *, queue_size: int = DEFAULT_EVENT_QUEUE_SIZE) -> None:
        self._queue_size = int(queue_size)
        self._lock = threading.Lock()
        self.active_subscriptions: Dict[str, Set[Subscription]] = {}

    def subscribe(self, topics: Iterable[str]) -> Subscription:
        sub = Subscription(topics, maxsize=self._queue_size)
        with self._lock:
            for topic in sub.topics:
                self.active_subscriptions.setdefault(topic, set()).add(sub)
        logger.debug("subscribed to %s", sorted(sub.topics))
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            for topic in sub.topics:
                subs = self.active_subscriptions.get(topic)
                if not subs:
                    continue
                subs.discard(sub)
                if not subs:
                    self.active_subscriptions.pop(topic, None)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self.active_subscriptions.get(topic, ()))

    def publish(self, topics: Iterable[str], message: dict) -> int:
        """Deliver ``message`` once to every subscriber of any of ``topics``."""
        with self._lock:
            targets: Set[Subscription] = set()
            for topic in topics:
                targets.update(self.active_subscriptions.get(topic, ()))

        delivered = 0
        for sub in targets:
            if sub.offer(message):
                delivered += 1
            else:
                logger.warning("subscriber inbox full, dropped %s", message.get("type"))
        return delivered

    def publish_event(self, event: AttendanceEvent) -> int:
        return self.publish(event.topics(), event.to_dict())
