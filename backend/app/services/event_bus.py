"""
Topic based publish/subscribe registry.

Handlers registered under a topic receive every event published to that
topic; handlers registered under ``"*"`` receive every event published to
any topic. Delivery is synchronous and best effort: with no subscriber the
event is dropped, and a failing handler is logged without affecting the
others. Handlers must not block; the stream gateway only enqueues.
"""

import itertools
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger("swiftcourier.events")

WILDCARD = "*"

# Topic taxonomy
TOPIC_PACKAGES = "admin:packages"
TOPIC_LOCATIONS = "admin:locations"
TOPIC_PRODUCTS = "admin:products"

Handler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class _Subscription:
    """Internal subscription record; identity is the sequence number."""
    seq: int
    topic: str
    handler: Handler


class EventBus:
    def __init__(self):
        self._subscriptions: Dict[str, List[_Subscription]] = defaultdict(list)
        self._lock = threading.RLock()
        self._seq = itertools.count(1)
        self._published = 0

    def subscribe(self, topic: str, handler: Handler) -> Unsubscribe:
        """
        Register ``handler`` under ``topic``.

        Returns:
            A disposer removing exactly this registration. Calling it again is a no-op.
        """
        subscription = _Subscription(next(self._seq), topic, handler)
        with self._lock:
            self._subscriptions[topic].append(subscription)

        def unsubscribe() -> None:
            self._remove(subscription)

        return unsubscribe

    def _remove(self, subscription: _Subscription) -> None:
        with self._lock:
            registered = self._subscriptions.get(subscription.topic)
            if not registered:
                return
            registered[:] = [s for s in registered if s.seq != subscription.seq]
            if not registered:
                del self._subscriptions[subscription.topic]

    def publish(self, topic: str, event: Any) -> int:
        """
        Deliver ``event`` to subscribers of ``topic`` then to wildcard subscribers.

        Returns:
            Number of handlers that completed without raising
        """
        with self._lock:
            self._published += 1
            targets = list(self._subscriptions.get(topic, ()))
            if topic != WILDCARD:
                targets.extend(self._subscriptions.get(WILDCARD, ()))

        delivered = 0
        for subscription in targets:
            try:
                subscription.handler(event)
                delivered += 1
            except Exception:
                logger.exception(
                    "Subscriber %s on %r failed for %s",
                    subscription.seq, subscription.topic, getattr(event, "type", type(event).__name__)
                )
        return delivered

    def subscriber_count(self, topic: Optional[str] = None) -> int:
        with self._lock:
            if topic is not None:
                return len(self._subscriptions.get(topic, ()))
            return sum(len(subs) for subs in self._subscriptions.values())

    @property
    def published_count(self) -> int:
        return self._published

    def clear(self) -> None:
        with self._lock:
            self._subscriptions.clear()
            self._published = 0
