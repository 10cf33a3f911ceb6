"""
Notification Fan-out - in-process publish/subscribe for lifecycle events.

Two kinds of topics:
- broadcast topics named after the event type (complaint:new, ...)
- per-user topics, user:<id>:notification

Delivery is best-effort and at-most-once: listeners are called inline,
a failing listener is logged and skipped, nothing is retried.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable, Dict, List
import logging

from app.models.notification import EventType

logger = logging.getLogger(__name__)

Listener = Callable[[str, Dict[str, Any]], None]

BROADCAST_TOPICS = [event_type.value for event_type in EventType]


class Notifier(ABC):
    """
    Narrow publishing contract used by the lifecycle coordinator.
    Swap the implementation to change the delivery transport.
    """

    @abstractmethod
    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        """Deliver payload to everyone subscribed to topic. Must not raise."""
        pass


class InProcessFanout(Notifier):
    """Delivers events to listeners registered in this process."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, topic: str, listener: Listener) -> Callable[[], None]:
        """
        Register listener for topic.

        Returns:
            A callable that removes the subscription (safe to call twice)
        """
        self._listeners[topic].append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(topic)
            if listeners and listener in listeners:
                listeners.remove(listener)
                if not listeners:
                    del self._listeners[topic]

        return unsubscribe

    def subscriber_count(self, topic: str) -> int:
        return len(self._listeners.get(topic, []))

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        # Copy: listeners may unsubscribe while being called
        listeners = list(self._listeners.get(topic, []))
        if not listeners:
            logger.debug(f"No subscribers for {topic}, event dropped")
            return

        for listener in listeners:
            try:
                listener(topic, payload)
            except Exception as e:
                logger.warning(f"⚠️ Notification listener failed on {topic}: {e}")


# Global fan-out instance (singleton pattern)
_fanout = None


def get_notification_fanout() -> InProcessFanout:
    """Get or create the process-wide fan-out."""
    global _fanout
    if _fanout is None:
        _fanout = InProcessFanout()
    return _fanout
