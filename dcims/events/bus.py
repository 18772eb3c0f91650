"""In-process publish/subscribe with explicit topics.

Services publish an ``Event`` after a successful write; subscribers (the
activity log, for one) register a handler per topic at startup.

Example:
    bus.subscribe(Topic.DASHBOARD_CHANGED, on_dashboard_changed)
    bus.publish(Event(topic=Topic.DASHBOARD_CHANGED, action="dashboard_updated", ...))
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class Topic(str, Enum):
    DASHBOARD_CHANGED = "dashboard_changed"
    ENUM_COLORS_CHANGED = "enum_colors_changed"
    SERVERS_CHANGED = "servers_changed"
    SERVERS_IMPORTED = "servers_imported"


@dataclass(frozen=True)
class Event:
    topic: Topic
    action: str
    user_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


Handler = Callable[[Event], None]


class EventBus:
    """Synchronous topic-based dispatcher."""

    def __init__(self) -> None:
        self._subscribers: Dict[Topic, List[Handler]] = {}

    def subscribe(self, topic: Topic, handler: Handler) -> None:
        """Register ``handler`` for ``topic``. Subscribing twice is a no-op."""
        handlers = self._subscribers.setdefault(topic, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, topic: Topic, handler: Handler) -> None:
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscribers(self, topic: Topic) -> List[Handler]:
        return list(self._subscribers.get(topic, []))

    def publish(self, event: Event) -> int:
        """
        Deliver ``event`` to every subscriber of its topic, in subscription
        order. A failing subscriber is logged and skipped; the publisher's
        write has already happened and is not undone.

        Returns the number of handlers that ran successfully.
        """
        delivered = 0
        for handler in self.subscribers(event.topic):
            try:
                handler(event)
                delivered += 1
            except Exception:
                logger.error(
                    "Subscriber %r failed for %s/%s",
                    getattr(handler, "__name__", handler),
                    event.topic.value,
                    event.action,
                    exc_info=True,
                )
        return delivered

    def clear(self) -> None:
        """Drop all subscriptions. Primarily for testing."""
        self._subscribers.clear()


bus = EventBus()
