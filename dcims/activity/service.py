# dcims/activity/service.py
import logging
from typing import Optional

from dcims.events.bus import Event, EventBus, Topic
from .schemas import ActivityLogOut, ActivityLogPage
from . import repository

logger = logging.getLogger(__name__)


def record_event(event: Event) -> None:
    """Bus subscriber: persist one event as an activity log row."""
    details = {"topic": event.topic.value, **event.details}
    repository.insert_activity(
        event.user_id,
        event.action,
        event.entity_type,
        event.entity_id,
        details,
    )
    logger.debug("Activity recorded: %s on %s %s", event.action, event.entity_type, event.entity_id)


def register_activity_logging(event_bus: EventBus) -> None:
    for topic in Topic:
        event_bus.subscribe(topic, record_event)


def list_activity_service(
    user_id: Optional[str],
    limit: int = 50,
    offset: int = 0,
) -> ActivityLogPage:
    rows = repository.list_activity(user_id, limit, offset)
    total = repository.count_activity(user_id)
    return ActivityLogPage(
        logs=[ActivityLogOut(**r) for r in rows],
        total_count=total,
        limit=limit,
        offset=offset,
    )
