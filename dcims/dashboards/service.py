# dcims/dashboards/service.py
import logging
from typing import Any, Dict, List, Optional

from dcims.core.exceptions import NotFoundError, PermissionDenied
from dcims.db.schemas import is_valid_uuid
from dcims.events.bus import Event, Topic, bus
from .schemas import (
    CloneRequest,
    DashboardCreate,
    DashboardOut,
    DashboardSummary,
    DashboardUpdate,
    WidgetCreate,
    WidgetOut,
    WidgetUpdate,
)
from . import repository

logger = logging.getLogger(__name__)


def _visible(row: Dict[str, Any], user_id: Optional[str]) -> bool:
    return bool(row.get("is_public")) or (user_id is not None and row.get("user_id") == user_id)


def _load_visible(dashboard_id: str, user_id: Optional[str]) -> Dict[str, Any]:
    """Dashboard row if it exists and the caller may see it; 404 otherwise."""
    row = repository.fetch_dashboard(dashboard_id) if is_valid_uuid(dashboard_id) else None
    if not row or not _visible(row, user_id):
        raise NotFoundError("Dashboard not found.")
    return row


def _load_owned(dashboard_id: str, user_id: str) -> Dict[str, Any]:
    """
    Dashboard row owned by ``user_id``. Someone else's public dashboard is a
    403; a private one is indistinguishable from a missing one (404).
    """
    row = _load_visible(dashboard_id, user_id)
    if row.get("user_id") != user_id:
        raise PermissionDenied("You can only modify your own dashboards.")
    return row


def _publish(action: str, user_id: str, dashboard_id: str, **details) -> None:
    bus.publish(
        Event(
            topic=Topic.DASHBOARD_CHANGED,
            user_id=user_id,
            entity_type="dashboard",
            entity_id=dashboard_id,
            action=action,
            details=details,
        )
    )


def list_dashboards_service(user_id: Optional[str]) -> List[DashboardSummary]:
    rows = repository.list_dashboards(user_id)
    return [DashboardSummary(**r) for r in rows]


def get_dashboard_service(dashboard_id: str, user_id: Optional[str]) -> DashboardOut:
    row = _load_visible(dashboard_id, user_id)
    widgets = repository.fetch_widgets(dashboard_id)
    return DashboardOut(**row, widgets=widgets, widget_count=len(widgets))


def create_dashboard_service(user_id: str, data: DashboardCreate) -> DashboardOut:
    payload = data.model_dump(exclude={"widgets"})
    widgets = [w.to_row(i) for i, w in enumerate(data.widgets)]
    row = repository.insert_dashboard(user_id, payload, widgets)
    _publish("dashboard_created", user_id, row["id"], name=row["name"])
    return DashboardOut(**row, widget_count=len(row["widgets"]))


def update_dashboard_service(
    dashboard_id: str,
    user_id: str,
    data: DashboardUpdate,
) -> DashboardOut:
    _load_owned(dashboard_id, user_id)

    payload = data.model_dump(exclude={"widgets", "version"}, exclude_none=True)
    widgets = None
    if data.widgets is not None:
        widgets = [w.to_row(i) for i, w in enumerate(data.widgets)]

    row = repository.update_dashboard(
        dashboard_id,
        user_id,
        payload,
        widgets=widgets,
        expected_version=data.version,
    )
    if not row:
        raise NotFoundError("Dashboard not found.")

    if "widgets" not in row:
        row["widgets"] = repository.fetch_widgets(dashboard_id)

    _publish("dashboard_updated", user_id, dashboard_id, version=row["version"])
    return DashboardOut(**row, widget_count=len(row["widgets"]))


def delete_dashboard_service(dashboard_id: str, user_id: str) -> Dict[str, Any]:
    _load_owned(dashboard_id, user_id)
    if not repository.delete_dashboard(dashboard_id, user_id):
        raise NotFoundError("Dashboard not found.")
    _publish("dashboard_deleted", user_id, dashboard_id)
    return {"id": dashboard_id, "deleted": True}


def clone_dashboard_service(
    dashboard_id: str,
    user_id: str,
    data: CloneRequest,
) -> DashboardOut:
    source = _load_visible(dashboard_id, user_id)
    source_widgets = repository.fetch_widgets(dashboard_id)

    clone = DashboardCreate(
        name=data.name,
        description=f"Cloned from: {source['name']}",
        layout=source.get("layout") or {},
        settings=source.get("settings") or {},
        widgets=[{k: v for k, v in w.items() if k != "id"} for w in source_widgets],
    )
    result = create_dashboard_service(user_id, clone)
    logger.info("Dashboard %s cloned to %s by %s", dashboard_id, result.id, user_id)
    return result


# -------------------------------------------------
# Single-widget operations
# -------------------------------------------------


def create_widget_service(dashboard_id: str, user_id: str, data: WidgetCreate) -> WidgetOut:
    _load_owned(dashboard_id, user_id)
    existing = repository.fetch_widgets(dashboard_id)
    row = repository.insert_widget(dashboard_id, data.to_row(len(existing)))
    _publish("widget_created", user_id, dashboard_id, widget_id=row["id"])
    return WidgetOut(**row)


def _load_owned_widget(widget_id: str, user_id: str) -> Dict[str, Any]:
    widget = repository.fetch_widget(widget_id) if is_valid_uuid(widget_id) else None
    if not widget:
        raise NotFoundError("Widget not found.")
    _load_owned(widget["dashboard_id"], user_id)
    return widget


def update_widget_service(widget_id: str, user_id: str, data: WidgetUpdate) -> WidgetOut:
    widget = _load_owned_widget(widget_id, user_id)
    fields = data.model_dump(exclude_none=True)
    row = repository.update_widget(widget_id, widget["dashboard_id"], fields)
    if not row:
        raise NotFoundError("Widget not found.")
    _publish("widget_updated", user_id, widget["dashboard_id"], widget_id=widget_id)
    return WidgetOut(**row)


def delete_widget_service(widget_id: str, user_id: str) -> Dict[str, Any]:
    widget = _load_owned_widget(widget_id, user_id)
    if not repository.delete_widget(widget_id, widget["dashboard_id"]):
        raise NotFoundError("Widget not found.")
    _publish("widget_deleted", user_id, widget["dashboard_id"], widget_id=widget_id)
    return {"id": widget_id, "deleted": True}
