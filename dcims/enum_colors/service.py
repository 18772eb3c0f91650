# dcims/enum_colors/service.py
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dcims.core.exceptions import NotFoundError
from dcims.db.schemas import is_valid_uuid
from dcims.events.bus import Event, Topic, bus
from .schemas import EnumColorCreate, EnumColorOut, EnumColorUpdate
from . import repository


def resolve_colors(
    rows: Iterable[Mapping[str, Any]],
    user_id: Optional[str],
) -> Dict[str, Dict[str, str]]:
    """
    {enum_type: {enum_value: color_hex}} where the user's own mapping wins
    over the global one for the same value.
    """
    resolved: Dict[str, Dict[str, str]] = {}
    owned = set()
    for row in rows:
        if not row.get("is_active", True):
            continue
        key = (row["enum_type"], row["enum_value"])
        is_own = user_id is not None and row.get("user_id") == user_id
        if key in owned and not is_own:
            continue
        resolved.setdefault(row["enum_type"], {})[row["enum_value"]] = row["color_hex"]
        if is_own:
            owned.add(key)
    return resolved


def _publish(action: str, user_id: str, row: Mapping[str, Any]) -> None:
    bus.publish(
        Event(
            topic=Topic.ENUM_COLORS_CHANGED,
            action=action,
            user_id=user_id,
            entity_type="enum_color",
            entity_id=row["id"],
            details={"enum_type": row["enum_type"], "enum_value": row["enum_value"]},
        )
    )


def list_colors_service(
    user_id: str,
    enum_type: Optional[str] = None,
    enum_value: Optional[str] = None,
) -> List[EnumColorOut]:
    rows = repository.list_colors(user_id, enum_type, enum_value)
    return [EnumColorOut(**r) for r in rows]


def resolved_colors_service(user_id: str, enum_type: Optional[str] = None) -> Dict[str, Dict[str, str]]:
    return resolve_colors(repository.list_colors(user_id, enum_type), user_id)


def upsert_color_service(user_id: str, data: EnumColorCreate) -> EnumColorOut:
    row = repository.upsert_color(
        data.enum_type,
        data.enum_value,
        data.color_hex,
        data.color_name,
        owner_id=None if data.is_global else user_id,
        created_by=user_id,
    )
    _publish("enum_color_saved", user_id, row)
    return EnumColorOut(**row)


def update_color_service(color_id: str, user_id: str, data: EnumColorUpdate) -> EnumColorOut:
    row = None
    if is_valid_uuid(color_id):
        row = repository.update_color(color_id, user_id, data.color_hex, data.color_name)
    if not row:
        raise NotFoundError("Enum color not found.")
    _publish("enum_color_updated", user_id, row)
    return EnumColorOut(**row)


def delete_color_service(color_id: str, user_id: str) -> EnumColorOut:
    row = repository.delete_color(color_id, user_id) if is_valid_uuid(color_id) else None
    if not row:
        raise NotFoundError("Enum color not found.")
    _publish("enum_color_deleted", user_id, row)
    return EnumColorOut(**row)
