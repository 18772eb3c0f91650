# dcims/filters/tables.py
#
# Columns each queryable table exposes to widgets and filters. Names from
# these sets are interpolated into SQL as identifiers, so anything not listed
# here is rejected before a query is built.

from typing import Dict, FrozenSet, Tuple

SERVER_COLUMNS: FrozenSet[str] = frozenset(
    {
        "id",
        "serial_number",
        "hostname",
        "brand",
        "model",
        "ip_address",
        "ip_oob",
        "operating_system",
        "dc_site",
        "dc_building",
        "dc_floor",
        "dc_room",
        "rack",
        "unit",
        "allocation",
        "environment",
        "status",
        "device_type",
        "warranty",
        "notes",
        "created_by",
        "created_at",
        "updated_at",
    }
)

TABLE_COLUMNS: Dict[str, FrozenSet[str]] = {
    "servers": SERVER_COLUMNS,
    "activity_logs": frozenset(
        {"id", "user_id", "action", "entity_type", "entity_id", "created_at"}
    ),
    "dashboards": frozenset(
        {"id", "name", "user_id", "is_public", "status", "created_at", "updated_at"}
    ),
    "dashboard_widgets": frozenset(
        {"id", "dashboard_id", "widget_type", "title", "width", "height", "created_at"}
    ),
    "enum_colors": frozenset(
        {"id", "enum_type", "enum_value", "color_hex", "user_id", "is_active", "created_at"}
    ),
}

# Columns the enhanced server filter understands.
SERVER_FILTER_COLUMNS: FrozenSet[str] = frozenset(
    {
        "status",
        "device_type",
        "allocation",
        "environment",
        "brand",
        "model",
        "operating_system",
        "dc_site",
        "dc_building",
        "dc_floor",
        "dc_room",
        "rack",
        "unit",
    }
)

# Dropdown placeholders meaning "no constraint", matched case-insensitively
# as "All <label>" against the filter's own column only.
SERVER_FILTER_PLACEHOLDERS: Dict[str, Tuple[str, ...]] = {
    "status": ("status", "statuses"),
    "device_type": ("device type", "device types", "types"),
    "allocation": ("allocation", "allocations"),
    "environment": ("environment", "environments"),
    "brand": ("brand", "brands", "manufacturers"),
    "model": ("model", "models"),
    "operating_system": ("os", "operating system", "operating systems"),
    "dc_site": ("site", "sites", "data centers"),
    "dc_building": ("building", "buildings"),
    "dc_floor": ("floor", "floors"),
    "dc_room": ("room", "rooms"),
    "rack": ("rack", "racks"),
    "unit": ("unit", "units"),
}

# Plural keys sent by the filter UI.
SERVER_FILTER_ALIASES: Dict[str, str] = {
    "models": "model",
    "brands": "brand",
    "allocations": "allocation",
    "environments": "environment",
    "device_types": "device_type",
    "operating_systems": "operating_system",
    "dc_sites": "dc_site",
    "dc_buildings": "dc_building",
    "dc_floors": "dc_floor",
    "dc_rooms": "dc_room",
    "racks": "rack",
    "units": "unit",
}

# Free-text search targets for the server listing.
SERVER_SEARCH_COLUMNS = ("hostname", "serial_number", "ip_address", "brand", "model")
