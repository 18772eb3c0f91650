# dcims/servers/enums.py
#
# Accepted values for the enumerated server columns. The same lists back the
# Postgres enum types in sql/schema.sql.

from typing import Dict, List, Optional, Tuple

STATUS_VALUES: List[str] = [
    "Active",
    "Inactive",
    "Maintenance",
    "Decommissioned",
    "Retired",
    "Other",
]

DEVICE_TYPE_VALUES: List[str] = ["Server", "Storage", "Network"]

ALLOCATION_VALUES: List[str] = [
    "IAAS",
    "PAAS",
    "SAAS",
    "Load Balancer",
    "Database",
    "Other",
]

ENVIRONMENT_VALUES: List[str] = [
    "Production",
    "Testing",
    "Pre-Production",
    "Development",
    "Staging",
]

ENUM_FIELDS: Dict[str, List[str]] = {
    "status": STATUS_VALUES,
    "device_type": DEVICE_TYPE_VALUES,
    "allocation": ALLOCATION_VALUES,
    "environment": ENVIRONMENT_VALUES,
}


def invalid_enum_message(field: str, value: str) -> str:
    return f"Invalid {field} '{value}'. Accepted values: {', '.join(ENUM_FIELDS[field])}"


def canonical_enum_value(field: str, value: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Match ``value`` against the accepted values of ``field`` ignoring case
    and surrounding whitespace.

    Returns (canonical_value, None) on a match, (None, error_message) otherwise.
    """
    wanted = value.strip().lower()
    for accepted in ENUM_FIELDS[field]:
        if accepted.lower() == wanted:
            return accepted, None
    return None, invalid_enum_message(field, value)
