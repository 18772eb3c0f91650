"""
Cascading location filter: site -> building -> floor -> room, with rack as
the terminal leaf.

Everything here is pure. Option lists are computed from the distinct
location rows of the server inventory; fetching those rows is the
repository's job.
"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dcims.core.exceptions import ValidationError

LEVELS = ("dc_site", "dc_building", "dc_floor", "dc_room")
RACK = "rack"
ALL_LEVELS = LEVELS + (RACK,)

# Plural names used by the location dropdowns
LEVEL_ALIASES = {
    "sites": "dc_site",
    "buildings": "dc_building",
    "floors": "dc_floor",
    "rooms": "dc_room",
    "racks": "rack",
}


def resolve_level(name: str) -> str:
    level = LEVEL_ALIASES.get(name, name)
    if level not in ALL_LEVELS:
        raise ValidationError(
            f"Invalid level '{name}'. Expected one of: {', '.join(ALL_LEVELS)}"
        )
    return level


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class LocationSelection:
    dc_site: Optional[str] = None
    dc_building: Optional[str] = None
    dc_floor: Optional[str] = None
    dc_room: Optional[str] = None
    rack: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "LocationSelection":
        data = data or {}
        return cls(**{level: _clean(data.get(level)) for level in ALL_LEVELS})

    def as_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)

    def ancestors_of(self, level: str) -> Dict[str, str]:
        """Selected values of every level above ``level``."""
        result = {}
        for name in ALL_LEVELS:
            if name == level:
                break
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        return result

    def select(self, level: str, value: Any) -> "LocationSelection":
        """
        Set ``level`` and clear every level below it (rack included).
        A blank value clears the level itself too.
        """
        level = resolve_level(level)
        index = ALL_LEVELS.index(level)
        changes = {name: None for name in ALL_LEVELS[index:]}
        changes[level] = _clean(value)
        return replace(self, **changes)

    def with_rack_location(self, rack: str, location: Mapping[str, Any]) -> "LocationSelection":
        """All four levels from the rack's location, plus the rack itself."""
        return LocationSelection(
            **{level: _clean(location.get(level)) for level in LEVELS},
            rack=_clean(rack),
        )


def _matches(row: Mapping[str, Any], constraints: Mapping[str, str]) -> bool:
    return all(_clean(row.get(k)) == v for k, v in constraints.items())


def options_for_level(
    rows: Iterable[Mapping[str, Any]],
    level: str,
    constraints: Mapping[str, str],
) -> List[str]:
    """Sorted distinct non-empty values of ``level`` among rows matching ``constraints``."""
    level = resolve_level(level)
    values = {
        _clean(row.get(level))
        for row in rows
        if _matches(row, constraints)
    }
    values.discard(None)
    return sorted(values)


def compute_options(
    rows: Iterable[Mapping[str, Any]],
    selection: LocationSelection,
) -> Dict[str, List[str]]:
    """Option list for every level, each constrained by its selected ancestors."""
    rows = list(rows)
    return {
        level: options_for_level(rows, level, selection.ancestors_of(level))
        for level in ALL_LEVELS
    }
