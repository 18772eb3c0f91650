# dcims/locations/service.py
import logging
from typing import Dict, List, Optional

from dcims.core.exceptions import NotFoundError
from .hierarchy import (
    LEVELS,
    RACK,
    LocationSelection,
    compute_options,
    options_for_level,
    resolve_level,
)
from .schemas import HierarchyState, LevelOptionsRequest, RackLocation, SelectRequest, SelectionModel
from . import repository

logger = logging.getLogger(__name__)


def _state(selection: LocationSelection) -> HierarchyState:
    rows = repository.fetch_location_rows()
    return HierarchyState(
        selection=SelectionModel(**selection.as_dict()),
        options=compute_options(rows, selection),
    )


def options_service(selection: Optional[SelectionModel] = None) -> HierarchyState:
    current = LocationSelection.from_mapping(selection.model_dump() if selection else None)
    return _state(current)


def rack_location_service(rack: str) -> RackLocation:
    rack = (rack or "").strip()
    location = repository.fetch_rack_location(rack) if rack else None
    if not location:
        raise NotFoundError(f"No location recorded for rack '{rack}'.")
    return RackLocation(rack=rack, **{level: location.get(level) for level in LEVELS})


def select_service(req: SelectRequest) -> HierarchyState:
    """
    Apply one selection. Choosing a rack fills the four location levels from
    the rack's recorded location instead of cascading.
    """
    level = resolve_level(req.level)
    current = LocationSelection.from_mapping(req.selection.model_dump())

    if level == RACK and req.value and req.value.strip():
        location = rack_location_service(req.value)
        updated = current.with_rack_location(location.rack, location.model_dump())
    else:
        updated = current.select(level, req.value)

    logger.debug("Location selection %s=%r -> %s", level, req.value, updated.as_dict())
    return _state(updated)


def level_options_service(req: LevelOptionsRequest) -> List[str]:
    level = resolve_level(req.level)
    constraints = LocationSelection.from_mapping(req.filters).ancestors_of(level)
    return options_for_level(repository.fetch_location_rows(), level, constraints)


def default_rack_service() -> RackLocation:
    row = repository.fetch_first_rack()
    if not row:
        raise NotFoundError("No racks recorded in the inventory.")
    return RackLocation(**row)
