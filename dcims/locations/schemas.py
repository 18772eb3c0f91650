# dcims/locations/schemas.py
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SelectionModel(BaseModel):
    dc_site: Optional[str] = None
    dc_building: Optional[str] = None
    dc_floor: Optional[str] = None
    dc_room: Optional[str] = None
    rack: Optional[str] = None


class SelectRequest(BaseModel):
    """Pick ``value`` at ``level`` on top of the current selection."""

    selection: SelectionModel = Field(default_factory=SelectionModel)
    level: str
    value: Optional[str] = None


class LevelOptionsRequest(BaseModel):
    level: str
    filters: Dict[str, Optional[str]] = Field(default_factory=dict)


class HierarchyState(BaseModel):
    selection: SelectionModel
    options: Dict[str, List[str]]


class RackLocation(BaseModel):
    rack: str
    dc_site: Optional[str] = None
    dc_building: Optional[str] = None
    dc_floor: Optional[str] = None
    dc_room: Optional[str] = None
