# dcims/dashboards/schemas.py
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from dcims.db.schemas import is_valid_uuid
from dcims.filters.schemas import DataSource

WidgetType = Literal["metric", "chart", "table", "timeline", "stat", "gauge"]
DashboardStatus = Literal["active", "archived", "draft"]

DEFAULT_WIDTH = 4
DEFAULT_HEIGHT = 1
GRID_COLUMNS = 4


def default_config() -> Dict[str, Any]:
    return {"type": "bar", "showLegend": True}


def default_data_source() -> Dict[str, Any]:
    return {"table": "servers", "aggregation": "count", "groupBy": "status", "filters": []}


def _is_id_key(key: Any) -> bool:
    return isinstance(key, str) and (key == "id" or key.endswith("_id"))


def strip_invalid_ids(value: Any) -> Any:
    """
    Copy of ``value`` with every ``id`` / ``*_id`` entry removed unless it
    holds a well-formed UUID. Recurses through dicts and lists.
    """
    if isinstance(value, dict):
        return {
            k: strip_invalid_ids(v)
            for k, v in value.items()
            if not (_is_id_key(k) and not is_valid_uuid(v))
        }
    if isinstance(value, list):
        return [strip_invalid_ids(v) for v in value]
    return value


def check_data_source(v: Dict[str, Any]) -> Dict[str, Any]:
    try:
        DataSource.model_validate(v)
    except ValidationError as exc:
        raise ValueError(f"invalid data_source: {exc.errors()[0].get('msg')}")
    return v


def flatten_widget_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Editor shape (type, position{x,y}, size{width,height}) -> column names."""
    data = strip_invalid_ids(data)

    if "widget_type" not in data and "type" in data:
        data["widget_type"] = data.pop("type")

    position = data.pop("position", None)
    if isinstance(position, dict):
        data.setdefault("position_x", position.get("x"))
        data.setdefault("position_y", position.get("y"))

    size = data.pop("size", None)
    if isinstance(size, dict):
        data.setdefault("width", size.get("width"))
        data.setdefault("height", size.get("height"))
    return data


def grid_position(index: int) -> Dict[str, int]:
    return {"x": (index % GRID_COLUMNS) * 6, "y": (index // GRID_COLUMNS) * 4}


class WidgetIn(BaseModel):
    """
    A widget as submitted by the dashboard editor.

    Both the nested editor shape (``type``, ``position{x,y}``,
    ``size{width,height}``) and the flat stored shape are accepted.
    """

    id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    widget_type: WidgetType
    position_x: Optional[int] = Field(None, ge=0)
    position_y: Optional[int] = Field(None, ge=0)
    width: int = Field(DEFAULT_WIDTH, ge=1)
    height: int = Field(DEFAULT_HEIGHT, ge=1)
    config: Dict[str, Any] = Field(default_factory=default_config)
    data_source: Dict[str, Any] = Field(default_factory=default_data_source)
    filters: List[Any] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = flatten_widget_payload(data)

        # explicit nulls fall back to defaults
        for key in ("width", "height", "config", "data_source", "filters"):
            if key in data and data[key] is None:
                del data[key]

        if isinstance(data.get("title"), str):
            data["title"] = data["title"].strip()
        return data

    @field_validator("data_source")
    @classmethod
    def _check_data_source(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        return check_data_source(v)

    def to_row(self, index: int) -> Dict[str, Any]:
        """Column values for ``dashboard_widgets``; unset positions go on the grid."""
        grid = grid_position(index)
        return {
            "id": self.id,
            "title": self.title,
            "widget_type": self.widget_type,
            "position_x": self.position_x if self.position_x is not None else grid["x"],
            "position_y": self.position_y if self.position_y is not None else grid["y"],
            "width": self.width,
            "height": self.height,
            "config": self.config,
            "data_source": self.data_source,
            "filters": self.filters,
        }


class WidgetCreate(WidgetIn):
    pass


class WidgetUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    widget_type: Optional[WidgetType] = None
    position_x: Optional[int] = Field(None, ge=0)
    position_y: Optional[int] = Field(None, ge=0)
    width: Optional[int] = Field(None, ge=1)
    height: Optional[int] = Field(None, ge=1)
    config: Optional[Dict[str, Any]] = None
    data_source: Optional[Dict[str, Any]] = None
    filters: Optional[List[Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return flatten_widget_payload(data)

    @field_validator("data_source")
    @classmethod
    def _check_data_source(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if v is not None:
            check_data_source(v)
        return v


class WidgetOut(BaseModel):
    id: str
    dashboard_id: str
    title: str
    widget_type: str
    position_x: int
    position_y: int
    width: int
    height: int
    config: Dict[str, Any] = Field(default_factory=dict)
    data_source: Dict[str, Any] = Field(default_factory=dict)
    filters: List[Any] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DashboardCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    is_public: bool = False
    status: DashboardStatus = "active"
    layout: Dict[str, Any] = Field(default_factory=dict)
    settings: Dict[str, Any] = Field(default_factory=dict)
    widgets: List[WidgetIn] = Field(default_factory=list)


class DashboardUpdate(BaseModel):
    """
    ``widgets`` (when given) is the complete desired widget set.
    ``version`` is the version the client last read; a stale value is
    rejected with 409.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    is_public: Optional[bool] = None
    status: Optional[DashboardStatus] = None
    layout: Optional[Dict[str, Any]] = None
    settings: Optional[Dict[str, Any]] = None
    widgets: Optional[List[WidgetIn]] = None
    version: Optional[int] = None


class CloneRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class DashboardSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    user_id: Optional[str] = None
    is_public: bool = False
    status: str = "active"
    version: int = 1
    widget_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DashboardOut(DashboardSummary):
    layout: Dict[str, Any] = Field(default_factory=dict)
    settings: Dict[str, Any] = Field(default_factory=dict)
    widgets: List[WidgetOut] = Field(default_factory=list)
