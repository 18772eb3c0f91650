# dcims/widgets/schemas.py
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dcims.core.config import settings
from dcims.filters.schemas import DataSource, FilterConfig
from dcims.filters.tables import SERVER_COLUMNS, SERVER_FILTER_COLUMNS


class WidgetDataRequest(BaseModel):
    """
    Ad-hoc widget query.

    Accepts ``{"action": ..., "dataSource": {...}}``, the older
    ``{"config": {...}}`` wrapper, or a bare data source body.
    """

    model_config = ConfigDict(populate_by_name=True)

    action: Literal["query", "metric"] = "query"
    data_source: DataSource = Field(default_factory=DataSource, alias="dataSource")
    # Legacy widget-level filters, applied on top of the data source's own
    filters: List[FilterConfig] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "dataSource" in data or "data_source" in data:
            return data
        data = dict(data)
        action = data.pop("action", "query")
        if isinstance(data.get("config"), dict):
            return {"action": action, "dataSource": data["config"]}
        return {"action": action, "dataSource": data}


class ListWidgetRequest(BaseModel):
    """Rows for a list widget: 1-3 server columns, equality filters, paging."""

    columns: List[str]
    limit: int = Field(settings.LIST_WIDGET_DEFAULT_LIMIT, ge=1, le=1000)
    offset: int = Field(0, ge=0)
    filters: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_filters(cls, data: Any) -> Any:
        # Filter values may also arrive as top-level keys ({"dc_site": ...})
        if not isinstance(data, dict):
            return data
        data = dict(data)
        filters = dict(data.get("filters") or {})
        for key in list(data):
            if key in SERVER_FILTER_COLUMNS:
                filters[key] = data.pop(key)
        data["filters"] = filters
        return data

    @field_validator("columns")
    @classmethod
    def _check_columns(cls, v: List[str]) -> List[str]:
        if not v or len(v) > settings.LIST_WIDGET_MAX_COLUMNS:
            raise ValueError(f"You must select 1-{settings.LIST_WIDGET_MAX_COLUMNS} columns.")
        unknown = [c for c in v if c not in SERVER_COLUMNS]
        if unknown:
            raise ValueError(f"Unknown column(s): {', '.join(unknown)}")
        return v


class ChartDataset(BaseModel):
    label: str
    data: List[Union[int, float]]
    backgroundColor: List[str] = Field(default_factory=list)


class ChartData(BaseModel):
    labels: List[str]
    datasets: List[ChartDataset]
    total: Union[int, float] = 0


class MetricData(BaseModel):
    value: Optional[Union[int, float]] = None


class ListWidgetData(BaseModel):
    columns: List[str]
    rows: List[Dict[str, Any]]
    limit: int
    offset: int
