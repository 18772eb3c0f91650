# dcims/filters/schemas.py

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

FILTER_OPERATORS = (
    "equals",
    "not_equals",
    "contains",
    "in",
    "not_in",
    "gt",
    "lt",
    "gte",
    "lte",
)

AGGREGATIONS = ("count", "sum", "avg", "min", "max")


class FilterConfig(BaseModel):
    """Basic filter: one (field, operator, value) constraint."""

    field: str
    operator: str = "equals"
    value: Any = None


class DateRange(BaseModel):
    field: str
    start: str
    end: str


class ServerFilterConfig(BaseModel):
    """
    Enhanced server filter. Any key other than ``logic`` is a column (or a
    plural alias such as ``dc_sites``) mapped to a value, a list of values
    or a "no constraint" sentinel.
    """

    logic: Literal["AND", "OR"] = "AND"
    values: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_values(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "values" in data:
            return data
        logic = str(data.get("logic") or "AND").upper()
        values = {
            k: v
            for k, v in data.items()
            if k not in ("logic", "hierarchical_filtering")
        }
        return {"logic": logic, "values": values}


class DataSource(BaseModel):
    """A widget's declarative data source."""

    model_config = ConfigDict(populate_by_name=True)

    table: str = "servers"
    aggregation: str = "count"
    field: Optional[str] = None
    group_by: Optional[Union[str, List[str]]] = Field(None, alias="groupBy")
    filters: List[FilterConfig] = Field(default_factory=list)
    server_filters: Optional[ServerFilterConfig] = Field(None, alias="serverFilters")
    date_range: Optional[DateRange] = Field(None, alias="dateRange")
    limit: Optional[int] = Field(None, ge=1, le=10000)

    @model_validator(mode="before")
    @classmethod
    def _normalize_filters(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        # EnhancedQueryConfig sent them as basicFilters
        if "filters" not in data and "basicFilters" in data:
            data["filters"] = data.pop("basicFilters")

        filters = data.get("filters")
        if filters is None:
            data["filters"] = []
        elif isinstance(filters, dict):
            # {"status": "Active", "brand": ""} -> equality filters, blanks dropped
            data["filters"] = [
                {"field": k, "operator": "equals", "value": v}
                for k, v in filters.items()
                if v is not None and v != ""
            ]

        if data.get("groupBy") == "" or data.get("group_by") == "":
            data.pop("groupBy", None)
            data.pop("group_by", None)
        return data
