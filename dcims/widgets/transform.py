"""
Reshape raw rows into the chart payload consumed by dashboard widgets:

    {"labels": [...], "datasets": [{"label", "data", "backgroundColor"}], "total": n}

The transform is a pure function of its inputs. Label order is first-seen
order in the row sequence, so a chart stays visually stable across refreshes
of unchanged data.
"""

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from dcims.filters.translation import normalize_group_by

CHART_COLORS = [
    "#3b82f6",
    "#ef4444",
    "#10b981",
    "#f59e0b",
    "#8b5cf6",
    "#06b6d4",
    "#84cc16",
    "#f97316",
    "#ec4899",
    "#6366f1",
]
EMPTY_COLOR = "#e5e7eb"
UNKNOWN_LABEL = "Unknown"
LABEL_SEPARATOR = " / "

_PANDAS_AGG = {"sum": "sum", "avg": "mean", "min": "min", "max": "max"}


def empty_chart_data() -> Dict[str, Any]:
    return {
        "labels": [],
        "datasets": [{"label": "No Data", "data": [], "backgroundColor": [EMPTY_COLOR]}],
        "total": 0,
    }


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def bucket_label(row: Mapping[str, Any], group_by: Sequence[str]) -> str:
    parts = []
    for column in group_by:
        value = row.get(column)
        parts.append(UNKNOWN_LABEL if _is_missing(value) else str(value).strip())
    return LABEL_SEPARATOR.join(parts)


def _to_number(value: Any) -> Optional[float]:
    if _is_missing(value) or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _native(value: Any) -> Union[int, float]:
    """numpy scalar / NaN -> plain int or float."""
    if hasattr(value, "item"):
        value = value.item()
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return 0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def dataset_label(aggregation: str) -> str:
    return "Count" if aggregation == "count" else aggregation.capitalize()


def palette(n: int) -> List[str]:
    return [CHART_COLORS[i % len(CHART_COLORS)] for i in range(n)]


def _aggregate_all(values: pd.Series, aggregation: str) -> Union[int, float]:
    if aggregation == "count":
        return int(len(values))
    return _native(getattr(values, _PANDAS_AGG[aggregation])())


def build_chart_data(
    rows: Iterable[Mapping[str, Any]],
    group_by: Union[None, str, Sequence[str]] = None,
    aggregation: str = "count",
    field: Optional[str] = None,
) -> Dict[str, Any]:
    rows = list(rows)
    if not rows:
        return empty_chart_data()

    aggregation = (aggregation or "count").lower()
    if aggregation != "count" and aggregation not in _PANDAS_AGG:
        raise ValueError(f"Unsupported aggregation '{aggregation}'")
    if aggregation != "count" and not field:
        raise ValueError(f"Aggregation '{aggregation}' requires a field")

    group_by = normalize_group_by(group_by)

    # Labels and values are built in Python first so pandas never has to
    # infer dtypes from mixed / null-heavy columns.
    frame = pd.DataFrame(
        {
            "label": [bucket_label(r, group_by) for r in rows] if group_by else "Total",
            "value": [_to_number(r.get(field)) if field else None for r in rows],
        },
        index=range(len(rows)),
    )
    frame["value"] = frame["value"].astype("float64")

    total = _aggregate_all(frame["value"], aggregation)

    if not group_by:
        labels = ["Total"]
        data = [total]
        colors = [CHART_COLORS[0]]
    else:
        grouped = frame.groupby("label", sort=False)
        if aggregation == "count":
            series = grouped.size()
        else:
            series = grouped["value"].agg(_PANDAS_AGG[aggregation])
        labels = [str(label) for label in series.index]
        data = [_native(v) for v in series.tolist()]
        colors = palette(len(labels))

    return {
        "labels": labels,
        "datasets": [
            {"label": dataset_label(aggregation), "data": data, "backgroundColor": colors}
        ],
        "total": total,
    }
