# dcims/widgets/service.py
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from dcims.core.exceptions import NotFoundError, ValidationError
from dcims.db.schemas import is_valid_uuid
from dcims.filters.schemas import DataSource, FilterConfig
from dcims.filters.translation import translate_data_source, translate_server_filters
from .schemas import (
    ChartData,
    ListWidgetData,
    ListWidgetRequest,
    MetricData,
    WidgetDataRequest,
)
from .transform import build_chart_data
from . import repository

logger = logging.getLogger(__name__)


def _plain_number(value: Any) -> Optional[Union[int, float]]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def chart_data_service(
    data_source: DataSource,
    extra_filters: Optional[List[FilterConfig]] = None,
) -> ChartData:
    spec = translate_data_source(data_source, extra_filters)
    rows = repository.fetch_rows(spec)
    logger.debug("Widget query on %s returned %d row(s)", spec.table, len(rows))
    payload = build_chart_data(rows, spec.group_by, spec.aggregation, spec.field)
    return ChartData(**payload)


def metric_service(
    data_source: DataSource,
    extra_filters: Optional[List[FilterConfig]] = None,
) -> MetricData:
    spec = translate_data_source(data_source, extra_filters)
    value = repository.fetch_scalar(spec)
    if value is None and spec.aggregation in ("count", "sum"):
        value = 0
    return MetricData(value=_plain_number(value))


def widget_data_service(req: WidgetDataRequest) -> Union[ChartData, MetricData]:
    if req.action == "metric":
        return metric_service(req.data_source, req.filters)
    return chart_data_service(req.data_source, req.filters)


def list_widget_data_service(req: ListWidgetRequest) -> ListWidgetData:
    spec = translate_server_filters(req.filters)
    spec.limit = req.limit
    rows = repository.fetch_rows(spec, columns=req.columns, offset=req.offset)
    return ListWidgetData(columns=req.columns, rows=rows, limit=req.limit, offset=req.offset)


def stored_widget_data_service(widget_id: str, user_id: Optional[str]) -> ChartData:
    """Chart data for a saved widget, honouring its dashboard's visibility."""
    if not is_valid_uuid(widget_id):
        raise NotFoundError("Widget not found.")

    widget = repository.fetch_widget_with_owner(widget_id)
    if not widget or not (widget["is_public"] or widget["owner_id"] == user_id):
        raise NotFoundError("Widget not found.")

    try:
        data_source = DataSource.model_validate(widget.get("data_source") or {})
        extra = [FilterConfig.model_validate(f) for f in (widget.get("filters") or [])]
    except PydanticValidationError as exc:
        raise ValidationError(f"Stored widget configuration is invalid: {exc}")

    return chart_data_service(data_source, extra)
