# dcims/widgets/router.py
from typing import Optional, Union

from fastapi import APIRouter, Depends

from dcims.core.security import get_current_user_id, get_optional_user_id
from dcims.db.schemas import ApiResponse
from .schemas import (
    ChartData,
    ListWidgetData,
    ListWidgetRequest,
    MetricData,
    WidgetDataRequest,
)
from . import service

router = APIRouter()


# POST /api/v1/widget-data
@router.post(
    "/widget-data",
    response_model=ApiResponse[Union[ChartData, MetricData]],
    summary="Run a widget data source (chart or metric)",
)
def widget_data(
    payload: WidgetDataRequest,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.widget_data_service(payload))


# POST /api/v1/widget-data/list
@router.post(
    "/widget-data/list",
    response_model=ApiResponse[ListWidgetData],
    summary="Rows for a list widget",
)
def list_widget_data(
    payload: ListWidgetRequest,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.list_widget_data_service(payload))


# GET /api/v1/widgets/{widget_id}/data
@router.get(
    "/widgets/{widget_id}/data",
    response_model=ApiResponse[ChartData],
    summary="Chart data for a saved widget",
)
def stored_widget_data(
    widget_id: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
):
    return ApiResponse(data=service.stored_widget_data_service(widget_id, user_id))
