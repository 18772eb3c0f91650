# dcims/dashboards/router.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends

from dcims.core.security import get_current_user_id, get_optional_user_id
from dcims.db.schemas import ApiResponse
from .schemas import (
    CloneRequest,
    DashboardCreate,
    DashboardOut,
    DashboardSummary,
    DashboardUpdate,
    WidgetCreate,
    WidgetOut,
    WidgetUpdate,
)
from . import service

router = APIRouter()


@router.get(
    "/dashboards",
    response_model=ApiResponse[List[DashboardSummary]],
    summary="List own and public dashboards",
)
def list_dashboards(user_id: Optional[str] = Depends(get_optional_user_id)):
    return ApiResponse(data=service.list_dashboards_service(user_id))


@router.post(
    "/dashboards",
    response_model=ApiResponse[DashboardOut],
    status_code=201,
    summary="Create a dashboard with its widgets",
)
def create_dashboard(
    payload: DashboardCreate,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.create_dashboard_service(user_id, payload))


@router.get(
    "/dashboards/{dashboard_id}",
    response_model=ApiResponse[DashboardOut],
    summary="Get a dashboard and its widgets",
)
def get_dashboard(
    dashboard_id: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
):
    return ApiResponse(data=service.get_dashboard_service(dashboard_id, user_id))


@router.put(
    "/dashboards/{dashboard_id}",
    response_model=ApiResponse[DashboardOut],
    summary="Update a dashboard (widgets diffed by id)",
)
def update_dashboard(
    dashboard_id: str,
    payload: DashboardUpdate,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.update_dashboard_service(dashboard_id, user_id, payload))


@router.delete(
    "/dashboards/{dashboard_id}",
    response_model=ApiResponse[Dict[str, Any]],
    summary="Delete a dashboard and its widgets",
)
def delete_dashboard(
    dashboard_id: str,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.delete_dashboard_service(dashboard_id, user_id))


@router.post(
    "/dashboards/{dashboard_id}/clone",
    response_model=ApiResponse[DashboardOut],
    status_code=201,
    summary="Copy a visible dashboard under a new name",
)
def clone_dashboard(
    dashboard_id: str,
    payload: CloneRequest,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.clone_dashboard_service(dashboard_id, user_id, payload))


@router.post(
    "/dashboards/{dashboard_id}/widgets",
    response_model=ApiResponse[WidgetOut],
    status_code=201,
    summary="Add a widget to an owned dashboard",
)
def create_widget(
    dashboard_id: str,
    payload: WidgetCreate,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.create_widget_service(dashboard_id, user_id, payload))


@router.put(
    "/widgets/{widget_id}",
    response_model=ApiResponse[WidgetOut],
    summary="Update a single widget",
)
def update_widget(
    widget_id: str,
    payload: WidgetUpdate,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.update_widget_service(widget_id, user_id, payload))


@router.delete(
    "/widgets/{widget_id}",
    response_model=ApiResponse[Dict[str, Any]],
    summary="Delete a single widget",
)
def delete_widget(
    widget_id: str,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.delete_widget_service(widget_id, user_id))
