# dcims/activity/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from dcims.core.security import get_current_user_id
from dcims.db.schemas import ApiResponse
from .schemas import ActivityLogPage
from . import service

router = APIRouter()


# GET /api/v1/activity-logs
@router.get(
    "/activity-logs",
    response_model=ApiResponse[ActivityLogPage],
    summary="Recent activity, newest first",
)
def list_activity_logs(
    user_id: Optional[str] = Query(None, description="Only entries by this user"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.list_activity_service(user_id, limit, offset))
