# dcims/enum_colors/router.py
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from dcims.core.security import get_current_user_id
from dcims.db.schemas import ApiResponse
from .schemas import EnumColorCreate, EnumColorOut, EnumColorUpdate
from . import service

router = APIRouter()


@router.get(
    "/enum-colors",
    response_model=ApiResponse[List[EnumColorOut]],
    summary="Active color mappings (global and own)",
)
def list_enum_colors(
    enum_type: Optional[str] = Query(None),
    enum_value: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.list_colors_service(user_id, enum_type, enum_value))


@router.get(
    "/enum-colors/resolved",
    response_model=ApiResponse[Dict[str, Dict[str, str]]],
    summary="Effective color per enum value for the caller",
)
def resolved_enum_colors(
    enum_type: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.resolved_colors_service(user_id, enum_type))


@router.post(
    "/enum-colors",
    response_model=ApiResponse[EnumColorOut],
    summary="Create or replace a color mapping",
)
def upsert_enum_color(
    payload: EnumColorCreate,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.upsert_color_service(user_id, payload))


@router.put(
    "/enum-colors/{color_id}",
    response_model=ApiResponse[EnumColorOut],
    summary="Change the color of a mapping",
)
def update_enum_color(
    color_id: str,
    payload: EnumColorUpdate,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.update_color_service(color_id, user_id, payload))


@router.delete(
    "/enum-colors/{color_id}",
    response_model=ApiResponse[EnumColorOut],
    summary="Delete a color mapping",
)
def delete_enum_color(
    color_id: str,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.delete_color_service(color_id, user_id))
