# dcims/locations/router.py
from typing import List

from fastapi import APIRouter, Depends

from dcims.core.security import get_current_user_id
from dcims.db.schemas import ApiResponse
from .schemas import (
    HierarchyState,
    LevelOptionsRequest,
    RackLocation,
    SelectRequest,
    SelectionModel,
)
from . import service

router = APIRouter()


# POST /api/v1/locations/options
@router.post(
    "/locations/options",
    response_model=ApiResponse[HierarchyState],
    summary="Option lists for every level under the given selection",
)
def location_options(
    selection: SelectionModel,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.options_service(selection))


# POST /api/v1/locations/select
@router.post(
    "/locations/select",
    response_model=ApiResponse[HierarchyState],
    summary="Select a value at one level and cascade",
)
def select_location(
    payload: SelectRequest,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.select_service(payload))


# POST /api/v1/locations/level-options
@router.post(
    "/locations/level-options",
    response_model=ApiResponse[List[str]],
    summary="Distinct values of one level under ancestor filters",
)
def level_options(
    payload: LevelOptionsRequest,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.level_options_service(payload))


# GET /api/v1/locations/default-rack
@router.get(
    "/locations/default-rack",
    response_model=ApiResponse[RackLocation],
    summary="First rack in the inventory with its location",
)
def default_rack(user_id: str = Depends(get_current_user_id)):
    return ApiResponse(data=service.default_rack_service())


# GET /api/v1/locations/racks/{rack}
@router.get(
    "/locations/racks/{rack}",
    response_model=ApiResponse[RackLocation],
    summary="Recorded location of a rack",
)
def rack_location(
    rack: str,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.rack_location_service(rack))
