# dcims/servers/router.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, File, Query, UploadFile

from dcims.core.security import get_current_user_id
from dcims.db.schemas import ApiResponse
from .schemas import (
    ImportResult,
    ServerCreate,
    ServerFilterParams,
    ServerOut,
    ServerPage,
    ServerUpdate,
)
from . import service

router = APIRouter()


# GET /api/v1/servers/enums
@router.get(
    "/servers/enums",
    response_model=ApiResponse[Dict[str, List[str]]],
    summary="Accepted enum values and stored filter choices",
)
def get_enums(
    include_values: bool = Query(True, description="Also list distinct brands, models, sites, ..."),
):
    return ApiResponse(data=service.enums_service(include_values))


# POST /api/v1/servers/filter
@router.post(
    "/servers/filter",
    response_model=ApiResponse[ServerPage],
    summary="Search, filter, sort and page the server inventory",
)
def filter_servers(
    params: ServerFilterParams,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.filter_servers_service(params))


# POST /api/v1/servers/import
@router.post(
    "/servers/import",
    response_model=ApiResponse[ImportResult],
    summary="Bulk import servers from CSV",
)
async def import_servers(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
):
    result = await service.import_servers_service(user_id, file)
    return ApiResponse(data=result)


@router.post(
    "/servers",
    response_model=ApiResponse[ServerOut],
    status_code=201,
    summary="Create a server record",
)
def create_server(
    payload: ServerCreate,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.create_server_service(user_id, payload))


@router.get(
    "/servers/{server_id}",
    response_model=ApiResponse[ServerOut],
    summary="Get a server record",
)
def get_server(
    server_id: str,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.get_server_service(server_id))


@router.put(
    "/servers/{server_id}",
    response_model=ApiResponse[ServerOut],
    summary="Update fields of a server record",
)
def update_server(
    server_id: str,
    payload: ServerUpdate,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.update_server_service(server_id, user_id, payload))


@router.delete(
    "/servers/{server_id}",
    response_model=ApiResponse[Dict[str, Any]],
    summary="Delete a server record",
)
def delete_server(
    server_id: str,
    user_id: str = Depends(get_current_user_id),
):
    return ApiResponse(data=service.delete_server_service(server_id, user_id))
