# dcims/servers/service.py
import logging
import math
from typing import Any, Dict, List, Optional

from fastapi import UploadFile

from dcims.core.exceptions import NotFoundError, ValidationError
from dcims.db.schemas import is_valid_uuid
from dcims.events.bus import Event, Topic, bus
from dcims.filters.tables import SERVER_SEARCH_COLUMNS
from dcims.filters.translation import Clause, QuerySpec
from .csv_import import parse_servers_csv, validate_rows
from .enums import ENUM_FIELDS
from .schemas import (
    ImportResult,
    Pagination,
    ServerCreate,
    ServerFilterParams,
    ServerOut,
    ServerPage,
    ServerUpdate,
)
from . import repository

logger = logging.getLogger(__name__)

# Free-form columns whose distinct values are offered as filter choices
DISTINCT_VALUE_COLUMNS = {
    "brands": "brand",
    "models": "model",
    "operating_systems": "operating_system",
    "sites": "dc_site",
    "buildings": "dc_building",
    "racks": "rack",
    "units": "unit",
}


def _publish(
    action: str,
    user_id: str,
    entity_id: Optional[str] = None,
    topic: Topic = Topic.SERVERS_CHANGED,
    **details,
) -> None:
    bus.publish(
        Event(
            topic=topic,
            action=action,
            user_id=user_id,
            entity_type="server",
            entity_id=entity_id,
            details=details,
        )
    )


def build_server_query(params: ServerFilterParams) -> QuerySpec:
    clauses = [
        Clause(column=column, operator="in", value=values)
        for column, values in params.value_filters().items()
    ]
    return QuerySpec(
        table="servers",
        clauses=clauses,
        search_term=params.search or None,
        search_columns=SERVER_SEARCH_COLUMNS,
        order_by=[params.sort_by],
        descending=params.sort_direction == "desc",
        limit=params.page_size,
    )


def filter_servers_service(params: ServerFilterParams) -> ServerPage:
    spec = build_server_query(params)
    offset = (params.page - 1) * params.page_size
    rows, total = repository.list_servers(spec, offset)

    total_pages = math.ceil(total / params.page_size) if total else 0
    return ServerPage(
        data=[ServerOut(**r) for r in rows],
        pagination=Pagination(
            current_page=params.page,
            page_size=params.page_size,
            total_items=total,
            total_pages=total_pages,
            has_next_page=params.page < total_pages,
            has_prev_page=params.page > 1,
        ),
    )


def get_server_service(server_id: str) -> ServerOut:
    row = repository.fetch_server(server_id) if is_valid_uuid(server_id) else None
    if not row:
        raise NotFoundError("Server not found.")
    return ServerOut(**row)


def create_server_service(user_id: str, data: ServerCreate) -> ServerOut:
    row = repository.insert_server(data.model_dump(), user_id)
    _publish("server_created", user_id, row["id"], hostname=row["hostname"])
    return ServerOut(**row)


def update_server_service(server_id: str, user_id: str, data: ServerUpdate) -> ServerOut:
    if not is_valid_uuid(server_id):
        raise NotFoundError("Server not found.")
    fields = data.model_dump(exclude_unset=True)
    row = repository.update_server(server_id, fields)
    if not row:
        raise NotFoundError("Server not found.")
    _publish("server_updated", user_id, server_id, fields=sorted(fields))
    return ServerOut(**row)


def delete_server_service(server_id: str, user_id: str) -> Dict[str, Any]:
    if not is_valid_uuid(server_id) or not repository.delete_server(server_id):
        raise NotFoundError("Server not found.")
    _publish("server_deleted", user_id, server_id)
    return {"id": server_id, "deleted": True}


def enums_service(include_values: bool = True) -> Dict[str, List[str]]:
    """
    Accepted values of every enumerated column, optionally with the distinct
    values currently stored in the free-form columns.
    """
    result: Dict[str, List[str]] = {field: list(values) for field, values in ENUM_FIELDS.items()}
    if include_values:
        for key, column in DISTINCT_VALUE_COLUMNS.items():
            result[key] = repository.distinct_values(column)
    return result


async def import_servers_service(user_id: str, upload_file: UploadFile) -> ImportResult:
    filename = (upload_file.filename or "").lower()
    if filename and not filename.endswith(".csv"):
        raise ValidationError("Invalid file type. Please upload a .csv file.")

    file_bytes = await upload_file.read()
    df, rejected = parse_servers_csv(file_bytes)
    valid, errors = validate_rows(df, rejected)
    total_rows = len(df) + len(rejected)
    imported = repository.bulk_insert_servers(valid, user_id)

    logger.info(
        "Server import by %s: %d of %d row(s) imported, %d error(s)",
        user_id,
        imported,
        total_rows,
        len(errors),
    )
    if imported:
        _publish(
            "servers_imported",
            user_id,
            topic=Topic.SERVERS_IMPORTED,
            imported=imported,
            rejected=len(errors),
        )

    return ImportResult(total_rows=total_rows, imported=imported, errors=errors)
