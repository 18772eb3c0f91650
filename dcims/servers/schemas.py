# dcims/servers/schemas.py
import ipaddress
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from dcims.core.config import settings
from dcims.filters.tables import SERVER_COLUMNS
from .enums import ENUM_FIELDS, canonical_enum_value

WRITABLE_COLUMNS = (
    "hostname",
    "serial_number",
    "brand",
    "model",
    "ip_address",
    "ip_oob",
    "operating_system",
    "dc_site",
    "dc_building",
    "dc_floor",
    "dc_room",
    "rack",
    "unit",
    "allocation",
    "environment",
    "status",
    "device_type",
    "warranty",
    "notes",
)


LIST_FILTER_KEYS = (
    "status",
    "device_type",
    "environment",
    "allocation",
    "dc_site",
    "dc_building",
    "dc_floor",
    "dc_room",
    "rack",
    "brand",
    "model",
)


def check_ip(value: str) -> str:
    """Normalized IPv4/IPv6 text, or ValueError."""
    return str(ipaddress.ip_address(value.strip()))


def _blank_to_none(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    return {
        k: (v.strip() or None) if isinstance(v, str) else v
        for k, v in data.items()
    }


def _enum(field: str, v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    canonical, error = canonical_enum_value(field, v)
    if error:
        raise ValueError(error)
    return canonical


class _ServerFields(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def _strip(cls, data: Any) -> Any:
        return _blank_to_none(data)

    @field_validator("ip_address", "ip_oob", check_fields=False)
    @classmethod
    def _check_ip(cls, v: Optional[str]) -> Optional[str]:
        return check_ip(v) if v is not None else v

    @field_validator(*ENUM_FIELDS, check_fields=False)
    @classmethod
    def _check_enum(cls, v: Optional[str], info) -> Optional[str]:
        return _enum(info.field_name, v)


class ServerCreate(_ServerFields):
    hostname: str = Field(..., max_length=255)
    dc_site: str
    device_type: str
    serial_number: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    ip_address: Optional[str] = None
    ip_oob: Optional[str] = None
    operating_system: Optional[str] = None
    dc_building: Optional[str] = None
    dc_floor: Optional[str] = None
    dc_room: Optional[str] = None
    rack: Optional[str] = None
    unit: Optional[str] = None
    allocation: Optional[str] = None
    environment: Optional[str] = None
    status: Optional[str] = "Active"
    warranty: Optional[date] = None
    notes: Optional[str] = None


class ServerUpdate(_ServerFields):
    """Partial update; only fields present in the request are written."""

    hostname: Optional[str] = Field(None, max_length=255)
    dc_site: Optional[str] = None
    device_type: Optional[str] = None
    serial_number: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    ip_address: Optional[str] = None
    ip_oob: Optional[str] = None
    operating_system: Optional[str] = None
    dc_building: Optional[str] = None
    dc_floor: Optional[str] = None
    dc_room: Optional[str] = None
    rack: Optional[str] = None
    unit: Optional[str] = None
    allocation: Optional[str] = None
    environment: Optional[str] = None
    status: Optional[str] = None
    warranty: Optional[date] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _required_not_cleared(self):
        for name in ("hostname", "dc_site", "device_type"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be empty")
        return self


class ServerOut(BaseModel):
    id: str
    hostname: str
    dc_site: Optional[str] = None
    device_type: Optional[str] = None
    serial_number: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    ip_address: Optional[str] = None
    ip_oob: Optional[str] = None
    operating_system: Optional[str] = None
    dc_building: Optional[str] = None
    dc_floor: Optional[str] = None
    dc_room: Optional[str] = None
    rack: Optional[str] = None
    unit: Optional[str] = None
    allocation: Optional[str] = None
    environment: Optional[str] = None
    status: Optional[str] = None
    warranty: Optional[date] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServerFilterParams(BaseModel):
    """Body of the filtered server listing."""

    search: str = ""
    status: List[str] = Field(default_factory=list)
    device_type: List[str] = Field(default_factory=list)
    environment: List[str] = Field(default_factory=list)
    allocation: List[str] = Field(default_factory=list)
    dc_site: List[str] = Field(default_factory=list)
    dc_building: List[str] = Field(default_factory=list)
    dc_floor: List[str] = Field(default_factory=list)
    dc_room: List[str] = Field(default_factory=list)
    rack: List[str] = Field(default_factory=list)
    brand: List[str] = Field(default_factory=list)
    model: List[str] = Field(default_factory=list)
    page: int = 1
    page_size: int = settings.SERVER_PAGE_SIZE_DEFAULT
    sort_by: str = "created_at"
    sort_direction: Literal["asc", "desc"] = "desc"

    @model_validator(mode="before")
    @classmethod
    def _listify(cls, data: Any) -> Any:
        # single values (e.g. from a query string) become one-element lists
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key, value in data.items():
            if key in LIST_FILTER_KEYS and isinstance(value, str):
                data[key] = [value]
        if isinstance(data.get("sort_direction"), str):
            data["sort_direction"] = data["sort_direction"].lower()
        return data

    @field_validator("page")
    @classmethod
    def _page_floor(cls, v: int) -> int:
        return max(1, v)

    @field_validator("page_size")
    @classmethod
    def _clamp_page_size(cls, v: int) -> int:
        return min(settings.SERVER_PAGE_SIZE_MAX, max(1, v))

    @field_validator("sort_by")
    @classmethod
    def _check_sort(cls, v: str) -> str:
        if v not in SERVER_COLUMNS:
            raise ValueError(f"Cannot sort by '{v}'")
        return v

    def value_filters(self) -> Dict[str, List[str]]:
        return {k: getattr(self, k) for k in LIST_FILTER_KEYS if getattr(self, k)}


class Pagination(BaseModel):
    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class ServerPage(BaseModel):
    data: List[ServerOut]
    pagination: Pagination


class ImportResult(BaseModel):
    total_rows: int
    imported: int
    errors: List[str] = Field(default_factory=list)
