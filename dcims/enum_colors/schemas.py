# dcims/enum_colors/schemas.py
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

HEX_COLOR_RE = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)


def check_hex(value: str) -> str:
    value = value.strip()
    if not HEX_COLOR_RE.match(value):
        raise ValueError("Invalid color_hex format. Expected #RRGGBB")
    return value


class EnumColorCreate(BaseModel):
    enum_type: str = Field(..., min_length=1, max_length=100)
    enum_value: str = Field(..., min_length=1, max_length=200)
    color_hex: str
    color_name: Optional[str] = None
    # Global mappings apply to every user without an own mapping
    is_global: bool = False

    @field_validator("color_hex")
    @classmethod
    def _check_hex(cls, v: str) -> str:
        return check_hex(v)


class EnumColorUpdate(BaseModel):
    color_hex: str
    color_name: Optional[str] = None

    @field_validator("color_hex")
    @classmethod
    def _check_hex(cls, v: str) -> str:
        return check_hex(v)


class EnumColorOut(BaseModel):
    id: str
    enum_type: str
    enum_value: str
    color_hex: str
    color_name: Optional[str] = None
    user_id: Optional[str] = None
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
