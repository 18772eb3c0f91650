# dcims/db/schemas.py

import re
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_valid_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_RE.match(value))


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every endpoint: {success, data}."""

    success: bool = True
    data: T
