# dcims/core/security.py

import logging
from typing import Optional

from fastapi import Header
from jose import JWTError, jwt

from dcims.core.config import settings
from dcims.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def decode_user_id(authorization: str) -> str:
    """
    Verify a Supabase access token ("Bearer <jwt>") and return its subject.
    """
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Malformed Authorization header")

    if scheme.lower() != "bearer":
        raise AuthenticationError("Unsupported authorization scheme")

    if not settings.SUPABASE_JWT_SECRET:
        logger.error("SUPABASE_JWT_SECRET is not configured; cannot verify tokens")
        raise AuthenticationError("Token verification is not configured")

    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        raise AuthenticationError(f"Invalid token: {exc}")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Token has no subject")
    return user_id


def get_current_user_id(authorization: str = Header(None)) -> str:
    if not authorization:
        raise AuthenticationError("Authorization header missing")
    return decode_user_id(authorization)


def get_optional_user_id(authorization: str = Header(None)) -> Optional[str]:
    """
    Anonymous callers are allowed (public dashboards). A header that is
    present but invalid still fails, so a bad token never silently
    downgrades to public access.
    """
    if not authorization:
        return None
    return decode_user_id(authorization)
