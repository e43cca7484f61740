from typing import Optional

from fastapi import Header

from .config import get_settings
from .exceptions import AuthenticationException


async def verify_admin_api_key(x_api_key: Optional[str] = Header(None)):
    """
    Guard for administrative routes (lock, unlock, batch lock, add user).

    Open when no API_KEY is configured, as on a local development box.
    """
    expected = get_settings().API_KEY
    if not expected:
        return {"type": "open"}
    if x_api_key and x_api_key == expected:
        return {"type": "apikey"}
    raise AuthenticationException("Authentication required", error_code="AUTH_REQUIRED")
