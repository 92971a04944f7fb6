"""Vendor authentication endpoints.

Endpoints:
  - POST /api/vendor/auth/login
  - POST /api/vendor/auth/register   (creates place + vendor)
"""

from __future__ import annotations

from typing import Any

from vendorsync._api._common import unwrap_object
from vendorsync._transport import Transport
from vendorsync.exceptions import VendorAuthenticationError, VendorTransportError

_LOGIN_ENDPOINT = "/api/vendor/auth/login"
_REGISTER_ENDPOINT = "/api/vendor/auth/register"


async def _post_for_user(transport: Transport, endpoint: str, body: dict[str, Any], failure: str) -> dict[str, Any]:
    try:
        data = await transport.request("POST", endpoint, body=body)
    except VendorTransportError as exc:
        if exc.status_code is not None and 400 <= exc.status_code < 500:
            raise VendorAuthenticationError(str(exc), code=str(exc.status_code), endpoint=endpoint) from exc
        raise
    user = unwrap_object(data, "user", endpoint=endpoint)
    if not user:
        raise VendorAuthenticationError(failure, code="no_user", endpoint=endpoint)
    return user


async def login(transport: Transport, email: str, password: str) -> dict[str, Any]:
    return await _post_for_user(
        transport,
        _LOGIN_ENDPOINT,
        {"email": email, "password": password},
        "Invalid email or password",
    )


async def register(transport: Transport, body: dict[str, Any]) -> dict[str, Any]:
    return await _post_for_user(
        transport,
        _REGISTER_ENDPOINT,
        body,
        "Failed to create account. Please try again.",
    )
