"""Vendor profile endpoints.

Endpoints:
  - GET   /api/vendor/profile?vendorId=
  - PATCH /api/vendor/profile       (profile fields and payout details)
  - PATCH /api/vendor/password
  - PATCH /api/vendor/push-token
  - GET   /api/vendor/onboarding-status?vendorId=
"""

from __future__ import annotations

from typing import Any

from vendorsync._api._common import require_success, unwrap_object
from vendorsync._transport import Transport
from vendorsync.models.gallery import OnboardingStatus

_PROFILE_ENDPOINT = "/api/vendor/profile"
_PASSWORD_ENDPOINT = "/api/vendor/password"
_PUSH_TOKEN_ENDPOINT = "/api/vendor/push-token"
_ONBOARDING_ENDPOINT = "/api/vendor/onboarding-status"


async def fetch_profile(transport: Transport, vendor_id: str) -> dict[str, Any] | None:
    """Fetch the vendor row, ``None`` when the vendor no longer exists."""
    data = await transport.request("GET", _PROFILE_ENDPOINT, query={"vendorId": vendor_id})
    return unwrap_object(data, "vendor", endpoint=_PROFILE_ENDPOINT)


async def update_profile(transport: Transport, vendor_id: str, patch: dict[str, Any]) -> None:
    data = await transport.request("PATCH", _PROFILE_ENDPOINT, body={"vendorId": vendor_id, **patch})
    require_success(data, endpoint=_PROFILE_ENDPOINT)


async def update_password(transport: Transport, vendor_id: str, current_password: str, new_password: str) -> None:
    data = await transport.request(
        "PATCH",
        _PASSWORD_ENDPOINT,
        body={"vendorId": vendor_id, "currentPassword": current_password, "newPassword": new_password},
    )
    require_success(data, endpoint=_PASSWORD_ENDPOINT)


async def update_push_token(transport: Transport, vendor_id: str, push_token: str | None) -> None:
    data = await transport.request("PATCH", _PUSH_TOKEN_ENDPOINT, body={"vendorId": vendor_id, "push_token": push_token})
    require_success(data, endpoint=_PUSH_TOKEN_ENDPOINT)


async def fetch_onboarding_status(transport: Transport, vendor_id: str) -> OnboardingStatus:
    data = await transport.request("GET", _ONBOARDING_ENDPOINT, query={"vendorId": vendor_id})
    row = unwrap_object(data, "status", endpoint=_ONBOARDING_ENDPOINT)
    return OnboardingStatus.model_validate(row or {})
