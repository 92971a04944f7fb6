"""Place endpoints.

Endpoints:
  - GET   /api/vendor/place?placeId=         (full place row)
  - GET   /api/vendor/place?placeId=&fields=banner_image_link
  - PATCH /api/vendor/place                  (partial update)
  - POST  /api/vendor/upload-banner          (base64 image, returns the new URL)
"""

from __future__ import annotations

import logging
from typing import Any

from vendorsync._api._common import require_success, unwrap_object
from vendorsync._transport import Transport
from vendorsync.exceptions import VendorApiError
from vendorsync.ingestion.normalize import safe_str
from vendorsync.models.place import BANNER_FIELD, PlaceProfile

_logger = logging.getLogger(__name__)

_ENDPOINT = "/api/vendor/place"
_BANNER_UPLOAD_ENDPOINT = "/api/vendor/upload-banner"


async def fetch_place(transport: Transport, place_id: str) -> PlaceProfile:
    data = await transport.request("GET", _ENDPOINT, query={"placeId": place_id})
    row = unwrap_object(data, "place", endpoint=_ENDPOINT)
    if row is None:
        raise VendorApiError(f"Place {place_id} not found", code="not_found", endpoint=_ENDPOINT)
    return PlaceProfile.model_validate(row)


async def fetch_place_banner(transport: Transport, place_id: str) -> str | None:
    """Fetch only the banner image reference of a place."""
    data = await transport.request("GET", _ENDPOINT, query={"placeId": place_id, "fields": BANNER_FIELD})
    row = unwrap_object(data, "place", endpoint=_ENDPOINT)
    banner = safe_str(row.get(BANNER_FIELD)) if row else None
    _logger.debug("Fetched banner place_id=%s present=%s", place_id, banner is not None)
    return banner


async def update_place(transport: Transport, place_id: str, patch: dict[str, Any]) -> None:
    data = await transport.request("PATCH", _ENDPOINT, body={"placeId": place_id, **patch})
    require_success(data, endpoint=_ENDPOINT)


async def upload_banner(transport: Transport, place_id: str, base64: str) -> str | None:
    """Upload a new banner image and return its public URL when the backend reports one."""
    data = await transport.request("POST", _BANNER_UPLOAD_ENDPOINT, body={"placeId": place_id, "base64": base64})
    require_success(data, endpoint=_BANNER_UPLOAD_ENDPOINT)
    if not isinstance(data, dict):
        return None
    return safe_str(data.get("url") or data.get("publicUrl") or data.get(BANNER_FIELD))
