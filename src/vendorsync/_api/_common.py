"""Shared helpers for vendor endpoint modules.

The backend is not consistent about envelopes: list endpoints answer with a
bare JSON array or with ``{"<key>": [...]}``, single-object endpoints with
the object itself or ``{"<key>": {...}}``. These helpers accept both.

It is internal to vendorsync and may change at any time.
"""

from __future__ import annotations

from typing import Any

from vendorsync.exceptions import VendorApiError


def unwrap_list(data: Any, key: str, *, endpoint: str) -> list[dict[str, Any]]:
    """Return the list of row dicts carried by *data*."""
    items = data.get(key, data.get("data")) if isinstance(data, dict) else data
    if items is None:
        return []
    if not isinstance(items, list):
        raise VendorApiError(f"{endpoint} returned no {key} list", code="unexpected_shape", endpoint=endpoint)
    return [item for item in items if isinstance(item, dict)]


def unwrap_object(data: Any, key: str, *, endpoint: str) -> dict[str, Any] | None:
    """Return the single row dict carried by *data*, ``None`` for an empty answer."""
    if data is None:
        return None
    if not isinstance(data, dict):
        raise VendorApiError(f"{endpoint} returned no {key} object", code="unexpected_shape", endpoint=endpoint)
    nested = data.get(key, data.get("data"))
    if isinstance(nested, dict):
        return nested
    if nested is None and key not in data and "data" not in data:
        return data or None
    return None


def require_success(data: Any, *, endpoint: str) -> None:
    """Raise when an update endpoint reports ``success: false``."""
    if isinstance(data, dict) and data.get("success") is False:
        message = data.get("error") or data.get("message") or "update rejected"
        raise VendorApiError(f"{endpoint} failed: {message}", code="rejected", endpoint=endpoint)
