"""Push payload ingestion.

Translates decoded push messages into :class:`Notification` records. Three
envelope shapes are accepted:

* ``{"type": "INSERT", "table": "vendor_notifications", "record": {...}}``
* ``{"eventType": "INSERT", "new": {...}}``
* a bare notification row.

Anything that is not an insert of a well-formed row yields ``None``.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from vendorsync.models.notification import Notification

_logger = logging.getLogger(__name__)

_TABLE = "vendor_notifications"
_CHANGE_EVENTS = frozenset({"INSERT", "UPDATE", "DELETE"})


def _extract_inserted_row(payload: dict[str, Any]) -> dict[str, Any] | None:
    # A bare row carries its own ``type`` column (e.g. "NEW_BOOKING").
    event_type = str(payload.get("eventType") or payload.get("type") or "").upper()
    is_envelope = "record" in payload or "new" in payload or event_type in _CHANGE_EVENTS
    if not is_envelope:
        return payload if "id" in payload else None
    if event_type != "INSERT":
        return None
    table = payload.get("table")
    if table is not None and table != _TABLE:
        return None
    row = payload.get("record") or payload.get("new")
    return row if isinstance(row, dict) else None


def notification_from_push(payload: Any) -> Notification | None:
    if not isinstance(payload, dict):
        return None
    row = _extract_inserted_row(payload)
    if row is None:
        return None
    try:
        return Notification.model_validate(row)
    except ValidationError:
        _logger.debug("Ignoring malformed notification insert", exc_info=True)
        return None
