"""Vendor notification endpoints.

Endpoints:
  - GET  /api/vendor/notifications?vendorId=   (newest first)
  - POST /api/vendor/notifications/mark-read
"""

from __future__ import annotations

import logging

from vendorsync._api._common import require_success, unwrap_list
from vendorsync._transport import Transport
from vendorsync.models.notification import Notification

_logger = logging.getLogger(__name__)

_LIST_ENDPOINT = "/api/vendor/notifications"
_MARK_READ_ENDPOINT = "/api/vendor/notifications/mark-read"


async def fetch_notifications(transport: Transport, vendor_id: str) -> list[Notification]:
    data = await transport.request("GET", _LIST_ENDPOINT, query={"vendorId": vendor_id})
    rows = unwrap_list(data, "notifications", endpoint=_LIST_ENDPOINT)
    notifications = [Notification.model_validate(row) for row in rows]
    # Newest first regardless of backend ordering; undated rows sink to the end.
    notifications.sort(key=lambda n: (n.created_at is not None, n.created_at), reverse=True)
    _logger.debug("Fetched %d notifications vendor_id=%s", len(notifications), vendor_id)
    return notifications


async def mark_notifications_read(transport: Transport, vendor_id: str) -> None:
    data = await transport.request("POST", _MARK_READ_ENDPOINT, body={"vendorId": vendor_id})
    require_success(data, endpoint=_MARK_READ_ENDPOINT)
