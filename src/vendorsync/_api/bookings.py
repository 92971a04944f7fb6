"""Bookings endpoint.

Endpoint:
  - GET /api/vendor/bookings?placeId=  (all bookings for a place, with
    the booking user's contact details joined in)
"""

from __future__ import annotations

import logging

from vendorsync._api._common import unwrap_list
from vendorsync._transport import Transport
from vendorsync.models.booking import Booking

_logger = logging.getLogger(__name__)

_ENDPOINT = "/api/vendor/bookings"


async def fetch_bookings(transport: Transport, place_id: str) -> list[Booking]:
    data = await transport.request("GET", _ENDPOINT, query={"placeId": place_id})
    rows = unwrap_list(data, "bookings", endpoint=_ENDPOINT)
    _logger.debug("Fetched %d bookings place_id=%s", len(rows), place_id)
    return [Booking.model_validate(row) for row in rows]
