"""Reviews endpoint.

Endpoint:
  - GET /api/vendor/reviews?placeId=
"""

from __future__ import annotations

import logging

from vendorsync._api._common import unwrap_list
from vendorsync._transport import Transport
from vendorsync.models.review import Review

_logger = logging.getLogger(__name__)

_ENDPOINT = "/api/vendor/reviews"


async def fetch_reviews(transport: Transport, place_id: str) -> list[Review]:
    """Fetch raw reviews; the summary is always derived by the caller."""
    data = await transport.request("GET", _ENDPOINT, query={"placeId": place_id})
    rows = unwrap_list(data, "reviews", endpoint=_ENDPOINT)
    _logger.debug("Fetched %d reviews place_id=%s", len(rows), place_id)
    return [Review.model_validate(row) for row in rows]
