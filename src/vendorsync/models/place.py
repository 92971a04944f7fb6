"""Place (venue) model."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, field_validator

from vendorsync.ingestion.normalize import safe_float, safe_str
from vendorsync.models._base import VendorBaseModel

#: Never written to the persistent cache; refetched on every hydration.
BANNER_FIELD = "banner_image_link"


class PlaceProfile(VendorBaseModel):
    """Venue attributes as returned by the backend.

    Columns without a declared field are kept as extras.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    category: str | None = None
    sub_category: str | None = None
    phone_number: str | None = None
    description: str | None = None
    avg_price: float | None = None
    banner_image_link: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> str | None:
        return safe_str(value)

    @field_validator("avg_price", mode="before")
    @classmethod
    def _coerce_price(cls, value: object) -> float | None:
        return safe_float(value)

    def to_cache(self) -> dict[str, Any]:
        payload = super().to_cache()
        payload.pop(BANNER_FIELD, None)
        return payload

    def with_banner(self, banner_image_link: str | None) -> PlaceProfile:
        return self.model_copy(update={BANNER_FIELD: banner_image_link})
