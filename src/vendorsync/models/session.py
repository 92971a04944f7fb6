"""Vendor session model."""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator

from vendorsync.ingestion.normalize import safe_str
from vendorsync.models._base import VendorBaseModel


class Session(VendorBaseModel):
    """Identity of the logged-in vendor.

    ``id`` identifies the vendor (notifications, push channel);
    ``place_id`` identifies the venue the vendor manages (bookings,
    reviews, place details).
    """

    id: str
    """Vendor id."""
    place_id: str | None = Field(default=None, validation_alias=AliasChoices("place_id", "placeId"))
    """Venue id; ``None`` until the vendor has a place."""
    email: str | None = None
    vendor_full_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("vendor_full_name", "vendorFullName", "full_name"),
    )
    business_name: str | None = Field(default=None, validation_alias=AliasChoices("business_name", "businessName"))
    vendor_phone_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("vendor_phone_number", "vendorPhoneNumber"),
    )

    @field_validator("id", "place_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> str | None:
        return safe_str(value)

    @property
    def has_place(self) -> bool:
        return bool(self.place_id)
