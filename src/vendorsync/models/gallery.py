"""Gallery image and onboarding status models."""

from __future__ import annotations

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from vendorsync.ingestion.normalize import safe_bool, safe_str
from vendorsync.models._base import Timestamp, VendorBaseModel


class GalleryImage(VendorBaseModel):
    id: str
    place_id: str | None = None
    gallery_image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("gallery_image_url", "galleryImageUrl", "url")
    )
    created_at: Timestamp = None

    @field_validator("id", "place_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: object) -> str | None:
        return safe_str(value)


class OnboardingStatus(VendorBaseModel):
    """Which setup steps the vendor has finished.

    The backend adds steps over time; unknown flags are kept as extras.
    """

    model_config = ConfigDict(extra="allow")

    completed: bool = Field(
        default=False, validation_alias=AliasChoices("completed", "isComplete", "onboardingComplete")
    )
    has_place: bool | None = Field(default=None, validation_alias=AliasChoices("has_place", "hasPlace"))
    has_gallery: bool | None = Field(default=None, validation_alias=AliasChoices("has_gallery", "hasGallery"))
    has_payment_info: bool | None = Field(
        default=None, validation_alias=AliasChoices("has_payment_info", "hasPaymentInfo")
    )

    @field_validator("completed", mode="before")
    @classmethod
    def _coerce_completed(cls, value: object) -> bool:
        return safe_bool(value, default=False)
