"""Pydantic request models for client edit operations.

These models provide a consistent "validate → normalize → execute" flow.
They are used internally by :class:`vendorsync.client.VendorClient`.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_ACCOUNT_NUMBER_RE = re.compile(r"^\d{6,20}$")
_IFSC_RE = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
_UPI_RE = re.compile(r"^[\w.\-]{2,}@[a-zA-Z]{2,}$")


class _Request(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )


class PaymentInfoUpdate(_Request):
    """Payout details for the vendor."""

    account_holder_name: str
    account_number: str
    ifsc_code: str
    upi_id: str

    @field_validator("account_holder_name")
    @classmethod
    def _holder_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("Account holder name is required")
        return value

    @field_validator("account_number")
    @classmethod
    def _valid_account_number(cls, value: str) -> str:
        if not _ACCOUNT_NUMBER_RE.match(value):
            raise ValueError("Enter a valid account number")
        return value

    @field_validator("ifsc_code")
    @classmethod
    def _valid_ifsc(cls, value: str) -> str:
        code = value.upper()
        if not _IFSC_RE.match(code):
            raise ValueError("Enter a valid IFSC code")
        return code

    @field_validator("upi_id")
    @classmethod
    def _valid_upi(cls, value: str) -> str:
        if not _UPI_RE.match(value):
            raise ValueError("Enter a valid UPI ID (e.g., name@paytm)")
        return value


class _Patch(_Request):
    """Partial update; only explicitly set fields are sent."""

    @model_validator(mode="after")
    def _non_empty(self) -> _Patch:
        if not self.model_fields_set:
            raise ValueError("update must change at least one field")
        return self

    def to_patch(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ProfileUpdate(_Patch):
    vendor_full_name: str | None = None
    vendor_phone_number: str | None = None
    vendor_address: str | None = None
    vendor_city: str | None = None
    vendor_state: str | None = None
    vendor_country: str | None = None
    vendor_postal_code: str | None = None
    business_name: str | None = None


class PlaceUpdate(_Patch):
    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    phone_number: str | None = None
    description: str | None = None
    avg_price: float | None = Field(default=None, ge=0)


class PasswordUpdate(_Request):
    current_password: str
    new_password: str = Field(min_length=6)

    @model_validator(mode="after")
    def _differs(self) -> PasswordUpdate:
        if self.current_password == self.new_password:
            raise ValueError("new password must differ from the current one")
        return self


class LoginRequest(_Request):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email_non_empty(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("email must be a valid address")
        return value.lower()


class RegistrationRequest(_Request):
    """New vendor + place sign-up form."""

    business_name: str = Field(min_length=1)
    address: str
    country: str
    city: str
    state: str
    postal_code: str
    business_phone_number: str
    business_category: str
    business_sub_category: str | None = None
    vendor_full_name: str = Field(min_length=1)
    vendor_phone_number: str
    email: str
    password: str = Field(min_length=6)
    vendor_address: str | None = None
    vendor_city: str | None = None
    vendor_state: str | None = None
    vendor_country: str | None = None
    vendor_postal_code: str | None = None

    def to_body(self) -> dict[str, Any]:
        """camelCase request body expected by the register endpoint."""
        return {to_camel(name): value for name, value in self.model_dump().items()}


class BannerUpload(_Request):
    """Base64-encoded banner image for the vendor's place."""

    base64: str = Field(min_length=1)


class GalleryUpload(_Request):
    """Base64-encoded images to store in the place gallery."""

    images: list[str] = Field(min_length=1)

    @field_validator("images")
    @classmethod
    def _images_non_empty(cls, value: list[str]) -> list[str]:
        if any(not image.strip() for image in value):
            raise ValueError("gallery images must not be empty")
        return value
