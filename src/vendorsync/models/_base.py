"""Base model shared by every vendorsync entity.

Every entity model inherits from :class:`VendorBaseModel` which provides:

* frozen instances, so state changes always produce a new value;
* ``populate_by_name`` so both field names and backend aliases validate;
* a ``model_validator(mode="before")`` that turns empty strings into
  missing values so field defaults apply.

:data:`Timestamp` coerces ISO-8601 strings and epoch numbers into aware
UTC datetimes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator

from vendorsync.ingestion.normalize import parse_timestamp

Timestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces backend timestamps to UTC datetimes."""


class VendorBaseModel(BaseModel):
    """Base for backend entity models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_strings(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if not (isinstance(value, str) and not value.strip())}

    def to_cache(self) -> dict[str, Any]:
        """JSON-safe dict used for the persistent cache."""
        return self.model_dump(mode="json")
