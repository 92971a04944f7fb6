"""Booking models."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, time

from pydantic import ConfigDict, Field, field_validator

from vendorsync.ingestion.normalize import safe_str
from vendorsync.models._base import Timestamp, VendorBaseModel


class Booking(VendorBaseModel):
    """A single booking at the vendor's place.

    Unknown backend columns are kept so they survive a cache round-trip.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    user_id: str | None = None
    place_id: str | None = None
    booking_date_time: Timestamp = None
    created_at: Timestamp = None
    user_first_name: str | None = None
    user_last_name: str | None = None
    user_phone_number: str | None = None
    user_email: str | None = None

    @field_validator("id", "user_id", "place_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: object) -> str | None:
        return safe_str(value)

    @property
    def user_display_name(self) -> str | None:
        parts = [part for part in (self.user_first_name, self.user_last_name) if part]
        return " ".join(parts) if parts else None


def _local_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    local_now = now.astimezone()
    start = datetime.combine(local_now.date(), time.min, tzinfo=local_now.tzinfo)
    end = datetime.combine(local_now.date(), time.max, tzinfo=local_now.tzinfo)
    return start, end


class BookingsSnapshot(VendorBaseModel):
    """Aggregate counts plus the booking list for one venue."""

    total: int = 0
    pending: int = 0
    """Bookings scheduled at or after the moment of computation."""
    today: int = 0
    """Bookings scheduled within the local calendar day of computation."""
    bookings: list[Booking] = Field(default_factory=list)

    @classmethod
    def from_bookings(cls, bookings: Iterable[Booking], now: datetime) -> BookingsSnapshot:
        """Derive the counts from *bookings* as seen at *now*."""
        items = list(bookings)
        day_start, day_end = _local_day_bounds(now)
        pending = 0
        today = 0
        for booking in items:
            when = booking.booking_date_time
            if when is None:
                continue
            if when >= now:
                pending += 1
            if day_start <= when <= day_end:
                today += 1
        return cls(total=len(items), pending=pending, today=today, bookings=items)
