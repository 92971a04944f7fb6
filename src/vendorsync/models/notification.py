"""Vendor notification models."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import AliasChoices, Field, field_validator

from vendorsync.ingestion.normalize import safe_bool, safe_str
from vendorsync.models._base import Timestamp, VendorBaseModel


class Notification(VendorBaseModel):
    id: str
    vendor_id: str | None = None
    place_id: str | None = None
    booking_id: str | None = None
    type: str | None = None
    title: str | None = None
    body: str | None = None
    is_read: bool = False
    created_at: Timestamp = None

    @field_validator("id", "vendor_id", "place_id", "booking_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: object) -> str | None:
        return safe_str(value)

    @field_validator("is_read", mode="before")
    @classmethod
    def _coerce_is_read(cls, value: object) -> bool:
        return safe_bool(value, default=False)


class NotificationsState(VendorBaseModel):
    """Newest-first notification list plus unread count."""

    notifications: list[Notification] = Field(default_factory=list)
    unread_count: int = Field(default=0, validation_alias=AliasChoices("unread_count", "unreadCount"))

    @classmethod
    def from_notifications(cls, notifications: Iterable[Notification]) -> NotificationsState:
        items = list(notifications)
        return cls(notifications=items, unread_count=sum(1 for item in items if not item.is_read))

    def contains(self, notification_id: str) -> bool:
        return any(item.id == notification_id for item in self.notifications)

    def with_inserted(self, notification: Notification) -> NotificationsState:
        """Prepend *notification* unless its id is already present.

        Returns ``self`` unchanged for a duplicate id, so redelivery is a no-op.
        """
        if self.contains(notification.id):
            return self
        return NotificationsState(
            notifications=[notification, *self.notifications],
            unread_count=self.unread_count + 1,
        )

    def all_read(self) -> NotificationsState:
        return NotificationsState(
            notifications=[item.model_copy(update={"is_read": True}) for item in self.notifications],
            unread_count=0,
        )
