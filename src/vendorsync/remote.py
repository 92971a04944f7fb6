"""Remote data source contract and its REST implementation.

The store only talks to a :class:`RemoteDataSource`. Any object with these
coroutine methods works, which keeps the store testable with hand-written
fakes. Failures surface as :class:`vendorsync.exceptions.VendorSyncError`
subclasses carrying a human-readable message.
"""

from __future__ import annotations

import logging
from typing import Protocol

from vendorsync._api import bookings as _bookings_api
from vendorsync._api import notifications as _notifications_api
from vendorsync._api import place as _place_api
from vendorsync._api import profile as _profile_api
from vendorsync._api import reviews as _reviews_api
from vendorsync._transport import Transport
from vendorsync.auth import VendorAuth
from vendorsync.models.booking import Booking
from vendorsync.models.notification import NotificationsState
from vendorsync.models.place import PlaceProfile
from vendorsync.models.review import ReviewsSnapshot
from vendorsync.models.session import Session

_logger = logging.getLogger(__name__)


class RemoteDataSource(Protocol):
    async def get_session(self) -> Session | None:
        """The signed-in vendor as the backend currently sees it, ``None`` if signed out."""
        ...

    async def get_bookings(self, place_id: str) -> list[Booking]: ...

    async def get_reviews(self, place_id: str) -> ReviewsSnapshot: ...

    async def get_place(self, place_id: str) -> PlaceProfile: ...

    async def get_place_banner(self, place_id: str) -> str | None: ...

    async def get_notifications(self, vendor_id: str) -> NotificationsState: ...

    async def mark_notifications_read(self, vendor_id: str) -> None: ...


class ApiRemoteDataSource:
    """:class:`RemoteDataSource` backed by the vendor REST API."""

    def __init__(self, transport: Transport, auth: VendorAuth) -> None:
        self._transport = transport
        self._auth = auth

    async def get_session(self) -> Session | None:
        user = await self._auth.current_user()
        if user is None:
            return None
        profile = await _profile_api.fetch_profile(self._transport, str(user["id"]))
        if profile is None:
            _logger.info("Vendor %s no longer exists on the backend", user["id"])
            return None
        merged = {**user, **profile}
        await self._auth.refresh_user(merged)
        return Session.model_validate(merged)

    async def get_bookings(self, place_id: str) -> list[Booking]:
        return await _bookings_api.fetch_bookings(self._transport, place_id)

    async def get_reviews(self, place_id: str) -> ReviewsSnapshot:
        reviews = await _reviews_api.fetch_reviews(self._transport, place_id)
        return ReviewsSnapshot.from_reviews(reviews)

    async def get_place(self, place_id: str) -> PlaceProfile:
        return await _place_api.fetch_place(self._transport, place_id)

    async def get_place_banner(self, place_id: str) -> str | None:
        return await _place_api.fetch_place_banner(self._transport, place_id)

    async def get_notifications(self, vendor_id: str) -> NotificationsState:
        notifications = await _notifications_api.fetch_notifications(self._transport, vendor_id)
        return NotificationsState.from_notifications(notifications)

    async def mark_notifications_read(self, vendor_id: str) -> None:
        await _notifications_api.mark_notifications_read(self._transport, vendor_id)
