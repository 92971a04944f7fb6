from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from vendorsync._cache import MemoryCache
from vendorsync.exceptions import CacheStorageError, VendorTransportError
from vendorsync.models.booking import Booking
from vendorsync.models.notification import Notification, NotificationsState
from vendorsync.models.place import PlaceProfile
from vendorsync.models.review import Review, ReviewsSnapshot
from vendorsync.models.session import Session
from vendorsync.push import InsertHandler, PushSubscription
from vendorsync.state.store import VendorStore

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@dataclass
class FakeRemote:
    """In-memory backend; ``errors`` makes a method raise, ``gates`` makes its next call wait."""

    session: Session | None = field(default_factory=lambda: Session(id="vendor-1", place_id="place-1"))
    bookings: list[Booking] = field(default_factory=list)
    reviews: list[Review] = field(default_factory=list)
    place: PlaceProfile = field(
        default_factory=lambda: PlaceProfile(
            id="place-1",
            name="Blue Door Cafe",
            city="Pune",
            banner_image_link="https://cdn.example.com/banner-1.png",
        )
    )
    banner: str | None = "https://cdn.example.com/banner-2.png"
    notifications: list[Notification] = field(default_factory=list)
    errors: dict[str, BaseException] = field(default_factory=dict)
    gates: dict[str, list[asyncio.Event]] = field(default_factory=dict)
    calls: dict[str, int] = field(default_factory=dict)

    async def _enter(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        pending = self.gates.get(name)
        if pending:
            await pending.pop(0).wait()
        error = self.errors.get(name)
        if error is not None:
            raise error

    async def get_session(self) -> Session | None:
        session = self.session
        await self._enter("get_session")
        return session

    async def get_bookings(self, place_id: str) -> list[Booking]:
        bookings = list(self.bookings)
        await self._enter("get_bookings")
        return bookings

    async def get_reviews(self, place_id: str) -> ReviewsSnapshot:
        reviews = list(self.reviews)
        await self._enter("get_reviews")
        return ReviewsSnapshot.from_reviews(reviews)

    async def get_place(self, place_id: str) -> PlaceProfile:
        place = self.place
        await self._enter("get_place")
        return place

    async def get_place_banner(self, place_id: str) -> str | None:
        banner = self.banner
        await self._enter("get_place_banner")
        return banner

    async def get_notifications(self, vendor_id: str) -> NotificationsState:
        notifications = list(self.notifications)
        await self._enter("get_notifications")
        return NotificationsState.from_notifications(notifications)

    async def mark_notifications_read(self, vendor_id: str) -> None:
        await self._enter("mark_notifications_read")


class FailingCache(MemoryCache):
    """Memory cache whose writes to selected keys (or every read) fail."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.failing_set_keys: set[str] = set()
        self.fail_reads = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise CacheStorageError("disk unavailable", key=key)
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if key in self.failing_set_keys:
            raise CacheStorageError("disk full", key=key)
        await super().set(key, value)


class FakePushChannel:
    def __init__(self) -> None:
        self.handlers: dict[int, tuple[PushSubscription, InsertHandler]] = {}
        self.opened: list[PushSubscription] = []

    async def subscribe(self, vendor_id: str, on_insert: InsertHandler) -> PushSubscription:
        handle = PushSubscription(vendor_id=vendor_id)
        self.handlers[handle.handle_id] = (handle, on_insert)
        self.opened.append(handle)
        return handle

    async def unsubscribe(self, handle: PushSubscription) -> None:
        handle.closed = True
        self.handlers.pop(handle.handle_id, None)

    @property
    def open_subscriptions(self) -> list[PushSubscription]:
        return [handle for handle, _ in self.handlers.values()]

    def deliver(self, payload: dict[str, Any]) -> None:
        for handle, handler in list(self.handlers.values()):
            if not handle.closed:
                handler(payload)


def transport_error(message: str = "Request failed: 500") -> VendorTransportError:
    return VendorTransportError(message, status_code=500)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def cache() -> FailingCache:
    return FailingCache()


@pytest.fixture
def push_channel() -> FakePushChannel:
    return FakePushChannel()


@pytest.fixture
def store(remote: FakeRemote, cache: FailingCache, push_channel: FakePushChannel, clock: FakeClock) -> VendorStore:
    return VendorStore(remote, cache, push_channel=push_channel, clock=clock)
