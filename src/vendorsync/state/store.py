"""Synchronized vendor dashboard store.

This is the only component allowed to change published state. It serves
entity groups from the persistent cache while they are fresh, refreshes
them from the remote data source otherwise, and merges push-delivered
notification inserts.

Every change replaces a group's :class:`GroupState` with a new frozen
value. Each ``load`` takes a per-group generation number; a completion is
applied only while its generation is still the newest and the identity it
was issued for is still active.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from vendorsync._cache import PersistentCache
from vendorsync.exceptions import CacheStorageError, VendorSyncError
from vendorsync.ingestion.normalize import to_epoch_ms
from vendorsync.ingestion.push import notification_from_push
from vendorsync.models.booking import BookingsSnapshot
from vendorsync.models.notification import Notification, NotificationsState
from vendorsync.models.place import PlaceProfile
from vendorsync.models.review import ReviewsSnapshot
from vendorsync.models.session import Session
from vendorsync.push import PushChannel, PushSubscription
from vendorsync.remote import RemoteDataSource
from vendorsync.state.events import (
    DATA_GROUPS,
    PLACE_SCOPED_GROUPS,
    EntityGroup,
    GroupState,
    StoreSnapshot,
    all_cache_keys,
    initial_state,
    terminal_state,
    timestamp_key,
    value_key,
)
from vendorsync.state.policy import CachePolicy

_logger = logging.getLogger(__name__)

StateListener = Callable[[EntityGroup, GroupState[Any]], None]
NotificationCallback = Callable[[Notification], None]

# Errors a failed fetch may surface with; anything else is a bug and propagates.
_FETCH_ERRORS = (VendorSyncError, ValidationError)

_FAILURE_MESSAGES: dict[EntityGroup, str] = {
    EntityGroup.SESSION: "Failed to load session",
    EntityGroup.BOOKINGS: "Failed to load bookings",
    EntityGroup.REVIEWS: "Failed to load reviews",
    EntityGroup.PLACE: "Failed to load place",
    EntityGroup.NOTIFICATIONS: "Failed to load notifications",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VendorStore:
    """State store for one vendor dashboard.

    Usage::

        store = VendorStore(remote, cache, push_channel=channel)
        store.subscribe(lambda group, state: render(group, state))
        await store.load_home()
    """

    def __init__(
        self,
        remote: RemoteDataSource,
        cache: PersistentCache,
        *,
        push_channel: PushChannel | None = None,
        clock: Callable[[], datetime] = _utcnow,
        on_notification: NotificationCallback | None = None,
    ) -> None:
        self._remote = remote
        self._cache = cache
        self._push_channel = push_channel
        self._clock = clock
        self._on_notification = on_notification
        self._policy = CachePolicy(cache, clock=clock)
        self._states: dict[EntityGroup, GroupState[Any]] = {group: initial_state(group) for group in EntityGroup}
        self._generations: dict[EntityGroup, int] = {group: 0 for group in EntityGroup}
        self._is_loading = False
        self._banner_version = 0
        self._listeners: list[StateListener] = []
        self._subscription: PushSubscription | None = None
        self._push_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task[None]] = set()
        # One buffer per notifications fetch in flight; pushes landing meanwhile are replayed onto its result.
        self._push_buffers: list[list[Notification]] = []

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    def state(self, group: EntityGroup) -> GroupState[Any]:
        return self._states[group]

    @property
    def session(self) -> Session | None:
        session: Session | None = self._states[EntityGroup.SESSION].data
        return session

    @property
    def bookings(self) -> GroupState[BookingsSnapshot]:
        return self._states[EntityGroup.BOOKINGS]

    @property
    def reviews(self) -> GroupState[ReviewsSnapshot]:
        return self._states[EntityGroup.REVIEWS]

    @property
    def place(self) -> GroupState[PlaceProfile | None]:
        return self._states[EntityGroup.PLACE]

    @property
    def notifications(self) -> GroupState[NotificationsState]:
        return self._states[EntityGroup.NOTIFICATIONS]

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def banner_version(self) -> int:
        """Bumped after every banner refetch so image views can bust their cache."""
        return self._banner_version

    @property
    def push_subscription(self) -> PushSubscription | None:
        return self._subscription

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            session=self._states[EntityGroup.SESSION],
            bookings=self._states[EntityGroup.BOOKINGS],
            reviews=self._states[EntityGroup.REVIEWS],
            place=self._states[EntityGroup.PLACE],
            notifications=self._states[EntityGroup.NOTIFICATIONS],
            is_loading=self._is_loading,
            banner_version=self._banner_version,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* on every state change; returns the unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _set(self, group: EntityGroup, state: GroupState[Any]) -> None:
        self._states[group] = state
        for listener in list(self._listeners):
            try:
                listener(group, state)
            except Exception:
                _logger.exception("State listener failed group=%s", group)

    def _update(self, group: EntityGroup, **changes: Any) -> None:
        self._set(group, self._states[group].model_copy(update=changes))

    def _set_loading(self, loading: bool) -> None:
        self._is_loading = loading

    def _begin(self, group: EntityGroup) -> int:
        self._generations[group] += 1
        return self._generations[group]

    def _vendor_id(self) -> str | None:
        session = self.session
        return session.id if session is not None else None

    def _place_id(self) -> str | None:
        session = self.session
        return session.place_id if session is not None else None

    def _identity_for(self, group: EntityGroup) -> str | None:
        if group in PLACE_SCOPED_GROUPS:
            return self._place_id()
        return self._vendor_id()

    def _accepts(self, group: EntityGroup, generation: int, identity: str | None) -> bool:
        if generation != self._generations[group]:
            return False
        return identity is None or identity == self._identity_for(group)

    # ------------------------------------------------------------------
    # Persistent cache
    # ------------------------------------------------------------------

    async def _read_cached(self, key: str) -> dict[str, Any] | None:
        try:
            raw = await self._cache.get(key)
        except CacheStorageError:
            _logger.warning("Cache read failed key=%s", key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("Cached value is not JSON key=%s", key)
            return None
        return parsed if isinstance(parsed, dict) else None

    async def _persist(self, group: EntityGroup, payload: dict[str, Any], *, stamp: bool = True) -> None:
        """Write a group's value and, when *stamp* is set, a fresh timestamp.

        The old timestamp is removed before the value is written and the new
        one is written last, so a failure at any step leaves no valid
        timestamp behind and the next read is a cache miss.
        """
        try:
            if stamp:
                await self._cache.remove([timestamp_key(group)])
            await self._cache.set(value_key(group), json.dumps(payload))
            if stamp:
                await self._cache.set(timestamp_key(group), str(to_epoch_ms(self._clock())))
        except CacheStorageError:
            _logger.warning("Cache write failed group=%s", group, exc_info=True)

    async def _persist_current(self, group: EntityGroup) -> None:
        """Persist whatever the group holds *now* (value only, timestamp untouched)."""
        data = self._states[group].data
        if data is None:
            return
        await self._persist(group, data.to_cache(), stamp=False)

    def _schedule_persist_current(self, group: EntityGroup) -> None:
        task = asyncio.get_running_loop().create_task(self._persist_current(group))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _purge_group_caches(self) -> None:
        keys = [key for group in DATA_GROUPS for key in (value_key(group), timestamp_key(group))]
        try:
            await self._cache.remove(keys)
        except CacheStorageError:
            _logger.warning("Cannot purge cached groups", exc_info=True)

    # ------------------------------------------------------------------
    # Session and push subscription
    # ------------------------------------------------------------------

    async def _read_cached_session(self) -> Session | None:
        cached = await self._read_cached(value_key(EntityGroup.SESSION))
        if cached is None:
            return None
        try:
            return Session.model_validate(cached)
        except ValidationError:
            _logger.warning("Cached session is malformed; ignoring it")
            return None

    async def _apply_session(self, session: Session | None, *, loading: bool) -> None:
        previous = self.session
        self._set(EntityGroup.SESSION, GroupState(data=session, loading=loading))
        switched = previous is not None and (
            session is None or session.id != previous.id or session.place_id != previous.place_id
        )
        if switched:
            _logger.info(
                "Vendor identity changed from %s to %s; dropping cached data",
                previous.id if previous else None,
                session.id if session else None,
            )
            for group in DATA_GROUPS:
                self._begin(group)
                self._set(group, initial_state(group) if session is not None else terminal_state(group))
            await self._purge_group_caches()
        await self._sync_push_subscription()

    async def _sync_push_subscription(self) -> None:
        """Keep exactly one push subscription, for the active vendor id."""
        async with self._push_lock:
            target = self._vendor_id()
            current = self._subscription
            if current is not None and current.vendor_id == target:
                return
            if current is not None:
                self._subscription = None
                await self._close_subscription(current)
            if target is None or self._push_channel is None:
                return
            try:
                self._subscription = await self._push_channel.subscribe(target, self._handle_push)
            except (VendorSyncError, OSError):
                _logger.warning("Cannot open push subscription vendor_id=%s", target, exc_info=True)
                return
            _logger.debug("Push subscription opened vendor_id=%s", target)

    async def _close_subscription(self, subscription: PushSubscription) -> None:
        if self._push_channel is None:
            return
        try:
            await self._push_channel.unsubscribe(subscription)
        except (VendorSyncError, OSError):
            _logger.warning("Closing push subscription failed vendor_id=%s", subscription.vendor_id, exc_info=True)
        else:
            _logger.debug("Push subscription closed vendor_id=%s", subscription.vendor_id)

    async def _load_session(self) -> Session | None:
        """Hydrate the session from cache, then always re-verify it remotely."""
        group = EntityGroup.SESSION
        generation = self._begin(group)
        self._update(group, loading=True, error=None)

        if self.session is None:
            cached = await self._read_cached_session()
            if cached is not None and generation == self._generations[group]:
                await self._apply_session(cached, loading=True)

        try:
            fresh = await self._remote.get_session()
        except _FETCH_ERRORS as exc:
            _logger.error("Loading session failed: %s", exc)
            if generation == self._generations[group]:
                self._update(group, loading=False, error=str(exc) or _FAILURE_MESSAGES[group])
            return self.session

        if generation != self._generations[group]:
            _logger.debug("Discarding stale session result generation=%d", generation)
            return self.session

        await self._apply_session(fresh, loading=False)
        key = value_key(group)
        try:
            if fresh is None:
                await self._cache.remove([key])
            else:
                await self._cache.set(key, json.dumps(fresh.to_cache()))
        except CacheStorageError:
            _logger.warning("Cache write failed group=%s", group, exc_info=True)
        return fresh

    async def initialize(self) -> None:
        """Restore the cached session (no network) and open its push subscription."""
        if self.session is not None:
            return
        cached = await self._read_cached_session()
        await self._apply_session(cached, loading=False)

    # ------------------------------------------------------------------
    # Loads
    # ------------------------------------------------------------------

    async def _fetch(self, group: EntityGroup, identity: str) -> Any:
        """Fetch a group remotely and derive its computed fields from the raw payload."""
        if group is EntityGroup.BOOKINGS:
            bookings = await self._remote.get_bookings(identity)
            return BookingsSnapshot.from_bookings(bookings, self._clock())
        if group is EntityGroup.REVIEWS:
            reviews = await self._remote.get_reviews(identity)
            return ReviewsSnapshot.from_reviews(reviews.reviews)
        if group is EntityGroup.PLACE:
            return await self._remote.get_place(identity)
        if group is EntityGroup.NOTIFICATIONS:
            notifications = await self._remote.get_notifications(identity)
            return NotificationsState.from_notifications(notifications.notifications)
        raise ValueError(f"{group} is not a data group")

    async def _hydrate(self, group: EntityGroup, identity: str) -> Any:
        """Rebuild a group from cache as stored (no recomputation); ``None`` on a miss."""
        cached = await self._read_cached(value_key(group))
        if cached is None:
            return None
        try:
            if group is EntityGroup.BOOKINGS:
                return BookingsSnapshot.model_validate(cached)
            if group is EntityGroup.REVIEWS:
                return ReviewsSnapshot.model_validate(cached)
            if group is EntityGroup.NOTIFICATIONS:
                return NotificationsState.model_validate(cached)
            place = PlaceProfile.model_validate(cached)
        except ValidationError:
            _logger.warning("Cached %s is malformed; treating as a miss", group)
            return None
        if place.id != identity:
            return None
        return place.with_banner(await self._fetch_banner(place.id))

    async def _fetch_banner(self, place_id: str) -> str | None:
        try:
            return await self._remote.get_place_banner(place_id)
        except VendorSyncError as exc:
            _logger.warning("Banner fetch failed place_id=%s: %s", place_id, exc)
            return None

    async def load(
        self,
        group: EntityGroup,
        force_refresh: bool = False,
        *,
        vendor_id: str | None = None,
    ) -> None:
        """Load one entity group.

        Without an identity to load for, the group is set to its empty
        terminal state. Otherwise a fresh cache entry is served unless
        *force_refresh* is set; on a miss the remote source is called while
        the previous data stays visible. Failures are recorded in the
        group's ``error`` and never raised.

        *vendor_id* overrides the session's vendor id for notifications.
        """
        if group is EntityGroup.SESSION:
            await self._load_session()
            return

        override = vendor_id if group is EntityGroup.NOTIFICATIONS else None
        identity = override or self._identity_for(group)
        generation = self._begin(group)
        check_identity = None if override else identity

        if not identity:
            self._set(group, terminal_state(group))
            return

        if not force_refresh and await self._policy.is_valid(group):
            hydrated = await self._hydrate(group, identity)
            if hydrated is not None:
                if self._accepts(group, generation, check_identity):
                    self._set(group, GroupState(data=hydrated, loading=False))
                    _logger.debug("Served %s from cache", group)
                return

        if not self._accepts(group, generation, check_identity):
            return
        self._update(group, loading=True, error=None)

        pushed: list[Notification] = []
        if group is EntityGroup.NOTIFICATIONS:
            self._push_buffers.append(pushed)
        try:
            data = await self._fetch(group, identity)
        except _FETCH_ERRORS as exc:
            _logger.error("Loading %s failed: %s", group, exc)
            if self._accepts(group, generation, check_identity):
                self._update(group, loading=False, error=str(exc) or _FAILURE_MESSAGES[group])
            return
        finally:
            if group is EntityGroup.NOTIFICATIONS:
                self._push_buffers.remove(pushed)

        if not self._accepts(group, generation, check_identity):
            _logger.debug("Discarding stale %s result generation=%d", group, generation)
            return
        for notification in pushed:
            data = data.with_inserted(notification)
        self._set(group, GroupState(data=data, loading=False))
        await self._persist(group, data.to_cache())

    async def _settle(self, *loads: Awaitable[None]) -> None:
        """Run *loads* concurrently and return only once every one has finished."""
        results = await asyncio.gather(*loads, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                _logger.error("Sub-load failed", exc_info=result)

    async def load_home(self) -> None:
        """Resolve the session, then load everything the home screen shows.

        Bookings, place and reviews are cache-first; notifications are always
        refetched. Without a place id all four groups get their empty
        terminal state. ``is_loading`` is cleared on every exit path.
        """
        self._set_loading(True)
        try:
            session = await self._load_session()
            if session is not None and session.place_id:
                await self._settle(
                    self.load(EntityGroup.BOOKINGS),
                    self.load(EntityGroup.PLACE),
                    self.load(EntityGroup.REVIEWS),
                    self.load(EntityGroup.NOTIFICATIONS, force_refresh=True, vendor_id=session.id),
                )
            else:
                for group in DATA_GROUPS:
                    self._begin(group)
                    self._set(group, terminal_state(group))
        except Exception:
            _logger.exception("Loading home data failed")
        finally:
            self._set_loading(False)

    async def refresh_all(self) -> None:
        """Re-verify the session and force-refresh every data group."""
        self._set_loading(True)
        try:
            await self._load_session()
            await self._settle(*(self.load(group, force_refresh=True) for group in DATA_GROUPS))
        except Exception:
            _logger.exception("Refreshing data failed")
        finally:
            self._set_loading(False)

    async def load_banner(self) -> None:
        """Refetch only the place banner and swap it into the current place."""
        place: PlaceProfile | None = self.place.data
        place_id = self._place_id() or (place.id if place is not None else None)
        if not place_id:
            return
        try:
            banner = await self._remote.get_place_banner(place_id)
        except VendorSyncError as exc:
            _logger.error("Loading banner failed place_id=%s: %s", place_id, exc)
            return
        current: PlaceProfile | None = self.place.data
        if current is None or current.id != place_id:
            return
        self._update(EntityGroup.PLACE, data=current.with_banner(banner))
        self._banner_version += 1

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _handle_push(self, payload: dict[str, Any]) -> None:
        """Merge one pushed insert into the *current* notifications state.

        Runs on the event-loop thread with no suspension point between
        reading and replacing the state, so concurrent loads cannot
        interleave with the read-modify-write.
        """
        notification = notification_from_push(payload)
        if notification is None:
            return
        vendor_id = self._vendor_id()
        if vendor_id is None or (notification.vendor_id is not None and notification.vendor_id != vendor_id):
            _logger.debug("Ignoring push for another vendor id=%s", notification.id)
            return

        group = EntityGroup.NOTIFICATIONS
        current = self._states[group]
        merged = current.data.with_inserted(notification)
        if merged is current.data:
            _logger.debug("Ignoring redelivered notification id=%s", notification.id)
            return
        self._set(group, current.model_copy(update={"data": merged}))
        self._schedule_persist_current(group)
        for buffer in self._push_buffers:
            buffer.append(notification)

        if self._on_notification is not None:
            try:
                self._on_notification(notification)
            except Exception:
                _logger.exception("on_notification callback failed")

    async def mark_all_read(self, vendor_id: str | None = None) -> None:
        """Mark every notification read remotely, then locally.

        Nothing changes locally unless the remote update succeeds.
        """
        vid = vendor_id or self._vendor_id()
        if not vid:
            return
        try:
            await self._remote.mark_notifications_read(vid)
        except VendorSyncError as exc:
            _logger.error("Marking notifications read failed vendor_id=%s: %s", vid, exc)
            return

        group = EntityGroup.NOTIFICATIONS
        # Supersedes any refresh still in flight: its list predates this update.
        self._begin(group)
        current = self._states[group]
        self._set(group, current.model_copy(update={"data": current.data.all_read(), "loading": False}))
        await self._persist_current(group)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def clear_cache(self) -> None:
        """Drop every cached key and reset all in-memory state."""
        try:
            await self._cache.remove(all_cache_keys())
        except CacheStorageError:
            _logger.warning("Clearing cache failed", exc_info=True)
        for group in EntityGroup:
            self._begin(group)
            self._set(group, initial_state(group))
        await self._sync_push_subscription()

    async def aclose(self) -> None:
        """Close the push subscription and wait for pending cache writes."""
        async with self._push_lock:
            subscription = self._subscription
            self._subscription = None
            if subscription is not None:
                await self._close_subscription(subscription)
        if self._pending_writes:
            await asyncio.gather(*self._pending_writes, return_exceptions=True)
