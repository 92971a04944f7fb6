"""High-level async client for the vendor dashboard backend."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from vendorsync._api import gallery as _gallery_api
from vendorsync._api import place as _place_api
from vendorsync._api import profile as _profile_api
from vendorsync._cache import JsonFileCache, MemoryCache, PersistentCache
from vendorsync._transport import HttpTransport
from vendorsync.auth import VendorAuth
from vendorsync.config import VendorSyncConfig
from vendorsync.exceptions import VendorAuthenticationError, VendorSyncError
from vendorsync.models.gallery import GalleryImage, OnboardingStatus
from vendorsync.models.notification import Notification
from vendorsync.models.requests import (
    BannerUpload,
    GalleryUpload,
    PasswordUpdate,
    PaymentInfoUpdate,
    PlaceUpdate,
    ProfileUpdate,
    RegistrationRequest,
)
from vendorsync.models.session import Session
from vendorsync.push import MqttPushChannel, PushChannel
from vendorsync.remote import ApiRemoteDataSource
from vendorsync.state.events import EntityGroup
from vendorsync.state.store import NotificationCallback, VendorStore

_logger = logging.getLogger(__name__)


class VendorClient:
    """Async client wiring the backend, the persistent cache and the store.

    Usage::

        async with VendorClient(config) as client:
            await client.login("owner@example.com", "secret")
            await client.store.load_home()
            print(client.store.bookings.data.total)
    """

    def __init__(
        self,
        config: VendorSyncConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        cache: PersistentCache | None = None,
        push_channel: PushChannel | None = None,
        on_notification: NotificationCallback | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._cache = cache
        self._push_channel = push_channel
        self._on_notification = on_notification
        self._transport: HttpTransport | None = None
        self._auth: VendorAuth | None = None
        self._store: VendorStore | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> VendorClient:
        loop = asyncio.get_running_loop()
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        if self._cache is None:
            if self._config.cache_path:
                self._cache = JsonFileCache(self._config.cache_path)
            else:
                self._cache = MemoryCache()
        if self._push_channel is None and self._config.push_enabled:
            self._push_channel = MqttPushChannel(self._config.mqtt, loop=loop)

        self._transport = HttpTransport(self._config, self._http_session)
        self._auth = VendorAuth(self._transport, self._cache)
        self._store = VendorStore(
            ApiRemoteDataSource(self._transport, self._auth),
            self._cache,
            push_channel=self._push_channel,
            on_notification=self._on_notification,
        )
        await self._store.initialize()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._store is not None:
            await self._store.aclose()
            self._store = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None
        self._auth = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_ready(self) -> tuple[HttpTransport, VendorAuth, VendorStore]:
        if self._transport is None or self._auth is None or self._store is None:
            raise VendorSyncError("Client not initialized. Use 'async with VendorClient(...) as client:'")
        return self._transport, self._auth, self._store

    def _require_session(self) -> Session:
        _, _, store = self._require_ready()
        session = store.session
        if session is None:
            raise VendorAuthenticationError("No vendor logged in")
        return session

    def _require_place_id(self) -> str:
        session = self._require_session()
        if not session.place_id:
            raise VendorAuthenticationError("Vendor has no place")
        return session.place_id

    @property
    def store(self) -> VendorStore:
        _, _, store = self._require_ready()
        return store

    @property
    def auth(self) -> VendorAuth:
        _, auth, _ = self._require_ready()
        return auth

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> Session:
        """Sign in and re-verify the session in the store."""
        _, auth, store = self._require_ready()
        session = await auth.login(email, password)
        await store.load(EntityGroup.SESSION)
        return session

    async def register(self, request: RegistrationRequest) -> Session:
        _, auth, store = self._require_ready()
        session = await auth.register(request)
        await store.load(EntityGroup.SESSION)
        return session

    async def logout(self) -> None:
        """Forget the signed-in vendor and every cached dashboard entry."""
        _, auth, store = self._require_ready()
        await auth.logout()
        await store.clear_cache()

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    async def update_profile(self, update: ProfileUpdate) -> Session:
        """Patch the vendor profile, then re-verify the session."""
        _, auth, store = self._require_ready()
        self._require_session()
        await auth.update_user(update)
        await store.load(EntityGroup.SESSION)
        return self._require_session()

    async def update_payment_info(self, update: PaymentInfoUpdate) -> None:
        transport, _, _ = self._require_ready()
        session = self._require_session()
        await _profile_api.update_profile(transport, session.id, update.model_dump())
        _logger.debug("Payment info updated vendor_id=%s", session.id)

    async def update_place(self, update: PlaceUpdate) -> None:
        """Patch the vendor's place and force-refresh the place group."""
        transport, _, store = self._require_ready()
        place_id = self._require_place_id()
        await _place_api.update_place(transport, place_id, update.to_patch())
        await store.load(EntityGroup.PLACE, force_refresh=True)

    async def upload_banner(self, upload: BannerUpload) -> str | None:
        """Replace the place banner, then refetch it so views pick up the new image."""
        transport, _, store = self._require_ready()
        place_id = self._require_place_id()
        url = await _place_api.upload_banner(transport, place_id, upload.base64)
        _logger.debug("Banner uploaded place_id=%s", place_id)
        await store.load_banner()
        return url

    async def update_password(self, update: PasswordUpdate) -> None:
        transport, _, _ = self._require_ready()
        session = self._require_session()
        await _profile_api.update_password(transport, session.id, update.current_password, update.new_password)

    async def update_push_token(self, push_token: str | None) -> None:
        """Register (or clear with ``None``) the device token used for push alerts."""
        transport, _, _ = self._require_ready()
        session = self._require_session()
        await _profile_api.update_push_token(transport, session.id, push_token)

    # ------------------------------------------------------------------
    # Gallery and onboarding
    # ------------------------------------------------------------------

    async def get_gallery(self) -> list[GalleryImage]:
        transport, _, _ = self._require_ready()
        return await _gallery_api.fetch_gallery(transport, self._require_place_id())

    async def add_gallery_images(self, image_urls: list[str]) -> None:
        transport, _, _ = self._require_ready()
        if not image_urls:
            return
        await _gallery_api.add_gallery_images(transport, self._require_place_id(), image_urls)

    async def upload_gallery_images(self, upload: GalleryUpload) -> list[str]:
        """Upload base64 images and attach the resulting URLs to the gallery."""
        transport, _, _ = self._require_ready()
        place_id = self._require_place_id()
        urls = await _gallery_api.upload_gallery_images(transport, place_id, upload.images)
        if urls:
            await _gallery_api.add_gallery_images(transport, place_id, urls)
        return urls

    async def delete_gallery_images(self, image_ids: list[str]) -> None:
        transport, _, _ = self._require_ready()
        self._require_session()
        if not image_ids:
            return
        await _gallery_api.delete_gallery_images(transport, image_ids)

    async def remove_storage_paths(self, paths: list[str]) -> None:
        transport, _, _ = self._require_ready()
        self._require_session()
        if not paths:
            return
        await _gallery_api.remove_storage_paths(transport, paths)

    async def get_onboarding_status(self) -> OnboardingStatus:
        transport, _, _ = self._require_ready()
        session = self._require_session()
        return await _profile_api.fetch_onboarding_status(transport, session.id)

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    async def load_home(self) -> None:
        await self.store.load_home()

    async def refresh_all(self) -> None:
        await self.store.refresh_all()

    async def mark_all_notifications_read(self) -> None:
        await self.store.mark_all_read()

    def latest_notifications(self, limit: int = 10) -> list[Notification]:
        return list(self.store.notifications.data.notifications[:limit])
