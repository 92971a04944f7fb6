"""Vendor authentication collaborator.

Login and registration go through the backend; the resulting vendor row is
kept in the persistent cache under dedicated keys (outside the store's
``@app_cache_`` namespace) so a restart resumes the signed-in vendor.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from vendorsync._api import auth as _auth_api
from vendorsync._api import profile as _profile_api
from vendorsync._cache import PersistentCache
from vendorsync._constants import AUTH_STORAGE_KEY, USER_STORAGE_KEY
from vendorsync._transport import Transport
from vendorsync.exceptions import CacheStorageError, VendorAuthenticationError
from vendorsync.models.requests import LoginRequest, ProfileUpdate, RegistrationRequest
from vendorsync.models.session import Session

_logger = logging.getLogger(__name__)


class VendorAuth:
    """Signs vendors in and out and remembers who is signed in."""

    def __init__(self, transport: Transport, storage: PersistentCache) -> None:
        self._transport = transport
        self._storage = storage

    async def _remember(self, user: dict[str, Any]) -> None:
        await self._storage.set(AUTH_STORAGE_KEY, "true")
        await self._storage.set(USER_STORAGE_KEY, json.dumps(user))

    async def login(self, email: str, password: str) -> Session:
        request = LoginRequest(email=email, password=password)
        user = await _auth_api.login(self._transport, request.email, request.password)
        await self._remember(user)
        _logger.debug("Vendor logged in vendor_id=%s", user.get("id"))
        return Session.model_validate(user)

    async def register(self, request: RegistrationRequest) -> Session:
        user = await _auth_api.register(self._transport, request.to_body())
        await self._remember(user)
        _logger.debug("Vendor registered vendor_id=%s", user.get("id"))
        return Session.model_validate(user)

    async def logout(self) -> None:
        await self._storage.remove([AUTH_STORAGE_KEY, USER_STORAGE_KEY])

    async def is_logged_in(self) -> bool:
        try:
            return await self._storage.get(AUTH_STORAGE_KEY) == "true"
        except CacheStorageError:
            _logger.warning("Cannot read login flag", exc_info=True)
            return False

    async def current_user(self) -> dict[str, Any] | None:
        """The stored vendor row, or ``None`` when nobody is signed in."""
        try:
            raw = await self._storage.get(USER_STORAGE_KEY)
        except CacheStorageError:
            _logger.warning("Cannot read stored vendor", exc_info=True)
            return None
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("Stored vendor is not valid JSON; ignoring it")
            return None
        return user if isinstance(user, dict) and user.get("id") else None

    async def update_user(self, update: ProfileUpdate) -> dict[str, Any]:
        """Patch the signed-in vendor's profile and the stored copy."""
        user = await self.current_user()
        if user is None:
            raise VendorAuthenticationError("No vendor logged in")
        patch = update.to_patch()
        await _profile_api.update_profile(self._transport, str(user["id"]), patch)
        updated = {**user, **patch}
        await self._storage.set(USER_STORAGE_KEY, json.dumps(updated))
        return updated

    async def refresh_user(self, user: dict[str, Any]) -> None:
        """Replace the stored vendor row after a successful re-verification."""
        try:
            await self._storage.set(USER_STORAGE_KEY, json.dumps(user))
        except CacheStorageError:
            _logger.warning("Cannot persist refreshed vendor", exc_info=True)
