"""Custom exception hierarchy for vendorsync."""

from __future__ import annotations


class VendorSyncError(Exception):
    """Base exception for all vendorsync errors."""


class VendorConfigError(VendorSyncError):
    """Invalid or missing configuration."""


class VendorTransportError(VendorSyncError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class VendorApiError(VendorSyncError):
    """Backend answered, but not with the payload the endpoint promises."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class VendorAuthenticationError(VendorApiError):
    """Login failed or no vendor is logged in."""


class CacheStorageError(VendorSyncError):
    """Persistent cache read or write failed."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class PushChannelError(VendorSyncError):
    """Push subscription could not be opened."""
