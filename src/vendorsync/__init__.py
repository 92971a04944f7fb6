"""vendorsync - Async vendor dashboard client with a cached, push-synchronized store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("vendorsync")
except PackageNotFoundError:
    __version__ = "0+local"
from vendorsync._cache import JsonFileCache, MemoryCache, PersistentCache
from vendorsync.client import VendorClient
from vendorsync.config import MqttSettings, VendorSyncConfig
from vendorsync.exceptions import (
    CacheStorageError,
    PushChannelError,
    VendorApiError,
    VendorAuthenticationError,
    VendorConfigError,
    VendorSyncError,
    VendorTransportError,
)
from vendorsync.models import (
    BannerUpload,
    Booking,
    BookingsSnapshot,
    GalleryImage,
    GalleryUpload,
    Notification,
    NotificationsState,
    OnboardingStatus,
    PasswordUpdate,
    PaymentInfoUpdate,
    PlaceProfile,
    PlaceUpdate,
    ProfileUpdate,
    RegistrationRequest,
    Review,
    ReviewsSnapshot,
    ReviewSummary,
    Session,
)
from vendorsync.push import MqttPushChannel, PushChannel, PushSubscription
from vendorsync.remote import ApiRemoteDataSource, RemoteDataSource
from vendorsync.state.events import EntityGroup, GroupState, StoreSnapshot
from vendorsync.state.store import VendorStore

__all__ = [
    "__version__",
    "ApiRemoteDataSource",
    "BannerUpload",
    "Booking",
    "BookingsSnapshot",
    "CacheStorageError",
    "EntityGroup",
    "GalleryImage",
    "GalleryUpload",
    "GroupState",
    "JsonFileCache",
    "MemoryCache",
    "MqttPushChannel",
    "MqttSettings",
    "Notification",
    "NotificationsState",
    "OnboardingStatus",
    "PasswordUpdate",
    "PaymentInfoUpdate",
    "PersistentCache",
    "PlaceProfile",
    "PlaceUpdate",
    "ProfileUpdate",
    "PushChannel",
    "PushChannelError",
    "PushSubscription",
    "RegistrationRequest",
    "RemoteDataSource",
    "Review",
    "ReviewSummary",
    "ReviewsSnapshot",
    "Session",
    "StoreSnapshot",
    "VendorApiError",
    "VendorAuthenticationError",
    "VendorClient",
    "VendorConfigError",
    "VendorStore",
    "VendorSyncConfig",
    "VendorSyncError",
    "VendorTransportError",
]
