"""Typed models for vendor dashboard data."""

from vendorsync.models.booking import Booking, BookingsSnapshot
from vendorsync.models.gallery import GalleryImage, OnboardingStatus
from vendorsync.models.notification import Notification, NotificationsState
from vendorsync.models.place import BANNER_FIELD, PlaceProfile
from vendorsync.models.requests import (
    BannerUpload,
    GalleryUpload,
    LoginRequest,
    PasswordUpdate,
    PaymentInfoUpdate,
    PlaceUpdate,
    ProfileUpdate,
    RegistrationRequest,
)
from vendorsync.models.review import Review, ReviewAuthor, ReviewsSnapshot, ReviewSummary
from vendorsync.models.session import Session

__all__ = [
    "BANNER_FIELD",
    "BannerUpload",
    "Booking",
    "BookingsSnapshot",
    "GalleryImage",
    "GalleryUpload",
    "LoginRequest",
    "Notification",
    "NotificationsState",
    "OnboardingStatus",
    "PasswordUpdate",
    "PaymentInfoUpdate",
    "PlaceProfile",
    "PlaceUpdate",
    "ProfileUpdate",
    "RegistrationRequest",
    "Review",
    "ReviewAuthor",
    "ReviewSummary",
    "ReviewsSnapshot",
    "Session",
]
