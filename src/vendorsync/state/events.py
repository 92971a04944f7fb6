"""Entity groups, cache keys and the published state shapes."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from vendorsync._constants import CACHE_PREFIX, TIMESTAMP_SUFFIX
from vendorsync.models.booking import BookingsSnapshot
from vendorsync.models.notification import NotificationsState
from vendorsync.models.review import ReviewsSnapshot

T = TypeVar("T")


class EntityGroup(StrEnum):
    SESSION = "session"
    BOOKINGS = "bookings"
    REVIEWS = "reviews"
    PLACE = "place"
    NOTIFICATIONS = "notifications"


#: Groups cached with a timestamp and governed by the TTL.
DATA_GROUPS: tuple[EntityGroup, ...] = (
    EntityGroup.BOOKINGS,
    EntityGroup.PLACE,
    EntityGroup.REVIEWS,
    EntityGroup.NOTIFICATIONS,
)

#: Groups that need the vendor's place id rather than the vendor id.
PLACE_SCOPED_GROUPS: frozenset[EntityGroup] = frozenset(
    {EntityGroup.BOOKINGS, EntityGroup.PLACE, EntityGroup.REVIEWS}
)


def value_key(group: EntityGroup) -> str:
    if group is EntityGroup.SESSION:
        return f"{CACHE_PREFIX}user"
    return f"{CACHE_PREFIX}{group.value}"


def timestamp_key(group: EntityGroup) -> str:
    if group is EntityGroup.SESSION:
        raise ValueError("the session is cached without a timestamp")
    return f"{value_key(group)}{TIMESTAMP_SUFFIX}"


def all_cache_keys() -> list[str]:
    keys = [value_key(EntityGroup.SESSION)]
    for group in DATA_GROUPS:
        keys.extend((value_key(group), timestamp_key(group)))
    return keys


class GroupState(BaseModel, Generic[T]):
    """Read-only snapshot of one entity group as seen by subscribers."""

    model_config = ConfigDict(frozen=True)

    data: T
    loading: bool = False
    error: str | None = None


def empty_data(group: EntityGroup) -> Any:
    if group is EntityGroup.BOOKINGS:
        return BookingsSnapshot()
    if group is EntityGroup.REVIEWS:
        return ReviewsSnapshot()
    if group is EntityGroup.NOTIFICATIONS:
        return NotificationsState()
    return None


def initial_state(group: EntityGroup) -> GroupState[Any]:
    """Sentinel every group starts from: empty data, loading."""
    return GroupState(data=empty_data(group), loading=True)


def terminal_state(group: EntityGroup) -> GroupState[Any]:
    """Defined empty state for "no applicable identity yet"."""
    return GroupState(data=empty_data(group), loading=False)


class StoreSnapshot(BaseModel):
    """Everything the store publishes, at one instant.

    ``session.data`` is a :class:`Session` or ``None``; ``place.data`` a
    :class:`PlaceProfile` or ``None``; the other groups always carry their
    snapshot model.
    """

    model_config = ConfigDict(frozen=True)

    session: GroupState
    bookings: GroupState
    reviews: GroupState
    place: GroupState
    notifications: GroupState
    is_loading: bool = False
    banner_version: int = Field(default=0, ge=0)
