"""Cache freshness policy.

A cached entry is fresh exactly when ``now - timestamp < CACHE_TTL``. The
TTL is the single process-wide constant from :mod:`vendorsync._constants`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from vendorsync._cache import PersistentCache
from vendorsync._constants import CACHE_TTL
from vendorsync.exceptions import CacheStorageError
from vendorsync.ingestion.normalize import to_epoch_ms
from vendorsync.state.events import EntityGroup, timestamp_key

_logger = logging.getLogger(__name__)

_TTL_MS = int(CACHE_TTL.total_seconds() * 1000)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def parse_cache_timestamp(raw: str | None) -> int | None:
    """Epoch milliseconds stored in a timestamp key, ``None`` if unusable."""
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def is_fresh(now_ms: int, stamped_ms: int) -> bool:
    return now_ms - stamped_ms < _TTL_MS


class CachePolicy:
    """Answers "may this group be served from cache?" without side effects."""

    def __init__(self, cache: PersistentCache, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._cache = cache
        self._clock = clock

    async def is_valid(self, group: EntityGroup) -> bool:
        try:
            raw = await self._cache.get(timestamp_key(group))
        except CacheStorageError:
            _logger.warning("Cannot read cache timestamp group=%s", group, exc_info=True)
            return False
        stamped = parse_cache_timestamp(raw)
        if stamped is None:
            return False
        return is_fresh(to_epoch_ms(self._clock()), stamped)
