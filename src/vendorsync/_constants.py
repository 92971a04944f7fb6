"""Internal constants shared across the library."""

from datetime import timedelta

API_BASE_URL = "http://localhost:5001"
USER_AGENT = "vendorsync/1.0"

#: Freshness window applied uniformly to every cached entity group.
CACHE_TTL: timedelta = timedelta(minutes=5)

#: Reserved prefix for every key this library writes to the persistent cache.
CACHE_PREFIX = "@app_cache_"
TIMESTAMP_SUFFIX = "_timestamp"

#: Keys used by the auth collaborator (kept apart from the store's cache keys).
AUTH_STORAGE_KEY = "@vendorsync_auth"
USER_STORAGE_KEY = "@vendorsync_user"

MQTT_TOPIC_PREFIX = "vendor-notifications"
