"""Client configuration for vendorsync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from vendorsync._constants import API_BASE_URL, MQTT_TOPIC_PREFIX
from vendorsync.exceptions import VendorConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class MqttSettings:
    """Broker settings for the notification push channel."""

    host: str = "localhost"
    port: int = 1883
    tls: bool = False
    username: str | None = None
    password: str | None = None
    keepalive: int = 120
    topic_prefix: str = MQTT_TOPIC_PREFIX


@dataclasses.dataclass(frozen=True)
class VendorSyncConfig:
    """Client configuration.

    Parameters
    ----------
    api_base_url : str
        Base URL of the vendor backend (no trailing slash needed).
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    cache_path : str or None
        Path of the JSON file backing the persistent cache. ``None`` keeps
        the cache in memory only (lost on restart).
    push_enabled : bool
        Subscribe to live notification inserts over MQTT.
    mqtt : MqttSettings
        Broker settings used when ``push_enabled`` is true.
    """

    api_base_url: str = API_BASE_URL
    request_timeout: float = 30.0
    cache_path: str | None = None
    push_enabled: bool = True
    mqtt: MqttSettings = dataclasses.field(default_factory=MqttSettings)

    def __post_init__(self) -> None:
        if not self.api_base_url.strip():
            raise VendorConfigError("api_base_url must be non-empty")
        if self.request_timeout <= 0:
            raise VendorConfigError("request_timeout must be positive")
        object.__setattr__(self, "api_base_url", self.api_base_url.strip().rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> VendorSyncConfig:
        """Create configuration from environment variables.

        Reads ``VENDOR_API_BASE_URL``, ``VENDOR_REQUEST_TIMEOUT``,
        ``VENDOR_CACHE_PATH``, ``VENDOR_PUSH_ENABLED`` and the
        ``VENDOR_MQTT_*`` family. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        VendorSyncConfig
            Populated configuration.
        """
        env = os.environ

        mqtt_kwargs: dict[str, Any] = {}
        _ENV_MQTT_MAP = {
            "VENDOR_MQTT_HOST": "host",
            "VENDOR_MQTT_USERNAME": "username",
            "VENDOR_MQTT_PASSWORD": "password",
            "VENDOR_MQTT_TOPIC_PREFIX": "topic_prefix",
        }
        for env_key, field_name in _ENV_MQTT_MAP.items():
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = val

        port_env = env.get("VENDOR_MQTT_PORT")
        if port_env is not None:
            mqtt_kwargs["port"] = int(port_env)
        keepalive_env = env.get("VENDOR_MQTT_KEEPALIVE")
        if keepalive_env is not None:
            mqtt_kwargs["keepalive"] = int(keepalive_env)
        if "VENDOR_MQTT_TLS" in env:
            mqtt_kwargs["tls"] = _env_bool(env.get("VENDOR_MQTT_TLS"), False)

        # Allow overriding broker fields via a nested dict
        mqtt_overrides = overrides.pop("mqtt", None)
        if isinstance(mqtt_overrides, dict):
            mqtt_kwargs.update(mqtt_overrides)
        elif isinstance(mqtt_overrides, MqttSettings):
            mqtt_kwargs = dataclasses.asdict(mqtt_overrides)

        config_kwargs: dict[str, Any] = {"mqtt": MqttSettings(**mqtt_kwargs)}

        base_url = env.get("VENDOR_API_BASE_URL")
        if base_url is not None:
            config_kwargs["api_base_url"] = base_url

        cache_path = env.get("VENDOR_CACHE_PATH")
        if cache_path is not None:
            config_kwargs["cache_path"] = cache_path or None

        timeout_env = env.get("VENDOR_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        if "push_enabled" not in overrides:
            config_kwargs["push_enabled"] = _env_bool(env.get("VENDOR_PUSH_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
