from __future__ import annotations

import pytest

from vendorsync.config import MqttSettings, VendorSyncConfig
from vendorsync.exceptions import VendorConfigError


def test_defaults() -> None:
    config = VendorSyncConfig()

    assert config.api_base_url == "http://localhost:5001"
    assert config.cache_path is None
    assert config.push_enabled is True
    assert config.mqtt.topic_prefix == "vendor-notifications"


def test_base_url_is_normalized() -> None:
    assert VendorSyncConfig(api_base_url=" https://api.example.com/ ").api_base_url == "https://api.example.com"


@pytest.mark.parametrize("kwargs", [{"api_base_url": "  "}, {"request_timeout": 0}])
def test_invalid_values_raise(kwargs: dict[str, object]) -> None:
    with pytest.raises(VendorConfigError):
        VendorSyncConfig(**kwargs)  # type: ignore[arg-type]


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VENDOR_API_BASE_URL", "https://api.example.com/")
    monkeypatch.setenv("VENDOR_REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("VENDOR_CACHE_PATH", "/tmp/vendorsync.json")
    monkeypatch.setenv("VENDOR_PUSH_ENABLED", "no")
    monkeypatch.setenv("VENDOR_MQTT_HOST", "mqtt.example.com")
    monkeypatch.setenv("VENDOR_MQTT_PORT", "8883")
    monkeypatch.setenv("VENDOR_MQTT_TLS", "true")

    config = VendorSyncConfig.from_env()

    assert config.api_base_url == "https://api.example.com"
    assert config.request_timeout == 12.5
    assert config.cache_path == "/tmp/vendorsync.json"
    assert config.push_enabled is False
    assert config.mqtt == MqttSettings(host="mqtt.example.com", port=8883, tls=True)


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VENDOR_REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("VENDOR_PUSH_ENABLED", "false")
    monkeypatch.setenv("VENDOR_MQTT_HOST", "mqtt.example.com")

    config = VendorSyncConfig.from_env(request_timeout=3.0, push_enabled=True, mqtt={"port": 1884})

    assert config.request_timeout == 3.0
    assert config.push_enabled is True
    assert config.mqtt.host == "mqtt.example.com"
    assert config.mqtt.port == 1884


def test_empty_cache_path_means_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VENDOR_CACHE_PATH", "")

    assert VendorSyncConfig.from_env().cache_path is None
