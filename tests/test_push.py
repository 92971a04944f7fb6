from __future__ import annotations

from typing import Any

import pytest

from vendorsync._mqtt import MqttMessage, MqttRuntime, decode_mqtt_payload
from vendorsync.config import MqttSettings
from vendorsync.exceptions import PushChannelError
from vendorsync.ingestion.push import notification_from_push
from vendorsync.push import MqttPushChannel


def test_notification_from_realtime_insert_envelope() -> None:
    notification = notification_from_push(
        {
            "type": "INSERT",
            "table": "vendor_notifications",
            "record": {"id": 11, "vendor_id": 3, "title": "New booking", "is_read": False},
        }
    )

    assert notification is not None
    assert notification.id == "11"
    assert notification.vendor_id == "3"
    assert notification.is_read is False


def test_notification_from_event_type_envelope_and_bare_row() -> None:
    assert notification_from_push({"eventType": "INSERT", "new": {"id": "n1"}}) is not None
    assert notification_from_push({"id": "n2", "title": "Reminder"}) is not None


def test_bare_row_keeps_its_own_type_column() -> None:
    notification = notification_from_push(
        {"id": "n3", "vendor_id": "vendor-1", "type": "NEW_BOOKING", "title": "New booking", "is_read": False}
    )

    assert notification is not None
    assert notification.id == "n3"
    assert notification.vendor_id == "vendor-1"
    assert notification.type == "NEW_BOOKING"


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "UPDATE", "record": {"id": "n1"}},
        {"type": "INSERT", "table": "bookings", "record": {"id": "n1"}},
        {"type": "INSERT", "record": "oops"},
        {"title": "no id"},
        {"type": "INSERT", "record": {"title": "no id"}},
        ["not", "a", "dict"],
    ],
)
def test_non_insert_payloads_are_ignored(payload: Any) -> None:
    assert notification_from_push(payload) is None


def test_decode_mqtt_payload() -> None:
    assert decode_mqtt_payload(b'{"id": "n1"}') == {"id": "n1"}

    with pytest.raises(ValueError):
        decode_mqtt_payload(b"[1, 2]")
    with pytest.raises(ValueError):
        decode_mqtt_payload(b"not json")


def test_topic_for_vendor() -> None:
    channel = MqttPushChannel(MqttSettings(topic_prefix="vendor-notifications/"))

    assert channel.topic_for("vendor-1") == "vendor-notifications/vendor-1"


@pytest.mark.asyncio
async def test_subscription_delivers_until_closed(monkeypatch: pytest.MonkeyPatch) -> None:
    started: list[tuple[MqttRuntime, str]] = []
    stopped: list[MqttRuntime] = []

    def fake_start(self: MqttRuntime, topic: str) -> None:
        started.append((self, topic))

    def fake_stop(self: MqttRuntime) -> None:
        stopped.append(self)

    monkeypatch.setattr("vendorsync._mqtt.MqttRuntime.start", fake_start)
    monkeypatch.setattr("vendorsync._mqtt.MqttRuntime.stop", fake_stop)

    received: list[dict[str, Any]] = []
    channel = MqttPushChannel(MqttSettings())
    handle = await channel.subscribe("vendor-1", received.append)

    runtime, topic = started[0]
    assert topic == "vendor-notifications/vendor-1"
    assert channel.open_subscriptions == 1

    runtime._on_message(MqttMessage(topic=topic, payload={"id": "n1"}))
    await channel.unsubscribe(handle)
    runtime._on_message(MqttMessage(topic=topic, payload={"id": "n2"}))

    assert received == [{"id": "n1"}]
    assert handle.closed is True
    assert stopped == [runtime]
    assert channel.open_subscriptions == 0


@pytest.mark.asyncio
async def test_broker_connection_failure_raises_push_channel_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse(self: MqttRuntime, topic: str) -> None:
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr("vendorsync._mqtt.MqttRuntime.start", refuse)
    channel = MqttPushChannel(MqttSettings(host="broker.invalid"))

    with pytest.raises(PushChannelError, match="broker.invalid"):
        await channel.subscribe("vendor-1", lambda payload: None)

    assert channel.open_subscriptions == 0
