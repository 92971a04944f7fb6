"""Notification push channel.

A :class:`PushChannel` hands out one cancellable :class:`PushSubscription`
per vendor identity. The store owns the subscription and closes it when the
identity changes; UI code never touches it.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from vendorsync._mqtt import MqttMessage, MqttRuntime
from vendorsync.config import MqttSettings
from vendorsync.exceptions import PushChannelError

_logger = logging.getLogger(__name__)

InsertHandler = Callable[[dict[str, Any]], None]
"""Receives the decoded insert payload on the event-loop thread."""

_handle_ids = itertools.count(1)


@dataclass(eq=False)
class PushSubscription:
    """Handle for one open subscription."""

    vendor_id: str
    handle_id: int = field(default_factory=lambda: next(_handle_ids))
    closed: bool = False


class PushChannel(Protocol):
    async def subscribe(self, vendor_id: str, on_insert: InsertHandler) -> PushSubscription: ...

    async def unsubscribe(self, handle: PushSubscription) -> None: ...


class MqttPushChannel:
    """Push channel delivering ``vendor_notifications`` inserts over MQTT.

    Each subscription runs its own paho network thread subscribed to
    ``<topic_prefix>/<vendor_id>``.
    """

    def __init__(self, settings: MqttSettings, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._settings = settings
        self._loop = loop
        self._runtimes: dict[int, MqttRuntime] = {}

    def topic_for(self, vendor_id: str) -> str:
        return f"{self._settings.topic_prefix.rstrip('/')}/{vendor_id}"

    async def subscribe(self, vendor_id: str, on_insert: InsertHandler) -> PushSubscription:
        loop = self._loop or asyncio.get_running_loop()
        handle = PushSubscription(vendor_id=vendor_id)

        def _dispatch(message: MqttMessage) -> None:
            if handle.closed:
                return
            on_insert(message.payload)

        runtime = MqttRuntime(
            loop=loop,
            settings=self._settings,
            client_id=f"vendorsync_{vendor_id}_{secrets.token_hex(4)}",
            on_message=_dispatch,
            logger=_logger,
        )
        try:
            await loop.run_in_executor(None, runtime.start, self.topic_for(vendor_id))
        except OSError as exc:
            raise PushChannelError(f"Cannot connect to MQTT broker {self._settings.host}: {exc}") from exc
        self._runtimes[handle.handle_id] = runtime
        return handle

    async def unsubscribe(self, handle: PushSubscription) -> None:
        handle.closed = True
        runtime = self._runtimes.pop(handle.handle_id, None)
        if runtime is None:
            return
        loop = self._loop or asyncio.get_running_loop()
        await loop.run_in_executor(None, runtime.stop)

    @property
    def open_subscriptions(self) -> int:
        return len(self._runtimes)
