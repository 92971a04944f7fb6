"""HTTP transport for the vendor backend API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from vendorsync._constants import USER_AGENT
from vendorsync._redact import redact_for_log
from vendorsync.config import VendorSyncConfig
from vendorsync.exceptions import VendorTransportError

_logger = logging.getLogger(__name__)

_BODY_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})
_INVALID_JSON = object()


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Mapping[str, Any] | None = None,
        query: Mapping[str, str] | None = None,
    ) -> Any:
        ...


def _error_message(data: Any, status: int) -> str:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, str) and error.strip():
            return error
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return str(error["message"])
    return f"Request failed: {status}"


class HttpTransport:
    """JSON-over-HTTP transport backed by an aiohttp session."""

    def __init__(self, config: VendorSyncConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Mapping[str, Any] | None = None,
        query: Mapping[str, str] | None = None,
    ) -> Any:
        """Send a JSON request and return the decoded JSON value (object or array).

        Non-2xx responses raise :class:`VendorTransportError` carrying the
        backend's ``error`` message when it sends one.
        """
        method = method.upper()
        url = f"{self._config.api_base_url}{path}"
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }
        payload = json.dumps(dict(body)) if body is not None and method in _BODY_METHODS else None
        params = {k: v for k, v in (query or {}).items() if v is not None}

        _logger.debug("%s %s query=%s body=%s", method, url, params, redact_for_log(body))

        try:
            async with self._http.request(
                method,
                url,
                data=payload,
                params=params or None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise VendorTransportError(f"Request to {path} failed: {exc}", endpoint=path) from exc
        except TimeoutError as exc:
            raise VendorTransportError(f"Request to {path} timed out", endpoint=path) from exc

        data: Any
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError:
            data = _INVALID_JSON

        if not 200 <= status < 300:
            raise VendorTransportError(_error_message(data, status), status_code=status, endpoint=path)

        if data is _INVALID_JSON:
            raise VendorTransportError(f"Invalid JSON from {path}: {text[:200]}", status_code=status, endpoint=path)

        _logger.debug("%s %s -> %s %s", method, path, status, redact_for_log(data, max_string=128))
        return data
