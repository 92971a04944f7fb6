from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest

from vendorsync._api import auth as auth_api
from vendorsync._api import bookings as bookings_api
from vendorsync._api import gallery as gallery_api
from vendorsync._api import notifications as notifications_api
from vendorsync._api import place as place_api
from vendorsync._api import profile as profile_api
from vendorsync._api import reviews as reviews_api
from vendorsync._api._common import require_success, unwrap_list, unwrap_object
from vendorsync._transport import HttpTransport
from vendorsync.config import VendorSyncConfig
from vendorsync.exceptions import VendorApiError, VendorAuthenticationError, VendorTransportError


@dataclass
class FakeTransport:
    responses: dict[tuple[str, str], Any] = field(default_factory=dict)
    requests: list[tuple[str, str, dict[str, Any] | None, dict[str, str] | None]] = field(default_factory=list)

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Mapping[str, Any] | None = None,
        query: Mapping[str, str] | None = None,
    ) -> Any:
        self.requests.append((method, path, dict(body) if body else None, dict(query) if query else None))
        response = self.responses.get((method, path), {})
        if isinstance(response, BaseException):
            raise response
        return response


# ----------------------------------------------------------------------
# Envelope helpers
# ----------------------------------------------------------------------


def test_unwrap_list_accepts_every_envelope() -> None:
    rows = [{"id": 1}, "junk", {"id": 2}]

    assert unwrap_list(rows, "bookings", endpoint="/x") == [{"id": 1}, {"id": 2}]
    assert unwrap_list({"bookings": rows}, "bookings", endpoint="/x") == [{"id": 1}, {"id": 2}]
    assert unwrap_list({"data": rows}, "bookings", endpoint="/x") == [{"id": 1}, {"id": 2}]
    assert unwrap_list({}, "bookings", endpoint="/x") == []

    with pytest.raises(VendorApiError):
        unwrap_list({"bookings": "nope"}, "bookings", endpoint="/x")


def test_unwrap_object() -> None:
    assert unwrap_object({"place": {"id": 1}}, "place", endpoint="/x") == {"id": 1}
    assert unwrap_object({"id": 1}, "place", endpoint="/x") == {"id": 1}
    assert unwrap_object({"place": None}, "place", endpoint="/x") is None
    assert unwrap_object(None, "place", endpoint="/x") is None


def test_require_success() -> None:
    require_success({"success": True}, endpoint="/x")
    require_success({}, endpoint="/x")

    with pytest.raises(VendorApiError, match="bad ifsc"):
        require_success({"success": False, "error": "bad ifsc"}, endpoint="/x")


# ----------------------------------------------------------------------
# Endpoints
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_fetch_bookings_and_reviews() -> None:
    transport = FakeTransport(
        responses={
            ("GET", "/api/vendor/bookings"): [{"id": "b1", "booking_date_time": "2026-03-10T10:00:00Z"}],
            ("GET", "/api/vendor/reviews"): {"reviews": [{"rating": 5}, {"rating": "3"}]},
        }
    )

    bookings = await bookings_api.fetch_bookings(transport, "place-1")
    reviews = await reviews_api.fetch_reviews(transport, "place-1")

    assert [booking.id for booking in bookings] == ["b1"]
    assert [review.rating for review in reviews] == [5.0, 3.0]
    assert transport.requests[0] == ("GET", "/api/vendor/bookings", None, {"placeId": "place-1"})


@pytest.mark.asyncio
async def test_fetch_place_and_banner() -> None:
    transport = FakeTransport(responses={("GET", "/api/vendor/place"): {"place": {"id": "p1", "banner_image_link": "b.png"}}})

    place = await place_api.fetch_place(transport, "p1")
    banner = await place_api.fetch_place_banner(transport, "p1")

    assert place.id == "p1"
    assert banner == "b.png"
    assert transport.requests[1][3] == {"placeId": "p1", "fields": "banner_image_link"}


@pytest.mark.asyncio
async def test_fetch_missing_place_raises() -> None:
    transport = FakeTransport(responses={("GET", "/api/vendor/place"): {"place": None}})

    with pytest.raises(VendorApiError) as excinfo:
        await place_api.fetch_place(transport, "p404")

    assert excinfo.value.code == "not_found"


@pytest.mark.asyncio
async def test_notifications_are_sorted_newest_first() -> None:
    transport = FakeTransport(
        responses={
            ("GET", "/api/vendor/notifications"): {
                "notifications": [
                    {"id": "old", "created_at": "2026-03-01T00:00:00Z"},
                    {"id": "undated"},
                    {"id": "new", "created_at": "2026-03-09T00:00:00Z"},
                ]
            }
        }
    )

    notifications = await notifications_api.fetch_notifications(transport, "vendor-1")

    assert [item.id for item in notifications] == ["new", "old", "undated"]


@pytest.mark.asyncio
async def test_mark_read_and_profile_updates_send_vendor_id() -> None:
    transport = FakeTransport()

    await notifications_api.mark_notifications_read(transport, "vendor-1")
    await profile_api.update_password(transport, "vendor-1", "secret1", "secret2")
    await profile_api.update_push_token(transport, "vendor-1", "ExponentPushToken[x]")

    assert transport.requests[0] == ("POST", "/api/vendor/notifications/mark-read", {"vendorId": "vendor-1"}, None)
    assert transport.requests[1][2] == {"vendorId": "vendor-1", "currentPassword": "secret1", "newPassword": "secret2"}
    assert transport.requests[2][2] == {"vendorId": "vendor-1", "push_token": "ExponentPushToken[x]"}


@pytest.mark.asyncio
async def test_gallery_endpoints_send_place_and_ids() -> None:
    transport = FakeTransport(
        responses={
            ("GET", "/api/vendor/gallery"): [{"id": 7, "gallery_image_url": "g.png", "created_at": "2026-03-01T00:00:00Z"}],
            ("POST", "/api/vendor/upload-gallery"): {"images": [{"url": "a.png"}, {"publicUrl": "b.png"}, {"url": ""}]},
        }
    )

    images = await gallery_api.fetch_gallery(transport, "p1")
    await gallery_api.add_gallery_images(transport, "p1", ["g2.png"])
    await gallery_api.delete_gallery_images(transport, ["7"])
    urls = await gallery_api.upload_gallery_images(transport, "p1", ["aGVsbG8="])
    await gallery_api.remove_storage_paths(transport, ["p1/g.png"])

    assert images[0].id == "7"
    assert images[0].gallery_image_url == "g.png"
    assert urls == ["a.png", "b.png"]
    assert transport.requests == [
        ("GET", "/api/vendor/gallery", None, {"placeId": "p1"}),
        ("POST", "/api/vendor/gallery", {"placeId": "p1", "images": ["g2.png"]}, None),
        ("DELETE", "/api/vendor/gallery", {"ids": ["7"]}, None),
        ("POST", "/api/vendor/upload-gallery", {"placeId": "p1", "images": ["aGVsbG8="]}, None),
        ("POST", "/api/vendor/storage/remove", {"paths": ["p1/g.png"]}, None),
    ]


@pytest.mark.asyncio
async def test_rejected_gallery_delete_raises() -> None:
    transport = FakeTransport(responses={("DELETE", "/api/vendor/gallery"): {"success": False, "error": "not yours"}})

    with pytest.raises(VendorApiError, match="not yours"):
        await gallery_api.delete_gallery_images(transport, ["7"])


@pytest.mark.asyncio
async def test_upload_banner_returns_public_url() -> None:
    transport = FakeTransport(responses={("POST", "/api/vendor/upload-banner"): {"success": True, "publicUrl": "new.png"}})

    url = await place_api.upload_banner(transport, "p1", "aGVsbG8=")

    assert url == "new.png"
    assert transport.requests[0][2] == {"placeId": "p1", "base64": "aGVsbG8="}


@pytest.mark.asyncio
async def test_fetch_onboarding_status_keeps_unknown_steps() -> None:
    transport = FakeTransport(
        responses={("GET", "/api/vendor/onboarding-status"): {"status": {"isComplete": "true", "hasMenu": False}}}
    )

    status = await profile_api.fetch_onboarding_status(transport, "vendor-1")

    assert status.completed is True
    assert status.has_place is None
    assert status.model_extra == {"hasMenu": False}
    assert transport.requests[0][3] == {"vendorId": "vendor-1"}


@pytest.mark.asyncio
async def test_login_maps_client_errors_to_authentication_error() -> None:
    transport = FakeTransport(
        responses={
            ("POST", "/api/vendor/auth/login"): VendorTransportError("Invalid credentials", status_code=401),
        }
    )

    with pytest.raises(VendorAuthenticationError, match="Invalid credentials"):
        await auth_api.login(transport, "owner@example.com", "wrong")


@pytest.mark.asyncio
async def test_login_without_user_fails() -> None:
    transport = FakeTransport(responses={("POST", "/api/vendor/auth/login"): {"user": None}})

    with pytest.raises(VendorAuthenticationError, match="Invalid email or password"):
        await auth_api.login(transport, "owner@example.com", "pw")


@pytest.mark.asyncio
async def test_login_server_error_stays_transport_error() -> None:
    transport = FakeTransport(
        responses={("POST", "/api/vendor/auth/login"): VendorTransportError("Request failed: 500", status_code=500)}
    )

    with pytest.raises(VendorTransportError):
        await auth_api.login(transport, "owner@example.com", "pw")


# ----------------------------------------------------------------------
# HTTP transport
# ----------------------------------------------------------------------


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    async def text(self) -> str:
        return self._text


class _FakeHttpSession:
    def __init__(self, status: int = 200, text: str = "{}", error: BaseException | None = None) -> None:
        self.status = status
        self.text = text
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return _FakeResponse(self.status, self.text)


def _transport(http: _FakeHttpSession) -> HttpTransport:
    return HttpTransport(VendorSyncConfig(api_base_url="http://backend.test/"), http)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_transport_returns_decoded_arrays() -> None:
    http = _FakeHttpSession(text='[{"id": 1}]')

    data = await _transport(http).request("GET", "/api/vendor/bookings", query={"placeId": "p1"})

    assert data == [{"id": 1}]
    call = http.calls[0]
    assert call["url"] == "http://backend.test/api/vendor/bookings"
    assert call["params"] == {"placeId": "p1"}
    assert call["data"] is None


@pytest.mark.asyncio
async def test_transport_sends_json_body_for_writes() -> None:
    http = _FakeHttpSession(text="")

    data = await _transport(http).request("PATCH", "/api/vendor/place", body={"placeId": "p1", "name": "X"})

    assert data == {}
    assert http.calls[0]["data"] == '{"placeId": "p1", "name": "X"}'


@pytest.mark.asyncio
async def test_transport_surfaces_backend_error_message() -> None:
    http = _FakeHttpSession(status=400, text='{"error": "Place not found"}')

    with pytest.raises(VendorTransportError, match="Place not found") as excinfo:
        await _transport(http).request("GET", "/api/vendor/place")

    assert excinfo.value.status_code == 400


@pytest.mark.asyncio
async def test_transport_falls_back_to_status_message() -> None:
    http = _FakeHttpSession(status=503, text="<html>down</html>")

    with pytest.raises(VendorTransportError, match="Request failed: 503"):
        await _transport(http).request("GET", "/api/vendor/place")


@pytest.mark.asyncio
async def test_transport_rejects_invalid_json() -> None:
    http = _FakeHttpSession(text="not json")

    with pytest.raises(VendorTransportError, match="Invalid JSON"):
        await _transport(http).request("GET", "/api/vendor/place")


@pytest.mark.asyncio
async def test_transport_wraps_client_errors() -> None:
    http = _FakeHttpSession(error=aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(VendorTransportError, match="connection refused"):
        await _transport(http).request("GET", "/api/vendor/place")
