"""Gallery and storage endpoints.

Endpoints:
  - GET    /api/vendor/gallery?placeId=
  - POST   /api/vendor/gallery              (attach already-uploaded image URLs)
  - DELETE /api/vendor/gallery              (body: ids)
  - POST   /api/vendor/upload-gallery       (base64 images, returns public URLs)
  - POST   /api/vendor/storage/remove       (body: storage paths)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from vendorsync._api._common import require_success, unwrap_list
from vendorsync._transport import Transport
from vendorsync.exceptions import VendorApiError
from vendorsync.ingestion.normalize import safe_str
from vendorsync.models.gallery import GalleryImage

_logger = logging.getLogger(__name__)

_GALLERY_ENDPOINT = "/api/vendor/gallery"
_UPLOAD_ENDPOINT = "/api/vendor/upload-gallery"
_STORAGE_REMOVE_ENDPOINT = "/api/vendor/storage/remove"


async def fetch_gallery(transport: Transport, place_id: str) -> list[GalleryImage]:
    data = await transport.request("GET", _GALLERY_ENDPOINT, query={"placeId": place_id})
    rows = unwrap_list(data, "images", endpoint=_GALLERY_ENDPOINT)
    return [GalleryImage.model_validate(row) for row in rows]


async def add_gallery_images(transport: Transport, place_id: str, image_urls: Sequence[str]) -> None:
    data = await transport.request("POST", _GALLERY_ENDPOINT, body={"placeId": place_id, "images": list(image_urls)})
    require_success(data, endpoint=_GALLERY_ENDPOINT)


async def delete_gallery_images(transport: Transport, image_ids: Sequence[str]) -> None:
    data = await transport.request("DELETE", _GALLERY_ENDPOINT, body={"ids": list(image_ids)})
    require_success(data, endpoint=_GALLERY_ENDPOINT)


async def upload_gallery_images(transport: Transport, place_id: str, images: Sequence[str]) -> list[str]:
    """Upload base64 images to storage and return their public URLs."""
    data = await transport.request("POST", _UPLOAD_ENDPOINT, body={"placeId": place_id, "images": list(images)})
    require_success(data, endpoint=_UPLOAD_ENDPOINT)
    urls = _extract_urls(data)
    _logger.debug("Uploaded gallery images place_id=%s count=%d", place_id, len(urls))
    return urls


async def remove_storage_paths(transport: Transport, paths: Sequence[str]) -> None:
    data = await transport.request("POST", _STORAGE_REMOVE_ENDPOINT, body={"paths": list(paths)})
    require_success(data, endpoint=_STORAGE_REMOVE_ENDPOINT)


def _extract_urls(data: Any) -> list[str]:
    items = data.get("urls", data.get("images", data.get("data"))) if isinstance(data, dict) else data
    if items is None:
        return []
    if not isinstance(items, list):
        raise VendorApiError(
            f"{_UPLOAD_ENDPOINT} returned no url list", code="unexpected_shape", endpoint=_UPLOAD_ENDPOINT
        )
    urls: list[str] = []
    for item in items:
        url = safe_str(item.get("url") or item.get("publicUrl")) if isinstance(item, dict) else safe_str(item)
        if url is not None:
            urls.append(url)
    return urls
