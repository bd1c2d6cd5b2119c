"""Parsing of Immich API JSON payloads into models.

Every parser is tolerant of missing or mistyped fields: malformed entries are
skipped rather than raising, because the server schema drifts between Immich
releases.
"""

from __future__ import annotations

import logging
from typing import Any

from immich_swipe.models import (
    MEDIA_KIND_OTHER,
    MEDIA_KIND_PHOTO,
    MEDIA_KIND_VIDEO,
    Album,
    Asset,
    ImmichUser,
    SearchPage,
)

logger = logging.getLogger(__name__)

_IMMICH_TYPE_TO_KIND = {
    "IMAGE": MEDIA_KIND_PHOTO,
    "PHOTO": MEDIA_KIND_PHOTO,
    "VIDEO": MEDIA_KIND_VIDEO,
}


def _coerce_str(value: Any, default: str = "") -> str:
    """Coerce untrusted values to str."""
    if isinstance(value, str):
        return value
    return default


def _coerce_int(value: Any) -> int | None:
    """Coerce untrusted values to int, excluding bool."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def parse_media_kind(raw_type: Any) -> str:
    """Map an Immich asset ``type`` onto PHOTO / VIDEO / OTHER."""
    if not isinstance(raw_type, str):
        return MEDIA_KIND_OTHER
    return _IMMICH_TYPE_TO_KIND.get(raw_type.upper(), MEDIA_KIND_OTHER)


def parse_asset(item: Any) -> Asset | None:
    """Parse a single asset object. Returns None if it has no id."""
    if not isinstance(item, dict):
        return None
    asset_id = _coerce_str(item.get("id"))
    if not asset_id:
        return None
    taken_at = _coerce_str(item.get("localDateTime")) or _coerce_str(item.get("fileCreatedAt"))
    return Asset(
        asset_id=asset_id,
        kind=parse_media_kind(item.get("type")),
        filename=_coerce_str(item.get("originalFileName")),
        taken_at=taken_at,
    )


def parse_asset_list(data: Any) -> list[Asset]:
    """Parse a JSON array of assets, dropping malformed entries."""
    if not isinstance(data, list):
        return []
    assets: list[Asset] = []
    for item in data:
        asset = parse_asset(item)
        if asset is not None:
            assets.append(asset)
    return assets


def parse_album(item: Any) -> Album | None:
    """Parse a single album object. Returns None if it has no id."""
    if not isinstance(item, dict):
        return None
    album_id = _coerce_str(item.get("id"))
    if not album_id:
        return None
    return Album(
        album_id=album_id,
        name=_coerce_str(item.get("albumName")) or album_id,
        asset_count=_coerce_int(item.get("assetCount")) or 0,
    )


def parse_album_list(data: Any) -> list[Album]:
    """Parse a JSON array of albums, dropping malformed entries."""
    if not isinstance(data, list):
        return []
    return [album for album in (parse_album(item) for item in data) if album is not None]


def parse_user(data: Any) -> ImmichUser | None:
    """Parse the ``/users/me`` response."""
    if not isinstance(data, dict):
        return None
    user_id = _coerce_str(data.get("id"))
    if not user_id:
        return None
    email = _coerce_str(data.get("email"))
    return ImmichUser(
        user_id=user_id,
        name=_coerce_str(data.get("name")) or email or user_id,
        email=email,
    )


def _parse_next_page(raw: Any) -> int | None:
    """Interpret a next-page token, which Immich sends as a numeric string."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric nextPage token %r", raw)
        return None


def parse_search_page(data: Any, page_size: int) -> SearchPage:
    """Interpret a chronological search response.

    Three shapes are accepted:

    - a bare JSON array of assets;
    - ``{"assets": {"items", "total", "count", "nextPage"}}`` (current Immich),
      where ``nextPage`` may also sit at the top level;
    - ``{"items", "hasNextPage"}`` (older releases).

    ``has_more`` is decided from the raw response only: an explicit next-page
    token wins, then a total/count pair, then "a full page came back".
    """
    if isinstance(data, list):
        items = parse_asset_list(data)
        return SearchPage(items=items, has_more=len(data) == page_size, raw_count=len(data))

    if not isinstance(data, dict):
        return SearchPage(items=[], has_more=False)

    assets_section = data.get("assets")
    if isinstance(assets_section, dict) and isinstance(assets_section.get("items"), list):
        raw_items = assets_section["items"]
        items = parse_asset_list(raw_items)
        raw_next = assets_section.get("nextPage", data.get("nextPage"))
        next_page = _parse_next_page(raw_next)
        if next_page is not None:
            return SearchPage(
                items=items, has_more=True, next_page=next_page, raw_count=len(raw_items)
            )
        total = _coerce_int(assets_section.get("total"))
        count = _coerce_int(assets_section.get("count"))
        if total is not None and count is not None:
            return SearchPage(items=items, has_more=total > count, raw_count=len(raw_items))
        return SearchPage(
            items=items, has_more=len(raw_items) == page_size, raw_count=len(raw_items)
        )

    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        raw_items = []
    items = parse_asset_list(raw_items)
    has_next = data.get("hasNextPage")
    if isinstance(has_next, bool):
        return SearchPage(items=items, has_more=has_next, raw_count=len(raw_items))
    return SearchPage(items=items, has_more=len(raw_items) == page_size, raw_count=len(raw_items))


__all__ = [
    "parse_album",
    "parse_album_list",
    "parse_asset",
    "parse_asset_list",
    "parse_media_kind",
    "parse_search_page",
    "parse_user",
]
