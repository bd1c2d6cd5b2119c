"""Internal Immich API service helpers: authenticated requests and endpoint calls."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from immich_swipe.models import CHRONO_PAGE_SIZE, Album, Asset, ImmichUser, SearchPage
from immich_swipe.parsing import (
    parse_album_list,
    parse_asset_list,
    parse_search_page,
    parse_user,
)

logger = logging.getLogger(__name__)

IMMICH_API_PREFIX = "/api"
IMMICH_REQUEST_TIMEOUT = 30  # seconds
IMMICH_SEARCH_ASSET_TYPES = ("IMAGE", "VIDEO")


class ImmichConfigError(ValueError):
    """Raised when no server URL or API key is configured."""


class ImmichApiError(RuntimeError):
    """Raised when an Immich request fails (HTTP status or transport)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class ImmichConnection:
    """Where and as whom requests are sent."""

    base_url: str  # server root, without the /api suffix
    api_key: str

    def require(self) -> None:
        """Fail fast when the connection is not configured."""
        if not self.base_url:
            raise ImmichConfigError("Immich server URL is not configured")
        if not self.api_key:
            raise ImmichConfigError("Immich API key is not configured")

    def url_for(self, endpoint: str) -> str:
        normalized = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self.base_url}{IMMICH_API_PREFIX}{normalized}"


def _error_message(response: httpx.Response) -> str:
    """Extract the server's error message, falling back to status and body."""
    text = response.text
    try:
        payload = json.loads(text)
    except ValueError:
        return f"API error: {response.status_code} - {text}"
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, list):
            message = "; ".join(str(part) for part in message)
        if message:
            return str(message)
    return f"API error: {response.status_code}"


async def api_request(
    *,
    client: httpx.AsyncClient,
    connection: ImmichConnection,
    method: str,
    endpoint: str,
    params: dict[str, Any] | None = None,
    json_body: Any = None,
    timeout_seconds: int = IMMICH_REQUEST_TIMEOUT,
) -> Any:
    """Send one authenticated request and decode the JSON response.

    Empty bodies decode to an empty dict. Raises ImmichApiError for non-2xx
    responses and transport failures, ImmichConfigError when unconfigured.
    """
    connection.require()
    headers = {
        "x-api-key": connection.api_key,
        "Accept": "application/json",
    }
    content: bytes | None = None
    if json_body is not None:
        headers["Content-Type"] = "application/json"
        content = json.dumps(json_body).encode("utf-8")

    url = connection.url_for(endpoint)
    try:
        response = await client.request(
            method,
            url,
            params=params,
            headers=headers,
            content=content,
            timeout=timeout_seconds,
        )
    except httpx.HTTPError as exc:
        logger.warning("Immich %s %s failed: %s", method, endpoint, exc)
        raise ImmichApiError(f"Network error: {exc}") from exc

    if not response.is_success:
        message = _error_message(response)
        logger.warning(
            "Immich %s %s returned %d: %s", method, endpoint, response.status_code, message
        )
        raise ImmichApiError(message, status_code=response.status_code)

    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise ImmichApiError("Immich returned invalid JSON", response.status_code) from exc


async def get_current_user(
    *, client: httpx.AsyncClient, connection: ImmichConnection
) -> ImmichUser | None:
    """Fetch the user owning the API key (doubles as a connection test)."""
    data = await api_request(
        client=client, connection=connection, method="GET", endpoint="/users/me"
    )
    return parse_user(data)


async def fetch_random(
    *, client: httpx.AsyncClient, connection: ImmichConnection, count: int
) -> list[Asset]:
    """Fetch ``count`` random assets."""
    data = await api_request(
        client=client,
        connection=connection,
        method="GET",
        endpoint="/assets/random",
        params={"count": count},
    )
    return parse_asset_list(data)


def build_search_body(
    *, take: int, skip: int, page: int | None, order: str, asset_types: tuple[str, ...]
) -> dict[str, Any]:
    """Build the metadata search body; ``take`` and ``size`` are both sent for
    compatibility with older and newer servers."""
    body: dict[str, Any] = {
        "take": take,
        "size": take,
        "skip": skip,
        "order": order,
        "assetType": list(asset_types),
    }
    if page is not None:
        body["page"] = page
    return body


async def search_chronological(
    *,
    client: httpx.AsyncClient,
    connection: ImmichConnection,
    take: int = CHRONO_PAGE_SIZE,
    skip: int = 0,
    page: int | None = None,
    order: str = "asc",
    asset_types: tuple[str, ...] = IMMICH_SEARCH_ASSET_TYPES,
) -> SearchPage:
    """Fetch one chronologically sorted page via ``/search/metadata``."""
    data = await api_request(
        client=client,
        connection=connection,
        method="POST",
        endpoint="/search/metadata",
        json_body=build_search_body(
            take=take, skip=skip, page=page, order=order, asset_types=asset_types
        ),
    )
    return parse_search_page(data, take)


async def delete_assets(
    *,
    client: httpx.AsyncClient,
    connection: ImmichConnection,
    asset_ids: list[str],
    force: bool = False,
) -> None:
    """Delete assets; ``force=False`` moves them to the trash."""
    await api_request(
        client=client,
        connection=connection,
        method="DELETE",
        endpoint="/assets",
        json_body={"ids": asset_ids, "force": force},
    )


async def restore_assets(
    *, client: httpx.AsyncClient, connection: ImmichConnection, asset_ids: list[str]
) -> None:
    """Restore trashed assets."""
    await api_request(
        client=client,
        connection=connection,
        method="POST",
        endpoint="/trash/restore/assets",
        json_body={"ids": asset_ids},
    )


async def add_assets_to_album(
    *,
    client: httpx.AsyncClient,
    connection: ImmichConnection,
    album_id: str,
    asset_ids: list[str],
) -> None:
    """Add assets to an existing album."""
    await api_request(
        client=client,
        connection=connection,
        method="PUT",
        endpoint=f"/albums/{album_id}/assets",
        json_body={"ids": asset_ids},
    )


async def list_albums(*, client: httpx.AsyncClient, connection: ImmichConnection) -> list[Album]:
    """List albums visible to the user."""
    data = await api_request(
        client=client, connection=connection, method="GET", endpoint="/albums"
    )
    return parse_album_list(data)


def thumbnail_url(connection: ImmichConnection, asset_id: str, size: str = "preview") -> str:
    """Thumbnail URL for an asset, or empty string when unconfigured."""
    if not connection.base_url:
        return ""
    return connection.url_for(f"/assets/{asset_id}/thumbnail?size={size}")


def original_url(connection: ImmichConnection, asset_id: str) -> str:
    """Original-file URL for an asset, or empty string when unconfigured."""
    if not connection.base_url:
        return ""
    return connection.url_for(f"/assets/{asset_id}/original")


__all__ = [
    "IMMICH_REQUEST_TIMEOUT",
    "ImmichApiError",
    "ImmichConfigError",
    "ImmichConnection",
    "add_assets_to_album",
    "api_request",
    "build_search_body",
    "delete_assets",
    "fetch_random",
    "get_current_user",
    "list_albums",
    "original_url",
    "restore_assets",
    "search_chronological",
    "thumbnail_url",
]
