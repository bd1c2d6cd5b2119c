"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from immich_swipe.models import Album, Asset, ImmichUser, SearchPage
from immich_swipe.services import immich_api_service as _immich
from immich_swipe.services.immich_api_service import ImmichConnection


@runtime_checkable
class AssetService(Protocol):
    """Interface for the remote asset library consumed by the review queue."""

    async def get_current_user(self) -> ImmichUser | None:
        """Return the user owning the API key."""
        ...

    async def fetch_random(self, count: int) -> list[Asset]:
        """Return up to ``count`` randomly sampled assets."""
        ...

    async def search_chronological(
        self,
        *,
        take: int,
        skip: int,
        page: int | None,
        order: str,
    ) -> SearchPage:
        """Return one chronologically sorted page."""
        ...

    async def delete_assets(self, asset_ids: list[str], force: bool = False) -> None:
        """Trash (or permanently delete with ``force``) assets."""
        ...

    async def restore_assets(self, asset_ids: list[str]) -> None:
        """Restore trashed assets."""
        ...

    async def add_assets_to_album(self, album_id: str, asset_ids: list[str]) -> None:
        """Add assets to an album."""
        ...

    async def list_albums(self, force: bool = False) -> list[Album]:
        """List albums, cached unless ``force``."""
        ...


class DefaultAssetService:
    """Default adapter that delegates to function-based Immich API services."""

    def __init__(self, *, client: httpx.AsyncClient, connection: ImmichConnection) -> None:
        self._client = client
        self._connection = connection
        self._albums_cache: list[Album] | None = None

    @property
    def connection(self) -> ImmichConnection:
        return self._connection

    async def get_current_user(self) -> ImmichUser | None:
        return await _immich.get_current_user(client=self._client, connection=self._connection)

    async def fetch_random(self, count: int) -> list[Asset]:
        return await _immich.fetch_random(
            client=self._client, connection=self._connection, count=count
        )

    async def search_chronological(
        self,
        *,
        take: int,
        skip: int,
        page: int | None,
        order: str,
    ) -> SearchPage:
        return await _immich.search_chronological(
            client=self._client,
            connection=self._connection,
            take=take,
            skip=skip,
            page=page,
            order=order,
        )

    async def delete_assets(self, asset_ids: list[str], force: bool = False) -> None:
        await _immich.delete_assets(
            client=self._client, connection=self._connection, asset_ids=asset_ids, force=force
        )

    async def restore_assets(self, asset_ids: list[str]) -> None:
        await _immich.restore_assets(
            client=self._client, connection=self._connection, asset_ids=asset_ids
        )

    async def add_assets_to_album(self, album_id: str, asset_ids: list[str]) -> None:
        await _immich.add_assets_to_album(
            client=self._client,
            connection=self._connection,
            album_id=album_id,
            asset_ids=asset_ids,
        )

    async def list_albums(self, force: bool = False) -> list[Album]:
        if self._albums_cache is not None and not force:
            return self._albums_cache
        albums = await _immich.list_albums(client=self._client, connection=self._connection)
        self._albums_cache = albums
        return albums

    def thumbnail_url(self, asset_id: str, size: str = "preview") -> str:
        return _immich.thumbnail_url(self._connection, asset_id, size)

    def original_url(self, asset_id: str) -> str:
        return _immich.original_url(self._connection, asset_id)


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the app layer."""

    assets: AssetService


def build_default_app_services(
    *, client: httpx.AsyncClient, connection: ImmichConnection
) -> AppServices:
    """Build default app services backed by the function-based Immich module."""
    return AppServices(assets=DefaultAssetService(client=client, connection=connection))


__all__ = [
    "AppServices",
    "AssetService",
    "DefaultAssetService",
    "build_default_app_services",
]
