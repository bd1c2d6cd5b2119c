"""Tests for service interface adapters and defaults."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from immich_swipe.models import Album, Asset, SearchPage
from immich_swipe.services.immich_api_service import ImmichConnection
from immich_swipe.services.interfaces import (
    AppServices,
    AssetService,
    DefaultAssetService,
    build_default_app_services,
)

CONNECTION = ImmichConnection("https://photos.example.com", "key")


@pytest.mark.asyncio
async def test_build_default_app_services_protocol_compatible() -> None:
    async with httpx.AsyncClient() as client:
        services = build_default_app_services(client=client, connection=CONNECTION)

    assert isinstance(services, AppServices)
    assert isinstance(services.assets, AssetService)
    assert isinstance(services.assets, DefaultAssetService)


def test_fake_service_satisfies_protocol(fake_service) -> None:
    assert isinstance(fake_service, AssetService)


@pytest.mark.asyncio
async def test_default_adapter_delegates() -> None:
    client = object()
    service = DefaultAssetService(client=client, connection=CONNECTION)  # type: ignore[arg-type]
    page = SearchPage(items=[Asset("a1")], has_more=False)

    with (
        patch(
            "immich_swipe.services.interfaces._immich.fetch_random",
            new=AsyncMock(return_value=[Asset("a1")]),
        ) as fetch,
        patch(
            "immich_swipe.services.interfaces._immich.search_chronological",
            new=AsyncMock(return_value=page),
        ) as search,
        patch(
            "immich_swipe.services.interfaces._immich.delete_assets", new=AsyncMock()
        ) as delete,
    ):
        assets = await service.fetch_random(3)
        result = await service.search_chronological(take=50, skip=0, page=1, order="asc")
        await service.delete_assets(["a1"])

    assert assets == [Asset("a1")]
    assert result is page
    fetch.assert_awaited_once_with(client=client, connection=CONNECTION, count=3)
    search.assert_awaited_once_with(
        client=client, connection=CONNECTION, take=50, skip=0, page=1, order="asc"
    )
    delete.assert_awaited_once_with(
        client=client, connection=CONNECTION, asset_ids=["a1"], force=False
    )


@pytest.mark.asyncio
async def test_album_list_is_cached_until_forced() -> None:
    service = DefaultAssetService(client=object(), connection=CONNECTION)  # type: ignore[arg-type]
    first = [Album("al1", "Trips")]
    second = [Album("al1", "Trips"), Album("al2", "Pets")]

    with patch(
        "immich_swipe.services.interfaces._immich.list_albums",
        new=AsyncMock(side_effect=[first, second]),
    ) as listing:
        assert await service.list_albums() == first
        assert await service.list_albums() == first
        assert await service.list_albums(force=True) == second

    assert listing.await_count == 2


def test_default_adapter_urls() -> None:
    service = DefaultAssetService(client=object(), connection=CONNECTION)  # type: ignore[arg-type]
    assert service.thumbnail_url("a1").endswith("/api/assets/a1/thumbnail?size=preview")
    assert service.original_url("a1").endswith("/api/assets/a1/original")
