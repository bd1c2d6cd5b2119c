"""Shared test fixtures for Immich swipe tests."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any

import pytest

from immich_swipe.config import ReviewSettings
from immich_swipe.models import (
    MEDIA_KIND_PHOTO,
    MEDIA_KIND_VIDEO,
    Album,
    Asset,
    ImmichUser,
    SearchPage,
    UserConfig,
)
from immich_swipe.storage import InMemoryKeyValueStore, ReviewedStore, ReviewStats

# ── Fakes ────────────────────────────────────────────────────────────────────


class FakeAssetService:
    """In-memory stand-in for the remote library.

    Random draws come from ``random_batches`` (an entry may be an exception to
    raise). Chronological searches pop ``pages`` when scripted, otherwise they
    slice ``listing`` like a server would. ``gate``, when set, makes every
    fetch wait until it is released.
    """

    def __init__(self) -> None:
        self.random_batches: deque[list[Asset] | Exception] = deque()
        self.pages: deque[SearchPage | Exception] = deque()
        self.listing: list[Asset] = []
        self.albums: list[Album] = [Album("album-1", "Favorites", 3)]
        self.user: ImmichUser | None = ImmichUser("user-1", "Alice", "alice@example.com")
        self.gate: asyncio.Event | None = None
        # Per-call gates for random draws, consumed in call order.
        self.random_gates: deque[asyncio.Event | None] = deque()

        self.random_calls: list[int] = []
        self.search_calls: list[dict[str, Any]] = []
        self.deleted: list[tuple[list[str], bool]] = []
        self.restored: list[list[str]] = []
        self.album_adds: list[tuple[str, list[str]]] = []

        self.delete_error: Exception | None = None
        self.restore_error: Exception | None = None
        self.album_error: Exception | None = None
        self.user_error: Exception | None = None

    async def _wait_gate(self) -> None:
        if self.gate is not None:
            await self.gate.wait()

    async def get_current_user(self) -> ImmichUser | None:
        if self.user_error is not None:
            raise self.user_error
        return self.user

    async def fetch_random(self, count: int) -> list[Asset]:
        self.random_calls.append(count)
        call_gate = self.random_gates.popleft() if self.random_gates else None
        await self._wait_gate()
        if call_gate is not None:
            await call_gate.wait()
        if not self.random_batches:
            return []
        batch = self.random_batches.popleft()
        if isinstance(batch, Exception):
            raise batch
        return list(batch)

    async def search_chronological(
        self,
        *,
        take: int,
        skip: int,
        page: int | None,
        order: str,
    ) -> SearchPage:
        self.search_calls.append({"take": take, "skip": skip, "page": page, "order": order})
        await self._wait_gate()
        if self.pages:
            scripted = self.pages.popleft()
            if isinstance(scripted, Exception):
                raise scripted
            return scripted
        ordered = list(reversed(self.listing)) if order == "desc" else list(self.listing)
        items = ordered[skip : skip + take]
        return SearchPage(items=items, has_more=skip + len(items) < len(ordered))

    async def delete_assets(self, asset_ids: list[str], force: bool = False) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append((list(asset_ids), force))

    async def restore_assets(self, asset_ids: list[str]) -> None:
        if self.restore_error is not None:
            raise self.restore_error
        self.restored.append(list(asset_ids))

    async def add_assets_to_album(self, album_id: str, asset_ids: list[str]) -> None:
        if self.album_error is not None:
            raise self.album_error
        self.album_adds.append((album_id, list(asset_ids)))

    async def list_albums(self, force: bool = False) -> list[Album]:
        return list(self.albums)


class RecordingNotifier:
    """Collects (message, severity, duration_ms) notifications."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, int]] = []

    def notify(self, message: str, severity: str, duration_ms: int) -> None:
        self.messages.append((message, severity, duration_ms))

    @property
    def last(self) -> tuple[str, str, int] | None:
        return self.messages[-1] if self.messages else None


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_asset():
    """Factory fixture for creating Asset instances with sensible defaults."""

    def _make(
        asset_id: str = "asset-1",
        *,
        video: bool = False,
        filename: str | None = None,
        taken_at: str = "2024-01-15T10:00:00.000Z",
    ) -> Asset:
        return Asset(
            asset_id=asset_id,
            kind=MEDIA_KIND_VIDEO if video else MEDIA_KIND_PHOTO,
            filename=filename if filename is not None else f"{asset_id}.jpg",
            taken_at=taken_at,
        )

    return _make


@pytest.fixture
def fake_service() -> FakeAssetService:
    return FakeAssetService()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def make_settings():
    """Factory fixture for ReviewSettings that never touches disk."""

    def _make(**kwargs: Any) -> ReviewSettings:
        saved: list[UserConfig] = []

        def _save(config: UserConfig) -> bool:
            saved.append(config)
            return True

        settings = ReviewSettings(UserConfig(**kwargs), save=_save)
        settings.saved = saved  # type: ignore[attr-defined]
        return settings

    return _make


@pytest.fixture
def make_controller(fake_service, notifier, kv_store, make_settings):
    """Factory fixture wiring a ReviewQueueController to the shared fakes."""
    from immich_swipe.review.controller import ReviewQueueController

    def _make(**settings_kwargs: Any) -> ReviewQueueController:
        settings = make_settings(**settings_kwargs)
        return ReviewQueueController(
            fake_service,
            settings,
            ReviewStats(kv_store, "https://photos.example.com", "Alice"),
            ReviewedStore(kv_store, "https://photos.example.com", "Alice"),
            notifier=notifier,
        )

    return _make


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point platformdirs lookups at a temp directory."""
    monkeypatch.setattr("immich_swipe.config.user_config_dir", lambda _name: str(tmp_path))
    monkeypatch.setattr("immich_swipe.storage.user_config_dir", lambda _name: str(tmp_path))
    return tmp_path
