"""Ordering strategy: where the next candidate asset comes from."""

from __future__ import annotations

import logging

from immich_swipe.config import ReviewSettings
from immich_swipe.models import SKIP_VIDEOS_BATCH_SIZE, SKIP_VIDEOS_MAX_ATTEMPTS, Asset
from immich_swipe.review.pager import ChronologicalPager
from immich_swipe.services.interfaces import AssetService

logger = logging.getLogger(__name__)

ALL_VIDEOS_MESSAGE = "Only video assets were returned. Disable Skip Videos mode to review them."


class AllVideosError(RuntimeError):
    """Raised when Skip Videos filtered out every sampled asset."""

    def __init__(self, message: str = ALL_VIDEOS_MESSAGE) -> None:
        super().__init__(message)


async def fetch_random_asset(
    service: AssetService,
    *,
    skip_videos: bool,
    batch_size: int = SKIP_VIDEOS_BATCH_SIZE,
    max_attempts: int = SKIP_VIDEOS_MAX_ATTEMPTS,
) -> Asset | None:
    """Draw one random asset.

    Without Skip Videos a single asset is requested and returned as-is. With
    it, batches of ``batch_size`` are drawn until one contains a non-video,
    at most ``max_attempts`` times; running out raises AllVideosError.
    """
    attempts = max_attempts if skip_videos else 1
    count = batch_size if skip_videos else 1
    for attempt in range(attempts):
        assets = await service.fetch_random(count)
        if not assets:
            continue
        if not skip_videos:
            return assets[0]
        photo = next((asset for asset in assets if not asset.is_video), None)
        if photo is not None:
            return photo
        logger.debug("Random batch %d/%d contained only videos", attempt + 1, attempts)

    if skip_videos:
        raise AllVideosError()
    return None


class OrderingStrategy:
    """Chooses random sampling or the chronological pager from current settings."""

    def __init__(
        self,
        service: AssetService,
        settings: ReviewSettings,
        pager: ChronologicalPager,
    ) -> None:
        self._service = service
        self._settings = settings
        self._pager = pager

    @property
    def pager(self) -> ChronologicalPager:
        return self._pager

    async def next_candidate(self) -> Asset | None:
        if self._settings.is_chronological:
            return await self._pager.next_from_queue()
        return await fetch_random_asset(self._service, skip_videos=self._settings.skip_videos)


__all__ = [
    "ALL_VIDEOS_MESSAGE",
    "AllVideosError",
    "OrderingStrategy",
    "fetch_random_asset",
]
