"""Chronological pager: a forward-only cursor over the sorted remote listing."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable

from immich_swipe.models import (
    CHRONO_MAX_FETCH_ATTEMPTS,
    CHRONO_PAGE_SIZE,
    REVIEW_ORDER_CHRONO_DESC,
    Asset,
    ChronologicalCursor,
)
from immich_swipe.services.interfaces import AssetService

logger = logging.getLogger(__name__)


class ChronologicalPager:
    """Buffers not-yet-shown assets from a sorted, paginated search.

    The cursor and the pending queue are only touched by ``next_from_queue``
    and ``reset``. Each reset starts a new generation; a batch that lands
    after a reset belongs to the old generation and is dropped.
    """

    def __init__(
        self,
        service: AssetService,
        *,
        get_order: Callable[[], str],
        get_skip_videos: Callable[[], bool],
        page_size: int = CHRONO_PAGE_SIZE,
        max_fetch_attempts: int = CHRONO_MAX_FETCH_ATTEMPTS,
    ) -> None:
        self._service = service
        self._get_order = get_order
        self._get_skip_videos = get_skip_videos
        self._page_size = page_size
        self._max_fetch_attempts = max_fetch_attempts
        self._queue: deque[Asset] = deque()
        self._cursor = ChronologicalCursor()
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def cursor(self) -> ChronologicalCursor:
        return self._cursor

    @property
    def pending(self) -> tuple[Asset, ...]:
        return tuple(self._queue)

    @property
    def generation(self) -> int:
        return self._generation

    def reset(self) -> None:
        """Drop buffered assets and rewind to the first page."""
        self._generation += 1
        self._queue.clear()
        self._cursor = ChronologicalCursor()
        logger.debug("Chronological pager reset (generation %d)", self._generation)

    async def next_from_queue(self) -> Asset | None:
        """Pop the next asset, fetching batches as needed.

        Returns None when the listing is exhausted, when
        ``max_fetch_attempts`` consecutive batches were entirely filtered out,
        or when a reset happened while a batch was in flight.
        """
        generation = self._generation
        async with self._lock:
            if generation != self._generation:
                return None
            attempts = 0
            while (
                not self._queue
                and self._cursor.has_more
                and attempts < self._max_fetch_attempts
            ):
                attempts += 1
                if not await self._load_batch(generation):
                    return None
            if not self._queue:
                return None
            return self._queue.popleft()

    async def _load_batch(self, generation: int) -> bool:
        """Fetch one page into the queue. Returns False if the result went stale."""
        cursor = self._cursor
        order = "desc" if self._get_order() == REVIEW_ORDER_CHRONO_DESC else "asc"
        batch = await self._service.search_chronological(
            take=self._page_size,
            skip=cursor.skip,
            page=cursor.page,
            order=order,
        )
        if generation != self._generation:
            logger.debug("Discarding chronological batch from generation %d", generation)
            return False

        cursor.skip += batch.raw_count
        cursor.has_more = batch.has_more
        if batch.next_page is not None:
            cursor.page = batch.next_page
        elif cursor.page is not None and batch.has_more:
            cursor.page += 1

        if self._get_skip_videos():
            accepted = [asset for asset in batch.items if not asset.is_video]
        else:
            accepted = list(batch.items)
        self._queue.extend(accepted)
        logger.debug(
            "Chronological batch: %d raw, %d queued, skip=%d page=%s has_more=%s",
            batch.raw_count,
            len(accepted),
            cursor.skip,
            cursor.page,
            cursor.has_more,
        )
        return True


__all__ = ["ChronologicalPager"]
