"""Review queue controller: the current/next slots and the review actions.

One asset is on screen (``current``) and one is preloaded behind it
(``next``). Keep, keep-to-album and delete commit remotely, update the
counters and advance; undo restores the last deleted asset. Every reset
(reload, settings change, identity change) bumps a generation number, and
background work started under an older generation is ignored when it lands.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Coroutine
from typing import Any, Literal, Protocol

from immich_swipe.action_messages import (
    ALBUM_FAILED_NOTIFICATION,
    DELETE_FAILED_NOTIFICATION,
    DELETE_NOTIFICATION,
    KEEP_NOTIFICATION,
    NOTHING_TO_UNDO_NOTIFICATION,
    RESTORE_FAILED_NOTIFICATION,
    build_album_notification,
    build_empty_queue_message,
    build_restored_notification,
)
from immich_swipe.config import ReviewSettings
from immich_swipe.models import PRELOAD_MAX_DRAWS, Album, Asset, Severity
from immich_swipe.review.pager import ChronologicalPager
from immich_swipe.review.strategy import AllVideosError, OrderingStrategy
from immich_swipe.review.undo import UndoLedger
from immich_swipe.services.immich_api_service import ImmichApiError, ImmichConfigError
from immich_swipe.services.interfaces import AssetService
from immich_swipe.storage import ReviewedStore, ReviewStats

logger = logging.getLogger(__name__)

QueueStatus = Literal["empty", "loading", "ready", "error"]

KEEP_DURATION_MS = 1500
ALBUM_DURATION_MS = 1800
DELETE_DURATION_MS = 1500
UNDO_EMPTY_DURATION_MS = 1500
RESTORED_DURATION_MS = 2500
ERROR_DURATION_MS = 3000

_REMOTE_ERRORS = (ImmichApiError, ImmichConfigError)
_FETCH_ERRORS = (ImmichApiError, ImmichConfigError, AllVideosError)


class Notifier(Protocol):
    """Sink for short user-facing notifications."""

    def notify(self, message: str, severity: Severity, duration_ms: int) -> None: ...


TrackTask = Callable[[Coroutine[Any, Any, None]], asyncio.Task[None]]
StateListener = Callable[[], None]


def _untracked_task(coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
    return asyncio.create_task(coro)


class ReviewQueueController:
    """Owns the review state and every action that mutates it."""

    def __init__(
        self,
        service: AssetService,
        settings: ReviewSettings,
        stats: ReviewStats,
        reviewed: ReviewedStore,
        *,
        notifier: Notifier,
        track_task: TrackTask | None = None,
        pager: ChronologicalPager | None = None,
    ) -> None:
        self._service = service
        self._settings = settings
        self._stats = stats
        self._reviewed = reviewed
        self._notifier = notifier
        self._track_task = track_task or _untracked_task
        self._pager = pager or ChronologicalPager(
            service,
            get_order=lambda: settings.review_order,
            get_skip_videos=lambda: settings.skip_videos,
        )
        self._strategy = OrderingStrategy(service, settings, self._pager)
        self._undo = UndoLedger()
        # Assets displaced from the screen by undo, offered again before new draws.
        self._resume: deque[Asset] = deque()
        self._generation = 0
        self._preload_task: asyncio.Task[None] | None = None
        self._preload_generation = -1
        self._listeners: list[StateListener] = []

        self.status: QueueStatus = "empty"
        self.current: Asset | None = None
        self.next: Asset | None = None
        self.error: str | None = None

        self._unsubscribe = settings.subscribe(self.on_settings_changed)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    def can_undo(self) -> bool:
        return self._undo.can_undo()

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` after every visible state change."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def close(self) -> None:
        """Detach from the settings source."""
        self._unsubscribe()
        self._listeners.clear()

    async def wait_for_preload(self) -> None:
        """Wait until the current background preload (if any) has finished."""
        task = self._preload_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_initial(self) -> None:
        """Start the review flow from scratch."""
        self._reset_flow(clear_undo=True)
        self.current = None
        self.status = "loading"
        self.error = None
        self._emit()
        await self._fetch_current()

    async def _fetch_current(self) -> None:
        while True:
            generation = self._generation
            try:
                asset = await self._take_candidate()
            except _FETCH_ERRORS as e:
                if generation != self._generation:
                    continue
                logger.warning("Failed to load asset: %s", e)
                self.current = None
                self.status = "error"
                self.error = str(e)
                self._emit()
                return
            if generation == self._generation:
                break
            if asset is not None:
                logger.debug("Dropping asset %s fetched before a reset", asset.asset_id)

        self.current = asset
        if asset is None:
            self.status = "empty"
            self.error = build_empty_queue_message(
                chronological=self._settings.is_chronological,
                skip_videos=self._settings.skip_videos,
            )
            self._emit()
            return
        # A preload that landed while nothing was on screen may hold the same asset.
        if self.next is not None and self.next.asset_id == asset.asset_id:
            self.next = None
        self.status = "ready"
        self.error = None
        self._emit()
        self._start_preload()

    async def _take_candidate(self) -> Asset | None:
        if self._resume:
            return self._resume.popleft()
        return await self._strategy.next_candidate()

    async def _advance(self) -> None:
        task = self._preload_task
        if self.next is None and task is not None and not task.done():
            await asyncio.wait({task})

        if self.next is not None:
            self.current = self.next
            self.next = None
            self.status = "ready"
            self.error = None
            self._emit()
            self._start_preload()
            return

        self.current = None
        self.status = "loading"
        self._emit()
        await self._fetch_current()

    # ------------------------------------------------------------------
    # Preload
    # ------------------------------------------------------------------

    def _start_preload(self) -> None:
        if self.current is None or self.next is not None:
            return
        task = self._preload_task
        if (
            task is not None
            and not task.done()
            and self._preload_generation == self._generation
        ):
            return
        self._preload_generation = self._generation
        self._preload_task = self._track_task(self._preload_next(self._generation))

    async def _preload_next(self, generation: int) -> None:
        try:
            candidate = await self._draw_distinct(generation)
        except _FETCH_ERRORS as e:
            logger.warning("Preload failed: %s", e)
            return
        if generation != self._generation or candidate is None:
            return
        if self.next is not None:
            self._resume.appendleft(candidate)
            return
        self.next = candidate
        self._emit()

    async def _draw_distinct(self, generation: int) -> Asset | None:
        """Draw a candidate that is not the asset currently on screen."""
        for _ in range(PRELOAD_MAX_DRAWS):
            candidate = await self._take_candidate()
            if generation != self._generation or candidate is None:
                return None
            current = self.current
            if current is None or candidate.asset_id != current.asset_id:
                return candidate
            logger.debug("Preload drew the on-screen asset %s again", candidate.asset_id)
        return None

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def keep(self) -> None:
        asset = self.current
        if asset is None:
            return
        self._stats.increment_kept()
        self._reviewed.mark(asset.asset_id, "keep")
        self._notify(KEEP_NOTIFICATION, "success", KEEP_DURATION_MS)
        await self._advance()

    async def keep_to_album(self, album: Album) -> None:
        asset = self.current
        if asset is None:
            return
        try:
            await self._service.add_assets_to_album(album.album_id, [asset.asset_id])
        except _REMOTE_ERRORS as e:
            logger.warning("Failed to add %s to album %s: %s", asset.asset_id, album.album_id, e)
            self._notify(ALBUM_FAILED_NOTIFICATION, "error", ERROR_DURATION_MS)
            return
        self._settings.set_last_used_album(album.album_id)
        self._stats.increment_kept()
        self._reviewed.mark(asset.asset_id, "keep")
        self._notify(build_album_notification(album.name), "success", ALBUM_DURATION_MS)
        await self._advance()

    async def delete(self) -> None:
        asset = self.current
        if asset is None:
            return
        try:
            await self._service.delete_assets([asset.asset_id], force=False)
        except _REMOTE_ERRORS as e:
            logger.warning("Failed to delete %s: %s", asset.asset_id, e)
            self._notify(DELETE_FAILED_NOTIFICATION, "error", ERROR_DURATION_MS)
            return
        self._undo.record(asset)
        self._stats.increment_deleted()
        self._reviewed.mark(asset.asset_id, "delete")
        self._notify(DELETE_NOTIFICATION, "info", DELETE_DURATION_MS)
        await self._advance()

    async def undo(self) -> None:
        """Restore the last deleted asset and put it back on screen."""
        asset = self._undo.last_deleted
        if asset is None:
            self._notify(NOTHING_TO_UNDO_NOTIFICATION, "info", UNDO_EMPTY_DURATION_MS)
            return
        try:
            await self._service.restore_assets([asset.asset_id])
        except _REMOTE_ERRORS as e:
            logger.warning("Failed to restore %s: %s", asset.asset_id, e)
            self._notify(RESTORE_FAILED_NOTIFICATION, "error", ERROR_DURATION_MS)
            return

        self._stats.decrement_deleted()
        self._reviewed.unmark(asset.asset_id)
        self._notify(build_restored_notification(asset.filename), "success", RESTORED_DURATION_MS)
        self._undo.clear()

        displaced = self.current
        if displaced is not None and displaced.asset_id != asset.asset_id:
            self._resume.appendleft(displaced)
        self.current = asset
        self.status = "ready"
        self.error = None
        if self.next is not None and self.next.asset_id == asset.asset_id:
            self.next = None
        self._emit()
        self._start_preload()

    # ------------------------------------------------------------------
    # Resets
    # ------------------------------------------------------------------

    def on_settings_changed(self) -> None:
        """Rebuild the look-ahead for the new order or filter; keep ``current``."""
        self._reset_flow(clear_undo=False)
        self._emit()
        self._start_preload()

    def on_identity_changed(self) -> None:
        """Server or user changed: nothing from the previous session carries over."""
        self._reset_flow(clear_undo=True)
        self._emit()
        self._start_preload()

    def _reset_flow(self, *, clear_undo: bool) -> None:
        self._generation += 1
        self._pager.reset()
        self.next = None
        self._resume.clear()
        self._preload_task = None
        if clear_undo:
            self._undo.clear()
        logger.debug("Review flow reset (generation %d)", self._generation)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _notify(self, message: str, severity: Severity, duration_ms: int) -> None:
        self._notifier.notify(message, severity, duration_ms)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener()


__all__ = [
    "ERROR_DURATION_MS",
    "Notifier",
    "QueueStatus",
    "ReviewQueueController",
    "TrackTask",
]
