"""Immich swipe TUI: review a remote library one asset at a time.

Key bindings:
    right/k  - Keep
    left/d   - Delete (moves to the Immich trash)
    u/ctrl+z - Undo the last delete
    a        - Keep and add to the last used album
    v        - Toggle Skip Videos
    o        - Cycle review order (random, oldest first, newest first)
    t        - Toggle dark/light theme
    r        - Reload the queue
    q        - Quit

Dragging the card left or right commits delete or keep.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from rich.markup import escape as escape_markup
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.widgets import Header

from immich_swipe.action_messages import (
    build_actionable_error,
    build_failure_detail,
    build_review_order_notification,
    build_skip_videos_notification,
)
from immich_swipe.config import ReviewSettings, save_config
from immich_swipe.models import Album, ImmichUser, Severity, UserConfig
from immich_swipe.review.controller import ERROR_DURATION_MS, ReviewQueueController
from immich_swipe.services.immich_api_service import (
    ImmichApiError,
    ImmichConfigError,
    ImmichConnection,
)
from immich_swipe.services.interfaces import AppServices, build_default_app_services
from immich_swipe.storage import (
    KeyValueStore,
    ReviewedStore,
    ReviewStats,
    SqliteKeyValueStore,
    get_state_db_path,
)
from immich_swipe.ui_constants import (
    APP_BINDINGS,
    APP_CSS,
    DARK_THEME,
    FOOTER_HINTS,
    LIGHT_THEME,
)
from immich_swipe.widgets import AssetCard, ContextFooter, StatsBar, render_stats_line

logger = logging.getLogger(__name__)

# Textual only knows information/warning/error toasts.
_TOAST_SEVERITY: dict[str, str] = {
    "success": "information",
    "info": "information",
    "error": "error",
}


class ToastNotifier:
    """Routes review notifications to Textual toasts."""

    def __init__(self, app: App) -> None:
        self._app = app

    def notify(self, message: str, severity: Severity, duration_ms: int) -> None:
        self._app.notify(
            escape_markup(message),
            severity=_TOAST_SEVERITY.get(severity, "information"),
            timeout=duration_ms / 1000,
        )


class ImmichSwipeApp(App):
    """Single-card review screen backed by the review queue controller."""

    TITLE = "Immich Swipe"
    CSS = APP_CSS
    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        *,
        config: UserConfig,
        connection: ImmichConnection,
        services: AppServices | None = None,
        state_store: KeyValueStore | None = None,
        save_config_fn: Callable[[UserConfig], bool] = save_config,
    ) -> None:
        super().__init__()
        self._config = config
        self._connection = connection
        self._services = services
        self._save_config = save_config_fn
        self._settings = ReviewSettings(config, save=save_config_fn)

        store = state_store if state_store is not None else SqliteKeyValueStore(get_state_db_path())
        self._stats = ReviewStats(store, server=connection.base_url)
        self._reviewed = ReviewedStore(store, server=connection.base_url)

        self._user: ImmichUser | None = None
        self._controller: ReviewQueueController | None = None
        self._action_in_flight = False

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[None]] = set()

        # Shared HTTP client for connection pooling (created in on_mount)
        self._http_client: httpx.AsyncClient | None = None

    @property
    def controller(self) -> ReviewQueueController | None:
        return self._controller

    @property
    def stats(self) -> ReviewStats:
        return self._stats

    @property
    def settings(self) -> ReviewSettings:
        return self._settings

    @property
    def action_in_flight(self) -> bool:
        return self._action_in_flight

    def _get_services(self) -> AppServices:
        """Return app services, building the httpx-backed defaults on first use."""
        if self._services is None:
            if self._http_client is None:
                self._http_client = httpx.AsyncClient()
            self._services = build_default_app_services(
                client=self._http_client, connection=self._connection
            )
        return self._services

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="review-pane"):
            yield StatsBar("", id="status-line")
            yield AssetCard(id="asset-card")
        yield ContextFooter()

    def on_mount(self) -> None:
        """Build the controller and start the review session."""
        self.theme = DARK_THEME if self._config.dark_mode else LIGHT_THEME

        if self._config.config_defaulted:
            self.notify(
                "Config file was corrupt and has been backed up. Using defaults.",
                severity="warning",
                timeout=8,
            )

        services = self._get_services()
        self._controller = ReviewQueueController(
            services.assets,
            self._settings,
            self._stats,
            self._reviewed,
            notifier=ToastNotifier(self),
            track_task=self._track_task,
        )
        self._controller.add_listener(self._refresh_view)
        self._render_footer()
        self._refresh_view()
        self._run_action(self._start_session)

        try:
            self.query_one(AssetCard).focus()
        except NoMatches:
            pass

    async def on_unmount(self) -> None:
        """Cancel background work and close the shared HTTP client."""
        controller = self._controller
        self._controller = None
        if controller is not None:
            controller.close()

        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

        client = self._http_client
        self._http_client = None
        if client is not None:
            try:
                await client.aclose()
            except Exception as e:
                logger.debug(
                    "Failed to close shared HTTP client during shutdown: %s", e, exc_info=True
                )

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    def _run_action(self, action: Callable[[], Awaitable[None]]) -> bool:
        """Run one foreground action at a time; returns False if one is already running."""
        if self._action_in_flight or self._controller is None:
            return False
        self._action_in_flight = True

        async def _runner() -> None:
            try:
                await action()
            finally:
                self._action_in_flight = False
                self._refresh_view()

        self._track_task(_runner())
        return True

    async def _start_session(self) -> None:
        """Resolve the user behind the API key, then load the first asset."""
        services = self._get_services()
        try:
            user = await services.assets.get_current_user()
        except (ImmichApiError, ImmichConfigError) as e:
            logger.warning("Could not resolve Immich user: %s", e)
            self.notify(
                escape_markup(
                    build_actionable_error(
                        "verify the Immich API key",
                        why=str(e),
                        next_step="check the key with immich-swipe --api-key KEY",
                    )
                ),
                severity="error",
                timeout=ERROR_DURATION_MS / 1000,
            )
            user = None
        self._set_identity(user)
        controller = self._controller
        if controller is not None:
            await controller.load_initial()

    def _set_identity(self, user: ImmichUser | None) -> None:
        previous = self._user
        self._user = user
        user_name = user.name if user is not None else ""
        self._stats.switch_identity(self._connection.base_url, user_name)
        self._reviewed.switch_identity(self._connection.base_url, user_name)
        if user is not None:
            self.sub_title = f"{user.name} @ {self._connection.base_url}"
        if previous is not None and previous != user and self._controller is not None:
            self._controller.on_identity_changed()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _refresh_view(self) -> None:
        controller = self._controller
        if controller is None:
            return
        try:
            card = self.query_one(AssetCard)
            stats_bar = self.query_one(StatsBar)
        except NoMatches:
            return
        preview_url = ""
        current = controller.current
        assets = self._services.assets if self._services is not None else None
        thumbnail_url = getattr(assets, "thumbnail_url", None)
        if current is not None and callable(thumbnail_url):
            preview_url = thumbnail_url(current.asset_id)
        card.show(
            current,
            status=controller.status,
            message=controller.error,
            preview_url=preview_url,
        )
        stats_bar.update(
            render_stats_line(
                kept=self._stats.kept_count,
                deleted=self._stats.deleted_count,
                review_order=self._settings.review_order,
                skip_videos=self._settings.skip_videos,
                next_ready=controller.next is not None,
                user_label=self._user.name if self._user is not None else "",
            )
        )

    def _render_footer(self) -> None:
        try:
            self.query_one(ContextFooter).render_bindings(FOOTER_HINTS)
        except NoMatches:
            pass

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_keep(self) -> None:
        if self._controller is not None:
            self._run_action(self._controller.keep)

    def action_delete(self) -> None:
        if self._controller is not None:
            self._run_action(self._controller.delete)

    def action_undo(self) -> None:
        if self._controller is not None:
            self._run_action(self._controller.undo)

    def action_keep_to_album(self) -> None:
        self._run_action(self._keep_to_album)

    async def _keep_to_album(self) -> None:
        controller = self._controller
        if controller is None or controller.current is None:
            return
        try:
            albums = await self._get_services().assets.list_albums()
        except (ImmichApiError, ImmichConfigError) as e:
            logger.warning("Could not list albums: %s", e)
            self.notify(
                escape_markup(build_failure_detail("Failed to load albums", str(e))),
                severity="error",
                timeout=ERROR_DURATION_MS / 1000,
            )
            return
        album = _pick_album(albums, self._settings.last_used_album_id)
        if album is None:
            self.notify("No albums found. Create one in Immich first.", severity="warning")
            return
        await controller.keep_to_album(album)

    def action_toggle_skip_videos(self) -> None:
        if self._action_in_flight:
            return
        enabled = self._settings.toggle_skip_videos()
        self.notify(build_skip_videos_notification(enabled), timeout=1.5)
        self._reload_if_idle()

    def action_cycle_order(self) -> None:
        if self._action_in_flight:
            return
        order = self._settings.cycle_review_order()
        self.notify(build_review_order_notification(order), timeout=1.5)
        self._reload_if_idle()

    def _reload_if_idle(self) -> None:
        """Nothing on screen: a settings change should try loading again."""
        controller = self._controller
        if controller is not None and controller.current is None:
            self._run_action(controller.load_initial)
        else:
            self._refresh_view()

    def action_reload(self) -> None:
        if self._controller is not None:
            self._run_action(self._controller.load_initial)

    def action_toggle_theme(self) -> None:
        self._config.dark_mode = not self._config.dark_mode
        self.theme = DARK_THEME if self._config.dark_mode else LIGHT_THEME
        if not self._save_config(self._config):
            logger.warning("Theme changed but config could not be saved")

    @on(AssetCard.Swiped)
    def _on_card_swiped(self, event: AssetCard.Swiped) -> None:
        if event.direction == "right":
            self.action_keep()
        else:
            self.action_delete()


def _pick_album(albums: list[Album], last_used_album_id: str) -> Album | None:
    """Prefer the last used album, else the first one listed."""
    for album in albums:
        if album.album_id == last_used_album_id:
            return album
    return albums[0] if albums else None


__all__ = [
    "ImmichSwipeApp",
    "ToastNotifier",
]
