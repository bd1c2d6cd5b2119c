"""Asset card widget with drag-to-swipe detection."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from textual import events
from textual.message import Message
from textual.widgets import Static

from immich_swipe.models import MEDIA_KIND_VIDEO, Asset

SWIPE_THRESHOLD_CELLS = 8  # horizontal drag distance that commits a swipe

_KIND_LABELS = {
    "PHOTO": "Photo",
    "VIDEO": "Video",
    "OTHER": "Other",
}


def escape_rich_text(text: str) -> str:
    """Escape text for safe Rich markup rendering."""
    return escape_markup(text) if text else ""


def render_asset_card(
    asset: Asset | None,
    *,
    status: str,
    message: str | None = None,
    preview_url: str = "",
) -> str:
    """Build the markup shown inside the card for the current queue state."""
    if status == "loading":
        return "[italic]Loading…[/]"
    if asset is None:
        if message:
            return escape_rich_text(message)
        return "[italic]Nothing to review[/]"

    filename = escape_rich_text(asset.filename) or escape_rich_text(asset.asset_id)
    lines = [f"[bold]{filename}[/]"]
    details = [_KIND_LABELS.get(asset.kind, asset.kind)]
    if asset.taken_at:
        details.append(escape_rich_text(asset.taken_at[:19].replace("T", " ")))
    lines.append(" · ".join(details))
    if asset.kind == MEDIA_KIND_VIDEO:
        lines.append("[italic]Video preview not available in the terminal[/]")
    if preview_url:
        lines.append("")
        lines.append(f"[dim]{escape_rich_text(preview_url)}[/]")
    return "\n".join(lines)


class AssetCard(Static, can_focus=True):
    """Shows the asset under review; dragging it left or right commits a swipe."""

    class Swiped(Message):
        """Posted when a drag passes the swipe threshold."""

        def __init__(self, direction: str) -> None:
            super().__init__()
            self.direction = direction  # "left" or "right"

    DEFAULT_CSS = """
    AssetCard {
        height: 1fr;
        border: round $accent;
        padding: 1 2;
        content-align: center middle;
        text-align: center;
    }

    AssetCard.swipe-keep {
        border: round $success;
    }

    AssetCard.swipe-delete {
        border: round $error;
    }
    """

    def __init__(self, *, threshold: int = SWIPE_THRESHOLD_CELLS, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._threshold = threshold
        self._drag_origin: int | None = None

    @property
    def dragging(self) -> bool:
        return self._drag_origin is not None

    def show(
        self,
        asset: Asset | None,
        *,
        status: str,
        message: str | None = None,
        preview_url: str = "",
    ) -> None:
        self.update(
            render_asset_card(asset, status=status, message=message, preview_url=preview_url)
        )

    def swipe_direction(self, offset: int) -> str | None:
        """Map a horizontal drag offset to a swipe direction, if it is far enough."""
        if offset >= self._threshold:
            return "right"
        if offset <= -self._threshold:
            return "left"
        return None

    def on_mouse_down(self, event: events.MouseDown) -> None:
        self._drag_origin = event.screen_x
        self.capture_mouse()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self._drag_origin is None:
            return
        direction = self.swipe_direction(event.screen_x - self._drag_origin)
        self.set_class(direction == "right", "swipe-keep")
        self.set_class(direction == "left", "swipe-delete")

    def on_mouse_up(self, event: events.MouseUp) -> None:
        origin = self._drag_origin
        self._drag_origin = None
        self.release_mouse()
        self.remove_class("swipe-keep", "swipe-delete")
        if origin is None:
            return
        direction = self.swipe_direction(event.screen_x - origin)
        if direction is not None:
            self.post_message(self.Swiped(direction))


__all__ = [
    "SWIPE_THRESHOLD_CELLS",
    "AssetCard",
    "escape_rich_text",
    "render_asset_card",
]
