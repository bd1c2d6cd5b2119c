"""Widget chrome: review counters and footer key hints."""

from __future__ import annotations

from textual.widgets import Static

from immich_swipe.models import REVIEW_ORDER_LABELS
from immich_swipe.widgets.card import escape_rich_text


def render_stats_line(
    *,
    kept: int,
    deleted: int,
    review_order: str,
    skip_videos: bool,
    next_ready: bool,
    user_label: str = "",
) -> str:
    """Build the one-line status summary above the card."""
    parts = [
        f"[green]✓ {kept}[/] kept",
        f"[red]✗ {deleted}[/] deleted",
        f"Order: {REVIEW_ORDER_LABELS.get(review_order, review_order)}",
    ]
    if skip_videos:
        parts.append("Skipping videos")
    if next_ready:
        parts.append("[dim]next ready[/]")
    if user_label:
        parts.append(f"[dim]{escape_rich_text(user_label)}[/]")
    return "  ·  ".join(parts)


class StatsBar(Static):
    """Kept/deleted counters and active review settings."""

    DEFAULT_CSS = """
    StatsBar {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """


class ContextFooter(Static):
    """Footer showing the review keybindings; each hint is clickable."""

    DEFAULT_CSS = """
    ContextFooter {
        dock: bottom;
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def render_bindings(self, bindings: list[tuple[str, str, str]]) -> None:
        """Update the footer with (key, label, action) hints."""
        parts = []
        for key, label, action in bindings:
            safe_key = escape_rich_text(key)
            if action:
                parts.append(f"[@click=app.{action}][bold]{safe_key}[/bold] {label}[/]")
            else:
                parts.append(f"[bold]{safe_key}[/bold] {label}")
        self.update("  ".join(parts))


__all__ = [
    "ContextFooter",
    "StatsBar",
    "render_stats_line",
]
