"""Internal UI constants for the Immich swipe app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

DARK_THEME = "textual-dark"
LIGHT_THEME = "textual-light"

APP_CSS = """
Screen {
    layout: vertical;
}

#review-pane {
    height: 1fr;
    padding: 0 1;
}

#status-line {
    height: 1;
    padding: 0 1;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit", show=False),
    # Review decisions
    Binding("right", "keep", "Keep", show=False),
    Binding("k", "keep", "Keep", show=False),
    Binding("left", "delete", "Delete", show=False),
    Binding("d", "delete", "Delete", show=False),
    Binding("u", "undo", "Undo", show=False),
    Binding("ctrl+z", "undo", "Undo", show=False),
    Binding("a", "keep_to_album", "Keep to album", show=False),
    # Review settings
    Binding("v", "toggle_skip_videos", "Skip Videos", show=False),
    Binding("o", "cycle_order", "Order", show=False),
    Binding("t", "toggle_theme", "Theme", show=False),
    Binding("r", "reload", "Reload", show=False),
]

# (key, label, action) hints rendered in the footer
FOOTER_HINTS: list[tuple[str, str, str]] = [
    ("←/d", "delete", "delete"),
    ("→/k", "keep", "keep"),
    ("u", "undo", "undo"),
    ("a", "album", "keep_to_album"),
    ("v", "videos", "toggle_skip_videos"),
    ("o", "order", "cycle_order"),
    ("r", "reload", "reload"),
    ("q", "quit", "quit"),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
    "DARK_THEME",
    "FOOTER_HINTS",
    "LIGHT_THEME",
]
