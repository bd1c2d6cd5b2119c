"""Widget classes for the review screen."""

from immich_swipe.widgets.card import SWIPE_THRESHOLD_CELLS, AssetCard, render_asset_card
from immich_swipe.widgets.chrome import ContextFooter, StatsBar, render_stats_line

__all__ = [
    "SWIPE_THRESHOLD_CELLS",
    "AssetCard",
    "ContextFooter",
    "StatsBar",
    "render_asset_card",
    "render_stats_line",
]
