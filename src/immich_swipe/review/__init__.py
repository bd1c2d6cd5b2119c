"""Review queue: ordering, chronological paging, undo and the controller."""

from immich_swipe.review.controller import ReviewQueueController
from immich_swipe.review.pager import ChronologicalPager
from immich_swipe.review.strategy import (
    ALL_VIDEOS_MESSAGE,
    AllVideosError,
    OrderingStrategy,
    fetch_random_asset,
)
from immich_swipe.review.undo import UndoLedger

__all__ = [
    "ALL_VIDEOS_MESSAGE",
    "AllVideosError",
    "ChronologicalPager",
    "OrderingStrategy",
    "ReviewQueueController",
    "UndoLedger",
    "fetch_random_asset",
]
