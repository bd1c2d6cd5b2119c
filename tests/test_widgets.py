"""Tests for review screen widgets and render helpers."""

from __future__ import annotations

from immich_swipe.models import REVIEW_ORDER_CHRONO_ASC, Asset
from immich_swipe.widgets import AssetCard, render_asset_card, render_stats_line


def test_card_shows_escaped_filename_and_date() -> None:
    asset = Asset("a1", "PHOTO", "[weird].jpg", "2024-01-15T10:30:00.000Z")
    text = render_asset_card(asset, status="ready")
    assert r"\[weird].jpg" in text
    assert "2024-01-15 10:30:00" in text


def test_card_states() -> None:
    assert "Loading" in render_asset_card(None, status="loading")
    assert render_asset_card(None, status="empty", message="No photos found in your library") == (
        "No photos found in your library"
    )
    assert "Nothing to review" in render_asset_card(None, status="empty")


def test_card_marks_videos_and_preview_url() -> None:
    text = render_asset_card(
        Asset("v1", "VIDEO", "clip.mp4"), status="ready", preview_url="https://x/api/assets/v1"
    )
    assert "Video" in text
    assert "https://x/api/assets/v1" in text


def test_swipe_direction_threshold() -> None:
    card = AssetCard(threshold=8)
    assert card.swipe_direction(8) == "right"
    assert card.swipe_direction(-9) == "left"
    assert card.swipe_direction(7) is None
    assert card.swipe_direction(-7) is None


def test_stats_line() -> None:
    line = render_stats_line(
        kept=3,
        deleted=1,
        review_order=REVIEW_ORDER_CHRONO_ASC,
        skip_videos=True,
        next_ready=True,
        user_label="Alice",
    )
    assert "✓ 3" in line
    assert "✗ 1" in line
    assert "Oldest first" in line
    assert "Skipping videos" in line
    assert "next ready" in line
    assert "Alice" in line
