"""Property-based tests using Hypothesis.

Verifies invariants of the chronological pager, search page parsing and
server URL normalisation. Each test runs 50 examples in CI, 200 in dev.

Run:
    pytest tests/test_properties.py -v
    pytest tests/test_properties.py -v --hypothesis-seed=0  # reproducible
"""

from __future__ import annotations

import asyncio

import hypothesis.strategies as st
from hypothesis import given, settings

from immich_swipe.config import normalize_server_url
from immich_swipe.models import (
    MEDIA_KIND_PHOTO,
    MEDIA_KIND_VIDEO,
    REVIEW_ORDER_CHRONO_ASC,
    Asset,
    SearchPage,
)
from immich_swipe.parsing import parse_search_page
from immich_swipe.review.pager import ChronologicalPager

# ── Hypothesis profiles ─────────────────────────────────────────────
settings.register_profile("ci", max_examples=50, deadline=None)
settings.register_profile("dev", max_examples=200, deadline=None)
settings.load_profile("ci")


class _ListingService:
    """Serves a fixed ascending listing, sliced by skip/take."""

    def __init__(self, listing: list[Asset]) -> None:
        self.listing = listing
        self.calls = 0

    async def search_chronological(self, *, take, skip, page, order) -> SearchPage:
        self.calls += 1
        items = self.listing[skip : skip + take]
        return SearchPage(items=items, has_more=skip + len(items) < len(self.listing))


def _listing(video_flags: list[bool]) -> list[Asset]:
    return [
        Asset(f"a{i}", MEDIA_KIND_VIDEO if video else MEDIA_KIND_PHOTO)
        for i, video in enumerate(video_flags)
    ]


async def _drain(pager: ChronologicalPager) -> list[str]:
    seen: list[str] = []
    while True:
        asset = await pager.next_from_queue()
        if asset is not None:
            seen.append(asset.asset_id)
        elif not pager.cursor.has_more:
            return seen


@given(
    video_flags=st.lists(st.booleans(), max_size=60),
    page_size=st.integers(min_value=1, max_value=12),
    skip_videos=st.booleans(),
)
def test_pager_yields_each_matching_asset_once_in_order(video_flags, page_size, skip_videos):
    listing = _listing(video_flags)
    service = _ListingService(listing)
    pager = ChronologicalPager(
        service,  # type: ignore[arg-type]
        get_order=lambda: REVIEW_ORDER_CHRONO_ASC,
        get_skip_videos=lambda: skip_videos,
        page_size=page_size,
    )

    seen = asyncio.run(_drain(pager))

    expected = [a.asset_id for a in listing if not (skip_videos and a.is_video)]
    assert seen == expected
    assert pager.cursor.skip == len(listing)


@given(
    video_flags=st.lists(st.booleans(), min_size=1, max_size=30),
    page_size=st.integers(min_value=1, max_value=8),
)
def test_pager_queue_never_holds_filtered_assets(video_flags, page_size):
    service = _ListingService(_listing(video_flags))
    pager = ChronologicalPager(
        service,  # type: ignore[arg-type]
        get_order=lambda: REVIEW_ORDER_CHRONO_ASC,
        get_skip_videos=lambda: True,
        page_size=page_size,
    )

    async def _check() -> None:
        while True:
            asset = await pager.next_from_queue()
            assert all(not a.is_video for a in pager.pending)
            if asset is None and not pager.cursor.has_more:
                return

    asyncio.run(_check())


@given(count=st.integers(min_value=0, max_value=20), page_size=st.integers(1, 20))
def test_bare_list_has_more_iff_full_page(count, page_size):
    data = [{"id": f"a{i}", "type": "IMAGE"} for i in range(count)]
    page = parse_search_page(data, page_size)
    assert page.has_more == (count == page_size)
    assert page.raw_count == count


@given(
    total=st.integers(min_value=0, max_value=500),
    count=st.integers(min_value=0, max_value=500),
)
def test_total_count_decides_has_more(total, count):
    data = {"assets": {"items": [], "total": total, "count": count}}
    assert parse_search_page(data, 50).has_more == (total > count)


@given(
    host=st.from_regex(r"https?://[a-z]{1,12}\.[a-z]{2,5}(:[0-9]{2,5})?", fullmatch=True),
    suffix=st.sampled_from(["", "/", "//", "/api", "/api/"]),
)
def test_normalize_server_url_is_idempotent(host, suffix):
    once = normalize_server_url(host + suffix)
    assert once == host
    assert normalize_server_url(once) == once
