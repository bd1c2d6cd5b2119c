"""Tests for the single-slot undo ledger."""

from __future__ import annotations

from immich_swipe.review.undo import UndoLedger


def test_starts_empty() -> None:
    ledger = UndoLedger()
    assert ledger.last_deleted is None
    assert not ledger.can_undo()


def test_last_write_wins(make_asset) -> None:
    ledger = UndoLedger()
    ledger.record(make_asset("a1"))
    ledger.record(make_asset("a2"))
    assert ledger.last_deleted.asset_id == "a2"
    assert ledger.can_undo()


def test_clear(make_asset) -> None:
    ledger = UndoLedger()
    ledger.record(make_asset("a1"))
    ledger.clear()
    assert not ledger.can_undo()
