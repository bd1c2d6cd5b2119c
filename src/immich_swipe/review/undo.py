"""Single-slot undo ledger for the most recent delete."""

from __future__ import annotations

from immich_swipe.models import Asset


class UndoLedger:
    """Remembers only the last deleted asset; each new delete overwrites it."""

    __slots__ = ("_last_deleted",)

    def __init__(self) -> None:
        self._last_deleted: Asset | None = None

    @property
    def last_deleted(self) -> Asset | None:
        return self._last_deleted

    def record(self, asset: Asset) -> None:
        self._last_deleted = asset

    def clear(self) -> None:
        self._last_deleted = None

    def can_undo(self) -> bool:
        return self._last_deleted is not None


__all__ = ["UndoLedger"]
