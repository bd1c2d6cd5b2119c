"""UI-facing copy builders for review notifications and empty/error states."""

from __future__ import annotations

from immich_swipe.models import REVIEW_ORDER_LABELS

KEEP_NOTIFICATION = "Photo kept ✓"
DELETE_NOTIFICATION = "Photo deleted"
DELETE_FAILED_NOTIFICATION = "Failed to delete photo"
RESTORE_FAILED_NOTIFICATION = "Failed to restore photo"
ALBUM_FAILED_NOTIFICATION = "Failed to add to album"
NOTHING_TO_UNDO_NOTIFICATION = "Nothing to undo"


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_empty_queue_message(*, chronological: bool, skip_videos: bool) -> str:
    """Explain why nothing is left to review; the cause differs per mode."""
    if chronological:
        if skip_videos:
            return "No photos found in chronological mode after skipping videos."
        return "No photos found in chronological mode."
    if skip_videos:
        return "No photos were found after skipping videos. Try turning off Skip Videos mode."
    return "No photos found in your library"


def build_album_notification(album_name: str) -> str:
    return f"Added to {album_name}"


def build_restored_notification(filename: str) -> str:
    return f"{filename or 'Photo'} was restored"


def build_failure_detail(headline: str, reason: str | None) -> str:
    """Append the remote failure reason to a short headline, when known."""
    if not reason:
        return headline
    return f"{headline}: {reason}"


def build_review_order_notification(order: str) -> str:
    return f"Review order: {REVIEW_ORDER_LABELS.get(order, order)}"


def build_skip_videos_notification(enabled: bool) -> str:
    return "Skip Videos on" if enabled else "Skip Videos off"


__all__ = [
    "ALBUM_FAILED_NOTIFICATION",
    "DELETE_FAILED_NOTIFICATION",
    "DELETE_NOTIFICATION",
    "KEEP_NOTIFICATION",
    "NOTHING_TO_UNDO_NOTIFICATION",
    "RESTORE_FAILED_NOTIFICATION",
    "build_actionable_error",
    "build_album_notification",
    "build_empty_queue_message",
    "build_failure_detail",
    "build_next_step_hint",
    "build_restored_notification",
    "build_review_order_notification",
    "build_skip_videos_notification",
]
