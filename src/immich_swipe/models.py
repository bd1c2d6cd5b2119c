"""Data models and constants for the Immich swipe reviewer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, NamedTuple

# Application identity, single source of truth for platformdirs config paths
CONFIG_APP_NAME = "immich-swipe"

# Review order options (cycled with the "o" key)
REVIEW_ORDER_RANDOM = "random"
REVIEW_ORDER_CHRONO_ASC = "chronological-asc"
REVIEW_ORDER_CHRONO_DESC = "chronological-desc"
REVIEW_ORDERS = (REVIEW_ORDER_RANDOM, REVIEW_ORDER_CHRONO_ASC, REVIEW_ORDER_CHRONO_DESC)
REVIEW_ORDER_LABELS: dict[str, str] = {
    REVIEW_ORDER_RANDOM: "Random",
    REVIEW_ORDER_CHRONO_ASC: "Oldest first",
    REVIEW_ORDER_CHRONO_DESC: "Newest first",
}

# Media kinds
MEDIA_KIND_PHOTO = "PHOTO"
MEDIA_KIND_VIDEO = "VIDEO"
MEDIA_KIND_OTHER = "OTHER"

# Sampling / paging policy
SKIP_VIDEOS_BATCH_SIZE = 10
SKIP_VIDEOS_MAX_ATTEMPTS = 5
CHRONO_PAGE_SIZE = 50
CHRONO_MAX_FETCH_ATTEMPTS = 5
PRELOAD_MAX_DRAWS = 3

# Storage key prefixes
STATS_STORAGE_PREFIX = "immich-swipe-stats"
REVIEWED_STORAGE_PREFIX = "immich-swipe-reviewed"
REVIEWED_STORAGE_VERSION = 1
UNKNOWN_SERVER = "unknown-server"
DEFAULT_USER = "default-user"

Severity = Literal["success", "error", "info"]
ReviewDecision = Literal["keep", "delete"]


@dataclass(frozen=True, slots=True)
class Asset:
    """A single media item from the remote library."""

    asset_id: str
    kind: str = MEDIA_KIND_PHOTO  # PHOTO | VIDEO | OTHER
    filename: str = ""
    taken_at: str = ""  # ISO 8601, empty if unknown

    @property
    def is_video(self) -> bool:
        return self.kind == MEDIA_KIND_VIDEO


@dataclass(frozen=True, slots=True)
class Album:
    """A remote album that kept assets can be routed into."""

    album_id: str
    name: str
    asset_count: int = 0


@dataclass(frozen=True, slots=True)
class ImmichUser:
    """The user that owns the configured API key."""

    user_id: str
    name: str
    email: str = ""


@dataclass(slots=True)
class SearchPage:
    """One chronological search batch, already interpreted."""

    items: list[Asset]
    has_more: bool
    next_page: int | None = None
    raw_count: int = -1  # entries in the response before parsing, -1 = len(items)

    def __post_init__(self) -> None:
        if self.raw_count < 0:
            self.raw_count = len(self.items)


@dataclass(slots=True)
class ChronologicalCursor:
    """Forward-only position in the chronologically sorted listing."""

    skip: int = 0
    page: int | None = 1
    has_more: bool = True


class StorageKey(NamedTuple):
    """Composite key for per-server, per-user persisted state."""

    prefix: str
    server: str
    user: str

    @classmethod
    def for_identity(cls, prefix: str, server: str, user: str) -> StorageKey:
        return cls(prefix, server or UNKNOWN_SERVER, user or DEFAULT_USER)

    def legacy_string(self) -> str:
        """Flat ``prefix:server:user`` form used by the web client's localStorage.

        Parts are not escaped, so distinct keys can flatten to the same string.
        """
        return f"{self.prefix}:{self.server}:{self.user}"


@dataclass(slots=True)
class UserConfig:
    """Persisted user configuration: connection and review preferences."""

    server_url: str = ""
    api_key: str = ""
    review_order: str = REVIEW_ORDER_RANDOM
    skip_videos: bool = False
    dark_mode: bool = True
    last_used_album_id: str = ""
    version: int = 1
    config_defaulted: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        """Clamp review_order to a known option."""
        if self.review_order not in REVIEW_ORDERS:
            self.review_order = REVIEW_ORDER_RANDOM

    @property
    def is_logged_in(self) -> bool:
        return bool(self.server_url and self.api_key)


__all__ = [
    "CHRONO_MAX_FETCH_ATTEMPTS",
    "CHRONO_PAGE_SIZE",
    "CONFIG_APP_NAME",
    "DEFAULT_USER",
    "MEDIA_KIND_OTHER",
    "MEDIA_KIND_PHOTO",
    "MEDIA_KIND_VIDEO",
    "PRELOAD_MAX_DRAWS",
    "REVIEWED_STORAGE_PREFIX",
    "REVIEWED_STORAGE_VERSION",
    "REVIEW_ORDERS",
    "REVIEW_ORDER_CHRONO_ASC",
    "REVIEW_ORDER_CHRONO_DESC",
    "REVIEW_ORDER_LABELS",
    "REVIEW_ORDER_RANDOM",
    "SKIP_VIDEOS_BATCH_SIZE",
    "SKIP_VIDEOS_MAX_ATTEMPTS",
    "STATS_STORAGE_PREFIX",
    "UNKNOWN_SERVER",
    "Album",
    "Asset",
    "ChronologicalCursor",
    "ImmichUser",
    "ReviewDecision",
    "SearchPage",
    "Severity",
    "StorageKey",
    "UserConfig",
]
