"""Internal service layer for the remote Immich library."""

from immich_swipe.services.immich_api_service import (
    ImmichApiError,
    ImmichConfigError,
    ImmichConnection,
    add_assets_to_album,
    delete_assets,
    fetch_random,
    get_current_user,
    list_albums,
    restore_assets,
    search_chronological,
)

__all__ = [
    "ImmichApiError",
    "ImmichConfigError",
    "ImmichConnection",
    "add_assets_to_album",
    "delete_assets",
    "fetch_random",
    "get_current_user",
    "list_albums",
    "restore_assets",
    "search_chronological",
]
