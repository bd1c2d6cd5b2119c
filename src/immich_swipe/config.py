"""Configuration persistence and the review settings source."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from immich_swipe.models import (
    CONFIG_APP_NAME,
    REVIEW_ORDER_RANDOM,
    REVIEW_ORDERS,
    UserConfig,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_config() guarantees valid output for any input:
#
#   Field              Rule                         Handler
#   ─────────────────  ───────────────────────────  ──────────────────
#   server_url         normalized, no /api suffix   normalize_server_url
#   review_order       in REVIEW_ORDERS             _parse_review_order
#   scalar fields      type-checked via _safe_get   _dict_to_config
#
CONFIG_FILENAME = "config.json"
CORRUPT_SUFFIX = ".corrupt"

_TRAILING_SLASHES = re.compile(r"/+$")
_API_SUFFIX = re.compile(r"/api/?$")


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/immich-swipe/config.json
    - macOS: ~/Library/Application Support/immich-swipe/config.json
    - Windows: %APPDATA%/immich-swipe/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def normalize_server_url(url: str) -> str:
    """Strip whitespace, trailing slashes and a trailing ``/api`` segment.

    Requests always go to ``<server>/api/...``, so users may paste either the
    web UI address or the API address.
    """
    cleaned = _TRAILING_SLASHES.sub("", url.strip())
    return _TRAILING_SLASHES.sub("", _API_SUFFIX.sub("", cleaned))


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "server_url": config.server_url,
        "api_key": config.api_key,
        "review_order": config.review_order,
        "skip_videos": config.skip_videos,
        "dark_mode": config.dark_mode,
        "last_used_album_id": config.last_used_album_id,
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


def _parse_review_order(data: dict[str, Any]) -> str:
    order = _safe_get(data, "review_order", REVIEW_ORDER_RANDOM, str)
    if order not in REVIEW_ORDERS:
        logger.warning("Invalid review_order %r, defaulting to %r", order, REVIEW_ORDER_RANDOM)
        return REVIEW_ORDER_RANDOM
    return order


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    return UserConfig(
        server_url=normalize_server_url(_safe_get(data, "server_url", "", str)),
        api_key=_safe_get(data, "api_key", "", str),
        review_order=_parse_review_order(data),
        skip_videos=_safe_get(data, "skip_videos", False, bool),
        dark_mode=_safe_get(data, "dark_mode", True, bool),
        last_used_album_id=_safe_get(data, "last_used_album_id", "", str),
        version=_safe_get(data, "version", 1, int),
    )


def _backup_corrupt_config(config_path: Path) -> None:
    """Move an unreadable config aside so the next save starts clean."""
    backup = config_path.with_name(config_path.name + CORRUPT_SUFFIX)
    try:
        os.replace(config_path, backup)
        logger.warning("Backed up corrupt config to %s", backup)
    except OSError as e:
        logger.warning("Could not back up corrupt config: %s", e)


def load_config() -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted. A corrupt
    file is backed up next to the original and the returned config is flagged
    with ``config_defaulted`` so the UI can warn once.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        _backup_corrupt_config(config_path)
        return UserConfig(config_defaulted=True)
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()

    if not isinstance(data, dict):
        logger.warning("Config file root is %s, not an object", type(data).__name__)
        _backup_corrupt_config(config_path)
        return UserConfig(config_defaulted=True)
    return _dict_to_config(data)


def save_config(config: UserConfig) -> bool:
    """Save configuration to disk atomically.

    Uses write-to-tempfile + os.replace() to prevent partial writes
    on crash/interrupt from corrupting the config file.

    Creates the config directory if it doesn't exist.
    Returns True on success, False on failure.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = _config_to_dict(config)
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


def set_credentials(config: UserConfig, server_url: str, api_key: str) -> None:
    """Store normalized connection details on the config."""
    config.server_url = normalize_server_url(server_url)
    config.api_key = api_key.strip()


def clear_credentials(config: UserConfig) -> None:
    """Forget connection details (logout)."""
    config.server_url = ""
    config.api_key = ""


# ============================================================================
# Review Settings Source
# ============================================================================

SettingsListener = Callable[[], None]


class ReviewSettings:
    """Review order and skip-videos flag, with change notification.

    Every mutation is saved immediately through ``save`` and then announced to
    subscribers. Setting a value to what it already is does nothing.
    """

    def __init__(
        self,
        config: UserConfig,
        save: Callable[[UserConfig], bool] = save_config,
    ) -> None:
        self._config = config
        self._save = save
        self._listeners: list[SettingsListener] = []

    @property
    def review_order(self) -> str:
        return self._config.review_order

    @property
    def skip_videos(self) -> bool:
        return self._config.skip_videos

    @property
    def is_chronological(self) -> bool:
        return self._config.review_order != REVIEW_ORDER_RANDOM

    @property
    def last_used_album_id(self) -> str:
        return self._config.last_used_album_id

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def set_review_order(self, order: str) -> None:
        if order not in REVIEW_ORDERS:
            raise ValueError(f"Unknown review order: {order!r}")
        if order == self._config.review_order:
            return
        self._config.review_order = order
        self._persist_and_announce()

    def cycle_review_order(self) -> str:
        """Advance to the next review order and return it."""
        index = REVIEW_ORDERS.index(self._config.review_order)
        order = REVIEW_ORDERS[(index + 1) % len(REVIEW_ORDERS)]
        self.set_review_order(order)
        return order

    def set_skip_videos(self, enabled: bool) -> None:
        if enabled == self._config.skip_videos:
            return
        self._config.skip_videos = enabled
        self._persist_and_announce()

    def toggle_skip_videos(self) -> bool:
        self.set_skip_videos(not self._config.skip_videos)
        return self._config.skip_videos

    def set_last_used_album(self, album_id: str) -> None:
        """Remember the album used for keep-to-album; not a queue-affecting change."""
        if album_id == self._config.last_used_album_id:
            return
        self._config.last_used_album_id = album_id
        self._save(self._config)

    def _persist_and_announce(self) -> None:
        if not self._save(self._config):
            logger.warning("Review settings changed but could not be saved")
        for listener in list(self._listeners):
            listener()


__all__ = [
    "CONFIG_APP_NAME",
    "CONFIG_FILENAME",
    "ReviewSettings",
    "clear_credentials",
    "get_config_path",
    "load_config",
    "normalize_server_url",
    "save_config",
    "set_credentials",
]
