"""Namespaced key-value persistence for per-identity review state.

State is keyed by ``StorageKey(prefix, server, user)``. The SQLite backend
keeps the three parts in separate columns, so a ``:`` inside a server URL or
user name cannot make two identities share a row.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Protocol, runtime_checkable

from platformdirs import user_config_dir

from immich_swipe.models import (
    CONFIG_APP_NAME,
    REVIEWED_STORAGE_PREFIX,
    REVIEWED_STORAGE_VERSION,
    STATS_STORAGE_PREFIX,
    ReviewDecision,
    StorageKey,
)

logger = logging.getLogger(__name__)

STATE_DB_FILENAME = "state.db"


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal string store addressed by composite keys."""

    def get(self, key: StorageKey) -> str | None: ...

    def set(self, key: StorageKey, value: str) -> None: ...

    def delete(self, key: StorageKey) -> None: ...

    def keys(self, prefix: str) -> list[StorageKey]: ...


class InMemoryKeyValueStore:
    """Dict-backed store for tests and ephemeral sessions."""

    def __init__(self) -> None:
        self._data: dict[StorageKey, str] = {}

    def get(self, key: StorageKey) -> str | None:
        return self._data.get(key)

    def set(self, key: StorageKey, value: str) -> None:
        self._data[key] = value

    def delete(self, key: StorageKey) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str) -> list[StorageKey]:
        return [key for key in self._data if key.prefix == prefix]


def get_state_db_path() -> Path:
    """Get the path to the SQLite state store."""
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / STATE_DB_FILENAME


class SqliteKeyValueStore:
    """SQLite-backed store; one row per (prefix, server, user).

    Errors are logged and degrade to "missing" on read and "not saved" on
    write, so persistence problems never interrupt a review session.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._initialized = False

    def _init_db(self) -> None:
        if self._initialized:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(str(self._db_path)) as conn:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS kv_state ("
                "  prefix TEXT NOT NULL,"
                "  server TEXT NOT NULL,"
                "  user TEXT NOT NULL,"
                "  value TEXT NOT NULL,"
                "  PRIMARY KEY (prefix, server, user)"
                ")"
            )
        self._initialized = True

    def get(self, key: StorageKey) -> str | None:
        if not self._db_path.exists():
            return None
        try:
            self._init_db()
            with sqlite3.connect(str(self._db_path)) as conn:
                row = conn.execute(
                    "SELECT value FROM kv_state WHERE prefix = ? AND server = ? AND user = ?",
                    tuple(key),
                ).fetchone()
        except sqlite3.Error:
            logger.warning("Failed to read %s from state store", key.prefix, exc_info=True)
            return None
        return row[0] if row else None

    def set(self, key: StorageKey, value: str) -> None:
        try:
            self._init_db()
            with sqlite3.connect(str(self._db_path)) as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_state (prefix, server, user, value) "
                    "VALUES (?, ?, ?, ?)",
                    (*key, value),
                )
        except (sqlite3.Error, OSError):
            logger.warning("Failed to save %s to state store", key.prefix, exc_info=True)

    def delete(self, key: StorageKey) -> None:
        if not self._db_path.exists():
            return
        try:
            self._init_db()
            with sqlite3.connect(str(self._db_path)) as conn:
                conn.execute(
                    "DELETE FROM kv_state WHERE prefix = ? AND server = ? AND user = ?",
                    tuple(key),
                )
        except sqlite3.Error:
            logger.warning("Failed to delete %s from state store", key.prefix, exc_info=True)

    def keys(self, prefix: str) -> list[StorageKey]:
        if not self._db_path.exists():
            return []
        try:
            self._init_db()
            with sqlite3.connect(str(self._db_path)) as conn:
                rows = conn.execute(
                    "SELECT prefix, server, user FROM kv_state WHERE prefix = ?", (prefix,)
                ).fetchall()
        except sqlite3.Error:
            logger.warning("Failed to list %s keys in state store", prefix, exc_info=True)
            return []
        return [StorageKey(*row) for row in rows]


def _coerce_count(value: object) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return 0


class ReviewStats:
    """Kept/deleted counters for one (server, user) identity.

    Loaded on construction and on identity change, saved after every change.
    Decrements floor at zero.
    """

    def __init__(self, store: KeyValueStore, server: str = "", user: str = "") -> None:
        self._store = store
        self.kept_count = 0
        self.deleted_count = 0
        self._key = StorageKey.for_identity(STATS_STORAGE_PREFIX, server, user)
        self.load()

    @property
    def key(self) -> StorageKey:
        return self._key

    def switch_identity(self, server: str, user: str) -> None:
        self._key = StorageKey.for_identity(STATS_STORAGE_PREFIX, server, user)
        self.load()

    def load(self) -> None:
        self.kept_count = 0
        self.deleted_count = 0
        raw = self._store.get(self._key)
        if not raw:
            return
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Failed to parse stats for %s:%s", self._key.server, self._key.user)
            return
        if not isinstance(parsed, dict):
            return
        self.kept_count = _coerce_count(parsed.get("keptCount"))
        self.deleted_count = _coerce_count(parsed.get("deletedCount"))

    def save(self) -> None:
        self._store.set(
            self._key,
            json.dumps({"keptCount": self.kept_count, "deletedCount": self.deleted_count}),
        )

    def increment_kept(self) -> None:
        self.kept_count += 1
        self.save()

    def decrement_kept(self) -> None:
        if self.kept_count > 0:
            self.kept_count -= 1
            self.save()

    def increment_deleted(self) -> None:
        self.deleted_count += 1
        self.save()

    def decrement_deleted(self) -> None:
        if self.deleted_count > 0:
            self.deleted_count -= 1
            self.save()

    def reset(self) -> None:
        self.kept_count = 0
        self.deleted_count = 0
        self.save()


class ReviewedStore:
    """Per-identity record of which asset ids were kept or deleted.

    Write-only as far as the review flow goes: draws are not filtered by it,
    so an asset reviewed earlier can come up again.
    """

    def __init__(self, store: KeyValueStore, server: str = "", user: str = "") -> None:
        self._store = store
        self._kept: set[str] = set()
        self._deleted: set[str] = set()
        self._key = StorageKey.for_identity(REVIEWED_STORAGE_PREFIX, server, user)
        self.load()

    def switch_identity(self, server: str, user: str) -> None:
        self._key = StorageKey.for_identity(REVIEWED_STORAGE_PREFIX, server, user)
        self.load()

    def load(self) -> None:
        self._kept = set()
        self._deleted = set()
        raw = self._store.get(self._key)
        if not raw:
            return
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Failed to parse reviewed cache for %s", self._key.user)
            return
        if not isinstance(parsed, dict):
            return
        kept = parsed.get("kept")
        deleted = parsed.get("deleted")
        if isinstance(kept, list):
            self._kept = {aid for aid in kept if isinstance(aid, str)}
        if isinstance(deleted, list):
            self._deleted = {aid for aid in deleted if isinstance(aid, str)}

    def save(self) -> None:
        payload = {
            "v": REVIEWED_STORAGE_VERSION,
            "kept": sorted(self._kept),
            "deleted": sorted(self._deleted),
        }
        self._store.set(self._key, json.dumps(payload))

    def is_reviewed(self, asset_id: str) -> bool:
        return asset_id in self._kept or asset_id in self._deleted

    def get_decision(self, asset_id: str) -> ReviewDecision | None:
        if asset_id in self._kept:
            return "keep"
        if asset_id in self._deleted:
            return "delete"
        return None

    def mark(self, asset_id: str, decision: ReviewDecision) -> None:
        if not asset_id:
            return
        if decision == "keep":
            self._kept.add(asset_id)
            self._deleted.discard(asset_id)
        else:
            self._deleted.add(asset_id)
            self._kept.discard(asset_id)
        self.save()

    def unmark(self, asset_id: str) -> None:
        if not asset_id:
            return
        self._kept.discard(asset_id)
        self._deleted.discard(asset_id)
        self.save()

    def reset(self) -> None:
        """Forget decisions for this user on every server."""
        for key in self._store.keys(REVIEWED_STORAGE_PREFIX):
            if key.user == self._key.user:
                self._store.delete(key)
        self._store.delete(self._key)
        self.load()


__all__ = [
    "STATE_DB_FILENAME",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "ReviewStats",
    "ReviewedStore",
    "SqliteKeyValueStore",
    "get_state_db_path",
]
