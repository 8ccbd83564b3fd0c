from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .errors import StorageError

logger = logging.getLogger(__name__)

CATEGORIES = "categories"
WORK_ITEMS = "work_items"
COLLECTIONS = (CATEGORIES, WORK_ITEMS)

DEFAULT_CATEGORIES: list[dict[str, str]] = [
    {"id": "1", "name": "Development", "color": "#3b82f6"},
    {"id": "2", "name": "Meetings", "color": "#eab308"},
    {"id": "3", "name": "Support", "color": "#ef4444"},
    {"id": "4", "name": "Research", "color": "#10b981"},
]


class WorklogStore:
    """Whole-collection JSON records and string settings in one sqlite file."""

    def __init__(self, db_file: Path):
        self._db_file = Path(db_file)
        self._lock = threading.Lock()
        try:
            self._db_file.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open work log store at {self._db_file}: {exc}") from exc

    @property
    def path(self) -> Path:
        return self._db_file

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_file, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self):
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._lock, self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS collections (
                    name TEXT PRIMARY KEY,
                    payload TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS app_settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )
            conn.commit()

    def load(self, collection: str) -> list[dict[str, Any]]:
        _check_collection(collection)
        try:
            with self._lock, self._connection() as conn:
                row = conn.execute(
                    "SELECT payload FROM collections WHERE name = ?",
                    (collection,),
                ).fetchone()
        except sqlite3.Error as exc:
            logger.error("Failed to read collection %s: %s", collection, exc)
            raise StorageError(f"Failed to read {collection}: {exc}") from exc

        if row is None:
            if collection == CATEGORIES:
                return [dict(record) for record in DEFAULT_CATEGORIES]
            return []

        try:
            records = json.loads(row["payload"])
        except json.JSONDecodeError as exc:
            logger.error("Stored %s payload is corrupted: %s", collection, exc)
            raise StorageError(f"Stored {collection} data is corrupted.") from exc
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            logger.error("Stored %s payload is not a list of records", collection)
            raise StorageError(f"Stored {collection} data is corrupted.")
        return records

    def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        _check_collection(collection)
        payload = json.dumps(records, ensure_ascii=False)
        try:
            with self._lock, self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO collections(name, payload)
                    VALUES(?, ?)
                    ON CONFLICT(name) DO UPDATE SET payload = excluded.payload
                    """,
                    (collection, payload),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error("Failed to write collection %s: %s", collection, exc)
            raise StorageError(f"Failed to save {collection}: {exc}") from exc
        logger.debug("Saved %d %s record(s)", len(records), collection)

    def get_setting(self, key: str, default: str | None = None) -> str | None:
        try:
            with self._lock, self._connection() as conn:
                row = conn.execute(
                    "SELECT value FROM app_settings WHERE key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read setting {key}: {exc}") from exc
        if row is None:
            return default
        return str(row["value"])

    def set_setting(self, key: str, value: str) -> None:
        try:
            with self._lock, self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO app_settings(key, value)
                    VALUES(?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to save setting {key}: {exc}") from exc


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")
