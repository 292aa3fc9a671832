"""Local key/value storage for the persisted model."""

from __future__ import annotations

import json
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Mapping

from .ids import get_data_dir
from .schemas import versions

STORAGE_KEY = "MultitaskOS-Model"


class StateDecodeError(ValueError):
    """Stored content is not a JSON object."""


class LocalStateStore:
    """SQLite-backed stand-in for browser localStorage."""

    def __init__(self, path: str | Path | None = None, *, key: str = STORAGE_KEY) -> None:
        self._path = Path(path or get_data_dir() / "local_storage.db")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self.key = key
        self._setup()

    def _setup(self) -> None:
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS local_storage (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at REAL,
                    schema_version INTEGER DEFAULT 1
                )
                """
            )
            self._conn.commit()

    # ------------------------------------------------------------------ raw items
    def get_item(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM local_storage WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO local_storage (key, value, updated_at, schema_version)
                VALUES (?, ?, ?, ?)
                """,
                (key, value, time.time(), versions.LOCAL_RECORD_VERSION),
            )
            self._conn.commit()

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            self._conn.commit()

    # ------------------------------------------------------------------ model
    def load_state(self) -> dict[str, Any] | None:
        """Return the parsed model, or None when nothing is stored."""
        content = self.get_item(self.key)
        if not content:
            return None
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise StateDecodeError(f"stored value under {self.key!r} is not valid JSON") from exc
        if data is None:
            return None
        if not isinstance(data, dict):
            raise StateDecodeError(
                f"stored value under {self.key!r} is a {type(data).__name__}, expected an object"
            )
        return data

    def save_state(self, state: Mapping[str, Any]) -> None:
        self.set_item(self.key, json.dumps(state, ensure_ascii=False))

    def clear(self) -> None:
        self.remove_item(self.key)
