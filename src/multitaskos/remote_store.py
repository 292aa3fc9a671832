"""Per-user remote document storage with change notifications."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from typing_extensions import Protocol

from .ids import get_data_dir, user_document_path
from .schemas import versions

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[Dict[str, Any]]], Any]


class RemoteStoreError(RuntimeError):
    """A remote read or write could not be completed."""


class RemoteStore(Protocol):
    def read(self, user_id: str) -> Optional[Dict[str, Any]]: ...

    def write(self, user_id: str, state: Mapping[str, Any]) -> None: ...

    def subscribe(self, user_id: str, listener: Listener) -> Callable[[], None]: ...


def strip_empty(value: Any) -> Any:
    """Drop nulls, empty lists and empty mappings the way the cloud store does.

    Returns None when nothing is left of ``value``.
    """
    if isinstance(value, Mapping):
        kept = {}
        for key, item in value.items():
            stripped = strip_empty(item)
            if stripped is not None:
                kept[key] = stripped
        return kept or None
    if isinstance(value, (list, tuple)):
        items = [strip_empty(item) for item in value]
        items = [item for item in items if item is not None]
        return items or None
    return value


class DocumentStore:
    """SQLite-backed document store keyed by ``users-data/<uid>``.

    Listeners registered with ``subscribe`` get the current document right
    away and again after each write, one at a time in registration order.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path or get_data_dir() / "remote_documents.db")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._listeners: dict[str, List[Listener]] = {}
        self._setup()

    def _setup(self) -> None:
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    path TEXT PRIMARY KEY,
                    body TEXT,
                    updated_at REAL,
                    schema_version INTEGER DEFAULT 1
                )
                """
            )
            self._conn.commit()

    def read(self, user_id: str) -> Optional[Dict[str, Any]]:
        path = user_document_path(user_id)
        row = self._conn.execute("SELECT body FROM documents WHERE path = ?", (path,)).fetchone()
        if row is None or not row["body"]:
            return None
        return json.loads(row["body"])

    def write(self, user_id: str, state: Mapping[str, Any]) -> None:
        path = user_document_path(user_id)
        body = strip_empty(state)
        try:
            with self._lock:
                if body is None:
                    self._conn.execute("DELETE FROM documents WHERE path = ?", (path,))
                else:
                    self._conn.execute(
                        """
                        INSERT OR REPLACE INTO documents (path, body, updated_at, schema_version)
                        VALUES (?, ?, ?, ?)
                        """,
                        (
                            path,
                            json.dumps(body, ensure_ascii=False),
                            time.time(),
                            versions.REMOTE_DOCUMENT_VERSION,
                        ),
                    )
                self._conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as exc:
            raise RemoteStoreError(f"failed to write {path}") from exc
        self._notify(user_id)

    def subscribe(self, user_id: str, listener: Listener) -> Callable[[], None]:
        path = user_document_path(user_id)
        with self._lock:
            self._listeners.setdefault(path, []).append(listener)
        listener(self.read(user_id))

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(path, [])
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def _notify(self, user_id: str) -> None:
        path = user_document_path(user_id)
        with self._lock:
            listeners = list(self._listeners.get(path, []))
        if not listeners:
            return
        document = self.read(user_id)
        for listener in listeners:
            listener(document)
