"""Paths and identifiers for local data and per-user remote documents."""

from __future__ import annotations

import os
from pathlib import Path

REMOTE_ROOT = "users-data"


def get_data_dir() -> Path:
    """Return the data directory (MULTITASKOS_DATA_DIR or repo_root/data)."""
    env_dir = os.getenv("MULTITASKOS_DATA_DIR")
    if env_dir:
        data_dir = Path(env_dir).expanduser()
    else:
        data_dir = Path(__file__).resolve().parents[2] / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def normalize_user_id(user_id: str | None) -> str | None:
    uid = (user_id or "").strip()
    return uid or None


def user_document_path(user_id: str) -> str:
    """Remote document path for a user, e.g. ``users-data/abc123``."""
    uid = normalize_user_id(user_id)
    if uid is None:
        raise ValueError("user_id must be a non-empty string")
    if "/" in uid:
        raise ValueError(f"user_id may not contain '/': {uid!r}")
    return f"{REMOTE_ROOT}/{uid}"
