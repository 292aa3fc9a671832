"""Runtime settings read from the environment (and an optional .env file)."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .state_store import STORAGE_KEY
from .types import TiePolicy

logger = logging.getLogger(__name__)


def parse_tie_policy(value: str | None) -> TiePolicy:
    raw = (value or TiePolicy.LOCAL.value).strip().lower()
    try:
        return TiePolicy(raw)
    except ValueError:
        logger.warning(f"Unknown tie policy {raw!r}; falling back to 'local'")
        return TiePolicy.LOCAL


def load_settings(env_file: str | Path | None = None) -> dict[str, Any]:
    """Return the effective settings.

    Values already present in the process environment win over ``env_file``.
    """
    if env_file is not None:
        load_dotenv(env_file)

    return {
        "storage_key": os.getenv("MULTITASKOS_STORAGE_KEY", STORAGE_KEY),
        "local_db_path": os.getenv("MULTITASKOS_LOCAL_DB") or None,
        "remote_db_path": os.getenv("MULTITASKOS_REMOTE_DB") or None,
        "user_id": os.getenv("MULTITASKOS_USER_ID") or None,
        "tie_policy": parse_tie_policy(os.getenv("MULTITASKOS_TIE_POLICY")),
        "host": os.getenv("MULTITASKOS_HOST", "127.0.0.1"),
        "port": int(os.getenv("MULTITASKOS_PORT", "8765")),
        "log_level": os.getenv("MULTITASKOS_LOG_LEVEL", "INFO").upper(),
    }
