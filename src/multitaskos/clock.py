"""Logical timestamps for the save path."""

from __future__ import annotations

import copy
import time
from typing import Any, Mapping

from .model import PersistedState, timestamp_of
from .schemas import versions


def now_ms() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def stamp(state: Mapping[str, Any], *, now: int | None = None) -> PersistedState:
    """Return a copy of ``state`` stamped for saving.

    The timestamp never moves backwards relative to the one already on the
    state, so a skewed wall clock cannot make a fresh save look older.
    """
    stamped: dict[str, Any] = copy.deepcopy(dict(state))
    ts = now_ms() if now is None else int(now)
    previous = timestamp_of(state)
    if previous is not None and previous > ts:
        ts = previous
    stamped["timestamp"] = ts
    stamped["schemaVersion"] = versions.STATE_VERSION
    return stamped  # type: ignore[return-value]
