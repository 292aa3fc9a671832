"""Record shapes and small helpers shared by the migrator and reconciler."""

from __future__ import annotations

import math
import re
from typing import Any, List, Mapping, Optional

from typing_extensions import TypedDict

_DIGITS = re.compile(r"[0-9]+")


class Job(TypedDict, total=False):
    title: str
    worklog: List[Any]


class JobHistory(TypedDict, total=False):
    events: List[Any]


class JobEntry(TypedDict, total=False):
    tag: str
    data: Job
    history: JobHistory


class PersistedState(TypedDict, total=False):
    jobQueue: List[JobEntry]
    unsavedJob: Optional[Job]
    timestamp: int
    schemaVersion: int


def is_tagged_entry(entry: Any) -> bool:
    """Return True when a queue element already has the ``{tag, data}`` shape."""
    return isinstance(entry, Mapping) and isinstance(entry.get("tag"), str) and "data" in entry


def entry_job(entry: Any) -> Any:
    """Return the job held by a queue element, tagged or bare."""
    if is_tagged_entry(entry):
        return entry["data"]
    return entry


def coerce_timestamp(value: Any) -> int | None:
    """Return a non-negative integer timestamp, or None when unusable."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if not math.isfinite(value) or value < 0:
            return None
        return int(value)
    if isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
        return int(value.strip())
    return None


def timestamp_of(state: Mapping[str, Any] | None) -> int | None:
    if not state:
        return None
    return coerce_timestamp(state.get("timestamp"))


def declared_version(state: Mapping[str, Any] | None) -> int | None:
    """Return the schemaVersion a blob claims, if it claims a sane one."""
    if not state:
        return None
    value = state.get("schemaVersion")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value
