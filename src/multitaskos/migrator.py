"""Schema migration for persisted MultitaskOS state.

Stored blobs were written by every client version ever shipped, and most of
them carry no reliable version tag. ``migrate`` therefore runs the same
ordered pipeline of structural steps on every load. Each step inspects the
shape of the data to decide whether it applies, so running the pipeline on an
already-current state changes nothing.

Steps, in order:

1. root field renames (``thread`` -> ``job``, ``threadQueue`` -> ``jobQueue``,
   ``newThread`` -> ``newJob`` -> ``unsavedJob``)
2. job shape normalisation (``threadName`` -> ``title``, ``journal`` merged
   into ``worklog``)
3. folding of the legacy single-slot ``job`` into the front of ``jobQueue``
4. tagging of bare queue entries as ``Queued``
5. backfill of sequences the document store drops when empty
6. removal of deprecated fields

After the pipeline the timestamp is normalised and the schema version stamped.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Sequence

from .model import (
    Job,
    JobEntry,
    PersistedState,
    coerce_timestamp,
    declared_version,
    entry_job,
    is_tagged_entry,
)
from .schemas import versions
from .types import EntryTag

logger = logging.getLogger(__name__)

# Applied in sequence so chained renames compose within a single pass.
FIELD_RENAMES: tuple[tuple[str, str], ...] = (
    ("thread", "job"),
    ("threadQueue", "jobQueue"),
    ("newThread", "newJob"),
    ("newJob", "unsavedJob"),
)

DEPRECATED_FIELDS: tuple[str, ...] = ("hotkeysPressed",)

LEGACY_FIELDS: frozenset[str] = frozenset(
    {
        "thread",
        "threadQueue",
        "newThread",
        "newJob",
        "job",
        "threadName",
        "journal",
        "hotkeysPressed",
    }
)


def migrate(raw: Mapping[str, Any]) -> PersistedState:
    """Return a current-schema copy of ``raw``.

    ``raw`` is never mutated. Any mapping is accepted, including ``{}``.
    """
    if not isinstance(raw, Mapping):
        raise TypeError(f"persisted state must be a mapping, got {type(raw).__name__}")

    state: dict[str, Any] = copy.deepcopy(dict(raw))
    _rename_root_fields(state)
    _listify_queue(state)
    _normalize_jobs(state)
    _fold_singleton_job(state)
    _tag_queue_entries(state)
    _backfill_defaults(state)
    _drop_deprecated_fields(state)
    _normalize_timestamp(state)
    _stamp_version(state)
    return state  # type: ignore[return-value]


def migrate_job(job: Any) -> Job:
    """Return a current-shape copy of a single job."""
    job = copy.deepcopy(job)
    _normalize_job(job)
    _backfill_job(job)
    return job


def tag_entry(job: Any, tag: EntryTag = EntryTag.QUEUED) -> JobEntry:
    return {"tag": tag.value, "data": job, "history": {"events": []}}


# ---------------------------------------------------------------------- steps
def _rename_root_fields(state: dict[str, Any]) -> None:
    for old, new in FIELD_RENAMES:
        if old in state:
            state[new] = state.pop(old)


def _listify_queue(state: dict[str, Any]) -> None:
    queue = state.get("jobQueue")
    if isinstance(queue, Sequence) and not isinstance(queue, (str, bytes, list)):
        state["jobQueue"] = list(queue)


def _normalize_jobs(state: dict[str, Any]) -> None:
    _normalize_job(state.get("unsavedJob"))
    _normalize_job(state.get("job"))
    queue = state.get("jobQueue")
    if isinstance(queue, list):
        for entry in queue:
            _normalize_job(entry_job(entry))


def _normalize_job(job: Any) -> None:
    if not isinstance(job, dict):
        return
    if "threadName" in job:
        job["title"] = job.pop("threadName")
    if "journal" not in job:
        return
    journal = job.pop("journal")
    if isinstance(journal, list):
        merged = list(journal)
    elif journal is None:
        merged = []
    else:
        merged = [journal]
    legacy = job.get("worklog")
    if isinstance(legacy, list):
        merged = list(legacy) + merged
    elif legacy is not None:
        merged.insert(0, legacy)
    job["worklog"] = merged


def _fold_singleton_job(state: dict[str, Any]) -> None:
    if "job" not in state:
        return
    job = state.pop("job")
    if job is None:
        return
    queue = state.get("jobQueue")
    if not isinstance(queue, list):
        queue = []
    state["jobQueue"] = [job] + queue


def _tag_queue_entries(state: dict[str, Any]) -> None:
    queue = state.get("jobQueue")
    if not isinstance(queue, list) or not queue:
        return
    state["jobQueue"] = [
        entry if is_tagged_entry(entry) else tag_entry(entry) for entry in queue
    ]


def _backfill_defaults(state: dict[str, Any]) -> None:
    if not isinstance(state.get("jobQueue"), list):
        if state.get("jobQueue") is not None:
            logger.warning(
                "Discarding jobQueue of unexpected type %s", type(state["jobQueue"]).__name__
            )
        state["jobQueue"] = []
    for entry in state["jobQueue"]:
        _backfill_job(entry_job(entry))
        if is_tagged_entry(entry):
            _backfill_history(entry)
    _backfill_job(state.get("unsavedJob"))


def _backfill_job(job: Any) -> None:
    if not isinstance(job, dict):
        return
    worklog = job.get("worklog")
    if worklog is None:
        job["worklog"] = []
    elif not isinstance(worklog, list):
        job["worklog"] = [worklog]


def _backfill_history(entry: dict[str, Any]) -> None:
    history = entry.get("history")
    if not isinstance(history, dict):
        entry["history"] = {"events": []}
        return
    if not isinstance(history.get("events"), list):
        history["events"] = []


def _drop_deprecated_fields(state: dict[str, Any]) -> None:
    for name in DEPRECATED_FIELDS:
        state.pop(name, None)


def _normalize_timestamp(state: dict[str, Any]) -> None:
    if "timestamp" not in state:
        return
    ts = coerce_timestamp(state["timestamp"])
    if ts is None:
        logger.warning("Dropping unusable timestamp %r", state["timestamp"])
        del state["timestamp"]
    else:
        state["timestamp"] = ts


def _stamp_version(state: dict[str, Any]) -> None:
    declared = declared_version(state)
    if declared is None:
        logger.info(
            "Upgrading unversioned state (schemaVersion %s) to %s",
            versions.LEGACY_STATE_VERSION,
            versions.STATE_VERSION,
        )
    if declared is not None and declared > versions.STATE_VERSION:
        # Written by a newer client; keep its claim rather than downgrade it.
        logger.warning(
            "State declares schemaVersion %s, newer than supported %s",
            declared,
            versions.STATE_VERSION,
        )
        return
    state["schemaVersion"] = versions.STATE_VERSION
