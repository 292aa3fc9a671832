"""Invariant checks for migrated state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Mapping

from .migrator import LEGACY_FIELDS
from .model import coerce_timestamp, entry_job, is_tagged_entry
from .types import ValidatorStatus


@dataclass
class ValidatorResult:
    validator_id: str
    code: str
    status: ValidatorStatus
    message: str
    details: dict | None = None


def _iter_jobs(state: Mapping[str, Any]) -> Iterator[Any]:
    if state.get("unsavedJob") is not None:
        yield state["unsavedJob"]
    queue = state.get("jobQueue")
    if isinstance(queue, list):
        for entry in queue:
            yield entry_job(entry)


def _check_queue_present(state: Mapping[str, Any]) -> str | None:
    if not isinstance(state.get("jobQueue"), list):
        return "jobQueue is missing or not a list"
    return None


def _check_entries_tagged(state: Mapping[str, Any]) -> str | None:
    queue = state.get("jobQueue")
    if not isinstance(queue, list):
        return None
    bare = [idx for idx, entry in enumerate(queue) if not is_tagged_entry(entry)]
    if bare:
        return f"untagged queue entries at {bare}"
    return None


def _check_worklogs(state: Mapping[str, Any]) -> str | None:
    for job in _iter_jobs(state):
        if not isinstance(job, Mapping) or not isinstance(job.get("worklog"), list):
            return "job without a worklog list"
    return None


def _check_legacy_fields(state: Mapping[str, Any]) -> str | None:
    found = sorted(LEGACY_FIELDS.intersection(state))
    for job in _iter_jobs(state):
        if isinstance(job, Mapping):
            found.extend(sorted(LEGACY_FIELDS.intersection(job)))
    if found:
        return f"legacy fields present: {', '.join(found)}"
    return None


def _check_timestamp(state: Mapping[str, Any]) -> str | None:
    if "timestamp" not in state:
        return None
    value = state["timestamp"]
    if coerce_timestamp(value) != value or not isinstance(value, int):
        return f"timestamp {value!r} is not a non-negative integer"
    return None


_CHECKS: list[tuple[str, Callable[[Mapping[str, Any]], str | None]]] = [
    ("state.job_queue_present", _check_queue_present),
    ("state.entries_tagged", _check_entries_tagged),
    ("state.worklogs_present", _check_worklogs),
    ("state.no_legacy_fields", _check_legacy_fields),
    ("state.timestamp_valid", _check_timestamp),
]


def run_validators(state: Mapping[str, Any]) -> List[ValidatorResult]:
    """Run one check per current-schema invariant and report each outcome."""
    results: List[ValidatorResult] = []
    for validator_id, check in _CHECKS:
        problem = check(state)
        if problem is None:
            results.append(
                ValidatorResult(
                    validator_id=validator_id,
                    code="validator.ok",
                    status=ValidatorStatus.OK,
                    message="ok",
                )
            )
        else:
            results.append(
                ValidatorResult(
                    validator_id=validator_id,
                    code="validator.violation",
                    status=ValidatorStatus.ERROR,
                    message=problem,
                )
            )
    return results


def is_blocked(results: List[ValidatorResult]) -> bool:
    """Return True if any validator reported an error."""
    return any(r.status == ValidatorStatus.ERROR for r in results)
