"""Shared enums for queue tags, reconciliation and validation."""

from __future__ import annotations

from enum import Enum


class EntryTag(str, Enum):
    QUEUED = "Queued"


class DecisionKind(str, Enum):
    KEEP_LOCAL = "keep_local"
    ADOPT_REMOTE = "adopt_remote"


class TiePolicy(str, Enum):
    """Which side wins when both copies carry the same timestamp."""

    LOCAL = "local"
    REMOTE = "remote"


class ValidatorStatus(str, Enum):
    OK = "ok"
    WARN = "warn"
    ERROR = "error"
