"""
MultitaskOS - State Core
========================

Migration and reconciliation of the persisted MultitaskOS model.

Core Components:
    migrate: Bring a stored blob of any historical shape to the current schema
    reconcile: Choose between local state and a remote copy by timestamp
    stamp: Prepare a state for saving (logical timestamp + schema version)

Storage:
    LocalStateStore: localStorage-like key/value store (SQLite)
    DocumentStore: per-user remote document store with change notifications

Example:
    >>> from multitaskos import migrate, reconcile
    >>> state = migrate({"thread": {"threadName": "Write report"}})
    >>> state["jobQueue"][0]["data"]["title"]
    'Write report'
    >>> reconcile(state, {"timestamp": 1}).adopted
    True

License: MIT
"""

__version__ = "0.1.0"

from .clock import now_ms, stamp
from .migrator import migrate, migrate_job
from .reconciler import KEEP_LOCAL, Decision, reconcile
from .types import DecisionKind, EntryTag, TiePolicy

__all__ = [
    "Decision",
    "DecisionKind",
    "EntryTag",
    "KEEP_LOCAL",
    "TiePolicy",
    "migrate",
    "migrate_job",
    "now_ms",
    "reconcile",
    "stamp",
    "__version__",
]
