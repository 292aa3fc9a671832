"""Pick the authoritative copy between local state and a remote notification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .migrator import migrate
from .model import PersistedState, timestamp_of
from .types import DecisionKind, TiePolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    kind: DecisionKind
    state: PersistedState | None = None

    @classmethod
    def adopt(cls, state: PersistedState) -> "Decision":
        return cls(DecisionKind.ADOPT_REMOTE, state)

    @property
    def adopted(self) -> bool:
        return self.kind is DecisionKind.ADOPT_REMOTE


KEEP_LOCAL = Decision(DecisionKind.KEEP_LOCAL)


def is_newer(candidate: Mapping[str, Any] | None, reference: Mapping[str, Any] | None) -> bool:
    """Return True if ``candidate`` is strictly newer than ``reference``.

    A missing timestamp is older than any present one.
    """
    cand_ts = timestamp_of(candidate)
    ref_ts = timestamp_of(reference)
    if cand_ts is None:
        return False
    if ref_ts is None:
        return True
    return cand_ts > ref_ts


def reconcile(
    local: Mapping[str, Any] | None,
    remote: Mapping[str, Any] | None,
    *,
    tie_policy: TiePolicy = TiePolicy.LOCAL,
) -> Decision:
    """Decide whether ``remote`` replaces ``local``.

    The adopted remote is always passed through ``migrate`` first, since an
    older client may have written it.
    """
    if remote is None:
        return KEEP_LOCAL
    if local is None:
        return Decision.adopt(migrate(remote))

    if is_newer(remote, local):
        return Decision.adopt(migrate(remote))
    if tie_policy is TiePolicy.REMOTE and timestamp_of(remote) == timestamp_of(local):
        logger.debug("Equal timestamps %s; remote wins by policy", timestamp_of(local))
        return Decision.adopt(migrate(remote))
    return KEEP_LOCAL
