"""Application context wiring the core to local and remote storage."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from .clock import now_ms, stamp
from .ids import normalize_user_id
from .migrator import migrate
from .model import PersistedState
from .reconciler import Decision, reconcile
from .remote_store import RemoteStore, RemoteStoreError
from .state_store import LocalStateStore
from .types import TiePolicy, ValidatorStatus
from .validators import is_blocked, run_validators

logger = logging.getLogger(__name__)


class AppContext:
    """Owns the current state and the storage collaborators.

    Every entry point runs to completion before returning; remote
    notifications are expected to be delivered one at a time.
    """

    def __init__(
        self,
        local_store: LocalStateStore,
        remote_store: RemoteStore | None = None,
        *,
        tie_policy: TiePolicy = TiePolicy.LOCAL,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._local = local_store
        self._remote = remote_store
        self._clock = clock
        self.tie_policy = tie_policy
        self.state: PersistedState | None = None
        self.user_id: str | None = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------ startup
    def load(self) -> PersistedState | None:
        """Read local storage once and migrate whatever is there."""
        raw = self._local.load_state()
        if raw is None:
            logger.info("No saved model in local storage")
            self.state = None
            return None
        self.state = migrate(raw)
        self._check(self.state, source="local")
        return self.state

    # ------------------------------------------------------------------ session
    @property
    def signed_in(self) -> bool:
        return self.user_id is not None

    def sign_in(self, user_id: str) -> None:
        """Attach to the user's remote document and follow its changes."""
        uid = normalize_user_id(user_id)
        if uid is None:
            raise ValueError("user_id must be a non-empty string")
        if uid == self.user_id:
            return
        self.sign_out()
        self.user_id = uid
        if self._remote is not None:
            self._unsubscribe = self._remote.subscribe(uid, self.on_remote_change)

    def sign_out(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.user_id = None

    # ------------------------------------------------------------------ sync
    def on_remote_change(self, raw: Mapping[str, Any] | None) -> Decision:
        decision = reconcile(self.state, raw, tie_policy=self.tie_policy)
        if decision.adopted:
            logger.info("Model in database is newer than local version. Syncing...")
            self.state = decision.state
            self._check(self.state, source="remote")
        return decision

    def save(self, state: Mapping[str, Any]) -> PersistedState:
        """Stamp ``state`` and write it to local storage and the remote store."""
        stamped = stamp(state, now=self._clock())
        self._local.save_state(stamped)
        self.state = stamped
        if self._remote is not None and self.user_id is not None:
            try:
                self._remote.write(self.user_id, stamped)
            except RemoteStoreError:
                logger.exception("Remote write failed", extra={"user_id": self.user_id})
        return stamped

    def import_state(self, raw: Mapping[str, Any]) -> PersistedState:
        """Replace the current state with an imported blob and save it."""
        migrated = migrate(raw)
        self._check(migrated, source="import")
        return self.save(migrated)

    def _check(self, state: Mapping[str, Any] | None, *, source: str) -> None:
        if state is None:
            return
        results = run_validators(state)
        if is_blocked(results):
            for result in results:
                if result.status != ValidatorStatus.OK:
                    logger.warning(f"{source} state failed {result.validator_id}: {result.message}")
