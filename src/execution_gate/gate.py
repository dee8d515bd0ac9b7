from __future__ import annotations

"""Execution gate: run a callback once, once per version, or once every N days.

The gate keeps every record in memory and mirrors the full table to its
RecordStore after each change. Instances are built explicitly by the host
application (see `execution_gate.config.build_gate`); there is no shared
global gate.
"""

import threading
from collections.abc import Callable
from datetime import UTC, datetime

from execution_gate.errors import MissingVersionError
from execution_gate.logger import get_logger
from execution_gate.policy import GatePolicy
from execution_gate.record_store import RecordStore, RecordTable
from execution_gate.schemas import ExecutionRecord
from execution_gate.timeutil import utc_now

Action = Callable[[], object]
Clock = Callable[[], datetime]


class ExecutionGate:
    """Decides between a primary and a secondary action from past executions."""

    def __init__(
        self,
        *,
        store: RecordStore,
        app_version: str,
        clock: Clock | None = None,
    ) -> None:
        if not app_version or not app_version.strip():
            raise MissingVersionError("ExecutionGate requires a non-empty application version.")
        self.store = store
        self.app_version = app_version
        self.clock = clock or utc_now
        self.logger = get_logger("gate")
        # Reentrant so actions may call back into the gate on the same thread.
        self._lock = threading.RLock()
        self._records: RecordTable = self.store.load()

    def _now(self) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=UTC)
        return now

    def run_gated(
        self,
        primary: Action | None,
        secondary: Action | None,
        key: str,
        per_version: bool = False,
        every_x_days: float = 0,
    ) -> bool:
        """Run `primary` if the gate for `key` is not yet satisfied, else `secondary`.

        Returns True when the primary path was taken. The record for `key` is
        only written after `primary` actually ran; if it raises, nothing is
        recorded and the exception propagates.
        """
        policy = GatePolicy(key=key, per_version=per_version, every_x_days=every_x_days)
        with self._lock:
            record = self._records.get(key)
            now = self._now()
            if policy.is_satisfied(record, now=now, current_version=self.app_version):
                self.logger.debug("GATE SKIP key=%s", key)
                if secondary is not None:
                    secondary()
                return False

            reason = policy.reason(record, now=now, current_version=self.app_version)
            if primary is None:
                self.logger.info("GATE OPEN NO ACTION key=%s reason=%s", key, reason)
                return True

            self.logger.info("GATE FIRE key=%s reason=%s", key, reason)
            primary()
            self._mark_executed(key)
            return True

    def run_once(self, action: Action | None, key: str, otherwise: Action | None = None) -> bool:
        return self.run_gated(action, otherwise, key)

    def run_once_per_version(
        self, action: Action | None, key: str, otherwise: Action | None = None
    ) -> bool:
        return self.run_gated(action, otherwise, key, per_version=True)

    def run_once_per_interval(
        self,
        action: Action | None,
        key: str,
        days: float,
        otherwise: Action | None = None,
    ) -> bool:
        return self.run_gated(action, otherwise, key, every_x_days=days)

    def already_executed(self, key: str, per_version: bool = False, every_x_days: float = 0) -> bool:
        """Return True if `run_gated` with this policy would take the secondary path."""
        policy = GatePolicy(key=key, per_version=per_version, every_x_days=every_x_days)
        with self._lock:
            return policy.is_satisfied(
                self._records.get(key), now=self._now(), current_version=self.app_version
            )

    def get_record(self, key: str) -> ExecutionRecord | None:
        with self._lock:
            return self._records.get(key)

    def records(self) -> RecordTable:
        with self._lock:
            return dict(self._records)

    def reset(self) -> None:
        """Erase every record, in memory and in storage."""
        with self._lock:
            count = len(self._records)
            self._records = {}
            self.store.clear()
        self.logger.info("GATE RESET cleared=%s", count)

    def _mark_executed(self, key: str) -> None:
        # Memory is updated first; a failed save leaves storage stale until the next save.
        self._records[key] = ExecutionRecord(
            last_executed_at=self._now(),
            last_executed_version=self.app_version,
        )
        self.store.save(self._records)
