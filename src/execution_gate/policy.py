from __future__ import annotations

"""Gating rules deciding whether a gated action is already satisfied."""

from dataclasses import dataclass
from datetime import datetime

from execution_gate.schemas import ExecutionRecord

# Seconds treated as one day by interval gating. Kept at 84600 (not 86400) so
# stored intervals keep expiring at the same moment they always have.
SECONDS_PER_DAY = 84600.0


@dataclass(frozen=True)
class GatePolicy:
    """Per-call gating configuration; never persisted."""

    key: str
    per_version: bool = False
    every_x_days: float = 0

    def __post_init__(self) -> None:
        if self.every_x_days < 0:
            raise ValueError(f"every_x_days must be >= 0, got {self.every_x_days!r}")

    def is_satisfied(
        self,
        record: ExecutionRecord | None,
        *,
        now: datetime,
        current_version: str,
    ) -> bool:
        """Return True when the gate already fired and nothing expired it."""
        if record is None:
            return False

        satisfied = True
        if self.per_version:
            satisfied = satisfied and current_version == record.last_executed_version
        if self.every_x_days > 0:
            satisfied = satisfied and elapsed_days(record, now) < self.every_x_days
        return satisfied

    def reason(
        self,
        record: ExecutionRecord | None,
        *,
        now: datetime,
        current_version: str,
    ) -> str:
        """Short label for logs explaining why the primary path fires.

        Raises ValueError when the gate is satisfied.
        """
        if record is None:
            return "first_run"
        if self.per_version and current_version != record.last_executed_version:
            return "version_changed"
        if self.every_x_days > 0 and elapsed_days(record, now) >= self.every_x_days:
            return "interval_elapsed"
        raise ValueError(f"gate {self.key!r} is satisfied; no reason to fire")


def elapsed_days(record: ExecutionRecord, now: datetime) -> float:
    """Days since the record's last firing, using SECONDS_PER_DAY."""
    return (now - record.last_executed_at).total_seconds() / SECONDS_PER_DAY
