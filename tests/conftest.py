"""Shared test fixtures for the execution-gate test suite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from execution_gate.backends import InMemoryKeyValueBackend, SQLiteKeyValueBackend
from execution_gate.errors import StorageWriteError
from execution_gate.gate import ExecutionGate
from execution_gate.record_store import RecordStore

START = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, *, seconds: float = 0, days: float = 0) -> None:
        self.now = self.now + timedelta(seconds=seconds, days=days)


class FlakyBackend(InMemoryKeyValueBackend):
    """In-memory backend whose writes can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    def set(self, key: str, value: bytes) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        super().set(key, value)

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        super().remove(key)


class Recorder:
    """Counts how many times each named action ran."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def action(self, name: str):
        def _run() -> None:
            self.calls.append(name)

        return _run

    def count(self, name: str) -> int:
        return self.calls.count(name)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def memory_backend() -> InMemoryKeyValueBackend:
    return InMemoryKeyValueBackend()


@pytest.fixture
def sqlite_backend(tmp_path: Path) -> SQLiteKeyValueBackend:
    """Provide a fresh SQLite backend backed by a temp database."""
    return SQLiteKeyValueBackend(db_path=str(tmp_path / "gate.db"))


@pytest.fixture
def gate(memory_backend: InMemoryKeyValueBackend, clock: FakeClock) -> ExecutionGate:
    return ExecutionGate(store=RecordStore(memory_backend), app_version="1.0.0", clock=clock)
