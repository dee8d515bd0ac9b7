from __future__ import annotations

"""Runtime settings and the composition-root factory for ExecutionGate.

Settings come from the environment, with a repo-level `.env` loaded on import.
Explicit arguments to `build_gate` always win over settings.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from execution_gate.backends import (
    InMemoryKeyValueBackend,
    KeyValueBackend,
    SQLiteKeyValueBackend,
)
from execution_gate.gate import Clock, ExecutionGate
from execution_gate.record_store import DEFAULT_STORAGE_KEY, RecordStore
from execution_gate.version import resolve_app_version

ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT_DIR / ".env")

DEFAULT_DB_PATH = ".tmp/execution_gate.db"
SUPPORTED_BACKENDS = ("sqlite", "memory")


@dataclass(frozen=True)
class GateSettings:
    db_path: str = DEFAULT_DB_PATH
    storage_key: str = DEFAULT_STORAGE_KEY
    backend: str = "sqlite"
    app_version: str | None = None
    distribution: str | None = None

    @classmethod
    def from_env(cls) -> GateSettings:
        backend = (os.getenv("EXECUTION_GATE_BACKEND") or "sqlite").lower().strip()
        return cls(
            db_path=os.getenv("EXECUTION_GATE_DB_PATH") or DEFAULT_DB_PATH,
            storage_key=os.getenv("EXECUTION_GATE_STORAGE_KEY") or DEFAULT_STORAGE_KEY,
            backend=backend,
            app_version=os.getenv("EXECUTION_GATE_APP_VERSION") or None,
            distribution=os.getenv("EXECUTION_GATE_DISTRIBUTION") or None,
        )


def build_backend(settings: GateSettings) -> KeyValueBackend:
    if settings.backend == "sqlite":
        return SQLiteKeyValueBackend(settings.db_path)
    if settings.backend == "memory":
        return InMemoryKeyValueBackend()
    raise ValueError(
        f"Unsupported backend {settings.backend!r}. "
        f"Set EXECUTION_GATE_BACKEND to one of: {', '.join(SUPPORTED_BACKENDS)}."
    )


def build_gate(
    settings: GateSettings | None = None,
    *,
    backend: KeyValueBackend | None = None,
    app_version: str | None = None,
    clock: Clock | None = None,
) -> ExecutionGate:
    """Build a gate wired to the configured backend and application version.

    Raises MissingVersionError when no version can be resolved.
    """
    settings = settings or GateSettings.from_env()
    version = resolve_app_version(
        app_version or settings.app_version, distribution=settings.distribution
    )
    store = RecordStore(backend or build_backend(settings), storage_key=settings.storage_key)
    return ExecutionGate(store=store, app_version=version, clock=clock)
