"""Execution gate runtime surface.

This package exposes the gate, its persistence primitives, and the factory
host applications use to wire them together.
"""

from execution_gate.backends import (
    InMemoryKeyValueBackend,
    KeyValueBackend,
    SQLiteKeyValueBackend,
)
from execution_gate.config import GateSettings, build_gate
from execution_gate.errors import (
    FatalGateError,
    GateError,
    MalformedStoredDataError,
    MissingVersionError,
    RecoverableGateError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from execution_gate.gate import ExecutionGate
from execution_gate.policy import SECONDS_PER_DAY, GatePolicy
from execution_gate.record_store import DecodeResult, RecordStore, decode_table, encode_table
from execution_gate.schemas import ExecutionRecord

__all__ = [
    "DecodeResult",
    "ExecutionGate",
    "ExecutionRecord",
    "FatalGateError",
    "GateError",
    "GatePolicy",
    "GateSettings",
    "InMemoryKeyValueBackend",
    "KeyValueBackend",
    "MalformedStoredDataError",
    "MissingVersionError",
    "RecordStore",
    "RecoverableGateError",
    "SECONDS_PER_DAY",
    "SQLiteKeyValueBackend",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "build_gate",
    "decode_table",
    "encode_table",
]
