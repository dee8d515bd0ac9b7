from __future__ import annotations

"""Durable mirror of the gate's record table.

The whole table is encoded as one JSON blob and written under a single fixed
storage key. Reads happen once at gate construction; writes replace the blob
after every record change.
"""

from dataclasses import dataclass, field

from pydantic import ValidationError

from execution_gate.backends import KeyValueBackend
from execution_gate.errors import MalformedStoredDataError
from execution_gate.logger import get_logger
from execution_gate.schemas import ExecutionRecord, RecordTableBlob

DEFAULT_STORAGE_KEY = "ExecutionGate"

RecordTable = dict[str, ExecutionRecord]


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding a stored blob."""

    ok: bool
    table: RecordTable = field(default_factory=dict)
    error: str | None = None

    def unwrap(self) -> RecordTable:
        """Return the table or raise MalformedStoredDataError."""
        if not self.ok:
            raise MalformedStoredDataError(self.error or "stored record blob is malformed")
        return self.table


def encode_table(table: RecordTable) -> bytes:
    """Serialize a record table to the stored blob format."""
    return RecordTableBlob(records=dict(table)).model_dump_json().encode("utf-8")


def decode_table(blob: bytes) -> DecodeResult:
    """Deserialize a stored blob without raising on bad data."""
    try:
        envelope = RecordTableBlob.model_validate_json(blob)
    except (ValidationError, UnicodeDecodeError) as e:
        return DecodeResult(ok=False, error=str(e))
    return DecodeResult(ok=True, table=dict(envelope.records))


class RecordStore:
    """Loads and saves the record table through a key-value backend."""

    def __init__(self, backend: KeyValueBackend, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        self.backend = backend
        self.storage_key = storage_key
        self.logger = get_logger("record_store")

    def load(self) -> RecordTable:
        """Read the stored table; missing or malformed blobs yield an empty table."""
        blob = self.backend.get(self.storage_key)
        if blob is None:
            self.logger.info("RECORDS LOAD EMPTY storage_key=%s", self.storage_key)
            return {}

        result = decode_table(blob)
        if not result.ok:
            self.logger.warning(
                "RECORDS LOAD MALFORMED storage_key=%s bytes=%s error=%s",
                self.storage_key,
                len(blob),
                result.error,
            )
            return {}

        self.logger.info(
            "RECORDS LOAD storage_key=%s count=%s", self.storage_key, len(result.table)
        )
        return result.table

    def save(self, table: RecordTable) -> None:
        """Replace the stored blob with the full table."""
        blob = encode_table(table)
        self.backend.set(self.storage_key, blob)
        self.logger.info(
            "RECORDS SAVE storage_key=%s count=%s bytes=%s",
            self.storage_key,
            len(table),
            len(blob),
        )

    def clear(self) -> None:
        """Remove the stored blob entirely."""
        self.backend.remove(self.storage_key)
        self.logger.info("RECORDS CLEAR storage_key=%s", self.storage_key)
