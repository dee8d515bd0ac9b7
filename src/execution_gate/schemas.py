# schemas.py

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

BLOB_FORMAT_VERSION = 1


class ExecutionRecord(BaseModel):
    """Metadata describing the last primary firing of one gate."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    last_executed_at: datetime
    last_executed_version: str

    @field_validator("last_executed_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are stored as UTC so elapsed-time math stays comparable.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class RecordTableBlob(BaseModel):
    """Envelope persisted under the fixed storage key."""

    model_config = ConfigDict(extra="forbid")

    format_version: Literal[1] = BLOB_FORMAT_VERSION
    records: dict[str, ExecutionRecord] = Field(default_factory=dict)
