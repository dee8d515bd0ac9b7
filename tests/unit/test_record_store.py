import json
import tempfile
import unittest
from datetime import UTC, datetime

from execution_gate.backends import InMemoryKeyValueBackend, SQLiteKeyValueBackend
from execution_gate.errors import MalformedStoredDataError
from execution_gate.record_store import (
    DEFAULT_STORAGE_KEY,
    RecordStore,
    decode_table,
    encode_table,
)
from execution_gate.schemas import ExecutionRecord

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
FAR_FUTURE = datetime(9999, 12, 31, 23, 59, 59, 999999, tzinfo=UTC)


def _sample_table() -> dict[str, ExecutionRecord]:
    return {
        "welcome": ExecutionRecord(last_executed_at=EPOCH, last_executed_version=""),
        "survey": ExecutionRecord(last_executed_at=FAR_FUTURE, last_executed_version="2.3.1"),
        "": ExecutionRecord(
            last_executed_at=datetime(2024, 2, 29, 8, 30, 15, 123456, tzinfo=UTC),
            last_executed_version="1.0 (build 42) ü",
        ),
    }


class RecordCodecTests(unittest.TestCase):
    def test_encoding_uses_stable_field_names(self) -> None:
        payload = json.loads(encode_table(_sample_table()))
        self.assertEqual(payload["format_version"], 1)
        self.assertEqual(
            set(payload["records"]["survey"]), {"last_executed_at", "last_executed_version"}
        )

    def test_decode_reverses_encode(self) -> None:
        table = _sample_table()
        result = decode_table(encode_table(table))
        self.assertTrue(result.ok)
        self.assertEqual(result.table, table)

    def test_encode_is_stable_across_round_trips(self) -> None:
        blob = encode_table(_sample_table())
        self.assertEqual(encode_table(decode_table(blob).unwrap()), blob)

    def test_naive_timestamps_are_read_as_utc(self) -> None:
        blob = b'{"records": {"k": {"last_executed_at": "2024-01-01T00:00:00", "last_executed_version": "1"}}}'
        record = decode_table(blob).unwrap()["k"]
        self.assertEqual(record.last_executed_at, datetime(2024, 1, 1, tzinfo=UTC))

    def test_malformed_blobs_report_failure(self) -> None:
        for blob in (
            b"not-json",
            b"\xff\xfe\x00",
            b'{"records": {"k": {"last_executed_version": "1"}}}',
            b'{"format_version": 99, "records": {}}',
            b'{"records": [], "extra": 1}',
        ):
            with self.subTest(blob=blob):
                result = decode_table(blob)
                self.assertFalse(result.ok)
                self.assertEqual(result.table, {})
                self.assertTrue(result.error)
                with self.assertRaises(MalformedStoredDataError):
                    result.unwrap()


class RecordStoreTests(unittest.TestCase):
    def test_load_without_blob_returns_empty_table(self) -> None:
        store = RecordStore(InMemoryKeyValueBackend())
        self.assertEqual(store.load(), {})

    def test_save_then_load_repeatedly(self) -> None:
        backend = InMemoryKeyValueBackend()
        store = RecordStore(backend)
        table = _sample_table()
        store.save(table)
        for _ in range(3):
            store.save(store.load())
        self.assertEqual(store.load(), table)
        self.assertIn(DEFAULT_STORAGE_KEY, backend)

    def test_malformed_blob_loads_empty_and_warns(self) -> None:
        backend = InMemoryKeyValueBackend({DEFAULT_STORAGE_KEY: b"\x00garbage"})
        store = RecordStore(backend)
        with self.assertLogs("execution_gate.record_store", level="WARNING") as logs:
            self.assertEqual(store.load(), {})
        self.assertIn("RECORDS LOAD MALFORMED", logs.output[0])

    def test_clear_removes_blob(self) -> None:
        backend = InMemoryKeyValueBackend()
        store = RecordStore(backend)
        store.save(_sample_table())
        store.clear()
        self.assertIsNone(backend.get(DEFAULT_STORAGE_KEY))
        self.assertEqual(store.load(), {})

    def test_custom_storage_key_is_isolated(self) -> None:
        backend = InMemoryKeyValueBackend()
        RecordStore(backend, storage_key="app-a").save(_sample_table())
        self.assertEqual(RecordStore(backend, storage_key="app-b").load(), {})

    def test_sqlite_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            table = _sample_table()
            RecordStore(SQLiteKeyValueBackend(f"{temp_dir}/gate.db")).save(table)
            reopened = RecordStore(SQLiteKeyValueBackend(f"{temp_dir}/gate.db"))
            self.assertEqual(reopened.load(), table)


if __name__ == "__main__":
    unittest.main()
