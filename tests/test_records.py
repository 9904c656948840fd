"""Unit tests for scriptvault.core.records: JSON records, timeouts and the single retry."""

import asyncio
import unittest
from datetime import UTC, datetime

from scriptvault.core.errors import ErrorKind, ServiceError
from scriptvault.core.object_store import BlobEntry, MemoryObjectStore, ObjectStoreError
from scriptvault.core.records import RecordStore
from scriptvault.models.user import User


def _user(username: str = "alice") -> User:
    return User(
        username=username,
        password_hash="00:11",
        role="user",
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
    )


class FlakyStore(MemoryObjectStore):
    """Fails the first `failures` list calls, then behaves normally."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.list_calls = 0

    async def list(self, prefix: str) -> list[BlobEntry]:
        self.list_calls += 1
        if self.list_calls <= self.failures:
            raise ObjectStoreError("Blob list returned 502", 502)
        return await super().list(prefix)


class HangingStore(MemoryObjectStore):
    def __init__(self) -> None:
        super().__init__()
        self.list_calls = 0

    async def list(self, prefix: str) -> list[BlobEntry]:
        self.list_calls += 1
        await asyncio.sleep(10)
        return []


class TestRecordRoundTrip(unittest.TestCase):
    """write / exists / read_first / read_all against the memory store."""

    def test_write_then_read_first(self) -> None:
        records = RecordStore(MemoryObjectStore())

        async def run() -> None:
            self.assertFalse(await records.exists("users/alice.json"))
            url = await records.write("users/alice.json", _user())
            self.assertTrue(url.endswith("users/alice.json"))
            self.assertTrue(await records.exists("users/alice.json"))
            found = await records.read_first("users/alice.json", User)
            self.assertIsNotNone(found)
            self.assertEqual(found.username, "alice")

        asyncio.run(run())

    def test_read_first_missing_returns_none(self) -> None:
        records = RecordStore(MemoryObjectStore())
        self.assertIsNone(asyncio.run(records.read_first("users/nobody.json", User)))

    def test_write_overwrites_last_writer_wins(self) -> None:
        records = RecordStore(MemoryObjectStore())

        async def run() -> None:
            await records.write("users/alice.json", _user())
            await records.write("users/alice.json", _user().model_copy(update={"role": "admin"}))
            found = await records.read_first("users/alice.json", User)
            self.assertEqual(found.role, "admin")
            self.assertEqual(len(await records.list_entries("users/")), 1)

        asyncio.run(run())

    def test_read_all_skips_unreadable_records(self) -> None:
        store = MemoryObjectStore()
        records = RecordStore(store)

        async def run() -> None:
            await records.write("users/alice.json", _user("alice"))
            await records.write("users/bob.json", _user("bob"))
            await store.put("users/broken.json", b"{not json")
            users = await records.read_all("users/", User)
            self.assertEqual(sorted(u.username for u in users), ["alice", "bob"])

        asyncio.run(run())

    def test_read_first_corrupt_record_is_internal_error(self) -> None:
        store = MemoryObjectStore()
        records = RecordStore(store)

        async def run() -> None:
            await store.put("users/broken.json", b"[]")
            with self.assertRaises(ServiceError) as ctx:
                await records.read_first("users/broken.json", User)
            self.assertEqual(ctx.exception.kind, ErrorKind.INTERNAL)

        asyncio.run(run())


class TestRetryAndTimeout(unittest.TestCase):
    """Store faults are retried once, then surface as StorageUnavailable."""

    def test_single_failure_is_retried(self) -> None:
        store = FlakyStore(failures=1)
        records = RecordStore(store, retry_delay_sec=0)
        self.assertFalse(asyncio.run(records.exists("users/alice.json")))
        self.assertEqual(store.list_calls, 2)

    def test_two_failures_raise_storage_unavailable(self) -> None:
        store = FlakyStore(failures=5)
        records = RecordStore(store, retry_delay_sec=0)
        with self.assertRaises(ServiceError) as ctx:
            asyncio.run(records.exists("users/alice.json"))
        self.assertEqual(ctx.exception.kind, ErrorKind.STORAGE_UNAVAILABLE)
        self.assertIsInstance(ctx.exception.cause, ObjectStoreError)
        self.assertEqual(store.list_calls, 2)

    def test_hung_store_times_out(self) -> None:
        store = HangingStore()
        records = RecordStore(store, timeout_sec=0.01, retry_delay_sec=0)
        with self.assertRaises(ServiceError) as ctx:
            asyncio.run(records.exists("users/alice.json"))
        self.assertEqual(ctx.exception.kind, ErrorKind.STORAGE_UNAVAILABLE)
        self.assertIn("timed out", ctx.exception.message)
        self.assertEqual(store.list_calls, 2)


if __name__ == "__main__":
    unittest.main()
