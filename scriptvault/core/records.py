"""
Record-oriented access to the object store.

Wraps the raw put/list/get primitives with JSON (de)serialization, a per-call
timeout and a single bounded retry. There is no compare-and-swap underneath:
`write` is an unconditional overwrite and two writers to the same key race
with the last one winning, undetected. Callers that check-then-write must
document the window.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from scriptvault.core.errors import ErrorKind, ServiceError, storage_unavailable
from scriptvault.core.object_store import BlobEntry, ObjectStore, ObjectStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

JSON_CONTENT_TYPE = "application/json"

# One initial attempt plus one retry.
MAX_ATTEMPTS = 2


class RecordStore:
    """JSON records addressed by pathname prefix on top of an ObjectStore."""

    def __init__(
        self,
        store: ObjectStore,
        timeout_sec: float = 10.0,
        retry_delay_sec: float = 0.25,
    ) -> None:
        self.store = store
        self.timeout_sec = timeout_sec
        self.retry_delay_sec = retry_delay_sec

    async def _call(self, op: str, target: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run one store call with timeout; retry once, then raise StorageUnavailable."""
        last_error: Exception | None = None
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                return await asyncio.wait_for(fn(), timeout=self.timeout_sec)
            except (TimeoutError, ObjectStoreError) as e:
                last_error = e
                logger.warning(
                    "Object store call failed",
                    extra={
                        "op": op,
                        "target": target,
                        "attempt": attempt,
                        "error": type(e).__name__,
                    },
                )
                if attempt < MAX_ATTEMPTS and self.retry_delay_sec:
                    await asyncio.sleep(self.retry_delay_sec)
        if isinstance(last_error, TimeoutError):
            message = "Storage timed out. Try again shortly."
        else:
            message = "Storage is unavailable. Try again shortly."
        raise storage_unavailable(message, cause=last_error)

    async def list_entries(self, prefix: str) -> list[BlobEntry]:
        return await self._call("list", prefix, lambda: self.store.list(prefix))

    async def get_bytes(self, url: str) -> bytes:
        return await self._call("get", url, lambda: self.store.get(url))

    async def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        return await self._call("put", key, lambda: self.store.put(key, data, content_type))

    async def exists(self, prefix: str) -> bool:
        return bool(await self.list_entries(prefix))

    async def read_first(self, prefix: str, model: type[M]) -> M | None:
        """Fetch and parse the first record under prefix; None if there is none."""
        entries = await self.list_entries(prefix)
        if not entries:
            return None
        raw = await self.get_bytes(entries[0].url)
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            logger.error(
                "Stored record is unreadable",
                extra={"object_key": entries[0].pathname, "model": model.__name__},
            )
            raise ServiceError(ErrorKind.INTERNAL, "Stored record is corrupt.", cause=e) from e

    async def read_all(self, prefix: str, model: type[M]) -> list[M]:
        """Fetch every record under prefix, skipping ones that fail to parse."""
        records: list[M] = []
        for entry in await self.list_entries(prefix):
            raw = await self.get_bytes(entry.url)
            try:
                records.append(model.model_validate_json(raw))
            except ValidationError:
                logger.warning(
                    "Skipping unreadable record",
                    extra={"object_key": entry.pathname, "model": model.__name__},
                )
        return records

    async def write(self, key: str, record: BaseModel) -> str:
        """Unconditional overwrite of key; returns the stored object's URL."""
        data = record.model_dump_json().encode("utf-8")
        return await self.put_bytes(key, data, JSON_CONTENT_TYPE)
