"""
Object store contract and an in-process implementation.

The backing store only offers put/list/get: no delete, no transactions and no
compare-and-swap between a list and a put. Higher layers must not assume more.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


class ObjectStoreError(Exception):
    """Raised by store clients when the store is unreachable or rejects a call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class BlobEntry:
    """One object returned by a prefix listing."""

    pathname: str
    url: str
    size: int
    uploaded_at: datetime


class ObjectStore(Protocol):
    async def put(
        self, pathname: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> str:
        """Write (or overwrite) an object; returns its URL."""
        ...

    async def list(self, prefix: str) -> list[BlobEntry]:
        """Return every object whose pathname starts with prefix."""
        ...

    async def get(self, url: str) -> bytes:
        """Fetch the bytes of an object by URL."""
        ...

    async def aclose(self) -> None:
        ...


class MemoryObjectStore:
    """
    Dict-backed store with the same contract as the remote one.

    Every call yields to the event loop first, so concurrent check-then-write
    sequences interleave the way they would against remote I/O.
    """

    URL_SCHEME = "memory://"

    def __init__(self) -> None:
        self._objects: dict[str, tuple[bytes, datetime]] = {}
        self.put_count = 0

    async def put(
        self, pathname: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> str:
        await asyncio.sleep(0)
        self._objects[pathname] = (bytes(data), datetime.now(UTC))
        self.put_count += 1
        return f"{self.URL_SCHEME}{pathname}"

    async def list(self, prefix: str) -> list[BlobEntry]:
        await asyncio.sleep(0)
        return [
            BlobEntry(
                pathname=pathname,
                url=f"{self.URL_SCHEME}{pathname}",
                size=len(data),
                uploaded_at=uploaded_at,
            )
            for pathname, (data, uploaded_at) in sorted(self._objects.items())
            if pathname.startswith(prefix)
        ]

    async def get(self, url: str) -> bytes:
        await asyncio.sleep(0)
        if not url.startswith(self.URL_SCHEME):
            raise ObjectStoreError(f"Unsupported URL for memory store: {url}")
        item = self._objects.get(url[len(self.URL_SCHEME):])
        if item is None:
            raise ObjectStoreError("Object not found", status_code=404)
        return item[0]

    async def aclose(self) -> None:
        return None
