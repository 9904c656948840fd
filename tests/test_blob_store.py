"""Unit tests for scriptvault.core.blob_store: request shapes and error mapping via httpx.MockTransport."""

import asyncio
import unittest

import httpx

from scriptvault.core.blob_store import BlobStoreClient
from scriptvault.core.object_store import ObjectStoreError

BASE_URL = "https://blob.example.test"


def _client(handler) -> BlobStoreClient:
    return BlobStoreClient(
        base_url=BASE_URL,
        token="tok_123",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestPut(unittest.TestCase):
    """put sends bearer auth, no random suffix, overwrite allowed; returns the blob URL."""

    def test_put_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "url": "https://store.public.blob.example.test/scripts/a_b_fetch.lua",
                    "pathname": "scripts/a_b_fetch.lua",
                },
            )

        async def run() -> str:
            client = _client(handler)
            try:
                return await client.put("scripts/a_b_fetch.lua", b"print(1)", "text/plain")
            finally:
                await client.aclose()

        url = asyncio.run(run())
        self.assertEqual(url, "https://store.public.blob.example.test/scripts/a_b_fetch.lua")
        self.assertEqual(len(seen), 1)
        req = seen[0]
        self.assertEqual(req.method, "PUT")
        self.assertEqual(req.url.path, "/scripts/a_b_fetch.lua")
        self.assertEqual(req.headers["authorization"], "Bearer tok_123")
        self.assertEqual(req.headers["x-add-random-suffix"], "0")
        self.assertEqual(req.headers["x-allow-overwrite"], "1")
        self.assertEqual(req.content, b"print(1)")

    def test_put_error_status_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"error": {"message": "Access denied"}})

        async def run() -> None:
            client = _client(handler)
            try:
                await client.put("users/a.json", b"{}")
            finally:
                await client.aclose()

        with self.assertRaises(ObjectStoreError) as ctx:
            asyncio.run(run())
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertIn("Access denied", ctx.exception.message)


class TestList(unittest.TestCase):
    """list follows the cursor until hasMore is false."""

    def test_list_paginates(self) -> None:
        seen: list[httpx.Request] = []
        pages = [
            {
                "blobs": [
                    {
                        "pathname": "users/a.json",
                        "url": "https://s/users/a.json",
                        "size": 10,
                        "uploadedAt": "2025-02-01T10:00:00.000Z",
                    }
                ],
                "cursor": "c1",
                "hasMore": True,
            },
            {
                "blobs": [
                    {
                        "pathname": "users/b.json",
                        "url": "https://s/users/b.json",
                        "size": 12,
                        "uploadedAt": "2025-02-02T10:00:00.000Z",
                    }
                ],
                "hasMore": False,
            },
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=pages[len(seen) - 1])

        async def run():
            client = _client(handler)
            try:
                return await client.list("users/")
            finally:
                await client.aclose()

        entries = asyncio.run(run())
        self.assertEqual([e.pathname for e in entries], ["users/a.json", "users/b.json"])
        self.assertEqual(entries[0].size, 10)
        self.assertEqual(entries[0].uploaded_at.year, 2025)
        self.assertEqual(len(seen), 2)
        self.assertEqual(seen[0].url.params["prefix"], "users/")
        self.assertNotIn("cursor", seen[0].url.params)
        self.assertEqual(seen[1].url.params["cursor"], "c1")

    def test_connection_error_raises_object_store_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def run() -> None:
            client = _client(handler)
            try:
                await client.list("users/")
            finally:
                await client.aclose()

        with self.assertRaises(ObjectStoreError) as ctx:
            asyncio.run(run())
        self.assertIn("ConnectError", ctx.exception.message)


class TestGet(unittest.TestCase):
    def test_get_returns_bytes(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"print('hi')")

        async def run() -> bytes:
            client = _client(handler)
            try:
                return await client.get("https://s/scripts/x.lua")
            finally:
                await client.aclose()

        self.assertEqual(asyncio.run(run()), b"print('hi')")

    def test_get_404_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="Not Found")

        async def run() -> None:
            client = _client(handler)
            try:
                await client.get("https://s/scripts/x.lua")
            finally:
                await client.aclose()

        with self.assertRaises(ObjectStoreError) as ctx:
            asyncio.run(run())
        self.assertEqual(ctx.exception.status_code, 404)


if __name__ == "__main__":
    unittest.main()
