"""HTTP client for a Vercel Blob compatible object store (put / list / get, no delete)."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from scriptvault.core.object_store import BlobEntry, ObjectStoreError

logger = logging.getLogger(__name__)

BLOB_API_VERSION = "7"
LIST_PAGE_LIMIT = 1000


def _parse_uploaded_at(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.fromtimestamp(0, UTC)


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
        err = body.get("error") or {}
        detail = err.get("message") if isinstance(err, dict) else str(err)
        return detail or json.dumps(body)[:300]
    except Exception:
        return resp.text[:300] if resp.text else "Unknown error"


class BlobStoreClient:
    """
    Async client over the blob REST API.

    Objects are written without a random suffix and with overwrite allowed,
    so a pathname always addresses the latest write (last writer wins).
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    def _headers(self) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self._token}",
            "x-api-version": BLOB_API_VERSION,
        }

    async def put(
        self, pathname: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> str:
        url = f"{self.base_url}/{quote(pathname, safe='/')}"
        headers = self._headers()
        headers.update(
            {
                "x-add-random-suffix": "0",
                "x-allow-overwrite": "1",
                "x-content-type": content_type,
            }
        )
        try:
            resp = await self._client.put(url, content=data, headers=headers)
        except httpx.HTTPError as e:
            raise ObjectStoreError(f"Blob put failed: {e.__class__.__name__}") from e
        if resp.status_code >= 400:
            raise ObjectStoreError(
                f"Blob put returned {resp.status_code}: {_error_detail(resp)}",
                resp.status_code,
            )
        try:
            body = resp.json()
        except ValueError as e:
            raise ObjectStoreError("Blob put response is not valid JSON.") from e
        blob_url = body.get("url")
        if not blob_url:
            raise ObjectStoreError("Blob put response missing url.")
        return blob_url

    async def list(self, prefix: str) -> list[BlobEntry]:
        entries: list[BlobEntry] = []
        cursor: str | None = None
        while True:
            params: dict[str, str | int] = {"prefix": prefix, "limit": LIST_PAGE_LIMIT}
            if cursor:
                params["cursor"] = cursor
            try:
                resp = await self._client.get(
                    self.base_url, params=params, headers=self._headers()
                )
            except httpx.HTTPError as e:
                raise ObjectStoreError(f"Blob list failed: {e.__class__.__name__}") from e
            if resp.status_code >= 400:
                raise ObjectStoreError(
                    f"Blob list returned {resp.status_code}: {_error_detail(resp)}",
                    resp.status_code,
                )
            try:
                body = resp.json()
            except ValueError as e:
                raise ObjectStoreError("Blob list response is not valid JSON.") from e
            for blob in body.get("blobs", []):
                entries.append(
                    BlobEntry(
                        pathname=blob.get("pathname", ""),
                        url=blob.get("url", ""),
                        size=int(blob.get("size") or 0),
                        uploaded_at=_parse_uploaded_at(blob.get("uploadedAt")),
                    )
                )
            cursor = body.get("cursor")
            if not body.get("hasMore") or not cursor:
                break
        logger.debug("Blob list completed", extra={"prefix": prefix, "count": len(entries)})
        return entries

    async def get(self, url: str) -> bytes:
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as e:
            raise ObjectStoreError(f"Blob get failed: {e.__class__.__name__}") from e
        if resp.status_code >= 400:
            raise ObjectStoreError(
                f"Blob get returned {resp.status_code}", resp.status_code
            )
        return resp.content

    async def aclose(self) -> None:
        await self._client.aclose()
