"""
Script repository: Lua bodies under scripts/ with metadata sidecars under metadata/.

Fetching is deliberately unauthenticated: deployed clients have no session and
pull scripts by auth_key alone, so an auth_key is a secret capability.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from scriptvault.core.errors import ServiceError, not_found, validation_error
from scriptvault.core.records import RecordStore
from scriptvault.models.script import (
    SCRIPTS_PREFIX,
    ScriptMetadata,
    auth_key_from_script_key,
    make_auth_key,
    metadata_key,
    script_key,
)
from scriptvault.services.sessions import Session

logger = logging.getLogger(__name__)

SCRIPT_CONTENT_TYPE = "text/plain; charset=utf-8"
MAX_SCRIPT_BYTES = 1024 * 1024  # 1 MB
MAX_ID_LENGTH = 128


@dataclass(frozen=True)
class UploadResult:
    auth_key: str
    blob_url: str
    metadata_written: bool


@dataclass(frozen=True)
class ScriptListing:
    """
    One stored script. metadata is None when the sidecar is missing or
    unreadable; that is an expected state, not an error.
    """

    auth_key: str
    size: int
    uploaded_at: datetime
    metadata: ScriptMetadata | None


def _redact(auth_key: str) -> str:
    return f"{auth_key[:6]}..." if len(auth_key) > 6 else "***"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _check_id(field: str, value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise validation_error(f"{field} is required.")
    if len(value) > MAX_ID_LENGTH or "/" in value:
        raise validation_error(f"{field} must be at most {MAX_ID_LENGTH} characters and contain no '/'.")
    return value


class ScriptRepository:
    def __init__(
        self,
        records: RecordStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.records = records
        self.clock = clock

    async def upload(
        self,
        session: Session,
        script_id: str,
        api_key: str,
        body: str,
        name: str | None = None,
        description: str | None = None,
    ) -> UploadResult:
        """
        Write the body, then its metadata sidecar.

        A failed sidecar write does not undo the body: the upload reports
        success with metadata_written=False.
        """
        script_id = _check_id("script_id", script_id)
        api_key = _check_id("api_key", api_key)
        if not body or not body.strip():
            raise validation_error("script_code is required.")
        data = body.encode("utf-8")
        if len(data) > MAX_SCRIPT_BYTES:
            raise validation_error(
                f"script_code must not exceed {MAX_SCRIPT_BYTES // 1024} KB."
            )

        auth_key = make_auth_key(script_id, api_key)
        blob_url = await self.records.put_bytes(script_key(auth_key), data, SCRIPT_CONTENT_TYPE)

        metadata = ScriptMetadata(
            auth_key=auth_key,
            name=(name or "").strip() or script_id,
            description=(description or "").strip(),
            size=len(data),
            created_at=self.clock(),
            uploaded_by=session.username,
        )
        metadata_written = True
        try:
            await self.records.write(metadata_key(auth_key), metadata)
        except ServiceError as e:
            metadata_written = False
            logger.warning(
                "Script metadata write failed; body was stored",
                extra={"auth_key": _redact(auth_key), "reason": e.message},
            )

        logger.info(
            "Script uploaded",
            extra={
                "auth_key": _redact(auth_key),
                "size": len(data),
                "uploaded_by": session.username,
            },
        )
        return UploadResult(auth_key=auth_key, blob_url=blob_url, metadata_written=metadata_written)

    async def fetch(self, auth_key: str) -> str:
        """Return the body stored at exactly this auth_key; NotFound otherwise."""
        auth_key = (auth_key or "").strip()
        if not auth_key or "/" in auth_key:
            raise not_found("Invalid authentication key")
        pathname = script_key(auth_key)
        entries = await self.records.list_entries(pathname)
        match = next((e for e in entries if e.pathname == pathname), None)
        if match is None:
            logger.info("Script fetch miss", extra={"auth_key": _redact(auth_key)})
            raise not_found("Invalid authentication key")
        data = await self.records.get_bytes(match.url)
        # Non-UTF-8 bytes written outside upload are replaced.
        return data.decode("utf-8", errors="replace")

    async def list(self, session: Session) -> list[ScriptListing]:
        """All stored scripts with their metadata joined when present."""
        listings: list[ScriptListing] = []
        for entry in await self.records.list_entries(SCRIPTS_PREFIX):
            auth_key = auth_key_from_script_key(entry.pathname)
            listings.append(
                ScriptListing(
                    auth_key=auth_key,
                    size=entry.size,
                    uploaded_at=entry.uploaded_at,
                    metadata=await self._metadata_for(auth_key),
                )
            )
        logger.debug(
            "Scripts listed", extra={"count": len(listings), "username": session.username}
        )
        return listings

    async def _metadata_for(self, auth_key: str) -> ScriptMetadata | None:
        try:
            return await self.records.read_first(metadata_key(auth_key), ScriptMetadata)
        except ServiceError as e:
            logger.warning(
                "Script metadata unavailable",
                extra={"auth_key": _redact(auth_key), "reason": e.message},
            )
            return None
