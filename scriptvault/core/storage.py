"""Object store construction from settings."""

from typing import TYPE_CHECKING

from scriptvault.core.blob_store import BlobStoreClient
from scriptvault.core.object_store import MemoryObjectStore, ObjectStore
from scriptvault.core.records import RecordStore

if TYPE_CHECKING:
    from scriptvault.core.config import Settings


def build_object_store(settings: "Settings") -> ObjectStore:
    """Return the configured backend. Raises ValueError if blob storage lacks a token."""
    if settings.STORAGE_BACKEND == "memory":
        return MemoryObjectStore()
    token = (
        settings.BLOB_READ_WRITE_TOKEN.get_secret_value()
        if settings.BLOB_READ_WRITE_TOKEN is not None
        else ""
    )
    if not token.strip():
        raise ValueError("BLOB_READ_WRITE_TOKEN must be set when STORAGE_BACKEND=blob")
    return BlobStoreClient(
        base_url=settings.BLOB_API_URL,
        token=token.strip(),
        timeout=settings.STORAGE_REQUEST_TIMEOUT_SEC,
    )


def build_record_store(settings: "Settings", store: ObjectStore) -> RecordStore:
    return RecordStore(
        store,
        timeout_sec=settings.STORAGE_REQUEST_TIMEOUT_SEC,
        retry_delay_sec=settings.STORAGE_RETRY_DELAY_SEC,
    )
