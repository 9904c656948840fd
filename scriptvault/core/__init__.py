"""Core app configuration, errors, hashing and storage."""

from scriptvault.core.config import get_settings, settings
from scriptvault.core.errors import ErrorKind, ServiceError
from scriptvault.core.records import RecordStore

__all__ = ["ErrorKind", "RecordStore", "ServiceError", "get_settings", "settings"]
