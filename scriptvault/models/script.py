"""Stored script body keys and metadata sidecar record."""

from datetime import datetime

from pydantic import BaseModel

SCRIPTS_PREFIX = "scripts/"
METADATA_PREFIX = "metadata/"
SCRIPT_SUFFIX = ".lua"
METADATA_SUFFIX = ".json"
AUTH_KEY_SUFFIX = "_fetch"


def make_auth_key(script_id: str, api_key: str) -> str:
    return f"{script_id}_{api_key}{AUTH_KEY_SUFFIX}"


def script_key(auth_key: str) -> str:
    return f"{SCRIPTS_PREFIX}{auth_key}{SCRIPT_SUFFIX}"


def metadata_key(auth_key: str) -> str:
    return f"{METADATA_PREFIX}{auth_key}{METADATA_SUFFIX}"


def auth_key_from_script_key(pathname: str) -> str:
    """Inverse of script_key for listing results."""
    name = pathname[len(SCRIPTS_PREFIX):] if pathname.startswith(SCRIPTS_PREFIX) else pathname
    if name.endswith(SCRIPT_SUFFIX):
        name = name[: -len(SCRIPT_SUFFIX)]
    return name


class ScriptMetadata(BaseModel):
    """Sidecar written right after the script body; may be missing."""

    auth_key: str
    name: str
    description: str = ""
    size: int
    created_at: datetime
    uploaded_by: str
