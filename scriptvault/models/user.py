"""Stored user and admin-seed records."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["admin", "user"]

USERS_PREFIX = "users/"
ADMIN_SEED_KEY = "config/admin.json"


def user_key(username: str) -> str:
    """Object key for a user record; the suffix keeps 'bob' from matching 'bobby'."""
    return f"{USERS_PREFIX}{username}.json"


class User(BaseModel):
    """
    User account stored at users/{username}.json.

    role: 'admin' or 'user'
    """

    username: str
    password_hash: str
    role: Role = "user"
    created_at: datetime
    created_by: str | None = None
    initialized_from_config: bool = False


class AdminSeed(BaseModel):
    """Configuration record for the default admin. Holds a hash, never the plain password."""

    username: str
    password_hash: str
    role: Role = "admin"
    created_at: datetime = Field(description="When the seed was first persisted")
