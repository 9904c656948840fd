"""Credential store: user records in the object store, keyed by username."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from scriptvault.core.errors import ErrorKind, ServiceError, conflict, validation_error
from scriptvault.core.records import RecordStore
from scriptvault.core.security import (
    hash_password,
    password_problem,
    username_problem,
    verify_password,
)
from scriptvault.models.user import USERS_PREFIX, Role, User, user_key

logger = logging.getLogger(__name__)

VALID_ROLES: tuple[Role, ...] = ("admin", "user")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CredentialStore:
    """Find, create and authenticate users. No update or delete is exposed."""

    def __init__(
        self,
        records: RecordStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.records = records
        self.clock = clock

    async def find_user(self, username: str) -> User | None:
        if username_problem(username):
            return None
        return await self.records.read_first(user_key(username), User)

    async def create_user(
        self,
        username: str,
        password: str,
        role: str = "user",
        created_by: str | None = None,
    ) -> User:
        """
        Validate, check for an existing record, then write a new user.

        The existence check and the write are not atomic: two callers creating
        the same username at the same moment can both pass the check, and the
        later write silently replaces the earlier one. Callers staggered by a
        single store round-trip see Conflict.
        """
        username = username.strip()
        problem = username_problem(username) or password_problem(password)
        if problem:
            raise validation_error(problem)
        if role not in VALID_ROLES:
            raise validation_error("Role must be 'admin' or 'user'.")

        if await self.records.exists(user_key(username)):
            raise conflict("Username already exists.")

        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            created_at=self.clock(),
            created_by=created_by,
        )
        await self.records.write(user_key(username), user)
        logger.info(
            "User created",
            extra={"username": username, "role": role, "created_by": created_by},
        )
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """Return the user for valid credentials; one generic Unauthorized otherwise."""
        user = await self.find_user(username.strip())
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Login failed", extra={"username": username})
            raise ServiceError(ErrorKind.UNAUTHORIZED, "Invalid username or password.")
        return user

    async def list_users(self) -> list[User]:
        users = await self.records.read_all(USERS_PREFIX, User)
        return sorted(users, key=lambda u: u.created_at)
