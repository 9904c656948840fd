"""Ensure the default admin account exists, seeded from a configuration record."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from scriptvault.core.errors import ServiceError
from scriptvault.core.records import RecordStore
from scriptvault.core.security import hash_password
from scriptvault.models.user import ADMIN_SEED_KEY, AdminSeed, User, user_key

logger = logging.getLogger(__name__)


class BootstrapResult(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AdminBootstrap:
    """
    Idempotent (best-effort) creation of the admin user.

    The seed record at config/admin.json is the single source of truth for the
    admin's initial password. It is written once, with the password hashed at
    that moment, so the plain password from settings never reaches the store.
    """

    def __init__(
        self,
        records: RecordStore,
        admin_username: str,
        admin_password: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.records = records
        self.admin_username = admin_username
        self._admin_password = admin_password
        self.clock = clock

    async def ensure_admin(self) -> BootstrapResult:
        """
        Create the admin user if missing; never raises.

        Common path is a single exists() with no write. Concurrent cold starts
        can each see the admin missing and write overlapping records; those
        writes derive from the same seed, so the outcome is equivalent. A seed
        changed concurrently with this read is not protected against.
        """
        try:
            if await self.records.exists(user_key(self.admin_username)):
                return BootstrapResult.EXISTS

            seed = await self._ensure_seed()
            user = User(
                username=seed.username,
                password_hash=seed.password_hash,
                role=seed.role,
                created_at=self.clock(),
                created_by=None,
                initialized_from_config=True,
            )
            await self.records.write(user_key(seed.username), user)
        except ServiceError as e:
            logger.error(
                "Admin bootstrap failed",
                extra={"username": self.admin_username, "reason": e.message},
            )
            return BootstrapResult.FAILED

        logger.info("Admin user initialized from config", extra={"username": seed.username})
        return BootstrapResult.CREATED

    async def _ensure_seed(self) -> AdminSeed:
        # Same race as above: two writers may both create the seed. Each hashes
        # the same settings password, so either record verifies it.
        seed = await self.records.read_first(ADMIN_SEED_KEY, AdminSeed)
        if seed is not None:
            return seed
        seed = AdminSeed(
            username=self.admin_username,
            password_hash=hash_password(self._admin_password),
            role="admin",
            created_at=self.clock(),
        )
        await self.records.write(ADMIN_SEED_KEY, seed)
        logger.info("Admin seed record written", extra={"key": ADMIN_SEED_KEY})
        return seed
