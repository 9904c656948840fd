"""Admin-issued, single-use, time-boxed registration codes."""

import logging
import secrets
import string
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import Enum

from scriptvault.core.errors import forbidden, validation_error
from scriptvault.core.records import RecordStore
from scriptvault.models.access_code import ACCESS_CODES_PREFIX, AccessCode, access_code_key
from scriptvault.services.sessions import Session

logger = logging.getLogger(__name__)

CODE_PREFIX = "RAC-"
CODE_LENGTH = 10
CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_MIN_VALID_DAYS = 1
CODE_MAX_VALID_DAYS = 365


class RedeemResult(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"
    EXPIRED = "expired"


def generate_code() -> str:
    """RAC- followed by 10 uppercase letters/digits."""
    return CODE_PREFIX + "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def is_code_format(code: str) -> bool:
    body = code[len(CODE_PREFIX):]
    return (
        code.startswith(CODE_PREFIX)
        and len(body) == CODE_LENGTH
        and all(ch in CODE_ALPHABET for ch in body)
    )


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AccessCodeIssuer:
    def __init__(
        self,
        records: RecordStore,
        default_valid_days: int = 30,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.records = records
        self.default_valid_days = default_valid_days
        self.clock = clock

    async def generate(self, issuer: Session, valid_days: int | None = None) -> AccessCode:
        """Create and persist a fresh code. Admin sessions only."""
        if issuer.role != "admin":
            raise forbidden()
        days = self.default_valid_days if valid_days is None else valid_days
        if not (CODE_MIN_VALID_DAYS <= days <= CODE_MAX_VALID_DAYS):
            raise validation_error(
                f"valid_days must be between {CODE_MIN_VALID_DAYS} and {CODE_MAX_VALID_DAYS}."
            )
        now = self.clock()
        access_code = AccessCode(
            code=generate_code(),
            created_at=now,
            expires_at=now + timedelta(days=days),
            valid_days=days,
            created_by=issuer.username,
        )
        await self.records.write(access_code_key(access_code.code), access_code)
        logger.info(
            "Access code generated",
            extra={"created_by": issuer.username, "valid_days": days},
        )
        return access_code

    async def inspect(self, code: str) -> tuple[RedeemResult, AccessCode | None]:
        """Read-only check of whether code could be redeemed right now."""
        code = code.strip().upper()
        if not is_code_format(code):
            return RedeemResult.NOT_FOUND, None
        record = await self.records.read_first(access_code_key(code), AccessCode)
        if record is None:
            return RedeemResult.NOT_FOUND, None
        if record.used:
            return RedeemResult.ALREADY_USED, record
        if record.is_expired(self.clock()):
            return RedeemResult.EXPIRED, record
        return RedeemResult.OK, record

    async def consume(self, record: AccessCode, username: str) -> AccessCode:
        """Mark a code used by username and write it back."""
        used = record.model_copy(
            update={"used": True, "used_by": username, "used_by_at": self.clock()}
        )
        await self.records.write(access_code_key(record.code), used)
        logger.info("Access code redeemed", extra={"used_by": username})
        return used

    async def release(self, record: AccessCode) -> None:
        """Write back the unused record taken before a consume that must be undone."""
        await self.records.write(access_code_key(record.code), record)
        logger.info("Access code released", extra={"code": record.code})

    async def redeem(self, code: str, username: str) -> RedeemResult:
        """
        Inspect then consume.

        Read and write-back are separate store calls: two redemptions racing on
        the same code can both read used=false and both succeed. That rare
        double registration is tolerated; the record ends up naming one of them.
        """
        result, record = await self.inspect(code)
        if result is not RedeemResult.OK or record is None:
            return result
        await self.consume(record, username)
        return RedeemResult.OK

    async def list(self, issuer: Session) -> list[AccessCode]:
        """All codes, newest first. Admin sessions only."""
        if issuer.role != "admin":
            raise forbidden()
        codes = await self.records.read_all(ACCESS_CODES_PREFIX, AccessCode)
        return sorted(codes, key=lambda c: c.created_at, reverse=True)
