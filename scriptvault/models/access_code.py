"""Stored access-code record."""

from datetime import datetime

from pydantic import BaseModel

ACCESS_CODES_PREFIX = "access_codes/"


def access_code_key(code: str) -> str:
    return f"{ACCESS_CODES_PREFIX}{code}.json"


class AccessCode(BaseModel):
    """Single-use, time-boxed registration voucher issued by an admin."""

    code: str
    created_at: datetime
    expires_at: datetime
    valid_days: int
    used: bool = False
    used_by: str | None = None
    used_by_at: datetime | None = None
    created_by: str

    @property
    def status(self) -> str:
        return "Used" if self.used else "Available"

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
