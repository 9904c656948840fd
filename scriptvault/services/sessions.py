"""
In-process session manager: opaque tokens mapped to (username, role, created_at).

Sessions are volatile. A process restart invalidates every outstanding token and
sessions are not shared between instances.
"""

import asyncio
import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from scriptvault.core.errors import forbidden, unauthorized

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
DEFAULT_TTL = timedelta(hours=24)


class SessionStatus(str, Enum):
    ACTIVE = "active"
    INVALID = "invalid"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Session:
    token: str
    username: str
    role: str
    created_at: datetime


@dataclass(frozen=True)
class SessionCheck:
    """Outcome of validate(); session is set only when status is ACTIVE."""

    status: SessionStatus
    session: Session | None = None

    @property
    def valid(self) -> bool:
        return self.status is SessionStatus.ACTIVE


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionManager:
    """
    Owns the token map. All reads and mutations, including the periodic sweep,
    go through one lock; no store I/O happens while it is held.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.ttl = ttl
        self.clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, username: str, role: str) -> str:
        token = secrets.token_hex(TOKEN_BYTES)
        session = Session(token=token, username=username, role=role, created_at=self.clock())
        with self._lock:
            self._sessions[token] = session
        logger.info("Session created", extra={"username": username, "role": role})
        return token

    def validate(self, token: str | None) -> SessionCheck:
        if not token:
            return SessionCheck(SessionStatus.INVALID)
        now = self.clock()
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return SessionCheck(SessionStatus.INVALID)
            if now - session.created_at > self.ttl:
                del self._sessions[token]
                return SessionCheck(SessionStatus.EXPIRED)
        return SessionCheck(SessionStatus.ACTIVE, session)

    def destroy(self, token: str | None) -> bool:
        if not token:
            return False
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is not None:
            logger.info("Session destroyed", extra={"username": session.username})
        return session is not None

    def require_session(self, token: str | None) -> Session:
        """Return the active session or raise Unauthorized."""
        check = self.validate(token)
        if check.session is None:
            if check.status is SessionStatus.EXPIRED:
                raise unauthorized("Session expired. Please log in again.")
            raise unauthorized("Invalid or expired session")
        return check.session

    def require_role(self, token: str | None, role: str) -> Session:
        """Return the active session if its role matches; Unauthorized or Forbidden otherwise."""
        session = self.require_session(token)
        if session.role != role:
            logger.warning(
                "Role check failed",
                extra={"username": session.username, "required_role": role},
            )
            raise forbidden("Admin access required" if role == "admin" else "Access denied")
        return session

    def sweep(self) -> int:
        """Evict every session older than the TTL; returns how many were removed."""
        cutoff = self.clock() - self.ttl
        with self._lock:
            expired = [t for t, s in self._sessions.items() if s.created_at < cutoff]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info("Session sweep evicted expired sessions", extra={"evicted": len(expired)})
        return len(expired)

    def active_count(self) -> int:
        """Sessions still inside their TTL; expired entries awaiting the sweep are not counted."""
        now = self.clock()
        with self._lock:
            return sum(1 for s in self._sessions.values() if now - s.created_at <= self.ttl)


async def run_session_sweeper(manager: SessionManager, interval_sec: float) -> None:
    """Sweep expired sessions every interval_sec until cancelled."""
    while True:
        await asyncio.sleep(interval_sec)
        try:
            manager.sweep()
        except Exception as e:
            logger.exception("Session sweep failed: %s", e)
