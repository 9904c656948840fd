"""Domain services: credentials, sessions, access codes, scripts and the action dispatcher."""

from scriptvault.services.access_codes import AccessCodeIssuer, RedeemResult
from scriptvault.services.bootstrap import AdminBootstrap, BootstrapResult
from scriptvault.services.credentials import CredentialStore
from scriptvault.services.dispatcher import ActionDispatcher, build_dispatcher
from scriptvault.services.scripts import ScriptRepository
from scriptvault.services.sessions import Session, SessionManager, SessionStatus

__all__ = [
    "AccessCodeIssuer",
    "ActionDispatcher",
    "AdminBootstrap",
    "BootstrapResult",
    "CredentialStore",
    "RedeemResult",
    "ScriptRepository",
    "Session",
    "SessionManager",
    "SessionStatus",
    "build_dispatcher",
]
