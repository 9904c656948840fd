"""
Action dispatcher: routes `{"action": ..., ...}` requests to the services.

Transport-agnostic. Returns a response model on success and raises
ServiceError on failure; the HTTP layer renders both.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from scriptvault.core.errors import (
    ErrorKind,
    ServiceError,
    conflict,
    not_found,
    validation_error,
)
from scriptvault.core.security import password_problem, username_problem
from scriptvault.core.storage import build_record_store
from scriptvault.models.access_code import AccessCode
from scriptvault.schemas.actions import (
    CreateUserRequest,
    FetchScriptRequest,
    GenerateAccessCodeRequest,
    LoginRequest,
    RegisterUserRequest,
    SessionPayload,
    UploadScriptRequest,
)
from scriptvault.schemas.health import HealthResponse
from scriptvault.schemas.responses import (
    AccessCodeItem,
    AccessCodeResponse,
    AccessCodesResponse,
    ActionResponse,
    CreateUserResponse,
    FetchScriptResponse,
    LoginResponse,
    RegisterUserResponse,
    ScriptItem,
    ScriptMetadataItem,
    ScriptsResponse,
    UploadScriptResponse,
    UserListItem,
    UsersResponse,
    VerifySessionResponse,
)
from scriptvault.services.access_codes import AccessCodeIssuer, RedeemResult
from scriptvault.services.bootstrap import AdminBootstrap
from scriptvault.services.credentials import CredentialStore
from scriptvault.services.scripts import ScriptRepository
from scriptvault.services.sessions import SessionManager

if TYPE_CHECKING:
    from scriptvault.core.config import Settings
    from scriptvault.core.object_store import ObjectStore

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)
Handler = Callable[[dict[str, Any]], Awaitable[BaseModel]]

ADMIN_ROLE = "admin"


def parse_payload(model: type[P], body: dict[str, Any]) -> P:
    """Validate an action payload; missing fields produce a field-level message."""
    try:
        return model.model_validate(body)
    except ValidationError as e:
        errors = e.errors()
        missing = [str(err["loc"][0]) for err in errors if err["type"] == "missing" and err["loc"]]
        if missing:
            raise validation_error(f"Missing required field(s): {', '.join(missing)}") from e
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "request"
        raise validation_error(f"Invalid {field}: {first.get('msg', 'invalid value')}") from e


class ActionDispatcher:
    def __init__(
        self,
        sessions: SessionManager,
        credentials: CredentialStore,
        access_codes: AccessCodeIssuer,
        scripts: ScriptRepository,
        bootstrap: AdminBootstrap,
        environment: str = "dev",
    ) -> None:
        self.sessions = sessions
        self.credentials = credentials
        self.access_codes = access_codes
        self.scripts = scripts
        self.bootstrap = bootstrap
        self.environment = environment
        self._handlers: dict[str, Handler] = {
            "login": self.login,
            "register_user": self.register_user,
            "generate_access_code": self.generate_access_code,
            "list_access_codes": self.list_access_codes,
            "create_user": self.create_user,
            "list_users": self.list_users,
            "verify_session": self.verify_session,
            "logout": self.logout,
            "upload_script": self.upload_script,
            "fetch_script": self.fetch_script,
            "list_scripts": self.list_scripts,
        }

    @property
    def actions(self) -> list[str]:
        return sorted(self._handlers)

    async def dispatch(self, body: dict[str, Any]) -> BaseModel:
        """Run the handler named by body['action']. Unexpected exceptions become Internal."""
        action = body.get("action") if isinstance(body, dict) else None
        handler = self._handlers.get(action) if isinstance(action, str) else None
        if handler is None:
            raise validation_error("Invalid action")
        start = time.perf_counter()
        try:
            result = await handler(body)
        except ServiceError as e:
            logger.info(
                "Action failed",
                extra={
                    "action": action,
                    "error_kind": e.kind.value,
                    "latency_seconds": time.perf_counter() - start,
                },
            )
            raise
        except Exception as e:
            logger.exception("Action raised unexpectedly", extra={"action": action})
            raise ServiceError(ErrorKind.INTERNAL, "Server error", cause=e) from e
        logger.debug(
            "Action completed",
            extra={"action": action, "latency_seconds": time.perf_counter() - start},
        )
        return result

    async def health(self) -> HealthResponse:
        result = await self.bootstrap.ensure_admin()
        return HealthResponse(
            environment=self.environment,
            active_sessions=self.sessions.active_count(),
            admin=result.value,
        )

    # -- authentication -------------------------------------------------

    async def login(self, body: dict[str, Any]) -> LoginResponse:
        req = parse_payload(LoginRequest, body)
        await self.bootstrap.ensure_admin()
        user = await self.credentials.authenticate(req.username, req.password)
        token = self.sessions.create(user.username, user.role)
        return LoginResponse(
            message="Login successful",
            session_token=token,
            role=user.role,
            username=user.username,
        )

    async def register_user(self, body: dict[str, Any]) -> RegisterUserResponse:
        """
        Check the code, mark it used, then create the user.

        Consuming first means a storage failure can never leave a new account
        next to a still-unused code. If the user write fails afterwards the
        code is released again; if that release fails too the code stays
        burned and an admin has to issue a new one. Concurrent redemptions of
        one code still race per the record layer.
        """
        req = parse_payload(RegisterUserRequest, body)
        username = req.username.strip()
        problem = username_problem(username) or password_problem(req.password)
        if problem:
            raise validation_error(problem)

        result, record = await self.access_codes.inspect(req.access_code)
        if result is RedeemResult.NOT_FOUND or record is None:
            raise not_found("Invalid access code")
        if result is RedeemResult.ALREADY_USED:
            raise conflict("Access code has already been used")
        if result is RedeemResult.EXPIRED:
            raise validation_error("Access code has expired")

        if await self.credentials.find_user(username) is not None:
            raise conflict("Username already exists.")

        await self.access_codes.consume(record, username)
        try:
            user = await self.credentials.create_user(
                username, req.password, role="user", created_by=f"access_code:{record.code}"
            )
        except ServiceError:
            await self._release_code(record, username)
            raise
        return RegisterUserResponse(message="Registration successful", username=user.username)

    async def _release_code(self, record: AccessCode, username: str) -> None:
        try:
            await self.access_codes.release(record)
        except ServiceError as e:
            logger.error(
                "Access code left consumed after failed registration",
                extra={"code": record.code, "username": username, "reason": e.message},
            )

    async def verify_session(self, body: dict[str, Any]) -> VerifySessionResponse:
        token = body.get("session_token")
        check = self.sessions.validate(token if isinstance(token, str) else None)
        if check.session is None:
            return VerifySessionResponse(valid=False, message=f"Session {check.status.value}")
        return VerifySessionResponse(
            valid=True, username=check.session.username, role=check.session.role
        )

    async def logout(self, body: dict[str, Any]) -> ActionResponse:
        req = parse_payload(SessionPayload, body)
        existed = self.sessions.destroy(req.session_token)
        return ActionResponse(message="Logged out" if existed else "Session already ended")

    # -- administration -------------------------------------------------

    async def generate_access_code(self, body: dict[str, Any]) -> AccessCodeResponse:
        req = parse_payload(GenerateAccessCodeRequest, body)
        admin = self.sessions.require_role(req.session_token, ADMIN_ROLE)
        code = await self.access_codes.generate(admin, req.valid_days)
        return AccessCodeResponse(access_code=code.code, expires=code.expires_at)

    async def list_access_codes(self, body: dict[str, Any]) -> AccessCodesResponse:
        req = parse_payload(SessionPayload, body)
        admin = self.sessions.require_role(req.session_token, ADMIN_ROLE)
        codes = await self.access_codes.list(admin)
        return AccessCodesResponse(
            codes=[AccessCodeItem(**c.model_dump(), status=c.status) for c in codes]
        )

    async def create_user(self, body: dict[str, Any]) -> CreateUserResponse:
        req = parse_payload(CreateUserRequest, body)
        admin = self.sessions.require_role(req.session_token, ADMIN_ROLE)
        user = await self.credentials.create_user(
            req.new_username, req.new_password, role=req.new_role, created_by=admin.username
        )
        return CreateUserResponse(
            message="User created", username=user.username, role=user.role
        )

    async def list_users(self, body: dict[str, Any]) -> UsersResponse:
        req = parse_payload(SessionPayload, body)
        self.sessions.require_role(req.session_token, ADMIN_ROLE)
        users = await self.credentials.list_users()
        return UsersResponse(
            users=[
                UserListItem(
                    username=u.username,
                    role=u.role,
                    created_at=u.created_at,
                    created_by=u.created_by,
                )
                for u in users
            ]
        )

    # -- scripts --------------------------------------------------------

    async def upload_script(self, body: dict[str, Any]) -> UploadScriptResponse:
        req = parse_payload(UploadScriptRequest, body)
        session = self.sessions.require_session(req.session_token)
        result = await self.scripts.upload(
            session,
            req.script_id,
            req.api_key,
            req.script_code,
            name=req.name,
            description=req.description,
        )
        return UploadScriptResponse(
            message=None if result.metadata_written else "Script stored; metadata could not be saved",
            auth_key=result.auth_key,
            blob_url=result.blob_url,
            metadata_saved=result.metadata_written,
        )

    async def fetch_script(self, body: dict[str, Any]) -> FetchScriptResponse:
        req = parse_payload(FetchScriptRequest, body)
        if req.user_data:
            logger.info(
                "Script fetch client context",
                extra={"user_data_keys": sorted(req.user_data)[:20]},
            )
        script = await self.scripts.fetch(req.auth_key)
        return FetchScriptResponse(script=script, timestamp=int(time.time() * 1000))

    async def list_scripts(self, body: dict[str, Any]) -> ScriptsResponse:
        req = parse_payload(SessionPayload, body)
        session = self.sessions.require_session(req.session_token)
        listings = await self.scripts.list(session)
        return ScriptsResponse(
            scripts=[
                ScriptItem(
                    auth_key=item.auth_key,
                    size=item.size,
                    uploaded_at=item.uploaded_at,
                    metadata=(
                        ScriptMetadataItem(**item.metadata.model_dump(exclude={"auth_key"}))
                        if item.metadata is not None
                        else None
                    ),
                )
                for item in listings
            ]
        )


def build_dispatcher(settings: Settings, store: ObjectStore) -> ActionDispatcher:
    """Wire every service around one object store and one session manager."""
    records = build_record_store(settings, store)
    sessions = SessionManager(ttl=timedelta(hours=settings.SESSION_TTL_HOURS))
    return ActionDispatcher(
        sessions=sessions,
        credentials=CredentialStore(records),
        access_codes=AccessCodeIssuer(
            records, default_valid_days=settings.ACCESS_CODE_DEFAULT_VALID_DAYS
        ),
        scripts=ScriptRepository(records),
        bootstrap=AdminBootstrap(
            records,
            admin_username=settings.ADMIN_USERNAME,
            admin_password=settings.ADMIN_PASSWORD.get_secret_value(),
        ),
        environment=settings.APP_ENV,
    )
