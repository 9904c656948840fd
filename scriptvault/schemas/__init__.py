"""Pydantic request/response schemas."""

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
    AccessCodeResponse,
    AccessCodesResponse,
    ActionResponse,
    CreateUserResponse,
    FetchScriptResponse,
    LoginResponse,
    RegisterUserResponse,
    ScriptsResponse,
    UploadScriptResponse,
    UsersResponse,
    VerifySessionResponse,
)

__all__ = [
    "AccessCodeResponse",
    "AccessCodesResponse",
    "ActionResponse",
    "CreateUserRequest",
    "CreateUserResponse",
    "FetchScriptRequest",
    "FetchScriptResponse",
    "GenerateAccessCodeRequest",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "RegisterUserRequest",
    "RegisterUserResponse",
    "ScriptsResponse",
    "SessionPayload",
    "UploadScriptRequest",
    "UploadScriptResponse",
    "UsersResponse",
    "VerifySessionResponse",
]
