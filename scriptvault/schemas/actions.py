"""Per-action request payloads. Every request is `{"action": ..., <fields>}`."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ActionPayload(BaseModel):
    """Base for action payloads; unknown fields (including 'action') are ignored."""

    model_config = ConfigDict(extra="ignore")


class SessionPayload(ActionPayload):
    session_token: str = Field(..., min_length=1, description="Token returned by login")


class LoginRequest(ActionPayload):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterUserRequest(ActionPayload):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    access_code: str = Field(..., min_length=1)


class GenerateAccessCodeRequest(SessionPayload):
    valid_days: int | None = Field(default=None, description="Defaults to 30")


class CreateUserRequest(SessionPayload):
    new_username: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
    new_role: Literal["admin", "user"] = "user"


class UploadScriptRequest(SessionPayload):
    script_id: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=1)
    script_code: str = Field(..., min_length=1, description="Lua source")
    name: str | None = None
    description: str | None = None


class FetchScriptRequest(ActionPayload):
    auth_key: str = Field(..., min_length=1)
    user_data: dict[str, Any] | None = Field(
        default=None, description="Client-reported context, logged only"
    )
