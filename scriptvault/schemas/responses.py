"""Success payloads for each action. Failures are rendered by the API error handler."""

from datetime import datetime

from pydantic import BaseModel, Field


class ActionResponse(BaseModel):
    success: bool = True
    message: str | None = None


class LoginResponse(ActionResponse):
    session_token: str
    role: str
    username: str


class RegisterUserResponse(ActionResponse):
    username: str


class AccessCodeResponse(ActionResponse):
    access_code: str
    expires: datetime


class AccessCodeItem(BaseModel):
    """Access code as listed for admins, with derived status Used/Available."""

    code: str
    created_at: datetime
    expires_at: datetime
    valid_days: int
    used: bool
    used_by: str | None = None
    used_by_at: datetime | None = None
    created_by: str
    status: str


class AccessCodesResponse(ActionResponse):
    codes: list[AccessCodeItem] = Field(default_factory=list)


class CreateUserResponse(ActionResponse):
    username: str
    role: str


class UserListItem(BaseModel):
    """User entry for admin list (no password hash)."""

    username: str
    role: str
    created_at: datetime
    created_by: str | None = None


class UsersResponse(ActionResponse):
    users: list[UserListItem] = Field(default_factory=list)


class VerifySessionResponse(ActionResponse):
    valid: bool
    username: str | None = None
    role: str | None = None


class UploadScriptResponse(ActionResponse):
    auth_key: str
    blob_url: str
    metadata_saved: bool = True


class FetchScriptResponse(ActionResponse):
    script: str
    timestamp: int = Field(..., description="Server time in epoch milliseconds")


class ScriptMetadataItem(BaseModel):
    name: str
    description: str = ""
    size: int
    created_at: datetime
    uploaded_by: str


class ScriptItem(BaseModel):
    auth_key: str
    size: int
    uploaded_at: datetime
    metadata: ScriptMetadataItem | None = Field(
        default=None, description="Absent when the sidecar was never written or is unreadable"
    )


class ScriptsResponse(ActionResponse):
    scripts: list[ScriptItem] = Field(default_factory=list)
