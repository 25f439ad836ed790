"""
API request and response models for the SSO REST endpoints.

These Pydantic v2 models define the transport contract. They are separate
from the dataclasses in auth/models.py, which own the domain shape; route
handlers map between the two.

Request fields default to empty values rather than being required so that a
missing field reaches the handler's own "<field> is required" check and is
reported as invalid_argument like an empty one. Wrong types still fail
Pydantic validation and are reported the same way by api/main.py.

No response model carries a password hash.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""
    app_id: int = 0


class RegisterRequest(BaseModel):
    email: str = ""
    password: str = ""
    # Empty string registers the default role ("user").
    role: str = ""


class UpdateRoleRequest(BaseModel):
    role: str = ""


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int


class GetUserRoleResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str


class UpdateRoleResponse(BaseModel):
    """Empty acknowledgement."""

    model_config = ConfigDict(frozen=True)


class UserItem(BaseModel):
    """Public view of a user -- id, email and role only."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserItem":
        return cls(id=user.id, email=user.email, role=user.role)


class ListUsersResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    users: list[UserItem] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
