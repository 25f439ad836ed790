"""
api/routes/v1/auth.py -- RPC-style endpoints over the auth service.

Routes:
  POST /api/v1/auth/login                 -- {email, password, app_id} -> {token}
  POST /api/v1/auth/register              -- {email, password, role} -> {user_id}
  GET  /api/v1/auth/users/{user_id}/role  -- -> {role}
  PUT  /api/v1/auth/users/{user_id}/role  -- {role} -> {}
  GET  /api/v1/auth/users                 -- -> {users: [{id, email, role}]}

Every handler does the same three things:
  1. Boundary validation. Required fields are checked here and rejected with
     invalid_argument before the service is called.
  2. Call the service under the per-request deadline (_invoke).
  3. Map AuthError kinds to status codes via api/status.py.

A deadline_exceeded response means the caller stopped waiting, not that the
work was undone. A register whose insert was already running may still
commit, in which case a retry gets already_exists. The store applies the
same deadline as a statement timeout, which keeps that window short.

Authorization of who may call the role endpoints is left to the deployment
(gateway / network policy); these handlers do not check caller identity.

Login responses carry Cache-Control: no-store so tokens are not cached by
intermediaries.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import (
    GetUserRoleResponse,
    ListUsersResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UpdateRoleRequest,
    UpdateRoleResponse,
    UserItem,
)
from api.status import StatusCode, rpc_error, status_for, to_http_exception
from auth.errors import AuthError
from auth.passwords import MAX_PASSWORD_BYTES
from auth.service import AuthService

logger = logging.getLogger("sso.api")

T = TypeVar("T")

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require(value: str, message: str) -> None:
    if not value:
        raise rpc_error(StatusCode.invalid_argument, message)


def _check_password(password: str) -> None:
    _require(password, "password is required")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise rpc_error(
            StatusCode.invalid_argument,
            f"password must be at most {MAX_PASSWORD_BYTES} bytes",
        )


async def _invoke(request: Request, call: Callable[[AuthService], Awaitable[T]], internal_message: str) -> T:
    """Run one service call under the request deadline and map its errors.

    The call is built inside this function (from the service instance) so
    nothing is awaited if validation already failed.
    """
    service: AuthService = request.app.state.auth_service
    timeout = request.app.state.settings.request_timeout_seconds
    try:
        return await asyncio.wait_for(call(service), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("%s %s deadline exceeded after %.1fs", request.method, request.url.path, timeout)
        raise rpc_error(StatusCode.deadline_exceeded, "deadline exceeded") from None
    except AuthError as exc:
        if status_for(exc) is StatusCode.internal:
            # Full text stays server-side.
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        raise to_http_exception(exc, internal_message) from exc


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/login", response_model=LoginResponse)
async def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Verify credentials and return a token signed for the calling app."""
    _require(body.email, "email is required")
    _check_password(body.password)
    if body.app_id == 0:
        raise rpc_error(StatusCode.invalid_argument, "app_id is required")

    token = await _invoke(
        request,
        lambda s: s.login(body.email, body.password, body.app_id),
        "failed to login",
    )
    resp = JSONResponse(content=LoginResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=RegisterResponse)
async def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create a user. role may be "", "user" or "organizer"."""
    _require(body.email, "email is required")
    _check_password(body.password)

    user_id = await _invoke(
        request,
        lambda s: s.register(body.email, body.password, body.role),
        "failed to register",
    )
    return RegisterResponse(user_id=user_id)


@router.get("/auth/users/{user_id}/role", response_model=GetUserRoleResponse)
async def get_user_role(request: Request, user_id: int) -> GetUserRoleResponse:
    role = await _invoke(request, lambda s: s.get_user_role(user_id), "failed to get user")
    return GetUserRoleResponse(role=role)


@router.put("/auth/users/{user_id}/role", response_model=UpdateRoleResponse)
async def update_role(request: Request, user_id: int, body: UpdateRoleRequest) -> UpdateRoleResponse:
    """Assign any known role, including admin."""
    await _invoke(request, lambda s: s.update_role(user_id, body.role), "failed to update user")
    return UpdateRoleResponse()


@router.get("/auth/users", response_model=ListUsersResponse)
async def list_users(request: Request) -> ListUsersResponse:
    users = await _invoke(request, lambda s: s.list_users(), "failed to list users")
    return ListUsersResponse(users=[UserItem.from_user(u) for u in users])
