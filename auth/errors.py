"""
auth/errors.py -- Typed error kinds raised by the auth service.

Every failure that leaves AuthService is an AuthError subclass. Callers
classify by type (or by the .kind attribute), never by parsing message text:

    try:
        await service.login(email, password, app_id)
    except InvalidCredentials:
        ...

Each error carries the operation that raised it (.op, e.g. "Auth.Login") and
chains the collaborator exception that caused it via __cause__, so the full
story is available to logs without being part of the error's identity.

str(err) is "<op>: <message>" for diagnostics. It may contain internal
detail (storage messages) and must not be sent to clients for InternalError --
api/status.py owns that boundary.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    user_not_found = "user_not_found"
    user_exists = "user_exists"
    invalid_credentials = "invalid_credentials"
    invalid_role = "invalid_role"
    invalid_argument = "invalid_argument"
    internal = "internal"


class AuthError(Exception):
    """Base class for all auth service failures."""

    kind: ErrorKind = ErrorKind.internal
    default_message = "internal error"

    def __init__(self, op: str, message: str | None = None) -> None:
        self.op = op
        self.message = message or self.default_message
        super().__init__(f"{op}: {self.message}")


class UserNotFound(AuthError):
    kind = ErrorKind.user_not_found
    default_message = "user not found"


class UserExists(AuthError):
    kind = ErrorKind.user_exists
    default_message = "user already exists"


class InvalidCredentials(AuthError):
    kind = ErrorKind.invalid_credentials
    default_message = "invalid credentials"


class InvalidRole(AuthError):
    kind = ErrorKind.invalid_role
    default_message = "invalid role"


class InvalidArgument(AuthError):
    kind = ErrorKind.invalid_argument
    default_message = "invalid argument"


class InternalError(AuthError):
    """Collaborator failure: storage down, hashing or signing failed, unknown app."""

    kind = ErrorKind.internal
