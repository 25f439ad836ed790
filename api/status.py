"""
api/status.py -- Mapping from auth error kinds to protocol status codes.

This is the transport's whole error policy:

  InvalidCredentials           -> unauthenticated   (401)
  UserExists                   -> already_exists    (409)
  UserNotFound                 -> not_found         (404)
  InvalidRole, InvalidArgument -> invalid_argument  (400)
  request deadline expired     -> deadline_exceeded (504)
  anything else                -> internal          (500)

For internal errors the client gets the caller-supplied fixed message
("failed to login", ...) and never the exception text, which may carry
storage or driver detail.
"""

from __future__ import annotations

from enum import Enum

from fastapi import HTTPException

from api.models import ErrorDetail
from auth.errors import AuthError, ErrorKind


class StatusCode(str, Enum):
    invalid_argument = "invalid_argument"
    not_found = "not_found"
    already_exists = "already_exists"
    unauthenticated = "unauthenticated"
    deadline_exceeded = "deadline_exceeded"
    internal = "internal"


HTTP_STATUS: dict[StatusCode, int] = {
    StatusCode.invalid_argument: 400,
    StatusCode.unauthenticated: 401,
    StatusCode.not_found: 404,
    StatusCode.already_exists: 409,
    StatusCode.internal: 500,
    StatusCode.deadline_exceeded: 504,
}

_KIND_TO_STATUS: dict[ErrorKind, StatusCode] = {
    ErrorKind.invalid_credentials: StatusCode.unauthenticated,
    ErrorKind.user_exists: StatusCode.already_exists,
    ErrorKind.user_not_found: StatusCode.not_found,
    ErrorKind.invalid_role: StatusCode.invalid_argument,
    ErrorKind.invalid_argument: StatusCode.invalid_argument,
}


def status_for(exc: BaseException) -> StatusCode:
    """Classify an exception. Anything that is not a known AuthError kind is internal."""
    if isinstance(exc, AuthError):
        return _KIND_TO_STATUS.get(exc.kind, StatusCode.internal)
    return StatusCode.internal


def rpc_error(code: StatusCode, message: str) -> HTTPException:
    return HTTPException(
        status_code=HTTP_STATUS[code],
        detail=ErrorDetail(code=code.value, message=message).model_dump(),
    )


def to_http_exception(exc: BaseException, internal_message: str) -> HTTPException:
    """Build the HTTPException for exc. internal_message replaces the text of internal errors."""
    code = status_for(exc)
    if code is StatusCode.internal:
        return rpc_error(code, internal_message)
    message = exc.message if isinstance(exc, AuthError) else internal_message
    return rpc_error(code, message)
