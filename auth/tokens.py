"""
auth/tokens.py -- Access token construction (python-jose, HS256).

A token binds a user to the application they logged in through. It is signed
with that application's secret, so each app can verify only its own tokens.

Claims:
  sub     user ID as a string (JWT requires a string subject)
  uid     user ID as an integer
  email   user email
  app_id  application ID
  role    user role at issue time
  iat     issue time (whole seconds, UTC)
  exp     iat + ttl

Tokens are stateless: nothing is persisted and there is no revocation.

The algorithm is fixed to HS256 for both encode and decode. decode_token()
passes algorithms=[HS256] explicitly so a token claiming any other algorithm
(including "none") is rejected rather than trusted.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from jose import jwt
from jose.exceptions import JOSEError

if TYPE_CHECKING:
    from auth.models import App, User

ALGORITHM = "HS256"


class TokenError(Exception):
    """Raised when a token cannot be generated."""


def valid_ttl(ttl: timedelta) -> bool:
    """True when ttl is at least one second and has no fractional part.

    exp is stored in whole seconds, so any other ttl could not be encoded
    exactly.
    """
    return ttl >= timedelta(seconds=1) and ttl.microseconds == 0


def new_token(user: User, app: App, ttl: timedelta, now: datetime | None = None) -> str:
    """Build and sign an access token for user, scoped to app, valid for ttl.

    now is injectable for tests; it defaults to the current UTC time and is
    truncated to whole seconds so exp - iat equals ttl exactly.
    """
    if not app.secret:
        raise TokenError(f"app {app.id} has no signing secret")
    if not valid_ttl(ttl):
        raise TokenError(f"token ttl must be a positive whole number of seconds, got {ttl}")

    issued = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    iat = int(issued.timestamp())
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "uid": user.id,
        "email": user.email,
        "app_id": app.id,
        "role": user.role,
        "iat": iat,
        "exp": iat + int(ttl.total_seconds()),
    }
    try:
        return jwt.encode(payload, app.secret, algorithm=ALGORITHM)
    except (JOSEError, TypeError, ValueError) as exc:
        raise TokenError(f"failed to sign token: {exc}") from exc


def decode_token(token: str, secret: str) -> dict[str, Any]:
    """Verify signature and expiry and return the claims.

    Raises jose.JWTError (ExpiredSignatureError for expired tokens) on failure.
    """
    return jwt.decode(token, secret, algorithms=[ALGORITHM])
