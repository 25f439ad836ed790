"""
auth/service.py -- AuthService: register, login, and role management.

The service orchestrates the password hasher, the token issuer, the role
policy and a UserStorage gateway. It holds no mutable state; the only
configuration it keeps is the token TTL (and the bcrypt cost factor), so one
instance serves any number of concurrent requests.

Blocking work -- storage round-trips and bcrypt -- runs in worker threads via
asyncio.to_thread(). Cancelling the awaiting task (client disconnect, a
deadline in the API layer) returns control immediately; the thread's result
is discarded. The thread itself is not interrupted: a save_user that already
reached the database may still commit after the caller has given up. The
store's own statement timeout bounds how long that window stays open.

Error policy:
  Every failure leaves as an AuthError subclass tagged with the operation
  name. Storage NotFoundError / AlreadyExistsError map to UserNotFound /
  UserExists; anything unrecognised becomes InternalError. The collaborator
  exception is chained (raise ... from exc), never exposed as the error type.
  Nothing is retried.

Login and user enumeration:
  Login returns UserNotFound for an unknown email and InvalidCredentials for
  a wrong password. The logs record which one happened (WARNING vs INFO);
  the transport decides how much of that to show a client.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from auth.errors import (
    InternalError,
    InvalidArgument,
    InvalidCredentials,
    InvalidRole,
    UserExists,
    UserNotFound,
)
from auth.models import User
from auth.passwords import DEFAULT_ROUNDS, MAX_PASSWORD_BYTES, HashingError, hash_password, verify_password
from auth.roles import InvalidRoleError, normalize_registration_role, validate_role
from auth.storage import AlreadyExistsError, NotFoundError, UserStorage
from auth.tokens import TokenError, new_token, valid_ttl
from core.log import op_logger

logger = logging.getLogger("sso.auth")


class AuthService:
    def __init__(
        self,
        storage: UserStorage,
        token_ttl: timedelta,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        if not valid_ttl(token_ttl):
            raise ValueError(f"token_ttl must be a positive whole number of seconds, got {token_ttl}")
        self._storage = storage
        self._token_ttl = token_ttl
        self._bcrypt_rounds = bcrypt_rounds

    @property
    def token_ttl(self) -> timedelta:
        return self._token_ttl

    async def register(self, email: str, password: str, role: str = "") -> int:
        """Create a user and return the new ID.

        An empty role means "user". "admin" cannot be requested here; the
        role check runs before any hashing or storage work.
        """
        op = "Auth.RegisterNewUser"
        log = op_logger(logger, op, email=email)
        log.info("registering new user")

        try:
            role = normalize_registration_role(role)
        except InvalidRoleError as exc:
            log.warning("invalid role %r", exc.role)
            raise InvalidRole(op, str(exc)) from exc

        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            log.warning("password too long")
            raise InvalidArgument(op, f"password must be at most {MAX_PASSWORD_BYTES} bytes")

        try:
            pass_hash = await asyncio.to_thread(hash_password, password, self._bcrypt_rounds)
        except HashingError as exc:
            log.error("failed to hash password: %s", exc)
            raise InternalError(op, "failed to hash password") from exc

        try:
            uid = await asyncio.to_thread(self._storage.save_user, email, pass_hash, role)
        except AlreadyExistsError as exc:
            log.warning("user already exists")
            raise UserExists(op) from exc
        except Exception as exc:
            log.error("failed to save user: %s", exc)
            raise InternalError(op, f"failed to save user: {exc}") from exc

        log.info("user registered uid=%s role=%s", uid, role)
        return uid

    async def login(self, email: str, password: str, app_id: int) -> str:
        """Check credentials and return a token signed for app_id."""
        op = "Auth.Login"
        log = op_logger(logger, op, email=email, app_id=app_id)
        log.info("attempting to login user")

        try:
            user = await asyncio.to_thread(self._storage.get_user, email)
        except NotFoundError as exc:
            log.warning("user not found")
            raise UserNotFound(op) from exc
        except Exception as exc:
            log.error("failed to get user: %s", exc)
            raise InternalError(op, f"failed to get user: {exc}") from exc

        matched = await asyncio.to_thread(verify_password, user.pass_hash, password)
        if not matched:
            log.info("invalid credentials")
            raise InvalidCredentials(op)

        try:
            app = await asyncio.to_thread(self._storage.get_app, app_id)
        except Exception as exc:
            log.error("failed to get app: %s", exc)
            raise InternalError(op, f"failed to get app: {exc}") from exc

        try:
            token = new_token(user, app, self._token_ttl)
        except TokenError as exc:
            log.error("failed to generate token: %s", exc)
            raise InternalError(op, "token generation failed") from exc

        log.info("user logged in successfully")
        return token

    async def get_user_role(self, user_id: int) -> str:
        op = "Auth.GetUserRole"
        log = op_logger(logger, op, uid=user_id)
        log.info("attempting to get role")

        try:
            role = await asyncio.to_thread(self._storage.get_user_role, user_id)
        except NotFoundError as exc:
            log.warning("user not found")
            raise UserNotFound(op) from exc
        except Exception as exc:
            log.error("failed to get user role: %s", exc)
            raise InternalError(op, f"failed to get user role: {exc}") from exc

        log.info("role retrieved successfully")
        return role

    async def update_role(self, user_id: int, role: str) -> None:
        """Set a user's role. Any known role, including admin, is accepted."""
        op = "Auth.UpdateRole"
        log = op_logger(logger, op, uid=user_id, role=role)
        log.info("attempting to assign role")

        try:
            validate_role(role)
        except InvalidRoleError as exc:
            log.warning("invalid role")
            raise InvalidRole(op, str(exc)) from exc

        try:
            await asyncio.to_thread(self._storage.update_role, user_id, role)
        except NotFoundError as exc:
            log.warning("user not found")
            raise UserNotFound(op) from exc
        except Exception as exc:
            log.error("failed to update role: %s", exc)
            raise InternalError(op, f"failed to update role: {exc}") from exc

        log.info("updated role")

    async def list_users(self) -> list[User]:
        op = "Auth.ListUsers"
        log = op_logger(logger, op)
        log.info("attempting to list users")

        try:
            users = await asyncio.to_thread(self._storage.list_users)
        except Exception as exc:
            log.error("failed to list users: %s", exc)
            raise InternalError(op, f"failed to list users: {exc}") from exc

        log.info("users listed successfully count=%d", len(users))
        return list(users)
