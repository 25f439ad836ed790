"""
auth/storage.py -- Storage gateway contract consumed by AuthService.

UserStorage is the only thing the service knows about persistence. The SQL
implementation lives in auth/store.py; tests substitute an in-memory fake.

Implementations must surface two conditions as distinct exception types:

  NotFoundError       -- the requested user (or, as AppNotFoundError, app)
                         does not exist, or an update matched zero rows.
  AlreadyExistsError  -- a unique constraint (email) was violated.

Any other failure may be raised as StorageError or passed through as-is; the
service treats both as internal errors.

Methods are synchronous. The service runs them in worker threads, so
implementations must tolerate concurrent calls from several threads.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from auth.models import App, User


class StorageError(Exception):
    """Base class for storage failures."""


class NotFoundError(StorageError):
    """Requested record does not exist."""


class AppNotFoundError(NotFoundError):
    """Requested application does not exist."""


class AlreadyExistsError(StorageError):
    """Unique constraint violated."""


class UserStorage(ABC):
    @abstractmethod
    def save_user(self, email: str, pass_hash: bytes, role: str) -> int:
        """Insert a user and return its assigned ID. AlreadyExistsError on duplicate email."""

    @abstractmethod
    def get_user(self, email: str) -> User:
        """Look up a user by exact email."""

    @abstractmethod
    def get_user_by_id(self, user_id: int) -> User:
        ...

    @abstractmethod
    def get_user_role(self, user_id: int) -> str:
        ...

    @abstractmethod
    def update_role(self, user_id: int, role: str) -> None:
        """Set a user's role. NotFoundError when no row matched."""

    @abstractmethod
    def list_users(self) -> list[User]:
        """Return every user in storage order. Empty list when there are none."""

    @abstractmethod
    def get_app(self, app_id: int) -> App:
        """Look up an application. AppNotFoundError if absent."""

    def close(self) -> None:
        """Release resources. Default is a no-op."""
