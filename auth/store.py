"""
auth/store.py -- SQLAlchemy Core implementation of the UserStorage gateway.

Pattern: Repository + Data Mapper. SQLStore is the repository;
_row_to_user / _row_to_app are the mappers. The service never touches SQL.

Security:
  All queries use bound parameters. No f-strings in SQL.

Integrity:
  users.email is UNIQUE -- a duplicate insert raises IntegrityError, which is
  translated to AlreadyExistsError. Two concurrent registrations for the same
  email therefore resolve to exactly one insert, without any locking in
  Python.

  users.role carries a CHECK constraint over the three known roles, so a
  persisted user can never hold anything else even if a caller skips the
  role policy.

Concurrency:
  The engine owns a connection pool; each method checks out a connection for
  the duration of one statement. Safe to call from several worker threads.

Any SQLAlchemy URL works. SQLite is the default (WAL mode is enabled per
connection); Postgres is used in production via DATABASE_URL.
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import App, User
from auth.roles import ALL_ROLES
from auth.storage import AlreadyExistsError, AppNotFoundError, NotFoundError, StorageError, UserStorage

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_role_list = ", ".join(f"'{r}'" for r in sorted(ALL_ROLES))

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("pass_hash", LargeBinary, nullable=False),
    Column("role", String(30), nullable=False, server_default="user"),
    CheckConstraint(f"role IN ({_role_list})", name="ck_users_role"),
)

_apps = Table(
    "apps",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("secret", Text, nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block on a concurrent writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _is_unique_violation(exc: IntegrityError) -> bool:
    # Postgres drivers expose SQLSTATE; 23505 is unique_violation.
    code = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if code:
        return code == "23505"
    return "unique" in str(exc.orig).lower()


def _connect_args(db_url: str, timeout_seconds: float | None) -> dict:
    """Driver arguments for db_url, bounding each statement by timeout_seconds.

    SQLite waits at most timeout_seconds for a write lock. Postgres gets a
    server-side statement_timeout. Other dialects keep their driver default.
    """
    args: dict = {}
    if db_url.startswith("sqlite"):
        args["check_same_thread"] = False
        if timeout_seconds is not None:
            args["timeout"] = timeout_seconds
    elif db_url.startswith("postgresql") and timeout_seconds is not None:
        args["options"] = f"-c statement_timeout={int(timeout_seconds * 1000)}"
    return args


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SQLStore(UserStorage):
    """Repository for User and App records.

    Usage:
        store = SQLStore("sqlite:///sso.db")
        app_id = store.save_app("web", "app-secret")
        uid = store.save_user("a@x.com", hash_password("pw123"), "user")
        store.close()
    """

    def __init__(self, db_url: str, timeout_seconds: float | None = None) -> None:
        self.engine: Engine = create_engine(db_url, connect_args=_connect_args(db_url, timeout_seconds))
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def save_user(self, email: str, pass_hash: bytes, role: str) -> int:
        try:
            with self.engine.begin() as conn:
                result = conn.execute(_users.insert().values(email=email, pass_hash=pass_hash, role=role))
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise AlreadyExistsError(f"user {email!r} already exists") from exc
            raise StorageError(f"failed to save user: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to save user: {exc}") from exc
        return result.inserted_primary_key[0]

    def get_user(self, email: str) -> User:
        row = self._fetch_one(_users.select().where(_users.c.email == email))
        if row is None:
            raise NotFoundError(f"user {email!r} not found")
        return _row_to_user(row)

    def get_user_by_id(self, user_id: int) -> User:
        row = self._fetch_one(_users.select().where(_users.c.id == user_id))
        if row is None:
            raise NotFoundError(f"user {user_id} not found")
        return _row_to_user(row)

    def get_user_role(self, user_id: int) -> str:
        row = self._fetch_one(select(_users.c.role).where(_users.c.id == user_id))
        if row is None:
            raise NotFoundError(f"user {user_id} not found")
        return row.role

    def update_role(self, user_id: int, role: str) -> None:
        try:
            with self.engine.begin() as conn:
                result = conn.execute(_users.update().where(_users.c.id == user_id).values(role=role))
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to update role: {exc}") from exc
        if result.rowcount == 0:
            raise NotFoundError(f"user {user_id} not found")

    def list_users(self) -> list[User]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(_users.select().order_by(_users.c.id)).fetchall()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to list users: {exc}") from exc
        return [_row_to_user(r) for r in rows]

    # ------------------------------------------------------------------
    # Apps
    # ------------------------------------------------------------------

    def get_app(self, app_id: int) -> App:
        row = self._fetch_one(_apps.select().where(_apps.c.id == app_id))
        if row is None:
            raise AppNotFoundError(f"app {app_id} not found")
        return _row_to_app(row)

    def save_app(self, name: str, secret: str) -> int:
        """Provision an application and return its ID.

        Not part of the gateway contract: apps are created by operators
        (main.py add-app) and test fixtures, never by the auth service.
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(_apps.insert().values(name=name, secret=secret))
        except IntegrityError as exc:
            raise AlreadyExistsError(f"app {name!r} already exists") from exc
        return result.inserted_primary_key[0]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch_one(self, stmt):
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).fetchone()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        pass_hash=bytes(row.pass_hash),
        role=row.role,
    )


def _row_to_app(row) -> App:
    return App(id=row.id, name=row.name, secret=row.secret)
