"""
tests/conftest.py -- Shared fixtures for the SSO test suite.

This module provides:
  - fake_store / service: AuthService over the in-memory fake
  - sql_store: SQLStore on an isolated named shared-memory SQLite DB
  - make_client(): TestClient over the real FastAPI app with a patched
    lifespan, so routes hit real handlers but use the given service
  - api_client: module-scoped (client, store, app) triple backed by SQLStore

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because the service runs storage calls in worker threads. Plain :memory: DBs
are per-connection and would present a blank schema to each thread.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager, contextmanager

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import App
from auth.service import AuthService
from auth.store import SQLStore
from core.config import Settings
from tests.fakes import TEST_APP_SECRET, TEST_ROUNDS, TEST_TTL, InMemoryStorage


def _memory_url(prefix: str) -> str:
    return f"sqlite:///file:{prefix}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


def _patch_lifespan(service: AuthService, settings: Settings):
    """Return a lifespan that wires a pre-built service into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.auth_service = service
        yield

    return test_lifespan


@contextmanager
def make_client(service: AuthService, settings: Settings | None = None) -> Generator[TestClient, None, None]:
    app.router.lifespan_context = _patch_lifespan(service, settings or Settings(bcrypt_rounds=TEST_ROUNDS))
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


# ---------------------------------------------------------------------------
# Function-scoped fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_app() -> App:
    return App(id=1, name="test", secret=TEST_APP_SECRET)


@pytest.fixture
def fake_store(test_app: App) -> InMemoryStorage:
    store = InMemoryStorage()
    store.add_app(test_app)
    return store


@pytest.fixture
def service(fake_store: InMemoryStorage) -> AuthService:
    return AuthService(fake_store, token_ttl=TEST_TTL, bcrypt_rounds=TEST_ROUNDS)


@pytest.fixture
def sql_store() -> Generator[SQLStore, None, None]:
    store = SQLStore(_memory_url("test_store"))
    yield store
    store.close()


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, SQLStore, App], None, None]:
    """Yield (client, store, app) for API integration tests.

    The store is a real SQLStore with one provisioned application; tests
    register their own users with distinct emails.
    """
    store = SQLStore(_memory_url("test_api"))
    app_id = store.save_app("test", TEST_APP_SECRET)
    registered = App(id=app_id, name="test", secret=TEST_APP_SECRET)
    service = AuthService(store, token_ttl=TEST_TTL, bcrypt_rounds=TEST_ROUNDS)

    with make_client(service) as client:
        yield client, store, registered

    store.close()


@pytest.fixture
def client_factory():
    """Return make_client() for tests that need a client around their own service."""
    return make_client
