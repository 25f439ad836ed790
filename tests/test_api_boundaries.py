"""
tests/test_api_boundaries.py -- End-to-end scenario and transport edge cases.

Each test builds its own client around a fresh service so user IDs start at 1
and failure modes can be injected through the storage fake.
"""

from __future__ import annotations

import time
import uuid
from unittest.mock import MagicMock

from auth.service import AuthService
from auth.store import SQLStore
from auth.tokens import decode_token
from core.config import Settings
from tests.fakes import TEST_APP_SECRET, TEST_ROUNDS, TEST_TTL

API = "/api/v1/auth"


def test_register_role_update_login_scenario(client_factory):
    store = SQLStore(f"sqlite:///file:scenario_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")
    app_id = store.save_app("scenario", TEST_APP_SECRET)
    assert app_id == 1
    service = AuthService(store, token_ttl=TEST_TTL, bcrypt_rounds=TEST_ROUNDS)

    try:
        with client_factory(service) as client:
            resp = client.post(f"{API}/register", json={"email": "a@x.com", "password": "pw123", "role": ""})
            assert resp.json() == {"user_id": 1}

            assert client.get(f"{API}/users/1/role").json() == {"role": "user"}
            assert client.put(f"{API}/users/1/role", json={"role": "admin"}).status_code == 200
            assert client.get(f"{API}/users/1/role").json() == {"role": "admin"}

            resp = client.post(f"{API}/login", json={"email": "a@x.com", "password": "pw123", "app_id": 1})
            assert resp.status_code == 200
            token = resp.json()["token"]
            assert token
            claims = decode_token(token, TEST_APP_SECRET)
            assert claims["role"] == "admin"
            assert claims["exp"] - claims["iat"] == 3600
    finally:
        store.close()


def test_list_users_empty(service, client_factory):
    with client_factory(service) as client:
        resp = client.get(f"{API}/users")
    assert resp.status_code == 200
    assert resp.json() == {"users": []}


def test_internal_error_text_is_not_leaked(fake_store, client_factory):
    storage = MagicMock(wraps=fake_store)
    storage.list_users.side_effect = RuntimeError("dsn=postgres://sso:hunter2@db")
    service = AuthService(storage, token_ttl=TEST_TTL, bcrypt_rounds=TEST_ROUNDS)
    with client_factory(service) as client:
        resp = client.get(f"{API}/users")
    assert resp.status_code == 500
    assert resp.json()["error"] == {"code": "internal", "message": "failed to list users", "detail": None}
    assert "hunter2" not in resp.text


def test_service_call_past_deadline_is_deadline_exceeded(fake_store, client_factory):
    storage = MagicMock(wraps=fake_store)
    storage.get_user_role.side_effect = lambda uid: time.sleep(0.5) or "user"
    service = AuthService(storage, token_ttl=TEST_TTL, bcrypt_rounds=TEST_ROUNDS)
    settings = Settings(bcrypt_rounds=TEST_ROUNDS, request_timeout_seconds=0.05)
    with client_factory(service, settings) as client:
        resp = client.get(f"{API}/users/1/role")
    assert resp.status_code == 504
    assert resp.json()["error"]["code"] == "deadline_exceeded"


def test_invalid_input_never_reaches_service(fake_store, client_factory):
    storage = MagicMock(wraps=fake_store)
    service = AuthService(storage, token_ttl=TEST_TTL, bcrypt_rounds=TEST_ROUNDS)
    with client_factory(service) as client:
        client.post(f"{API}/login", json={"email": "a@x.com", "password": "pw123", "app_id": 0})
        client.post(f"{API}/register", json={"email": "", "password": "pw123"})
    assert storage.get_user.call_count == 0
    assert storage.save_user.call_count == 0
