"""Unit tests for core/config.py and core/log.py."""

import logging

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings
from core.log import configure_logging, op_logger


def test_defaults(monkeypatch):
    for var in ("ENV", "TOKEN_TTL_SECONDS", "BCRYPT_ROUNDS", "DATABASE_URL"):
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)
    assert s.env == "local"
    assert s.token_ttl_seconds == 3600
    assert s.bcrypt_rounds == 12
    assert s.database_url.startswith("sqlite:///")


def test_env_vars_override(monkeypatch):
    monkeypatch.setenv("TOKEN_TTL_SECONDS", "900")
    monkeypatch.setenv("ENV", "prod")
    s = Settings(_env_file=None)
    assert s.token_ttl_seconds == 900
    assert s.env == "prod"


@pytest.mark.parametrize(
    "field, value",
    [
        ("token_ttl_seconds", 0),
        ("bcrypt_rounds", 3),
        ("bcrypt_rounds", 32),
        ("request_timeout_seconds", 0),
        ("database_url", "  "),
        ("env", "staging"),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


@pytest.mark.parametrize("env, level", [("local", logging.DEBUG), ("dev", logging.DEBUG), ("prod", logging.INFO)])
def test_configure_logging_level(env, level):
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, root.handlers[:]
    try:
        configure_logging(env)
        assert root.level == level
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_op_logger_prefixes_context(caplog):
    caplog.set_level(logging.INFO, logger="sso.test")
    log = op_logger(logging.getLogger("sso.test"), "Auth.Login", email="a@x.com")
    log.info("attempting to login user")
    assert caplog.records[-1].getMessage() == "op=Auth.Login email=a@x.com attempting to login user"
