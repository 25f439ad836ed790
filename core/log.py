"""
core/log.py -- Logging setup and per-operation context.

configure_logging() is called once by process wiring (api/main.py, main.py).
Library modules only ever call logging.getLogger("sso.<area>").

op_logger() attaches an operation name plus identifying fields to every line
emitted through it, so each auth operation's log lines can be grepped by
op=... without threading the context through every call:

    log = op_logger(logger, "Auth.Login", email=email)
    log.info("attempting to login user")
    # -> ... sso.auth op=Auth.Login email=a@x.com attempting to login user

Never pass passwords or password hashes as fields.
"""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "local": logging.DEBUG,
    "dev": logging.DEBUG,
    "prod": logging.INFO,
}


def configure_logging(env: str) -> None:
    """Configure the root logger for the given environment name."""
    logging.basicConfig(
        level=_LEVELS.get(env, logging.INFO),
        format=_FORMAT,
        datefmt=_DATEFMT,
        force=True,
    )


class OpLoggerAdapter(logging.LoggerAdapter):
    """Prefix each message with key=value context pairs."""

    def process(self, msg, kwargs):
        prefix = " ".join(f"{k}={v}" for k, v in self.extra.items())
        return f"{prefix} {msg}", kwargs


def op_logger(logger: logging.Logger, op: str, **fields) -> OpLoggerAdapter:
    return OpLoggerAdapter(logger, {"op": op, **fields})
