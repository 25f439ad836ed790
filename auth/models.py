"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). The storage gateway
returns these; the service and routes do the work.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class User:
    """An identity record.

    email is unique and compared case-sensitively as stored.
    pass_hash is the raw bcrypt output. It must never be logged or returned
    in any response -- repr=False keeps it out of accidental log lines too.
    """

    email: str
    role: str  # "user", "organizer", "admin"
    id: int | None = None
    pass_hash: bytes = field(default=b"", repr=False)


@dataclass
class App:
    """A registered client application.

    secret is the HMAC key material used to sign tokens issued to users
    logging in through this app. Provisioned outside the auth service.
    """

    id: int
    name: str
    secret: str = field(repr=False)
