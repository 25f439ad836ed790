"""
auth/roles.py -- Role values and the two rules that admit them.

Registration and role assignment deliberately use different rules:

  normalize_registration_role() -- self-service signup. "" means "user";
      "user" and "organizer" are accepted; "admin" is refused so privilege
      cannot be self-granted.

  validate_role() -- role assignment by an already-privileged caller. Any of
      the three roles, including "admin".

Who may call role assignment is decided by the transport, not here.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    user = "user"
    organizer = "organizer"
    admin = "admin"


DEFAULT_ROLE = Role.user

ALL_ROLES: frozenset[str] = frozenset(r.value for r in Role)
SELF_SERVICE_ROLES: frozenset[str] = frozenset({Role.user.value, Role.organizer.value})


class InvalidRoleError(ValueError):
    """Raised when a role value is outside the set allowed by the rule applied."""

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"invalid role: {role!r}")


def normalize_registration_role(requested: str) -> str:
    """Return the role to store for a new user, or raise InvalidRoleError."""
    if requested == "":
        return DEFAULT_ROLE.value
    if requested not in SELF_SERVICE_ROLES:
        raise InvalidRoleError(requested)
    return requested


def validate_role(role: str) -> str:
    """Return role unchanged if it is one of the three known roles."""
    if role not in ALL_ROLES:
        raise InvalidRoleError(role)
    return role
