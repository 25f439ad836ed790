"""Unit tests for auth/roles.py -- registration vs assignment role rules."""

import pytest

from auth.roles import InvalidRoleError, Role, normalize_registration_role, validate_role


def test_empty_registration_role_defaults_to_user():
    assert normalize_registration_role("") == "user"


@pytest.mark.parametrize("role", ["user", "organizer"])
def test_registration_accepts_self_service_roles(role):
    assert normalize_registration_role(role) == role


@pytest.mark.parametrize("role", ["admin", "superuser", "User", " user", "ADMIN"])
def test_registration_rejects_admin_and_unknown(role):
    with pytest.raises(InvalidRoleError) as exc_info:
        normalize_registration_role(role)
    assert exc_info.value.role == role


@pytest.mark.parametrize("role", ["user", "organizer", "admin"])
def test_assignment_accepts_all_known_roles(role):
    assert validate_role(role) == role


@pytest.mark.parametrize("role", ["", "superuser", "Admin", "root"])
def test_assignment_rejects_unknown(role):
    with pytest.raises(InvalidRoleError):
        validate_role(role)


def test_rules_differ_only_on_admin():
    assert validate_role(Role.admin.value) == "admin"
    with pytest.raises(InvalidRoleError):
        normalize_registration_role(Role.admin.value)
