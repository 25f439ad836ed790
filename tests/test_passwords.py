"""Unit tests for auth/passwords.py -- bcrypt hashing and verification."""

import pytest

from auth.passwords import MAX_PASSWORD_BYTES, HashingError, hash_password, verify_password

ROUNDS = 4


@pytest.mark.parametrize("password", ["pw123", "correct horse battery staple", "пароль", "x"])
def test_hash_then_verify_matches(password):
    hashed = hash_password(password, rounds=ROUNDS)
    assert verify_password(hashed, password)


def test_hash_is_bytes_and_not_plaintext():
    hashed = hash_password("pw123", rounds=ROUNDS)
    assert isinstance(hashed, bytes)
    assert b"pw123" not in hashed
    assert hashed.startswith(b"$2")


def test_same_password_hashes_differ():
    """Each hash carries its own salt."""
    assert hash_password("pw123", rounds=ROUNDS) != hash_password("pw123", rounds=ROUNDS)


@pytest.mark.parametrize("other", ["pw124", "Pw123", "pw12", "pw1234", "", " pw123"])
def test_verify_rejects_any_other_password(other):
    hashed = hash_password("pw123", rounds=ROUNDS)
    assert not verify_password(hashed, other)


def test_passwords_differing_only_past_byte_72_are_distinguished():
    """Long inputs are refused rather than truncated into collisions."""
    base = "a" * MAX_PASSWORD_BYTES
    hashed = hash_password(base, rounds=ROUNDS)
    assert not verify_password(hashed, base + "b")
    with pytest.raises(HashingError):
        hash_password(base + "b", rounds=ROUNDS)


def test_malformed_hash_does_not_match():
    assert not verify_password(b"not-a-bcrypt-hash", "pw123")
    assert not verify_password(b"", "pw123")


def test_cost_factor_is_encoded_in_hash():
    hashed = hash_password("pw123", rounds=5)
    assert hashed.split(b"$")[2] == b"05"
