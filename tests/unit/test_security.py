"""Unit tests for password hashing and session tokens."""

from backend.docchat.security import (
    hash_password,
    hash_session_token,
    new_session_token,
    verify_password,
)


def test_hash_and_verify_password() -> None:
    encoded = hash_password("s3cret", iterations=1000)

    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert verify_password("s3cret", encoded)
    assert not verify_password("wrong", encoded)


def test_same_password_gets_different_salts() -> None:
    assert hash_password("pw", iterations=1000) != hash_password("pw", iterations=1000)


def test_verify_rejects_malformed_hashes() -> None:
    assert not verify_password("pw", "plaintext")
    assert not verify_password("pw", "md5$1$abc$def")


def test_session_tokens_are_random_and_hashed() -> None:
    first, second = new_session_token(), new_session_token()

    assert first != second
    assert len(hash_session_token(first)) == 64
    assert hash_session_token(first) == hash_session_token(first)
    assert hash_session_token(first) != first
