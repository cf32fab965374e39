"""Tests for password hashing."""

from storefront.identity.passwords import hash_password, verify_password


def test_hash_is_not_the_password():
    hashed = hash_password("correct-horse")
    assert hashed != "correct-horse"
    assert hashed.startswith("$2")


def test_verify_accepts_matching_password():
    assert verify_password("correct-horse", hash_password("correct-horse"))


def test_verify_rejects_wrong_password():
    assert not verify_password("battery-staple", hash_password("correct-horse"))


def test_verify_rejects_missing_hash():
    assert not verify_password("correct-horse", None)
    assert not verify_password("", hash_password("correct-horse"))
