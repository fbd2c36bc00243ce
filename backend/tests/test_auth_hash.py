import pytest

from openmd.utils import auth_hash


def test_hash_and_verify():
    pw = "correct horse battery staple"
    h = auth_hash.hash_password(pw)
    assert isinstance(h, str) and len(h) > 0
    assert auth_hash.verify_password(pw, h) is True


def test_wrong_password_fails():
    h = auth_hash.hash_password("secret1")
    assert auth_hash.verify_password("wrong", h) is False


def test_hashes_are_salted():
    h1 = auth_hash.hash_password("repeatable")
    h2 = auth_hash.hash_password("repeatable")
    assert h1 != h2
    assert auth_hash.verify_password("repeatable", h1)
    assert auth_hash.verify_password("repeatable", h2)


def test_missing_or_garbage_hash_is_a_mismatch():
    assert auth_hash.verify_password("pw", None) is False
    assert auth_hash.verify_password(None, auth_hash.hash_password("pw")) is False
    assert auth_hash.verify_password("pw", "not-a-hash") is False


def test_hashing_nothing_is_an_error():
    with pytest.raises(ValueError):
        auth_hash.hash_password(None)
