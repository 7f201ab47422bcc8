"""Tests for the salted hashing and verification engine."""

import hashlib
import string

import pytest

from anotherpass.crypto import (
    DEFAULT_SALT_LENGTH,
    generate_salt,
    hash_password,
    make_record,
    verify_password,
)
from anotherpass.storage import PasswordRecord


def test_generate_salt():
    """Test salt length and alphabet."""
    salt = generate_salt()
    assert len(salt) == DEFAULT_SALT_LENGTH
    assert set(salt) <= set(string.ascii_letters + string.digits)

    assert len(generate_salt(32)) == 32


def test_generate_salt_unique():
    """Test that generated salts do not repeat."""
    salts = {generate_salt() for _ in range(1000)}
    assert len(salts) == 1000


def test_generate_salt_invalid_length():
    """Test rejection of non-positive salt lengths."""
    with pytest.raises(ValueError):
        generate_salt(0)


def test_hash_password_format():
    """Test the hash is sha256 over password followed by salt."""
    expected = hashlib.sha256(b"hunter2abcdef").hexdigest()
    assert hash_password("hunter2", "abcdef") == expected
    assert hash_password("hunter2", "abcdef") == hash_password("hunter2", "abcdef")


def test_hash_password_unicode():
    """Test non-ASCII passwords are hashed as UTF-8."""
    expected = hashlib.sha256("pässwörd".encode("utf-8") + b"salt").hexdigest()
    assert hash_password("pässwörd", "salt") == expected


def test_salting_changes_hash():
    """Test that different salts give different hashes for one password."""
    s1, s2 = generate_salt(), generate_salt()
    assert s1 != s2
    assert hash_password("hunter2", s1) != hash_password("hunter2", s2)


def test_make_record():
    """Test building a record from a password."""
    record = make_record("hunter2", "backup")
    assert record.remainder == "backup"
    assert len(record.salt) == DEFAULT_SALT_LENGTH
    assert record.hash == hash_password("hunter2", record.salt)

    other = make_record("hunter2", "backup")
    assert other != record


def test_make_record_rejects_whitespace_remainder():
    """Test records are never built with a remainder holding whitespace."""
    with pytest.raises(ValueError):
        make_record("x", "my label")


def test_verify_password():
    """Test verification accepts only the registered password."""
    record = make_record("hunter2")
    assert verify_password("hunter2", record)
    assert not verify_password("hunter3", record)
    assert not verify_password("", record)
    assert not verify_password("Hunter2", record)


def test_verify_password_uppercase_hash():
    """Test verification of records persisted with an upper-case hex hash."""
    record = make_record("hunter2")
    shouted = PasswordRecord(remainder="", salt=record.salt, hash=record.hash.upper())
    assert verify_password("hunter2", shouted)
