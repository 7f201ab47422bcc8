"""Verification engine for secondary passwords."""

from .hashing import (
    DEFAULT_SALT_LENGTH,
    generate_salt,
    hash_password,
    make_record,
    verify_password,
)

__all__ = [
    "DEFAULT_SALT_LENGTH",
    "generate_salt",
    "hash_password",
    "make_record",
    "verify_password",
]
