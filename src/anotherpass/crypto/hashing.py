"""Salted password hashing and verification."""

import secrets
import string

import structlog
from cryptography.hazmat.primitives import constant_time, hashes

from ..storage.base import PasswordRecord

logger = structlog.get_logger(__name__)

SALT_ALPHABET = string.ascii_letters + string.digits
DEFAULT_SALT_LENGTH = 20


def generate_salt(length: int = DEFAULT_SALT_LENGTH) -> str:
    """Generate a random salt token.

    Args:
        length: Number of characters in the salt.

    Returns:
        An alphanumeric salt drawn from the system CSPRNG.

    Raises:
        ValueError: If length is not positive.
    """
    if length <= 0:
        raise ValueError("Salt length must be positive")
    return "".join(secrets.choice(SALT_ALPHABET) for _ in range(length))


def hash_password(plaintext: str, salt: str) -> str:
    """Compute the salted SHA-256 hash of a password.

    Args:
        plaintext: The password to hash.
        salt: The record's salt.

    Returns:
        Lowercase hex digest of ``sha256(plaintext + salt)``.
    """
    digest = hashes.Hash(hashes.SHA256())
    digest.update((plaintext + salt).encode("utf-8"))
    return digest.finalize().hex()


def verify_password(plaintext: str, record: PasswordRecord) -> bool:
    """Check a password against a stored record in constant time.

    Args:
        plaintext: The presented password.
        record: The stored record.

    Returns:
        True if the password matches the record, False otherwise.
    """
    candidate = hash_password(plaintext, record.salt)
    return constant_time.bytes_eq(
        candidate.encode("ascii"), record.hash.lower().encode("utf-8")
    )


def make_record(
    plaintext: str, remainder: str = "", salt_length: int = DEFAULT_SALT_LENGTH
) -> PasswordRecord:
    """Create a freshly salted record for a password.

    Args:
        plaintext: The password to register.
        remainder: Free-form label shown to the owner.
        salt_length: Number of characters in the generated salt.

    Returns:
        A new PasswordRecord. No store is modified.
    """
    salt = generate_salt(salt_length)
    record = PasswordRecord(
        remainder=remainder, salt=salt, hash=hash_password(plaintext, salt)
    )
    logger.debug("record_created", salt_size=len(salt))
    return record
