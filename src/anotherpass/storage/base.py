"""Base interfaces and types for password record storage."""

from abc import ABC, abstractmethod
from typing import Dict, NamedTuple

import structlog
from pydantic import BaseModel, ConfigDict, field_validator

logger = structlog.get_logger(__name__)

# Reserved delimiter between the fields of a serialized record.
DELIMITER = "#"


class CredentialStoreError(Exception):
    """Base exception for credential store operations."""


class CredentialNotFoundError(CredentialStoreError):
    """Exception raised when a credential is not found."""


class NoRecordsError(CredentialNotFoundError):
    """Exception raised when a user has no stored passwords."""


class InvalidIndexError(CredentialStoreError):
    """Exception raised when a record index is out of range."""

    def __init__(self, index: int, count: int):
        super().__init__(f"Invalid record index {index} (have {count})")
        self.index = index
        self.count = count


class InvalidRecordError(CredentialStoreError, ValueError):
    """Exception raised when record input is rejected."""


class MalformedRecordError(InvalidRecordError):
    """Exception raised when a serialized record cannot be parsed."""


class PersistenceError(CredentialStoreError):
    """Exception raised when the backing store cannot be read or written."""


def _is_token(value: str) -> bool:
    return bool(value) and DELIMITER not in value and not any(c.isspace() for c in value)


class PasswordRecord(BaseModel):
    """One registered secondary password.

    Records are immutable and hashable, so a user's records can be kept in an
    ordered set. Two records are equal iff their serialized lines are equal.
    """

    model_config = ConfigDict(frozen=True)

    remainder: str = ""
    salt: str
    hash: str

    @field_validator("salt", "hash")
    @classmethod
    def _check_token(cls, value: str) -> str:
        if not _is_token(value):
            raise ValueError("must be non-empty and free of delimiters and whitespace")
        return value

    @field_validator("remainder")
    @classmethod
    def _check_remainder(cls, value: str) -> str:
        # Persisted records are joined by whitespace
        if any(c.isspace() for c in value):
            raise ValueError("must not contain whitespace")
        return value

    def to_line(self) -> str:
        """Serialize as ``remainder#salt#hash``."""
        return DELIMITER.join((self.remainder, self.salt, self.hash))

    @classmethod
    def from_line(cls, line: str) -> "PasswordRecord":
        """Parse a serialized record.

        The salt and hash are taken from the last two fields, so a remainder
        holding extra delimiters still parses.

        Raises:
            MalformedRecordError: If the line does not split into three fields.
        """
        if any(c.isspace() for c in line):
            raise MalformedRecordError("Record contains whitespace")

        fields = line.rsplit(DELIMITER, 2)
        if len(fields) != 3:
            raise MalformedRecordError(
                f"Expected 3 fields, got {len(fields)}"
            )

        remainder, salt, hash_ = fields
        if not salt or not hash_:
            raise MalformedRecordError("Record has an empty salt or hash")
        return cls(remainder=remainder, salt=salt, hash=hash_)

    def display_hash(self, prefix_len: int = 8) -> str:
        """Return a shortened hash suitable for listings."""
        if prefix_len <= 0:
            return "..."
        return f"{self.hash[:prefix_len]}..."


class RecordView(NamedTuple):
    """A single row of a user's password listing."""

    index: int
    remainder: str
    hash_prefix: str


class KeyValueBackend(ABC):
    """Durable key-value namespace holding one value per user."""

    @abstractmethod
    def items(self) -> Dict[str, str]:
        """Return every persisted (user, value) pair.

        Raises:
            PersistenceError: If the namespace cannot be read.
        """
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Set a key to a value in the pending namespace."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every key from the pending namespace."""
        ...

    @abstractmethod
    def commit(self) -> None:
        """Durably flush the pending namespace.

        Raises:
            PersistenceError: If the write fails.
        """
        logger.debug("committing_namespace", backend=type(self).__name__)
        ...
