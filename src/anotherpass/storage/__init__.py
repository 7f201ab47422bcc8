"""Password record storage."""

from .backends import JsonFileBackend, MemoryBackend
from .base import (
    DELIMITER,
    CredentialNotFoundError,
    CredentialStoreError,
    InvalidIndexError,
    InvalidRecordError,
    KeyValueBackend,
    MalformedRecordError,
    NoRecordsError,
    PasswordRecord,
    PersistenceError,
    RecordView,
)
from .store import CredentialStore

__all__ = [
    "DELIMITER",
    "CredentialNotFoundError",
    "CredentialStore",
    "CredentialStoreError",
    "InvalidIndexError",
    "InvalidRecordError",
    "JsonFileBackend",
    "KeyValueBackend",
    "MalformedRecordError",
    "MemoryBackend",
    "NoRecordsError",
    "PasswordRecord",
    "PersistenceError",
    "RecordView",
]
