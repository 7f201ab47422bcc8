"""In-memory per-user password store with full-namespace persistence."""

import threading
from typing import Callable, Dict, List, Optional

import structlog

from ..audit import EventType, audit_event
from ..crypto import hashing
from .base import (
    DELIMITER,
    InvalidIndexError,
    InvalidRecordError,
    KeyValueBackend,
    MalformedRecordError,
    NoRecordsError,
    PasswordRecord,
    PersistenceError,
    RecordView,
)

logger = structlog.get_logger(__name__)

KnownUser = Callable[[str], bool]

# Records of one user, kept as an insertion-ordered set
RecordSet = Dict[PasswordRecord, None]


class CredentialStore:
    """Maps each user to an ordered set of secondary password records.

    Every mutation is applied in memory and then the whole backend namespace
    is replaced and committed. Listing order is insertion order and is the
    numbering used by delete_by_index().

    All operations run under one re-entrant lock, so concurrent callers never
    interleave a mutation with another mutation's save or with a read.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        known_user: Optional[KnownUser] = None,
        hash_prefix_len: int = 8,
        salt_length: Optional[int] = None,
    ):
        """Initialize an empty store.

        Args:
            backend: Persistence collaborator.
            known_user: Predicate telling whether a user currently exists.
                None accepts every user.
            hash_prefix_len: Number of hash characters shown by list().
            salt_length: Length of salts generated by add(). Defaults to
                the verification engine's salt length.
        """
        self._backend = backend
        self._known_user = known_user
        self._hash_prefix_len = hash_prefix_len
        self._salt_length = salt_length or hashing.DEFAULT_SALT_LENGTH
        self._passes: Dict[str, RecordSet] = {}
        self._lock = threading.RLock()

    def load(self, known_user: Optional[KnownUser] = None) -> None:
        """Rebuild memory from the backend, pruning unknown users.

        Malformed records are skipped. Calling load() twice on the same
        durable data yields the same in-memory state.

        Args:
            known_user: Overrides the predicate given at construction.

        Raises:
            PersistenceError: If the backend cannot be read.
        """
        if known_user is not None:
            self._known_user = known_user

        with self._lock:
            entries = self._backend.items()
            self._passes = {}
            skipped = 0

            for user, value in entries.items():
                if self._known_user is not None and not self._known_user(user):
                    logger.debug("unknown_user_in_saved_data", user=user)
                    audit_event(
                        event_type=EventType.STORE_PRUNE_USER, user=user, success=True
                    )
                    continue

                for token in value.split():
                    try:
                        record = PasswordRecord.from_line(token)
                    except MalformedRecordError as e:
                        skipped += 1
                        logger.warning("malformed_record_skipped", user=user, error=str(e))
                        audit_event(
                            event_type=EventType.ERROR_RECORD, user=user, success=False, error=e
                        )
                        continue
                    self._passes.setdefault(user, {})[record] = None

        logger.info("store_loaded", users=len(self._passes), skipped=skipped)
        audit_event(
            event_type=EventType.STORE_LOAD,
            user="*",
            success=True,
            details={"users": len(self._passes), "skipped": skipped},
        )

    reload = load

    def save(self) -> None:
        """Replace the backend namespace with the current records and commit.

        Raises:
            PersistenceError: If the commit fails. Memory is left as is.
        """
        with self._lock:
            try:
                self._backend.clear()
                for user, records in self._passes.items():
                    if records:
                        self._backend.set(
                            user, " ".join(r.to_line() for r in records)
                        )
                self._backend.commit()
                audit_event(
                    event_type=EventType.STORE_SAVE,
                    user="*",
                    success=True,
                    details={"users": len(self._passes)},
                )
            except PersistenceError as e:
                logger.error("store_save_failed", error=str(e))
                audit_event(
                    event_type=EventType.ERROR_PERSISTENCE,
                    user="*",
                    success=False,
                    error=e,
                )
                raise

    def _validate(self, plaintext: str, remainder: str) -> None:
        if not plaintext:
            raise InvalidRecordError("You did not supply a password")
        if DELIMITER in remainder or any(c.isspace() for c in remainder):
            raise InvalidRecordError(
                f"Remainder must not contain whitespace or '{DELIMITER}'"
            )

    def add(self, user: str, plaintext: str, remainder: str = "") -> bool:
        """Register a new password for a user.

        Args:
            user: Owner of the password.
            plaintext: The password.
            remainder: Label shown in listings.

        Returns:
            True if stored, False if an identical record already exists.

        Raises:
            InvalidRecordError: If the password is empty or the remainder is
                not storable.
            PersistenceError: If saving fails after the record was added.
        """
        self._validate(plaintext, remainder)
        record = hashing.make_record(plaintext, remainder, self._salt_length)
        added = self.insert(user, record)
        audit_event(
            event_type=EventType.PASS_ADD,
            user=user,
            success=True,
            details={"remainder": remainder, "duplicate": not added},
        )
        return added

    def insert(self, user: str, record: PasswordRecord) -> bool:
        """Insert an already built record, e.g. when restoring a backup.

        Returns:
            True if inserted and saved, False if the exact record exists.
        """
        with self._lock:
            records = self._passes.setdefault(user, {})
            if record in records:
                return False
            records[record] = None
            self.save()
            return True

    def list(self, user: str) -> List[RecordView]:
        """Return the user's records as 1-based display rows."""
        with self._lock:
            return [
                RecordView(i, r.remainder, r.display_hash(self._hash_prefix_len))
                for i, r in enumerate(self._passes.get(user, {}), start=1)
            ]

    def records(self, user: str) -> List[PasswordRecord]:
        """Return a copy of the user's records in listing order."""
        with self._lock:
            return list(self._passes.get(user, {}))

    def delete_by_index(self, user: str, index: int) -> PasswordRecord:
        """Remove the record shown at a 1-based position by list().

        Returns:
            The removed record.

        Raises:
            NoRecordsError: If the user has no records.
            InvalidIndexError: If the index is out of range.
            PersistenceError: If saving fails after the removal.
        """
        with self._lock:
            records = self._passes.get(user)
            if not records:
                raise NoRecordsError(f"No passwords set for {user}")
            if index < 1 or index > len(records):
                raise InvalidIndexError(index, len(records))

            record = list(records)[index - 1]
            self._remove(user, record)
            return record

    def delete_by_value(self, user: str, line: str) -> bool:
        """Remove the record whose serialized line equals ``line``.

        Returns:
            True if a record was removed, False otherwise.

        Raises:
            PersistenceError: If saving fails after the removal.
        """
        try:
            record = PasswordRecord.from_line(line)
        except (MalformedRecordError, ValueError):
            return False

        with self._lock:
            if record not in self._passes.get(user, {}):
                return False
            self._remove(user, record)
            return True

    def _remove(self, user: str, record: PasswordRecord) -> None:
        records = self._passes[user]
        del records[record]
        if not records:
            del self._passes[user]
        audit_event(
            event_type=EventType.PASS_DELETE,
            user=user,
            success=True,
            details={"remainder": record.remainder},
        )
        self.save()

    def clear(self, user: str) -> bool:
        """Remove every record of a user.

        Returns:
            True if the user had records, False if nothing changed.

        Raises:
            PersistenceError: If saving fails after the removal.
        """
        with self._lock:
            if user not in self._passes:
                return False
            del self._passes[user]
            audit_event(event_type=EventType.PASS_CLEAR, user=user, success=True)
            self.save()
            return True

    def check_login(self, user: str, plaintext: str) -> bool:
        """Return True if the password matches any of the user's records."""
        with self._lock:
            records = list(self._passes.get(user, {}))
        return any(hashing.verify_password(plaintext, r) for r in records)

    def users(self) -> List[str]:
        """Return users that have at least one record."""
        with self._lock:
            return list(self._passes)

    def count(self, user: str) -> int:
        with self._lock:
            return len(self._passes.get(user, {}))

    def snapshot(self) -> Dict[str, List[str]]:
        """Return the serialized lines of every user."""
        with self._lock:
            return {
                user: [r.to_line() for r in records]
                for user, records in self._passes.items()
            }

    def __contains__(self, user: object) -> bool:
        with self._lock:
            return user in self._passes
