"""Audit event type definitions."""

from enum import Enum


class EventType(str, Enum):
    """Audit event types."""

    # Password record events
    PASS_ADD = "pass.add"
    PASS_DELETE = "pass.delete"
    PASS_CLEAR = "pass.clear"
    PASS_LIST = "pass.list"

    # Login events
    LOGIN_ACCEPT = "login.accept"
    LOGIN_CONTINUE = "login.continue"

    # Store lifecycle events
    STORE_LOAD = "store.load"
    STORE_SAVE = "store.save"
    STORE_PRUNE_USER = "store.prune_user"

    # Error events
    ERROR_PERSISTENCE = "error.persistence"
    ERROR_RECORD = "error.record"
