"""Shared fixtures for the anotherpass test suite."""

import pytest

from anotherpass.audit import reset_logger
from anotherpass.storage import CredentialStore, MemoryBackend


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging state between tests."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def backend() -> MemoryBackend:
    """Create an empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> CredentialStore:
    """Create a loaded store over the in-memory backend."""
    store = CredentialStore(backend)
    store.load()
    return store
