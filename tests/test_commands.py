"""Tests for the chat-style command surface."""

from unittest.mock import patch

import pytest

from anotherpass.commands import NO_PASSWORDS, CommandHandler
from anotherpass.storage import CredentialStore, MemoryBackend


@pytest.fixture
def handler(store: CredentialStore) -> CommandHandler:
    """Command handler over the test store."""
    return CommandHandler(store)


def test_add(handler: CommandHandler, store: CredentialStore):
    """Test adding a password with a label."""
    assert handler.handle("alice", "Add hunter2 backup") == ["Password added."]
    assert store.check_login("alice", "hunter2")
    assert store.list("alice")[0].remainder == "backup"


def test_add_is_case_insensitive(handler: CommandHandler):
    """Test command names ignore case."""
    assert handler.handle("alice", "add hunter2") == ["Password added."]
    assert handler.handle("alice", "ADD other") == ["Password added."]


def test_add_without_password(handler: CommandHandler):
    """Test Add requires a password."""
    assert handler.handle("alice", "Add") == ["You did not supply a password."]


def test_add_duplicate(handler: CommandHandler):
    """Test re-adding the identical record."""
    with patch("anotherpass.crypto.hashing.generate_salt", return_value="fixedsalt"):
        handler.handle("alice", "Add hunter2")
        assert handler.handle("alice", "Add hunter2") == ["Password is already added."]


def test_add_bad_remainder(handler: CommandHandler):
    """Test remainders holding the delimiter are refused."""
    reply = handler.handle("alice", "Add hunter2 a#b")
    assert reply[0].startswith("Invalid remainder")


def test_add_not_saved(handler: CommandHandler, backend: MemoryBackend):
    """Test a persistence failure is reported to the user."""
    backend.fail_commits = True
    assert handler.handle("alice", "Add hunter2") == [
        "Password added. (warning: could not be saved)"
    ]


def test_list(handler: CommandHandler, store: CredentialStore):
    """Test listing shows ids, remainders and hash prefixes only."""
    handler.handle("alice", "Add one first")
    handler.handle("alice", "Add two second")
    output = "\n".join(handler.handle("alice", "List"))

    assert "Id" in output and "Remainder" in output and "PassHash" in output
    assert "first" in output and "second" in output
    for record in store.records("alice"):
        assert record.hash[:8] in output
        assert record.hash not in output
        assert record.salt not in output


def test_list_empty(handler: CommandHandler):
    """Test listing without passwords."""
    assert handler.handle("alice", "List") == [NO_PASSWORDS]


def test_list_only_own_records(handler: CommandHandler):
    """Test a user never sees another user's records."""
    handler.handle("alice", "Add hunter2 secretlabel")
    assert handler.handle("bob", "List") == [NO_PASSWORDS]


def test_del(handler: CommandHandler, store: CredentialStore):
    """Test deleting by listed id."""
    handler.handle("alice", "Add one first")
    handler.handle("alice", "Add two second")

    assert handler.handle("alice", "Del 1") == ["Removed"]
    assert [row.remainder for row in store.list("alice")] == ["second"]


@pytest.mark.parametrize("arg", ["0", "3", "x", "", "-1"])
def test_del_invalid(handler: CommandHandler, arg: str):
    """Test ids outside the listing are refused."""
    handler.handle("alice", "Add one")
    handler.handle("alice", "Add two")
    assert handler.handle("alice", f"Del {arg}") == ['Invalid #, check "list"']


def test_del_without_passwords(handler: CommandHandler):
    """Test deleting when nothing is stored."""
    assert handler.handle("alice", "Del 1") == [NO_PASSWORDS]


def test_clear(handler: CommandHandler, store: CredentialStore):
    """Test clearing all passwords."""
    handler.handle("alice", "Add one")
    assert handler.handle("alice", "Clear") == ["Cleared"]
    assert "alice" not in store
    assert handler.handle("alice", "Clear") == [NO_PASSWORDS]


def test_help(handler: CommandHandler):
    """Test the help table lists every command."""
    output = "\n".join(handler.handle("alice", "Help"))
    for name in ["Add", "Del", "Clear", "List"]:
        assert name in output
    assert "<pass> [remainder]" in output

    assert "Del <id>" in "\n".join(handler.handle("alice", "help del"))
    assert handler.handle("alice", "help nope") == ["No matches for 'nope'"]


def test_unknown_command(handler: CommandHandler):
    """Test unknown commands point to Help."""
    assert handler.handle("alice", "Frobnicate") == [
        "Unknown command [Frobnicate]",
        "Try: Help",
    ]
