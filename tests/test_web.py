"""Tests for the web page adapter."""

import pytest

from anotherpass.storage import CredentialStore
from anotherpass.web import WebPages


@pytest.fixture
def pages(store: CredentialStore) -> WebPages:
    """Web pages with one stored password for alice."""
    store.add("alice", "hunter2", "backup")
    return WebPages(store, base_path="/anotherpass/")


def test_index(pages: WebPages, store: CredentialStore):
    """Test the index rows carry no salt or full hash."""
    response = pages.render("alice", "index")
    record = store.records("alice")[0]
    assert response.rows == [
        {"Id": "1", "Remainder": "backup", "PassHash": record.hash[:8] + "..."}
    ]
    assert pages.render("bob", "index").rows == []


def test_add(pages: WebPages, store: CredentialStore):
    """Test adding redirects to the index."""
    response = pages.render("alice", "add", {"pass": "other", "remainder": "spare"})
    assert response.redirect == "/anotherpass/"
    assert response.error is None
    assert store.check_login("alice", "other")


def test_add_invalid(pages: WebPages):
    """Test invalid input is reported without raising."""
    assert pages.render("alice", "add", {"pass": ""}).error
    assert pages.render("alice", "add", {"pass": "x", "remainder": "a b"}).error


def test_delete_by_id(pages: WebPages, store: CredentialStore):
    """Test deleting by listed id."""
    response = pages.render("alice", "delete", {"id": "1"})
    assert response.redirect == "/anotherpass/"
    assert response.error is None
    assert "alice" not in store


@pytest.mark.parametrize("params", [{"id": "2"}, {"id": "abc"}, {}])
def test_delete_invalid(pages: WebPages, store: CredentialStore, params: dict):
    """Test bad delete requests leave the records alone."""
    assert pages.render("alice", "delete", params).error
    assert store.count("alice") == 1


def test_delete_by_line_requires_trust(pages: WebPages, store: CredentialStore):
    """Test line-addressed deletion is refused unless enabled."""
    line = store.records("alice")[0].to_line()
    assert pages.render("alice", "delete", {"line": line}).error
    assert store.count("alice") == 1

    trusted = WebPages(store, allow_line_delete=True)
    assert trusted.render("alice", "delete", {"line": "x#y#z"}).error
    assert trusted.render("alice", "delete", {"line": line}).error is None
    assert "alice" not in store


def test_unknown_page(pages: WebPages):
    """Test pages not served here."""
    assert pages.render("alice", "settings") is None
