"""Tests for entries and secrets."""

import pytest
from pydantic import ValidationError

from password_kvstore import Entry, Secret
from password_kvstore.errors import InvalidUtf8


def test_secret_redacted():
    """Test that secrets never render their content."""
    secret = Secret.from_plaintext("entry")
    assert str(secret) == "*****"
    assert repr(secret) == "Secret(*****)"
    assert f"{secret}" == "*****"
    assert str(Secret.from_plaintext("secret")) == "******"
    assert str(Secret()) == ""


def test_secret_accessors():
    """Test explicit access to secret content."""
    secret = Secret.from_plaintext("hunter2")
    assert secret.plaintext() == "hunter2"
    assert secret.as_bytes() == b"hunter2"
    assert len(secret) == 7


def test_secret_length_counts_bytes():
    """Test that redaction matches the byte length."""
    secret = Secret.from_plaintext("é")
    assert len(secret) == 2
    assert str(secret) == "**"


def test_secret_invalid_utf8():
    """Test reading non-text secret bytes as text."""
    with pytest.raises(InvalidUtf8):
        Secret(b"\xff\xfe").plaintext()


def test_secret_equality():
    """Test content equality."""
    assert Secret.from_plaintext("a") == Secret(b"a")
    assert Secret.from_plaintext("a") != Secret.from_plaintext("b")


def test_entry_defaults():
    """Test a name-only entry."""
    entry = Entry.from_name("entry")
    assert entry.name == "entry"
    assert entry.username == ""
    assert entry.password == Secret()
    assert entry.urls == []
    assert entry.attributes == {}


def test_entry_coerces_secrets():
    """Test that plain strings become secrets."""
    entry = Entry(name="mail", password="hunter2", attributes={"pin": "1234", "otp": b"\x01"})
    assert isinstance(entry.password, Secret)
    assert entry.password.plaintext() == "hunter2"
    assert entry.attributes["pin"] == Secret.from_plaintext("1234")
    assert entry.attributes["otp"] == Secret(b"\x01")

    entry.password = "changed"
    assert entry.password == Secret.from_plaintext("changed")


def test_entry_repr_hides_secrets():
    """Test that model rendering redacts secrets."""
    entry = Entry(name="mail", password="hunter2", attributes={"pin": "1234"})
    assert "hunter2" not in repr(entry)
    assert "1234" not in repr(entry)
    assert "*******" in repr(entry)


def test_entry_equality():
    """Test field equality."""
    first = Entry(name="mail", username="me", urls=["https://example.com"])
    second = Entry(name="mail", username="me", urls=["https://example.com"])
    assert first == second
    second.username = "you"
    assert first != second


def test_entry_requires_name():
    """Test validation of the required name."""
    with pytest.raises(ValidationError):
        Entry()
