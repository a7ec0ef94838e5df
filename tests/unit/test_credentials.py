"""Unit tests for secure credential store helpers."""

from __future__ import annotations

import pytest
from keyring.backends import fail
from keyring.errors import KeyringError

from castwright.credentials import KeyringCredentialStore, create_credential_store


class FakeKeyringModule:
    """In-memory keyring stub for deterministic credential store tests."""

    def __init__(self, backend: object | None = None) -> None:
        """Initialize fake storage dictionary and the reported backend."""

        self._storage: dict[tuple[str, str], str] = {}
        self._backend = backend if backend is not None else object()

    def get_keyring(self) -> object:
        """Return the configured backend object."""

        return self._backend

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Return previously stored password if present."""

        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Store password value for the service/account key."""

        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        """Delete password value for the service/account key."""

        self._storage.pop((service_name, account_name), None)


def test_keyring_store_roundtrip_set_get_clear(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keyring store should set/get/clear API key values via keyring backend."""

    fake_keyring = FakeKeyringModule()
    monkeypatch.setattr("castwright.credentials.keyring", fake_keyring)
    store = KeyringCredentialStore()

    assert store.is_available() is True
    assert store.get_api_key() is None

    store.set_api_key("  abc123  ")
    assert store.get_api_key() == "abc123"
    assert fake_keyring.get_password("castwright", "openai_api_key") == "abc123"

    assert store.clear_api_key() is True
    assert store.get_api_key() is None
    assert store.clear_api_key() is False


def test_keyring_store_rejects_blank_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Blank keys should not be written to secure storage."""

    monkeypatch.setattr("castwright.credentials.keyring", FakeKeyringModule())

    with pytest.raises(ValueError, match="non-empty"):
        KeyringCredentialStore().set_api_key("   ")


def test_keyring_store_degrades_when_only_fail_backend_exists(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The failing fallback backend should read as unavailable storage."""

    monkeypatch.setattr(
        "castwright.credentials.keyring", FakeKeyringModule(backend=fail.Keyring())
    )
    store = KeyringCredentialStore()

    assert store.is_available() is False
    assert store.get_api_key() is None
    assert store.clear_api_key() is False
    with pytest.raises(RuntimeError, match="unavailable"):
        store.set_api_key("abc123")


def test_keyring_store_treats_backend_errors_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    """Backend read errors should surface as no stored key."""

    class _LockedKeyring(FakeKeyringModule):
        """Keyring whose reads always fail."""

        def get_password(self, service_name: str, account_name: str) -> str | None:
            """Simulate a locked keychain."""

            raise KeyringError("keychain locked")

    monkeypatch.setattr("castwright.credentials.keyring", _LockedKeyring())

    assert KeyringCredentialStore().get_api_key() is None


def test_create_credential_store_uses_castwright_service() -> None:
    """The default store should target the Castwright service and account."""

    store = create_credential_store()

    assert isinstance(store, KeyringCredentialStore)
    assert store.service_name == "castwright"
    assert store.account_name == "openai_api_key"
