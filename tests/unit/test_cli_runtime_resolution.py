"""Unit tests for CLI provider runtime resolution helpers."""

from __future__ import annotations

import pytest

from castwright.cli_runtime import resolve_provider_runtime_sources
from castwright.errors import PipelineStageError


class InMemoryCredentialStore:
    """In-memory credential store implementation for runtime-resolution tests."""

    def __init__(self, initial_api_key: str | None = None) -> None:
        """Initialize the store with an optional initial API key."""

        self._api_key = initial_api_key
        self.stored_values: list[str] = []

    def get_api_key(self) -> str | None:
        """Return currently stored API key value."""

        return self._api_key

    def set_api_key(self, api_key: str) -> None:
        """Persist API key value and keep a history for assertions."""

        self._api_key = api_key
        self.stored_values.append(api_key)


class FailingCredentialStore:
    """Credential store that raises when persisting API key values."""

    def get_api_key(self) -> str | None:
        """Return no pre-existing secure API key."""

        return None

    def set_api_key(self, api_key: str) -> None:
        """Raise deterministic storage failure used for error-path assertions."""

        raise RuntimeError("no keyring backend")


def test_resolve_provider_runtime_sources_collects_cli_and_secure_values() -> None:
    """Resolver should normalize CLI overrides and include secure API key fallback."""

    store = InMemoryCredentialStore(initial_api_key="secure-api-key")
    runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
        provider=" openai ",
        model=" gpt-4o ",
        base_url="  ",
        api_key=None,
        prompt_api_key=False,
        store_api_key=True,
        credential_store_factory=lambda: store,
    )

    assert runtime_cli_values == {"provider": "openai", "model": "gpt-4o"}
    assert runtime_secure_values == {"api_key": "secure-api-key"}
    assert store.stored_values == []


def test_resolve_provider_runtime_sources_stores_cli_api_key(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """An explicit API key should be persisted when storing is enabled."""

    store = InMemoryCredentialStore()
    runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
        provider=None,
        model=None,
        base_url=None,
        api_key=" cli-key ",
        prompt_api_key=False,
        store_api_key=True,
        credential_store_factory=lambda: store,
    )

    assert runtime_cli_values == {"api_key": "cli-key"}
    assert runtime_secure_values == {}
    assert store.stored_values == ["cli-key"]
    assert "Stored API key in secure credential storage." in capsys.readouterr().out


def test_resolve_provider_runtime_sources_skips_storing_when_disabled() -> None:
    """`--no-store-api-key` should keep the key for this run only."""

    store = InMemoryCredentialStore()

    runtime_cli_values, _ = resolve_provider_runtime_sources(
        provider=None,
        model=None,
        base_url=None,
        api_key="one-off",
        prompt_api_key=False,
        store_api_key=False,
        credential_store_factory=lambda: store,
    )

    assert runtime_cli_values == {"api_key": "one-off"}
    assert store.stored_values == []


def test_resolve_provider_runtime_sources_prompts_for_missing_api_key(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Prompting should collect a hidden API key when none was passed."""

    prompts: list[dict[str, object]] = []

    def _fake_prompt(text: str, **kwargs: object) -> str:
        prompts.append({"text": text, **kwargs})
        return " prompted-key "

    monkeypatch.setattr("castwright.cli_runtime.typer.prompt", _fake_prompt)
    store = InMemoryCredentialStore()

    runtime_cli_values, _ = resolve_provider_runtime_sources(
        provider=None,
        model=None,
        base_url=None,
        api_key=None,
        prompt_api_key=True,
        store_api_key=False,
        credential_store_factory=lambda: store,
    )

    assert runtime_cli_values == {"api_key": "prompted-key"}
    assert prompts[0]["hide_input"] is True


def test_resolve_provider_runtime_sources_does_not_prompt_when_key_given(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """An explicit `--api-key` should take priority over prompting."""

    def _unexpected_prompt(*args: object, **kwargs: object) -> str:
        raise AssertionError("prompt must not be shown")

    monkeypatch.setattr("castwright.cli_runtime.typer.prompt", _unexpected_prompt)

    runtime_cli_values, _ = resolve_provider_runtime_sources(
        provider=None,
        model=None,
        base_url=None,
        api_key="given",
        prompt_api_key=True,
        store_api_key=False,
        credential_store_factory=InMemoryCredentialStore,
    )

    assert runtime_cli_values == {"api_key": "given"}


def test_resolve_provider_runtime_sources_wraps_storage_failures() -> None:
    """Storage failures should surface as a `credentials` stage error with a hint."""

    with pytest.raises(PipelineStageError) as exc_info:
        resolve_provider_runtime_sources(
            provider=None,
            model=None,
            base_url=None,
            api_key="cli-key",
            prompt_api_key=False,
            store_api_key=True,
            credential_store_factory=FailingCredentialStore,
        )

    error = exc_info.value
    assert error.stage == "credentials"
    assert "no keyring backend" in error.detail
    assert error.hint is not None
    assert "--no-store-api-key" in error.hint
