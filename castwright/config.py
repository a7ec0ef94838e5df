"""Configuration model and loaders for Castwright.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide deterministic precedence resolution for provider/model runtime settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `CastwrightConfig`: normalized runtime settings for one extraction run.
- `ProviderRuntimeConfig`: resolved provider/model runtime values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `CastwrightConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    normalize_string_list,
    parse_permissive_boolean,
    parse_positive_int,
)


DEFAULT_PROJECT_FILE = "PROJECT.md"
DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_CONCURRENCY = 4
DEFAULT_TOKEN_BUDGET = 2000
_SUPPORTED_PROVIDER_IDS = frozenset({"openai"})


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved provider settings for one run.

    Attributes:
        provider: Provider identifier for LLM queries.
        model: Model identifier for LLM queries.
        base_url: Optional OpenAI-compatible endpoint override.
        api_key: Optional provider API key, never persisted.
    """

    provider: str
    model: str
    base_url: str | None = None
    api_key: str | None = None


@dataclass(slots=True)
class CastwrightConfig:
    """Runtime configuration for one extraction or enrichment run.

    Attributes:
        project_file: Path to the `PROJECT.md` file holding cast front matter.
        provider: LLM provider identifier.
        model: LLM model identifier.
        base_url: Optional OpenAI-compatible endpoint override.
        api_key: Optional API key for provider calls.
        concurrency: Maximum number of files extracted in parallel.
        token_budget: Maximum estimated tokens per LLM request.
        temperature: Sampling temperature for provider calls.
        dry_run: Whether results are previewed without writing the project file.
        file_patterns: Discovery pattern override; empty means use front matter.
        runtime_sources: Optional runtime source overrides injected by CLI.
    """

    project_file: Path = Path(DEFAULT_PROJECT_FILE)
    provider: str = "openai"
    model: str = DEFAULT_MODEL
    base_url: str | None = None
    api_key: str | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    token_budget: int = DEFAULT_TOKEN_BUDGET
    temperature: float = 0.0
    dry_run: bool = False
    file_patterns: tuple[str, ...] = ()
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    @property
    def project_dir(self) -> Path:
        """Return the directory that holds the project file."""

        return self.project_file.resolve().parent

    def validate(self) -> None:
        """Validate runtime configuration values before pipeline execution."""

        self._validate_provider_id(self.provider)
        if not self.model.strip():
            raise ValueError("`model` must be a non-empty string.")
        if self.concurrency < 1:
            raise ValueError("`concurrency` must be a positive integer.")
        if self.token_budget < 1:
            raise ValueError("`token_budget` must be a positive integer.")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("`temperature` must be between 0.0 and 2.0.")

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field default.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources

        provider = self._resolve(
            "provider", "CASTWRIGHT_PROVIDER", self.provider, resolved_sources
        )
        model = self._resolve("model", "CASTWRIGHT_MODEL", self.model, resolved_sources)
        base_url = self._resolve(
            "base_url", "CASTWRIGHT_BASE_URL", self.base_url, resolved_sources
        )
        api_key = self._resolve("api_key", "OPENAI_API_KEY", self.api_key, resolved_sources)

        if provider is None or model is None:
            raise ValueError(
                "`provider` and `model` could not be resolved from CLI, secure storage, "
                "env, or defaults."
            )
        self._validate_provider_id(provider)
        return ProviderRuntimeConfig(
            provider=provider,
            model=model,
            base_url=base_url,
            api_key=api_key,
        )

    @staticmethod
    def _resolve(
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Return the first non-blank value in cli, secure, env, default order."""

        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, env_key),
        ):
            value = normalize_optional_string(mapping.get(lookup_key))
            if value is not None:
                return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _validate_provider_id(provider_id: str) -> None:
        """Validate provider identifiers against currently supported providers."""

        if provider_id not in _SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(_SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported `provider` value `{provider_id}`; supported: {supported}."
            )


class ConfigLoader:
    """Factory methods for creating `CastwrightConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "project_file",
            "provider",
            "model",
            "base_url",
            "api_key",
            "concurrency",
            "max_tokens",
            "temperature",
            "dry_run",
            "file_patterns",
        }
    )
    _RUNTIME_ENV_KEYS = frozenset(
        {
            "CASTWRIGHT_PROVIDER",
            "CASTWRIGHT_MODEL",
            "CASTWRIGHT_BASE_URL",
            "OPENAI_API_KEY",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> CastwrightConfig:
        """Create a validated config from a YAML file.

        Relative `project_file` values resolve against the YAML file's directory.
        """

        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        source_label = f"YAML `{path}`"
        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(
                f"{source_label} includes unsupported key(s): {', '.join(unknown)}."
            )

        project_file = Path(
            normalize_optional_string(payload.get("project_file")) or DEFAULT_PROJECT_FILE
        )
        if not project_file.is_absolute():
            project_file = path.parent / project_file

        config = CastwrightConfig(
            project_file=project_file,
            provider=normalize_optional_string(payload.get("provider")) or "openai",
            model=normalize_optional_string(payload.get("model")) or DEFAULT_MODEL,
            base_url=normalize_optional_string(payload.get("base_url")),
            api_key=normalize_optional_string(payload.get("api_key")),
            concurrency=ConfigLoader._optional_positive_int(
                payload, "concurrency", source_label, DEFAULT_CONCURRENCY
            ),
            token_budget=ConfigLoader._optional_positive_int(
                payload, "max_tokens", source_label, DEFAULT_TOKEN_BUDGET
            ),
            temperature=ConfigLoader._optional_float(payload, "temperature", source_label, 0.0),
            dry_run=ConfigLoader._optional_boolean(payload, "dry_run", source_label, False),
            file_patterns=ConfigLoader._optional_patterns(payload, source_label),
        )
        config.validate()
        return config

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> CastwrightConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        def optional(key: str) -> str | None:
            return normalize_optional_string(env_map.get(key))

        concurrency = optional("CASTWRIGHT_CONCURRENCY")
        token_budget = optional("CASTWRIGHT_MAX_TOKENS")
        dry_run_raw = optional("CASTWRIGHT_DRY_RUN")
        dry_run = False
        if dry_run_raw is not None:
            parsed = parse_permissive_boolean(dry_run_raw)
            if parsed is None:
                raise ValueError(
                    "Environment variable `CASTWRIGHT_DRY_RUN` must be a boolean value "
                    "(`true`/`false`, `1`/`0`, `yes`/`no`)."
                )
            dry_run = parsed

        runtime_env = {
            key: value
            for key, value in env_map.items()
            if key in ConfigLoader._RUNTIME_ENV_KEYS
            and normalize_optional_string(value) is not None
        }

        config = CastwrightConfig(
            project_file=Path(optional("CASTWRIGHT_PROJECT_FILE") or DEFAULT_PROJECT_FILE),
            provider=optional("CASTWRIGHT_PROVIDER") or "openai",
            model=optional("CASTWRIGHT_MODEL") or DEFAULT_MODEL,
            base_url=optional("CASTWRIGHT_BASE_URL"),
            api_key=optional("OPENAI_API_KEY"),
            concurrency=(
                parse_positive_int(concurrency, "CASTWRIGHT_CONCURRENCY")
                if concurrency is not None
                else DEFAULT_CONCURRENCY
            ),
            token_budget=(
                parse_positive_int(token_budget, "CASTWRIGHT_MAX_TOKENS")
                if token_budget is not None
                else DEFAULT_TOKEN_BUDGET
            ),
            dry_run=dry_run,
            runtime_sources=RuntimeConfigSources(env=runtime_env),
        )
        config.validate()
        return config

    @staticmethod
    def _optional_positive_int(
        payload: Mapping[str, Any], key: str, source_label: str, default: int
    ) -> int:
        """Read and validate a positive integer payload field."""

        if payload.get(key) is None:
            return default
        try:
            return parse_positive_int(payload[key], key)
        except ValueError as exc:
            raise ValueError(f"{source_label} field {exc}") from exc

    @staticmethod
    def _optional_float(
        payload: Mapping[str, Any], key: str, source_label: str, default: float
    ) -> float:
        """Read a numeric payload field as float."""

        raw_value = payload.get(key)
        if raw_value is None:
            return default
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a number.")
        try:
            return float(raw_value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{source_label} field `{key}` must be a number.") from exc

    @staticmethod
    def _optional_boolean(
        payload: Mapping[str, Any], key: str, source_label: str, default: bool
    ) -> bool:
        """Read and validate a boolean field from a payload."""

        if key not in payload:
            return default
        parsed = parse_permissive_boolean(payload[key])
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

    @staticmethod
    def _optional_patterns(payload: Mapping[str, Any], source_label: str) -> tuple[str, ...]:
        """Read `file_patterns` as a string or list of strings."""

        try:
            return tuple(normalize_string_list(payload.get("file_patterns")))
        except ValueError as exc:
            raise ValueError(
                f"{source_label} field `file_patterns` must be a string or list of strings."
            ) from exc
