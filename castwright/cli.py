"""Command-line interface for Castwright.

Responsibilities:
- Expose user-facing commands for cast extraction, voice enrichment, and credentials.
- Convert CLI arguments into `CastwrightConfig` and run the pipeline.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_cast_summary,
    echo_extraction_progress,
    echo_extraction_report,
    exit_with_command_error,
)
from .cli_runtime import resolve_provider_runtime_sources
from .config import CastwrightConfig, ConfigLoader, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import PipelineStageError
from .io.project_file import ProjectDocument, ProjectFile
from .llm.query import QueryFunction
from .parsing import normalize_optional_string
from .pipeline import CastExtractionPipeline
from .provider_factory import ProviderFactory
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="castwright",
    no_args_is_help=True,
    help="Castwright CLI: extract screenplay casts with an LLM.",
)

ProjectOption = Annotated[
    Path | None,
    typer.Option("--project", help="Path to PROJECT.md (default: ./PROJECT.md)."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Optional YAML config file."),
]
ProviderOption = Annotated[str | None, typer.Option("--provider", help="LLM provider id.")]
ModelOption = Annotated[str | None, typer.Option("--model", help="LLM model id override.")]
BaseUrlOption = Annotated[
    str | None,
    typer.Option("--base-url", help="OpenAI-compatible endpoint, e.g. a local server."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="Provider API key override. Prefer `--prompt-api-key` to avoid shell history.",
    ),
]
PromptApiKeyOption = Annotated[
    bool,
    typer.Option("--prompt-api-key", help="Prompt for API key with hidden input (never echoed)."),
]
StoreApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--store-api-key/--no-store-api-key",
        help="Persist CLI-entered API key to secure credential storage.",
    ),
]
DryRunOption = Annotated[
    bool | None,
    typer.Option("--dry-run/--write", help="Preview results without writing PROJECT.md."),
]
QuietOption = Annotated[bool, typer.Option("--quiet", help="Suppress progress output.")]


def _load_yaml_config(config_path: Path | None) -> CastwrightConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    project: Path | None,
    runtime_cli_values: dict[str, str],
    runtime_secure_values: dict[str, str],
    **overrides: object,
) -> CastwrightConfig:
    """Resolve effective config from YAML or environment plus explicit CLI overrides."""

    base_config = _load_yaml_config(config_file)
    if base_config is None:
        try:
            base_config = ConfigLoader.from_env()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Invalid environment configuration: {exc}",
                hint="Fix or unset the offending `CASTWRIGHT_*` variable.",
            ) from exc

    explicit = {key: value for key, value in overrides.items() if value is not None}
    if project is not None:
        explicit["project_file"] = project
    config = replace(
        base_config,
        runtime_sources=RuntimeConfigSources(
            cli=runtime_cli_values,
            secure=runtime_secure_values,
            env=os.environ,
        ),
        **explicit,
    )
    config.validate()
    return config


def _create_query_function(config: CastwrightConfig) -> QueryFunction:
    """Create the provider query function for resolved runtime settings."""

    runtime = config.resolved_provider_runtime()
    return ProviderFactory.create_query_function(
        provider_id=runtime.provider,
        model=runtime.model,
        api_key=runtime.api_key,
        base_url=runtime.base_url,
        temperature=config.temperature,
    )


def _write_project(config: CastwrightConfig, document: ProjectDocument) -> Path:
    """Write an updated project document and map failures to stage errors."""

    try:
        return ProjectFile(config.project_file).save(document)
    except OSError as exc:
        raise PipelineStageError(
            stage="write",
            detail=f"Failed to write `{config.project_file}`: {exc}",
            hint="Check file permissions, or rerun with `--dry-run`.",
        ) from exc


@app.command("extract")
def extract_command(
    project: ProjectOption = None,
    config_file: ConfigOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    base_url: BaseUrlOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
    pattern: Annotated[
        list[str] | None,
        typer.Option(
            "--pattern",
            help="Screenplay file pattern override, repeatable (default: front matter).",
        ),
    ] = None,
    concurrency: Annotated[
        int | None,
        typer.Option("--concurrency", min=1, help="Files extracted in parallel (default 4)."),
    ] = None,
    max_tokens: Annotated[
        int | None,
        typer.Option(
            "--max-tokens",
            min=1,
            help="Per-request token budget before scene chunking (default 2000).",
        ),
    ] = None,
    dry_run: DryRunOption = None,
    quiet: QuietOption = False,
) -> None:
    """Extract characters from screenplay files and update the project cast."""

    try:
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            provider=provider,
            model=model,
            base_url=base_url,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            credential_store_factory=create_credential_store,
        )
        config = _resolve_command_config(
            config_file,
            project,
            runtime_cli_values,
            runtime_secure_values,
            concurrency=concurrency,
            token_budget=max_tokens,
            dry_run=dry_run,
            file_patterns=tuple(pattern) if pattern else None,
        )
        query_fn = _create_query_function(config)
        pipeline = CastExtractionPipeline(
            run_logger=None if quiet else RunLogger(level="WARNING"),
            progress_callback=None if quiet else echo_extraction_progress,
        )
        if not quiet:
            typer.echo(f"Project: {config.project_file}")
            typer.echo(f"Model: {config.resolved_provider_runtime().model}")
        document, report = pipeline.run(config, query_fn)
        written_path = None if config.dry_run else _write_project(config, document)
    except Exception as exc:
        exit_with_command_error("extract", exc)

    if quiet:
        return
    echo_extraction_report(report)
    if written_path is None:
        typer.echo("(dry run; no changes written)")
    else:
        typer.echo(f"Written to {written_path}")


@app.command("enrich")
def enrich_command(
    project: ProjectOption = None,
    config_file: ConfigOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    base_url: BaseUrlOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
    dry_run: DryRunOption = None,
    quiet: QuietOption = False,
) -> None:
    """Generate voice descriptions for cast entries that lack one."""

    try:
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            provider=provider,
            model=model,
            base_url=base_url,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            credential_store_factory=create_credential_store,
        )
        config = _resolve_command_config(
            config_file,
            project,
            runtime_cli_values,
            runtime_secure_values,
            dry_run=dry_run,
        )
        query_fn = _create_query_function(config)
        pipeline = CastExtractionPipeline(run_logger=None if quiet else RunLogger(level="WARNING"))
        document, result = pipeline.run_enrichment(config, query_fn)
        written_path = None if config.dry_run else _write_project(config, document)
    except Exception as exc:
        exit_with_command_error("enrich", exc)

    if quiet:
        return
    typer.echo(
        f"Enriched {result.enriched_count} character(s), skipped {result.skipped_count}."
    )
    echo_cast_summary(result.updated_cast)
    if written_path is None:
        typer.echo("(dry run; no changes written)")
    else:
        typer.echo(f"Written to {written_path}")


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "OpenAI API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        if credential_store.clear_api_key():
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_api_key() is not None else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored OpenAI API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
