"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
per-file extraction rows, and cast summaries.
"""

from __future__ import annotations

from typing import NoReturn, Sequence

import typer

from .errors import PipelineStageError
from .models.datatypes import CastEntry, ExtractionReport


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_extraction_progress(label: str, completed: int, total: int) -> None:
    """Print one `[completed/total]` progress row for a finished file."""

    typer.echo(f"[{completed}/{total}] Extracting: {label}")


def echo_file_results(report: ExtractionReport) -> None:
    """Print per-file extraction outcomes in discovery order."""

    for outcome in report.files:
        if outcome.status == "read_failed":
            typer.secho(
                f"  {outcome.label}: skipped (read failed)", fg=typer.colors.YELLOW
            )
        else:
            typer.echo(f"  {outcome.label}: {len(outcome.records)} character(s)")


def echo_cast_summary(cast: Sequence[CastEntry]) -> None:
    """Print the final cast with each entry's primary voice."""

    typer.echo(f"Extracted {len(cast)} character(s):")
    for entry in cast:
        typer.echo(f"  {entry.name}: {entry.primary_voice or '(none)'}")


def echo_extraction_report(report: ExtractionReport) -> None:
    """Print per-file results, empty-result notices, and the cast summary."""

    if report.no_files_found:
        patterns = ", ".join(report.file_patterns) or "(any)"
        typer.secho(
            f"No screenplay files found matching pattern(s): {patterns}",
            fg=typer.colors.YELLOW,
        )
    else:
        echo_file_results(report)
        if report.extracted_count == 0:
            typer.secho("No characters extracted.", fg=typer.colors.YELLOW)
    echo_cast_summary(report.cast)
