"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
conversion summaries, inspection reports, and voice listings.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Sequence

import typer

from .errors import PipelineStageError, SynthesisError
from .models.datatypes import ConversionResult, InspectionReport


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if isinstance(exc, SynthesisError) and exc.retryable:
            typer.secho(
                f"Failure kind `{exc.failure_kind}` is retryable after a delay.",
                fg=typer.colors.YELLOW,
                err=True,
            )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_conversion_summary(result: ConversionResult, output_path: Path) -> None:
    """Print derived conversion metadata and the written audio path."""

    typer.echo(f"Detected language: {result.detected_language.value}")
    typer.echo(f"Text length: {result.text_length}")
    typer.echo(f"Chunks: {result.chunk_count}")
    typer.echo(f"Audio ({result.response_format}): {output_path}")


def echo_inspection_report(report: InspectionReport) -> None:
    """Print extraction diagnostics followed by the text sample."""

    typer.echo(f"Backend: {report.backend}")
    typer.echo(f"Text length: {report.text_length}")
    typer.echo(f"Detected language: {report.detected_language.value}")
    typer.echo(f"Chunks: {report.chunk_count}")
    typer.echo("Sample:")
    typer.echo(report.sample)


def echo_voice_list(voices: Sequence[str], default_voice: str) -> None:
    """Print supported voices, marking the configured default."""

    for voice in voices:
        marker = " (default)" if voice == default_voice else ""
        typer.echo(f"{voice}{marker}")
