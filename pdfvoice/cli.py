"""Command-line interface for pdfvoice.

Responsibilities:
- Expose user-facing commands for PDF/text conversion, inspection and previews.
- Resolve `PdfVoiceConfig` from YAML/environment defaults and CLI overrides.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_conversion_summary,
    echo_inspection_report,
    echo_voice_list,
    exit_with_command_error,
)
from .config import ConfigLoader, PdfVoiceConfig, collect_api_keys
from .credentials import create_credential_store
from .errors import PipelineStageError
from .pipeline import PdfVoicePipeline
from .telemetry.logger import RunLogger
from .tts.voices import SUPPORTED_VOICES

app = typer.Typer(
    name="pdfvoice",
    no_args_is_help=True,
    help="Convert text-based PDFs and plain text into speech audio.",
)

OutOption = Annotated[
    Path | None,
    typer.Option("--out", help="Output audio file path."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
VoiceOption = Annotated[
    str | None, typer.Option("--voice", help="TTS voice id override.")
]
ModelOption = Annotated[
    str | None, typer.Option("--model", help="TTS model id override.")
]
SpeedOption = Annotated[
    float | None, typer.Option("--speed", help="Speaking rate multiplier (0.25-4.0).")
]
ChunkSizeOption = Annotated[
    int | None,
    typer.Option("--max-chunk-size", help="Preferred maximum characters per chunk."),
]
WorkersOption = Annotated[
    int | None,
    typer.Option("--workers", help="Concurrent chunk synthesis calls (1 = sequential)."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="Provider API key tried before stored and environment keys.",
    ),
]


class ConvertProgressIndicator:
    """Render deterministic per-stage progress lines for conversion commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_base_config(config_path: Path | None) -> PdfVoiceConfig:
    """Load YAML or environment defaults and map failures to stage errors."""

    if config_path is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Invalid `PDFVOICE_*` environment configuration: {exc}",
                hint="Fix or unset the offending environment variable and rerun.",
            ) from exc

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
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_config(
    config_file: Path | None,
    *,
    api_key: str | None = None,
    voice: str | None = None,
    model: str | None = None,
    speed: float | None = None,
    max_chunk_size: int | None = None,
    workers: int | None = None,
) -> PdfVoiceConfig:
    """Apply CLI overrides and credential precedence over loaded defaults.

    Keys are ordered CLI, secure store, then config file and environment.
    """

    base_config = _load_base_config(config_file)
    stored_keys = create_credential_store().get_api_keys()
    return base_config.with_overrides(
        tts_voice=voice,
        tts_model=model,
        tts_speed=speed,
        max_chunk_size=max_chunk_size,
        synthesis_workers=workers,
        api_keys=collect_api_keys((api_key,), stored_keys, base_config.api_keys),
    )


def _read_input_pdf(input_pdf: Path) -> bytes:
    try:
        return input_pdf.read_bytes()
    except OSError as exc:
        raise PipelineStageError(
            stage="extract",
            detail=f"Cannot read input PDF `{input_pdf}`: {exc.strerror or exc}",
            hint="Verify the input file exists and is readable.",
        ) from exc


def _read_direct_text(
    text: str | None, text_file: Path | None, config: PdfVoiceConfig
) -> str:
    """Return direct text input, enforcing the caller-side character cap."""

    if (text is None) == (text_file is None):
        raise PipelineStageError(
            stage="input",
            detail="Provide exactly one of `--text` or `--text-file`.",
            hint="Pass inline text with `--text` or a UTF-8 file with `--text-file`.",
        )
    if text_file is None:
        source = text or ""
    else:
        try:
            source = text_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PipelineStageError(
                stage="input",
                detail=f"Cannot read text file `{text_file}`: {exc}",
                hint="Verify the file exists and is UTF-8 encoded.",
            ) from exc
    if len(source) > config.max_input_chars:
        raise PipelineStageError(
            stage="input",
            detail=(
                f"Text input has {len(source)} characters, above the limit of "
                f"{config.max_input_chars}."
            ),
            hint="Split the text into smaller parts or raise `max_input_chars` in config.",
        )
    return source


def _write_audio(output_path: Path, audio: bytes) -> Path:
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(audio)
    except OSError as exc:
        raise PipelineStageError(
            stage="output",
            detail=f"Cannot write audio to `{output_path}`: {exc.strerror or exc}",
            hint="Choose a writable location via `--out`.",
        ) from exc
    return output_path


def _create_pipeline(command_name: str) -> PdfVoicePipeline:
    progress = ConvertProgressIndicator(command_name=command_name)
    return PdfVoicePipeline(
        run_logger=RunLogger(),
        stage_progress_callback=progress.on_stage_start,
    )


@app.command("convert")
def convert_command(
    input_pdf: Annotated[Path, typer.Argument(help="Path to a text-based PDF.")],
    out: OutOption = None,
    config_file: ConfigOption = None,
    voice: VoiceOption = None,
    model: ModelOption = None,
    speed: SpeedOption = None,
    max_chunk_size: ChunkSizeOption = None,
    workers: WorkersOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Convert a PDF into one speech audio file."""

    try:
        config = _resolve_config(
            config_file,
            api_key=api_key,
            voice=voice,
            model=model,
            speed=speed,
            max_chunk_size=max_chunk_size,
            workers=workers,
        )
        pdf_bytes = _read_input_pdf(input_pdf)
        result = _create_pipeline("convert").convert_pdf(pdf_bytes, config)
        output_path = _write_audio(
            out or config.output_dir / f"{input_pdf.stem}.{config.response_format}",
            result.audio,
        )
    except Exception as exc:
        exit_with_command_error("convert", exc)

    echo_conversion_summary(result, output_path)


@app.command("speak")
def speak_command(
    text: Annotated[
        str | None, typer.Option("--text", help="Text to convert into speech.")
    ] = None,
    text_file: Annotated[
        Path | None,
        typer.Option("--text-file", help="UTF-8 text file to convert into speech."),
    ] = None,
    out: OutOption = None,
    config_file: ConfigOption = None,
    voice: VoiceOption = None,
    model: ModelOption = None,
    speed: SpeedOption = None,
    max_chunk_size: ChunkSizeOption = None,
    workers: WorkersOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Convert direct text input into one speech audio file."""

    try:
        config = _resolve_config(
            config_file,
            api_key=api_key,
            voice=voice,
            model=model,
            speed=speed,
            max_chunk_size=max_chunk_size,
            workers=workers,
        )
        source_text = _read_direct_text(text, text_file, config)
        result = _create_pipeline("speak").convert_text(source_text, config)
        default_stem = text_file.stem if text_file is not None else "speech"
        output_path = _write_audio(
            out or config.output_dir / f"{default_stem}.{config.response_format}",
            result.audio,
        )
    except Exception as exc:
        exit_with_command_error("speak", exc)

    echo_conversion_summary(result, output_path)


@app.command("inspect")
def inspect_command(
    input_pdf: Annotated[Path, typer.Argument(help="Path to a text-based PDF.")],
    config_file: ConfigOption = None,
    max_chunk_size: ChunkSizeOption = None,
) -> None:
    """Report extracted text statistics without synthesizing audio."""

    try:
        config = _load_base_config(config_file).with_overrides(max_chunk_size=max_chunk_size)
        pdf_bytes = _read_input_pdf(input_pdf)
        report = PdfVoicePipeline(run_logger=RunLogger()).inspect_pdf(pdf_bytes, config)
    except Exception as exc:
        exit_with_command_error("inspect", exc)

    echo_inspection_report(report)


@app.command("voices")
def voices_command(config_file: ConfigOption = None) -> None:
    """List supported TTS voices."""

    try:
        config = _load_base_config(config_file)
    except Exception as exc:
        exit_with_command_error("voices", exc)

    echo_voice_list(SUPPORTED_VOICES, config.tts_voice)


@app.command("preview")
def preview_command(
    voice: Annotated[str, typer.Argument(help="Voice id to preview.")],
    text: Annotated[
        str | None, typer.Option("--text", help="Custom preview sentence.")
    ] = None,
    out: OutOption = None,
    config_file: ConfigOption = None,
    model: ModelOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Synthesize a short sample of one voice at normal speed."""

    try:
        config = _resolve_config(config_file, api_key=api_key, model=model)
        audio = PdfVoicePipeline().preview_voice(voice, config, text=text)
        output_path = _write_audio(
            out or config.output_dir / f"preview-{voice}.{config.response_format}",
            audio,
        )
    except Exception as exc:
        exit_with_command_error("preview", exc)

    typer.echo(f"Preview audio: {output_path}")


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    slot: Annotated[
        int,
        typer.Option("--slot", help="Rotation slot (1-3) used with `--set-api-key`."),
    ] = 1,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear every stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored speech-engine credentials."""

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
        prompted_api_key = typer.prompt(
            "OpenAI API key (hidden input)",
            default="",
            hide_input=True,
            show_default=False,
        ).strip()
        if not prompted_api_key:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key, slot=slot)
        except (RuntimeError, ValueError) as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo(f"API key stored in secure credential storage (slot {slot}).")
        return

    if clear_api_key:
        removed = credential_store.clear_api_keys()
        if removed:
            typer.echo(f"Cleared {removed} stored API key(s) from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    stored = len(credential_store.get_api_keys())
    typer.echo(f"Stored OpenAI API keys: {stored}/{credential_store.slot_count}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
