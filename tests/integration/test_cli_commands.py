"""CLI tests for conversion, inspection, preview and credential commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from pdfvoice.cli import app
from pdfvoice.errors import PipelineStageError
from tests.fixture_builders import InMemoryCredentialStore


@pytest.fixture
def input_pdf(tmp_path: Path, sample_pdf_bytes: bytes) -> Path:
    """Write the sample PDF to disk for commands taking a path."""

    path = tmp_path / "report.pdf"
    path.write_bytes(sample_pdf_bytes)
    return path


def test_convert_command_writes_audio_and_prints_metadata(
    tmp_path: Path,
    input_pdf: Path,
    speech_calls: list[dict[str, object]],
    credential_store: InMemoryCredentialStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Convert writes the assembled audio and prints language, length and chunks."""

    monkeypatch.setenv("OPENAI_API_KEY", "env-key")
    out_path = tmp_path / "audio" / "report.mp3"

    result = CliRunner().invoke(
        app, ["convert", str(input_pdf), "--out", str(out_path), "--voice", "nova"]
    )

    assert result.exit_code == 0, result.output
    assert out_path.read_bytes() == b"<mp3:1>"
    assert "Detected language: latin" in result.output
    assert "Chunks: 1" in result.output
    assert f"Audio (mp3): {out_path}" in result.output
    assert "[progress] command=convert" in result.output
    assert speech_calls[0]["api_key"] == "env-key"
    assert speech_calls[0]["voice"] == "nova"
    assert speech_calls[0]["speed"] == 0.85


def test_convert_command_prefers_cli_then_stored_keys(
    tmp_path: Path,
    input_pdf: Path,
    speech_calls: list[dict[str, object]],
    credential_store: InMemoryCredentialStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The CLI key is tried first, ahead of stored and environment keys."""

    from pdfvoice.tts.openai_client import OpenAIProviderError, OpenAISpeechClient

    monkeypatch.setenv("OPENAI_API_KEY", "env-key")
    credential_store.set_api_key("stored-key")
    attempted: list[str] = []

    def _quota_for_cli_key(self: OpenAISpeechClient, **kwargs: object) -> bytes:
        attempted.append(self.api_key)
        if self.api_key == "cli-key":
            raise OpenAIProviderError("quota", failure_kind="insufficient_quota")
        return b"audio"

    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _quota_for_cli_key)

    result = CliRunner().invoke(
        app,
        ["convert", str(input_pdf), "--out", str(tmp_path / "a.mp3"), "--api-key", "cli-key"],
    )

    assert result.exit_code == 0, result.output
    assert attempted == ["cli-key", "stored-key"]


def test_speak_command_converts_direct_text(
    tmp_path: Path,
    speech_calls: list[dict[str, object]],
    credential_store: InMemoryCredentialStore,
) -> None:
    """Speak converts inline text with a one-time key."""

    out_path = tmp_path / "speech.mp3"

    result = CliRunner().invoke(
        app,
        [
            "speak",
            "--text",
            "Dr. Smith won 50% of the vote. He said: \u201cgreat!\u201d",
            "--out",
            str(out_path),
            "--api-key",
            "cli-key",
        ],
    )

    assert result.exit_code == 0, result.output
    assert out_path.read_bytes() == b"<mp3:1>"
    assert speech_calls[0]["text"] == (
        'Doctor Smith won 50 percent of the vote... He said:, "great!"'
    )


def test_speak_command_reads_text_file_with_default_output_name(
    tmp_path: Path,
    speech_calls: list[dict[str, object]],
    credential_store: InMemoryCredentialStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Text files are read as UTF-8 and named after their stem."""

    monkeypatch.setenv("PDFVOICE_OUTPUT_DIR", str(tmp_path / "out"))
    text_file = tmp_path / "notes.txt"
    text_file.write_text("A file based passage for speech.", encoding="utf-8")

    result = CliRunner().invoke(
        app, ["speak", "--text-file", str(text_file), "--api-key", "cli-key"]
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "notes.mp3").read_bytes() == b"<mp3:1>"


def test_speak_command_requires_exactly_one_input(credential_store: InMemoryCredentialStore) -> None:
    """Missing or duplicate inputs fail at the `input` stage."""

    result = CliRunner().invoke(app, ["speak"])

    assert result.exit_code == 1
    assert "speak failed at stage `input`" in result.output


def test_speak_command_enforces_input_character_cap(
    tmp_path: Path, credential_store: InMemoryCredentialStore
) -> None:
    """Direct text above `max_input_chars` is rejected before conversion."""

    config_path = tmp_path / "pdfvoice.yml"
    config_path.write_text("max_input_chars: 20\n", encoding="utf-8")

    result = CliRunner().invoke(
        app,
        ["speak", "--text", "x" * 21, "--config", str(config_path)],
    )

    assert result.exit_code == 1
    assert "above the limit of 20" in result.output
    assert "Hint: Split the text" in result.output


def test_speak_command_reports_short_input(credential_store: InMemoryCredentialStore) -> None:
    """Tiny text fails validation with a hint."""

    result = CliRunner().invoke(app, ["speak", "--text", "Hi"])

    assert result.exit_code == 1
    assert "speak failed at stage `validate`" in result.output


def test_convert_command_reports_scanned_pdf(
    tmp_path: Path,
    scanned_pdf_bytes: bytes,
    speech_calls: list[dict[str, object]],
    credential_store: InMemoryCredentialStore,
) -> None:
    """Image-only PDFs fail at extraction with an actionable hint."""

    path = tmp_path / "scan.pdf"
    path.write_bytes(scanned_pdf_bytes)

    result = CliRunner().invoke(app, ["convert", str(path), "--api-key", "cli-key"])

    assert result.exit_code == 1
    assert "convert failed at stage `extract`" in result.output
    assert "Hint: Provide a PDF with selectable text" in result.output
    assert speech_calls == []


def test_convert_command_reports_retryable_synthesis_failure(
    input_pdf: Path,
    credential_store: InMemoryCredentialStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Quota failures surface the chunk and retryability."""

    from pdfvoice.tts.openai_client import OpenAIProviderError, OpenAISpeechClient

    def _quota(self: OpenAISpeechClient, **kwargs: object) -> bytes:
        raise OpenAIProviderError("quota", failure_kind="insufficient_quota")

    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _quota)

    result = CliRunner().invoke(app, ["convert", str(input_pdf), "--api-key", "cli-key"])

    assert result.exit_code == 1
    assert "convert failed at stage `tts`: Chunk 1:" in result.output
    assert "retryable" in result.output


def test_convert_command_reports_missing_config_file(
    input_pdf: Path, credential_store: InMemoryCredentialStore
) -> None:
    """A missing `--config` path is a config stage failure."""

    result = CliRunner().invoke(
        app, ["convert", str(input_pdf), "--config", "missing/pdfvoice.yml"]
    )

    assert result.exit_code == 1
    assert "convert failed at stage `config`: Config file not found" in result.output


def test_convert_command_reports_non_stage_error(
    input_pdf: Path,
    credential_store: InMemoryCredentialStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Unexpected exceptions still exit with code 1."""

    def _failing_convert(*_: object, **__: object) -> None:
        raise RuntimeError("unexpected failure")

    monkeypatch.setattr("pdfvoice.cli.PdfVoicePipeline.convert_pdf", _failing_convert)

    result = CliRunner().invoke(app, ["convert", str(input_pdf)])

    assert result.exit_code == 1
    assert "convert failed: unexpected failure" in result.output


def test_inspect_command_prints_report(
    input_pdf: Path, credential_store: InMemoryCredentialStore
) -> None:
    """Inspect prints extraction statistics without synthesis."""

    result = CliRunner().invoke(app, ["inspect", str(input_pdf)])

    assert result.exit_code == 0, result.output
    assert "Backend: pypdf" in result.output
    assert "Detected language: latin" in result.output
    assert "Dr. Smith reviewed the quarterly report." in result.output


def test_voices_command_lists_voices_and_marks_default(
    credential_store: InMemoryCredentialStore,
) -> None:
    """Every supported voice is listed once."""

    result = CliRunner().invoke(app, ["voices"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert "fable (default)" in lines
    assert "nova" in lines
    assert len(lines) == 13


def test_preview_command_writes_sample(
    tmp_path: Path,
    speech_calls: list[dict[str, object]],
    credential_store: InMemoryCredentialStore,
) -> None:
    """Preview uses the requested voice at normal speed."""

    out_path = tmp_path / "coral.mp3"

    result = CliRunner().invoke(
        app, ["preview", "coral", "--out", str(out_path), "--api-key", "cli-key"]
    )

    assert result.exit_code == 0, result.output
    assert out_path.read_bytes() == b"<mp3:1>"
    assert speech_calls[0]["voice"] == "coral"
    assert speech_calls[0]["speed"] == 1.0


def test_credentials_command_sets_and_clears_keys(
    credential_store: InMemoryCredentialStore,
) -> None:
    """Credentials prompts for a hidden key, stores it per slot and clears all."""

    runner = CliRunner()

    stored = runner.invoke(app, ["credentials", "--set-api-key", "--slot", "2"], input="sk-new\n")
    status = runner.invoke(app, ["credentials"])
    cleared = runner.invoke(app, ["credentials", "--clear-api-key"])

    assert stored.exit_code == 0, stored.output
    assert "slot 2" in stored.output
    assert "Stored OpenAI API keys: 1/3" in status.output
    assert "Cleared 1 stored API key(s)" in cleared.output
    assert credential_store.get_api_keys() == ()


def test_credentials_command_rejects_conflicting_flags(
    credential_store: InMemoryCredentialStore,
) -> None:
    """One credentials action per invocation."""

    result = CliRunner().invoke(app, ["credentials", "--set-api-key", "--clear-api-key"])

    assert result.exit_code == 1
    assert "credentials failed at stage `credentials`" in result.output


def test_cli_error_renderer_uses_stage_hint_format() -> None:
    """Stage errors render the command, stage, detail and hint."""

    import typer

    from pdfvoice.cli_rendering import exit_with_command_error

    app_under_test = typer.Typer()

    @app_under_test.command()
    def fail() -> None:
        exit_with_command_error(
            "demo", PipelineStageError(stage="chunk", detail="boom", hint="Try again.")
        )

    result = CliRunner().invoke(app_under_test, [])

    assert result.exit_code == 1
    assert "demo failed at stage `chunk`: boom" in result.output
    assert "Hint: Try again." in result.output
