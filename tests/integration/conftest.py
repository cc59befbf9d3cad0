"""Integration-test fixtures for deterministic provider and credential behavior."""

from __future__ import annotations

import pytest

from pdfvoice.tts.openai_client import OpenAISpeechClient
from tests.fixture_builders import InMemoryCredentialStore


@pytest.fixture
def speech_calls(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, object]]:
    """Mock OpenAI speech calls and record the key and payload of each call."""

    calls: list[dict[str, object]] = []

    def _mock_synthesize_speech(self: OpenAISpeechClient, **kwargs: object) -> bytes:
        calls.append({"api_key": self.api_key, **kwargs})
        return f"<mp3:{len(calls)}>".encode("ascii")

    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _mock_synthesize_speech)
    return calls


@pytest.fixture
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Replace the keyring store used by CLI commands and isolate environment keys."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("pdfvoice.cli.create_credential_store", lambda: store)
    for name in ("OPENAI_API_KEY", "OPENAI_API_KEY_2", "OPENAI_API_KEY_3"):
        monkeypatch.delenv(name, raising=False)
    for name in (
        "PDFVOICE_TTS_VOICE",
        "PDFVOICE_TTS_MODEL",
        "PDFVOICE_MAX_CHUNK_SIZE",
        "PDFVOICE_SYNTHESIS_WORKERS",
        "PDFVOICE_OUTPUT_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    return store
