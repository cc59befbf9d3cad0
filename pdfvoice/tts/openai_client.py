"""OpenAI speech HTTP client.

Responsibilities:
- Send speech synthesis requests to OpenAI's `/audio/speech` REST endpoint.
- Classify HTTP and transport failures into stable failure kinds.
- Keep API keys out of every error message.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests


class OpenAIProviderError(RuntimeError):
    """Raised when an OpenAI request fails or returns an unusable payload."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


_HEADLINES = {
    "invalid_api_key": "OpenAI authentication failed",
    "insufficient_quota": "OpenAI quota is insufficient for this request",
    "rate_limited": "OpenAI rate limit reached",
    "invalid_model": "OpenAI rejected the selected model",
    "timeout": "OpenAI request timed out",
}

_MAX_MESSAGE_CHARS = 180
_API_KEY_PATTERN = re.compile(r"\bsk-[A-Za-z0-9_-]{8,}\b")
_BEARER_PATTERN = re.compile(r"(?i)bearer\s+[A-Za-z0-9._-]{12,}")
_MODEL_REJECTION = re.compile(r"not found|does not exist|invalid")


class OpenAISpeechClient:
    """Minimal requests-based client for OpenAI text-to-speech."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 120.0,
    ) -> None:
        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def synthesize_speech(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        response_format: str = "mp3",
        speed: float = 1.0,
        instructions: str | None = None,
    ) -> bytes:
        """Return synthesized audio bytes from OpenAI `/audio/speech`."""

        if not self.api_key:
            raise OpenAIProviderError(
                "Missing OpenAI API key. Set `OPENAI_API_KEY`, pass `--api-key`, or "
                "store one with `pdfvoice credentials --set-api-key`.",
                failure_kind="invalid_api_key",
            )

        payload: dict[str, Any] = {
            "model": model,
            "voice": voice,
            "input": text,
            "response_format": response_format,
            "speed": speed,
        }
        if instructions:
            payload["instructions"] = instructions

        audio = self._post(endpoint_path="/audio/speech", payload=payload)
        if not audio:
            raise OpenAIProviderError(
                "OpenAI speech response is empty.", failure_kind="empty_audio"
            )
        return audio

    def _post(self, *, endpoint_path: str, payload: dict[str, Any]) -> bytes:
        """POST a JSON payload and map every failure to `OpenAIProviderError`."""

        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise provider_error_from_response(exc.response) from exc
        except (requests.RequestException, TimeoutError) as exc:
            if isinstance(exc, TimeoutError | socket.timeout | requests.Timeout):
                raise OpenAIProviderError(
                    "OpenAI speech request timed out.", failure_kind="timeout"
                ) from exc
            raise OpenAIProviderError(
                f"OpenAI speech request could not be sent: {_compact(str(exc))}",
                failure_kind="transport",
            ) from exc
        return bytes(response.content)


def provider_error_from_response(response: requests.Response | None) -> OpenAIProviderError:
    """Build a classified, key-free provider error from a failed HTTP response."""

    status_code = response.status_code if response is not None else 0
    message, code = _read_error_body(response)
    failure_kind = classify_http_failure(status_code, message, code)
    headline = _HEADLINES.get(failure_kind, "OpenAI speech request failed")
    suffix = f": {message}" if message else "."
    return OpenAIProviderError(
        f"{headline} (HTTP {status_code}){suffix}",
        failure_kind=failure_kind,
        status_code=status_code,
        provider_code=code,
    )


def classify_http_failure(status_code: int, message: str, code: str | None) -> str:
    """Map an HTTP status plus provider error body to a failure kind.

    Authentication wins over quota, quota over plain rate limiting.
    """

    text = message.lower()
    code = (code or "").lower()
    if status_code == 401 or "api key" in text:
        return "invalid_api_key"
    if code == "insufficient_quota" or "quota" in text:
        return "insufficient_quota"
    if status_code == 429:
        return "rate_limited"
    if code == "model_not_found" or ("model" in text and _MODEL_REJECTION.search(text)):
        return "invalid_model"
    if status_code in (408, 504) or "timed out" in text:
        return "timeout"
    return "http_error"


def redact_secrets(text: str) -> str:
    """Replace API keys and bearer tokens with placeholders."""

    text = _API_KEY_PATTERN.sub("[redacted-key]", text)
    return _BEARER_PATTERN.sub("Bearer [redacted-token]", text)


def _read_error_body(response: requests.Response | None) -> tuple[str, str | None]:
    if response is None:
        return "", None
    body = bytes(response.content).decode("utf-8", errors="replace").strip()
    if not body:
        return "", None
    try:
        error = json.loads(body).get("error")
    except (json.JSONDecodeError, AttributeError):
        error = None
    if not isinstance(error, dict):
        return _compact(redact_secrets(body)), None

    message = error.get("message")
    code = error.get("code")
    message = message.strip() if isinstance(message, str) and message.strip() else body
    code = code.strip() if isinstance(code, str) and code.strip() else None
    return _compact(redact_secrets(message)), code


def _compact(text: str) -> str:
    compact = " ".join(text.split())
    if len(compact) <= _MAX_MESSAGE_CHARS:
        return compact
    return f"{compact[: _MAX_MESSAGE_CHARS - 1]}..."
