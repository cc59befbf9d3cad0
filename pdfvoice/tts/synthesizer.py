"""TTS synthesizer interfaces and OpenAI-backed implementation.

Responsibilities:
- Define the protocol for chunk-level speech synthesis.
- Provide OpenAI-backed synthesis with ordered credential rotation.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from loguru import logger

from ..models.datatypes import SynthesisRequest
from .openai_client import OpenAIProviderError, OpenAISpeechClient
from .rate_limiter import RateLimiter
from .voices import VoiceProfile, clamp_speed


class SpeechSynthesizer(Protocol):
    """Protocol for TTS provider implementations."""

    def synthesize(self, request: SynthesisRequest) -> bytes:
        """Synthesize one chunk and return encoded audio bytes."""

    def synthesize_preview(self, text: str, voice: VoiceProfile | None = None) -> bytes:
        """Synthesize a short unchunked voice sample."""


class OpenAISpeechSynthesizer:
    """OpenAI-backed synthesizer trying each configured API key in order.

    Only quota and rate-limit failures move on to the next key. Any other
    failure, or exhausting every key, propagates the provider error unchanged.
    """

    _ROTATE_ON = frozenset({"insufficient_quota", "rate_limited"})
    _INSTRUCTION_MODEL_PREFIXES = ("gpt-4o",)

    def __init__(
        self,
        *,
        api_keys: Sequence[str],
        model: str,
        voice: VoiceProfile,
        response_format: str = "mp3",
        rate_limiter: RateLimiter | None = None,
        timeout_seconds: float = 120.0,
    ) -> None:
        self.model = model
        self.voice = voice
        self.response_format = response_format
        self.rate_limiter = rate_limiter or RateLimiter()
        keys = [key for key in api_keys if key and key.strip()] or [""]
        self.clients = [
            OpenAISpeechClient(api_key=key, timeout_seconds=timeout_seconds) for key in keys
        ]

    def synthesize(self, request: SynthesisRequest) -> bytes:
        """Synthesize one request, rotating credentials on quota errors."""

        return self._synthesize_with_voice(request, self.voice.provider_voice_id)

    def synthesize_preview(self, text: str, voice: VoiceProfile | None = None) -> bytes:
        """Synthesize a short voice sample at normal speed without chunking."""

        profile = voice or self.voice
        request = SynthesisRequest(text=text.strip(), sequence_index=1, speed=1.0)
        return self._synthesize_with_voice(request, profile.provider_voice_id)

    def _synthesize_with_voice(self, request: SynthesisRequest, voice_id: str) -> bytes:
        last_error: OpenAIProviderError | None = None
        total = len(self.clients)
        for position, client in enumerate(self.clients, start=1):
            self.rate_limiter.acquire(self.model)
            try:
                return client.synthesize_speech(
                    model=self.model,
                    voice=voice_id,
                    text=request.text,
                    response_format=self.response_format,
                    speed=clamp_speed(request.speed),
                    instructions=self._instructions_for(request),
                )
            except OpenAIProviderError as exc:
                if exc.failure_kind not in self._ROTATE_ON:
                    raise
                logger.warning(
                    "[tts] credential {}/{} unavailable ({}) for chunk {}",
                    position,
                    total,
                    exc.failure_kind,
                    request.sequence_index,
                )
                last_error = exc
        if last_error is None:
            raise OpenAIProviderError(
                "No OpenAI credentials configured.", failure_kind="invalid_api_key"
            )
        raise last_error

    def _instructions_for(self, request: SynthesisRequest) -> str | None:
        if not request.language_instruction:
            return None
        if not self.model.startswith(self._INSTRUCTION_MODEL_PREFIXES):
            return None
        return request.language_instruction
