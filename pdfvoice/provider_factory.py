"""Provider factory helpers for the TTS stage.

Responsibilities:
- Resolve provider identifiers to concrete synthesizer implementations.
- Keep orchestration independent from concrete provider class construction.

Notes:
- Only `openai` is implemented at the moment.
"""

from __future__ import annotations

from typing import Sequence

from .tts.rate_limiter import RateLimiter
from .tts.synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer
from .tts.voices import VoiceProfile


class ProviderFactory:
    """Factory for provider-backed stage clients used by the pipeline."""

    @staticmethod
    def create_tts_synthesizer(
        provider_id: str,
        *,
        model: str,
        voice: VoiceProfile,
        api_keys: Sequence[str],
        response_format: str = "mp3",
        rate_limiter: RateLimiter | None = None,
    ) -> SpeechSynthesizer:
        """Create a TTS synthesizer for a configured provider identifier."""

        if provider_id == "openai":
            return OpenAISpeechSynthesizer(
                api_keys=api_keys,
                model=model,
                voice=voice,
                response_format=response_format,
                rate_limiter=rate_limiter,
            )
        raise ValueError(f"Unsupported TTS provider `{provider_id}`.")
