"""Voice profile models for synthesis configuration.

Responsibilities:
- Represent the engine voice and speaking rate used for a conversion.
- Validate voice identifiers against the engine's supported set.
"""

from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_VOICES = (
    "alloy",
    "ash",
    "ballad",
    "coral",
    "echo",
    "fable",
    "onyx",
    "nova",
    "sage",
    "shimmer",
    "verse",
    "marin",
    "cedar",
)

MIN_SPEED = 0.25
MAX_SPEED = 4.0


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile used by TTS providers.

    Attributes:
        provider_voice_id: Provider-native voice identifier.
        speaking_rate: Relative speaking rate multiplier.
    """

    provider_voice_id: str
    speaking_rate: float = 1.0


def clamp_speed(speed: float) -> float:
    """Limit a speaking rate to the engine's accepted range."""

    return max(MIN_SPEED, min(MAX_SPEED, speed))


def is_supported_voice(voice: str) -> bool:
    """Return whether a voice identifier is accepted by the engine."""

    return voice.strip().lower() in SUPPORTED_VOICES
