"""Text-to-speech provider abstractions.

This package contains voice profiles, the OpenAI speech client, and the
synthesizer interface consumed by the pipeline TTS stage.
"""

from .openai_client import OpenAIProviderError, OpenAISpeechClient
from .synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer
from .voices import SUPPORTED_VOICES, VoiceProfile

__all__ = [
    "OpenAIProviderError",
    "OpenAISpeechClient",
    "OpenAISpeechSynthesizer",
    "SUPPORTED_VOICES",
    "SpeechSynthesizer",
    "VoiceProfile",
]
