"""Text preprocessing and segmentation components.

This package provides deterministic normalization, cleanup, speech rewriting,
script detection, and chunking building blocks used before the TTS stage.
"""

from .chunking import Chunker
from .cleaners import (
    CollapseWhitespace,
    NormalizePunctuationSpacing,
    NormalizeTypography,
    RemoveControlCharacters,
    TextCleaner,
)
from .language import ScriptDetector, language_instruction
from .normalizer import TextNormalizer
from .speech import SpeechOptimizer

__all__ = [
    "Chunker",
    "CollapseWhitespace",
    "NormalizePunctuationSpacing",
    "NormalizeTypography",
    "RemoveControlCharacters",
    "ScriptDetector",
    "SpeechOptimizer",
    "TextCleaner",
    "TextNormalizer",
    "language_instruction",
]
