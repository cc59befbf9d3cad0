"""Dominant-script detection.

Responsibilities:
- Classify a whole document by the script family with the most code points.
- Map the detected script to a pronunciation instruction for the speech engine.
"""

from __future__ import annotations

from ..models.datatypes import DetectedLanguage

# Inclusive code point ranges; declaration order doubles as tie-break priority.
SCRIPT_RANGES: tuple[tuple[DetectedLanguage, tuple[tuple[int, int], ...]], ...] = (
    (DetectedLanguage.ARABIC, ((0x0600, 0x06FF),)),
    (DetectedLanguage.DEVANAGARI, ((0x0900, 0x097F),)),
    (
        DetectedLanguage.LATIN,
        ((0x0041, 0x005A), (0x0061, 0x007A), (0x00C0, 0x00D6), (0x00D8, 0x00F6), (0x00F8, 0x024F)),
    ),
    (DetectedLanguage.CYRILLIC, ((0x0400, 0x04FF),)),
)

LANGUAGE_INSTRUCTIONS: dict[DetectedLanguage, str] = {
    DetectedLanguage.ARABIC: (
        "Read the text in Arabic with clear Modern Standard Arabic pronunciation."
    ),
    DetectedLanguage.DEVANAGARI: (
        "Read this Devanagari-script text with native pronunciation for its language."
    ),
    DetectedLanguage.CYRILLIC: (
        "Read this Cyrillic-script text with native pronunciation for its language."
    ),
}


class ScriptDetector:
    """Classify text by dominant Unicode script."""

    def detect(self, text: str) -> DetectedLanguage:
        """Return the script with the highest code point count, or `unknown`."""

        counts = {language: 0 for language, _ in SCRIPT_RANGES}
        for char in text:
            language = self._classify(ord(char))
            if language is not None:
                counts[language] += 1

        ranked = sorted(counts.items(), key=lambda item: -item[1])
        top_language, top_count = ranked[0]
        if top_count == 0:
            return DetectedLanguage.UNKNOWN
        return top_language

    @staticmethod
    def _classify(code_point: int) -> DetectedLanguage | None:
        for language, ranges in SCRIPT_RANGES:
            for low, high in ranges:
                if low <= code_point <= high:
                    return language
        return None


def language_instruction(language: DetectedLanguage) -> str | None:
    """Return the engine pronunciation instruction for a detected script.

    Latin-script and unclassified documents get no instruction so the engine
    keeps its default pronunciation.
    """

    return LANGUAGE_INSTRUCTIONS.get(language)
