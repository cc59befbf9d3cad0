"""Speech-oriented text rewriting.

Responsibilities:
- Rewrite cleaned text so a speech engine reads it more naturally: pause
  markers, spoken units, expanded abbreviations, and stripped markup.
- Keep every rule a pure, ordered text-to-text substitution.

The rewrite is not idempotent: pause markers added by one run gain extra
punctuation on a second run, so the pipeline applies it exactly once.
"""

from __future__ import annotations

import re

_Rule = tuple[re.Pattern[str], str]

# Periods ending these tokens are not sentence ends and get no pause marker.
_NO_PAUSE_ABBREVIATIONS = ("Dr", "Mr", "Mrs", "Ms", "Prof", "etc", "vs", "i.e", "e.g", "U.S", "U.K")
_NO_PAUSE_GUARD = "".join(rf"(?<!\b{re.escape(token)})" for token in _NO_PAUSE_ABBREVIATIONS)

PAUSE_RULES: tuple[_Rule, ...] = (
    (re.compile(rf"((?:{_NO_PAUSE_GUARD}\.)|[!?])\s+"), r"\1... "),
    (re.compile(r"([,:;])\s+"), r"\1, "),
)

PARAGRAPH_RULES: tuple[_Rule, ...] = (
    (re.compile(r"\n\n+"), "... "),
    (re.compile(r"\n+"), " "),
)

# Four-digit years are left for the engine, which already reads them naturally.
UNIT_RULES: tuple[_Rule, ...] = (
    (re.compile(r"\b(\d+)%"), r"\1 percent"),
    (re.compile(r"\b(\d+)\s*°C"), r"\1 degrees Celsius"),
    (re.compile(r"\b(\d+)\s*°F"), r"\1 degrees Fahrenheit"),
)

SPOKEN_FORMS: tuple[tuple[str, str], ...] = (
    (r"\bDr\.", "Doctor"),
    (r"\bMrs\.", "Missus"),
    (r"\bMr\.", "Mister"),
    (r"\bMs\.", "Miss"),
    (r"\bProf\.", "Professor"),
    (r"\betc\.", "etcetera"),
    (r"\bi\.e\.", "that is"),
    (r"\be\.g\.", "for example"),
    (r"\bvs\.", "versus"),
    (r"\bw/o\b", "without"),
    (r"\bw/(?=\s|\w)", "with"),
    (r"(?<=\s)&(?=\s)", "and"),
    (r"\bU\.S\.", "United States"),
    (r"\bU\.K\.", "United Kingdom"),
    (r"\bCEO\b", "C E O"),
    (r"\bAPI\b", "A P I"),
    (r"\bAI\b", "A I"),
    (r"\bPDF\b", "P D F"),
    (r"\bURL\b", "U R L"),
    (r"\bHTML\b", "H T M L"),
    (r"\bCSS\b", "C S S"),
    (r"\bJS\b", "JavaScript"),
)

ABBREVIATION_RULES: tuple[_Rule, ...] = tuple(
    (re.compile(pattern), spoken) for pattern, spoken in SPOKEN_FORMS
)

MARKUP_RULES: tuple[_Rule, ...] = (
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"__(.*?)__"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"\[(.*?)\]"), r"\1"),
    (re.compile(r"\((.*?)\)"), r", \1,"),
)

CLEANUP_RULES: tuple[_Rule, ...] = (
    (re.compile(r"\s+"), " "),
    (re.compile(r"\s+,"), ","),
    (re.compile(r"\.{3,}"), "..."),
    (re.compile(r"([!?.])(?:\s*[!?])+"), r"\1"),
    (re.compile(r",\s*,+"), ","),
)


class SpeechOptimizer:
    """Apply ordered speech rewrite rule groups.

    Group order matters: pause insertion runs first and deliberately produces
    adjacent punctuation that the final cleanup group collapses.
    """

    def __init__(
        self,
        rule_groups: tuple[tuple[_Rule, ...], ...] | None = None,
    ) -> None:
        self.rule_groups = rule_groups or (
            PAUSE_RULES,
            PARAGRAPH_RULES,
            UNIT_RULES,
            ABBREVIATION_RULES,
            MARKUP_RULES,
            CLEANUP_RULES,
        )

    def optimize(self, text: str) -> str:
        """Rewrite text for natural spoken delivery."""

        optimized = text
        for group in self.rule_groups:
            for pattern, replacement in group:
                optimized = pattern.sub(replacement, optimized)
        return optimized.strip()
