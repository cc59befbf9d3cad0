"""Deterministic text cleaning rules.

Responsibilities:
- Provide composable cleanup rules applied to text before speech rewriting.
- Flatten whitespace and typography so downstream regex rules see plain ASCII
  punctuation.
"""

from __future__ import annotations

import re
from typing import Protocol


class CleanerRule(Protocol):
    """Protocol for text cleaning rules."""

    def apply(self, text: str) -> str:
        """Apply a single cleaning transformation."""


class CollapseWhitespace:
    """Collapse every whitespace class (newlines included) to single spaces."""

    def apply(self, text: str) -> str:
        """Collapse whitespace runs and trim the result."""

        return re.sub(r"\s+", " ", text).strip()


class RemoveControlCharacters:
    """Replace form feeds and other C0 control characters with spaces."""

    def apply(self, text: str) -> str:
        """Apply control-character cleanup rule."""

        return re.sub(r"[\x00-\x1f\x7f]", " ", text)


class NormalizeTypography:
    """Map typographic punctuation to plain ASCII equivalents."""

    _REPLACEMENTS = (
        ("\u00a0", " "),
        ("\u2022", "- "),
        ("\u2013", "-"),
        ("\u2014", "--"),
        ("\u201c", '"'),
        ("\u201d", '"'),
        ("\u201e", '"'),
        ("\u00ab", '"'),
        ("\u00bb", '"'),
        ("\u2018", "'"),
        ("\u2019", "'"),
        ("\u2026", "..."),
    )

    def apply(self, text: str) -> str:
        """Replace selected Unicode punctuation with ASCII."""

        for source, target in self._REPLACEMENTS:
            text = text.replace(source, target)
        return text


class NormalizePunctuationSpacing:
    """Normalize spacing around sentence and clause punctuation."""

    def apply(self, text: str) -> str:
        """Ensure one space after punctuation and none before it."""

        # Single capitals before a period are initials or acronyms (`U.S.`).
        text = re.sub(r"(?<!\b[A-Z])([.!?])\s*([A-Z])", r"\1 \2", text)
        text = re.sub(r"([,;:])(?!\d)\s*", r"\1 ", text)
        text = re.sub(r"\s+([.!?,:;])", r"\1", text)
        text = re.sub(r"\.{3,}", "...", text)
        return re.sub(r"\s+", " ", text).strip()


class TextCleaner:
    """Apply a sequence of deterministic cleaner rules."""

    def __init__(self, rules: list[CleanerRule] | None = None) -> None:
        """Initialize with custom rules or default rule sequence."""

        self.rules = rules or [
            CollapseWhitespace(),
            RemoveControlCharacters(),
            NormalizeTypography(),
            NormalizePunctuationSpacing(),
        ]

    def clean(self, text: str) -> str:
        """Apply all configured rules in order."""

        current = text
        for rule in self.rules:
            current = rule.apply(current)
        return current
