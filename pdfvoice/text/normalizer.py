"""Extraction-artifact normalization.

Responsibilities:
- Canonicalize extracted text before any other stage reads it.
- Repair right-to-left artifacts that PDF text layers commonly introduce:
  spurious spacing inside Arabic-script words and visually reversed word order.

Normalization never raises for string input. Reapplying it is a no-op except on
right-to-left dominant lines, whose token reversal is its own inverse.

Right-to-left spacing repair must run before NFKC compatibility
normalization. NFKC folds NBSP and the U+2000-U+200A spaces into plain spaces,
and the repair has to tell those apart from real word gaps.
"""

from __future__ import annotations

import re
import unicodedata

from .cleaners import CleanerRule

RTL_BLOCK = "\u0600-\u06ff"
RTL_LINE_RATIO = 0.6

_RTL_CHAR_RE = re.compile(f"[{RTL_BLOCK}]")


class StripInvisibleMarks:
    """Remove zero-width and bidirectional embedding/isolate controls."""

    _INVISIBLE_RE = re.compile("[\u200b-\u200f\u202a-\u202e\u2066-\u2069\ufeff]")

    def apply(self, text: str) -> str:
        """Delete presentation-only marks."""

        return self._INVISIBLE_RE.sub("", text)


class JoinRtlLetterSpacing:
    """Delete tab, no-break and typographic spaces between Arabic-script letters.

    Each pass can only join one gap per letter pair because matches consume both
    neighbours, so up to `max_passes` passes run until the text stops changing.
    This rule runs ahead of compatibility normalization, which would otherwise
    fold those spaces into ordinary word separators.
    """

    _GAP_PATTERNS = (
        re.compile(f"([{RTL_BLOCK}])\t+([{RTL_BLOCK}])"),
        re.compile(f"([{RTL_BLOCK}])\u00a0+([{RTL_BLOCK}])"),
        re.compile(f"([{RTL_BLOCK}])[\u2000-\u200a]+([{RTL_BLOCK}])"),
    )

    def __init__(self, max_passes: int = 3) -> None:
        self.max_passes = max_passes

    def apply(self, text: str) -> str:
        """Join split words until a fixed point or the pass limit."""

        for _ in range(self.max_passes):
            before = text
            for pattern in self._GAP_PATTERNS:
                text = pattern.sub(r"\1\2", text)
            if text == before:
                break
        return text


class CompatibilityNormalize:
    """Apply Unicode NFKC normalization."""

    def apply(self, text: str) -> str:
        """Unify visually identical code point sequences."""

        return unicodedata.normalize("NFKC", text)


class NormalizeLineControls:
    """Unify line terminators and blank out remaining control characters."""

    _LINE_BREAK_RE = re.compile(r"\r\n|[\r\f\v\x85\u2028\u2029]")
    _CONTROL_RE = re.compile(r"[\x00-\x08\x0e-\x1f\x7f-\x84\x86-\x9f]")

    def apply(self, text: str) -> str:
        """Map page/line separators to `\\n` and controls to spaces."""

        text = self._LINE_BREAK_RE.sub("\n", text)
        return self._CONTROL_RE.sub(" ", text)


class CollapseLineWhitespace:
    """Collapse tabs, space runs, and whitespace hugging line breaks."""

    def apply(self, text: str) -> str:
        """Apply whitespace collapsing rules."""

        text = re.sub(r"\t+", " ", text)
        text = re.sub(r"\s+\n", "\n", text)
        text = re.sub(r"\n\s+", "\n", text)
        return re.sub(r"[ \t]{2,}", " ", text)


class ReverseRtlLines:
    """Reverse word order on lines dominated by Arabic-script characters.

    PDF renderers frequently emit right-to-left lines in visual order, which
    reads backwards once extracted. Characters inside each token are kept.
    """

    def __init__(self, threshold: float = RTL_LINE_RATIO) -> None:
        self.threshold = threshold

    def apply(self, text: str) -> str:
        """Reorder tokens of each qualifying line."""

        return "\n".join(self._reorder_line(line) for line in text.split("\n"))

    def _reorder_line(self, line: str) -> str:
        rtl_count = len(_RTL_CHAR_RE.findall(line))
        if rtl_count == 0:
            return line
        letter_count = sum(1 for char in line if unicodedata.category(char).startswith("L")) or 1
        if rtl_count / letter_count < self.threshold:
            return line
        return " ".join(reversed(line.split()))


class TextNormalizer:
    """Normalize extracted text into the canonical internal representation."""

    def __init__(self, rules: list[CleanerRule] | None = None) -> None:
        """Initialize with custom rules or the default extraction repair sequence."""

        self.rules = rules or [
            StripInvisibleMarks(),
            JoinRtlLetterSpacing(),
            CompatibilityNormalize(),
            NormalizeLineControls(),
            CollapseLineWhitespace(),
            ReverseRtlLines(),
        ]

    def normalize(self, text: str) -> str:
        """Normalize text for downstream deterministic processing."""

        current = text
        for rule in self.rules:
            current = rule.apply(current)
        return current.strip()
