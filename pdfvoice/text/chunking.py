"""Text-to-chunk segmentation logic.

Responsibilities:
- Split long text into ordered chunks bounded by a maximum character size.
- Prefer sentence boundaries and never drop or truncate content.
- Assign gap-free 1-based sequence indices used for audio reassembly.
"""

from __future__ import annotations

import re

from ..models.datatypes import TextChunk


class Chunker:
    """Create sentence-aligned chunks with a two-pass greedy strategy.

    Pass one splits on a period followed by whitespace and an uppercase letter.
    Pass two re-splits any still-oversized chunk on `.`, `!` or `?` followed by
    whitespace. A single fine-grained sentence above the maximum is kept whole.
    Abbreviations such as `Mr. Smith` produce false fine-pass boundaries.
    """

    _COARSE_BOUNDARY_RE = re.compile(r"(?<=\.)\s+(?=[A-Z])")
    _FINE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")
    _JOINER = " "

    def segment(
        self,
        text: str,
        max_chunk_size: int,
        hard_limit: int | None = None,
    ) -> list[TextChunk]:
        """Split text into ordered chunks.

        Args:
            text: Source text.
            max_chunk_size: Preferred maximum chunk length in characters.
            hard_limit: Optional absolute ceiling. Oversized single sentences
                longer than this are cut at whitespace so no chunk exceeds it.

        Returns:
            Chunks with `sequence_index` values `1..N` in source order.

        Raises:
            ValueError: If `max_chunk_size` is not positive.
        """

        if max_chunk_size <= 0:
            raise ValueError(f"`max_chunk_size` must be positive, got {max_chunk_size}.")
        stripped = text.strip()
        if not stripped:
            return []

        if len(stripped) <= max_chunk_size:
            pieces = [(stripped, "sentence_complete")]
        else:
            pieces = self._two_pass_pieces(stripped, max_chunk_size)

        if hard_limit is not None and hard_limit > 0:
            pieces = self._enforce_hard_limit(pieces, hard_limit)

        return [
            TextChunk.build(piece, index, strategy)
            for index, (piece, strategy) in enumerate(pieces, start=1)
        ]

    def _two_pass_pieces(self, text: str, max_chunk_size: int) -> list[tuple[str, str]]:
        """Run coarse accumulation, then fine re-splitting of overflowing chunks."""

        pieces: list[tuple[str, str]] = []
        coarse_sentences = self._COARSE_BOUNDARY_RE.split(text)
        for coarse_chunk in self._accumulate(coarse_sentences, max_chunk_size):
            if len(coarse_chunk) <= max_chunk_size:
                pieces.append((coarse_chunk, "sentence_complete"))
                continue

            fine_sentences = self._FINE_BOUNDARY_RE.split(coarse_chunk)
            for fine_chunk in self._accumulate(fine_sentences, max_chunk_size):
                strategy = (
                    "oversized_sentence"
                    if len(fine_chunk) > max_chunk_size
                    else "sentence_overflow_split"
                )
                pieces.append((fine_chunk, strategy))
        return pieces

    def _accumulate(self, sentences: list[str], max_chunk_size: int) -> list[str]:
        """Greedily pack sentences into chunks that stay within the maximum."""

        chunks: list[str] = []
        current = ""
        for raw_sentence in sentences:
            sentence = raw_sentence.strip()
            if not sentence:
                continue
            if current and len(current) + len(self._JOINER) + len(sentence) > max_chunk_size:
                chunks.append(current)
                current = sentence
            elif current:
                current = f"{current}{self._JOINER}{sentence}"
            else:
                current = sentence
        if current:
            chunks.append(current)
        return chunks

    def _enforce_hard_limit(
        self, pieces: list[tuple[str, str]], hard_limit: int
    ) -> list[tuple[str, str]]:
        """Cut pieces above the hard limit into whitespace-aligned parts."""

        bounded: list[tuple[str, str]] = []
        for piece, strategy in pieces:
            if len(piece) <= hard_limit:
                bounded.append((piece, strategy))
                continue
            bounded.extend(
                (part, "forced_split_engine_cap")
                for part in self._split_at_whitespace(piece, hard_limit)
            )
        return bounded

    def _split_at_whitespace(self, text: str, limit: int) -> list[str]:
        """Return parts of at most `limit` characters, cutting at the last space."""

        parts: list[str] = []
        remaining = text
        while len(remaining) > limit:
            cut = self._last_whitespace_index(remaining, limit)
            if cut is None:
                parts.append(remaining[:limit])
                remaining = remaining[limit:].lstrip()
                continue
            parts.append(remaining[:cut].rstrip())
            remaining = remaining[cut + 1 :].lstrip()
        if remaining:
            parts.append(remaining)
        return parts

    def _last_whitespace_index(self, text: str, limit: int) -> int | None:
        """Return the last whitespace index within the first `limit + 1` characters."""

        for index in range(min(limit, len(text) - 1), 0, -1):
            if text[index].isspace():
                return index
        return None
