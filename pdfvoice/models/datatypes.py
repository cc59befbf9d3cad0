"""Core datatypes shared across pdfvoice modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Keep every record request-scoped: nothing here is cached across conversions.

Key types:
- `DetectedLanguage`, `TextChunk`, `SynthesisRequest`, `AudioSegment`,
  `ExtractionReport`, `InspectionReport`, and `ConversionResult`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DetectedLanguage(str, Enum):
    """Dominant script family of a document.

    Member order is the tie-break priority used by script detection.
    """

    ARABIC = "arabic"
    DEVANAGARI = "devanagari"
    LATIN = "latin"
    CYRILLIC = "cyrillic"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class TextChunk:
    """A bounded text segment queued for independent speech synthesis.

    Attributes:
        text: Non-empty chunk text.
        sequence_index: 1-based, gap-free position in source order.
        length: Character count of `text`.
        boundary_strategy: How the chunk boundary was chosen (`sentence_complete`,
            `sentence_overflow_split`, `oversized_sentence`, or
            `forced_split_engine_cap`).
    """

    text: str
    sequence_index: int
    length: int
    boundary_strategy: str = "sentence_complete"

    @classmethod
    def build(
        cls, text: str, sequence_index: int, boundary_strategy: str = "sentence_complete"
    ) -> TextChunk:
        """Create a chunk whose `length` always matches its text."""

        return cls(
            text=text,
            sequence_index=sequence_index,
            length=len(text),
            boundary_strategy=boundary_strategy,
        )


@dataclass(frozen=True, slots=True)
class SynthesisRequest:
    """One call to the external speech engine."""

    text: str
    sequence_index: int
    language_instruction: str | None = None
    speed: float = 1.0


@dataclass(frozen=True, slots=True)
class AudioSegment:
    """Opaque synthesized audio for one chunk."""

    sequence_index: int
    data: bytes


@dataclass(frozen=True, slots=True)
class ExtractionReport:
    """Normalized PDF text plus extraction diagnostics.

    Attributes:
        text: Normalized document text.
        page_count: Number of pages read from the PDF.
        backend: Name of the page-text backend that produced the text.
    """

    text: str
    page_count: int
    backend: str


@dataclass(frozen=True, slots=True)
class InspectionReport:
    """Result of a dry run that stops before speech synthesis."""

    text_length: int
    detected_language: DetectedLanguage
    sample: str
    chunk_count: int
    backend: str


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Final output of one conversion request.

    Attributes:
        audio: Concatenated audio buffer for all chunks in source order.
        detected_language: Dominant script of the processed text.
        text_length: Character count of the text sent to segmentation.
        chunk_count: Number of synthesized chunks.
        response_format: Audio container/codec produced by the engine.
    """

    audio: bytes
    detected_language: DetectedLanguage
    text_length: int
    chunk_count: int
    response_format: str = "mp3"
