"""Domain exceptions for pipeline and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ExtractionError(PipelineStageError):
    """Raised when a PDF has no usable embedded text or cannot be parsed."""

    def __init__(self, detail: str, *, hint: str | None = None) -> None:
        super().__init__(
            stage="extract",
            detail=detail,
            hint=hint or "Provide a PDF with selectable text (not a scanned image).",
        )


class InputTooShortError(PipelineStageError):
    """Raised when input text is below the minimum length worth synthesizing."""

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(
            stage="validate",
            detail=(
                f"Input text is too short for speech synthesis "
                f"({length} characters, minimum {minimum})."
            ),
            hint="Provide a longer document or text passage.",
        )
        self.length = length
        self.minimum = minimum


class SynthesisError(PipelineStageError):
    """Raised when the speech engine fails for any chunk of a conversion.

    Attributes:
        sequence_index: 1-based index of the chunk whose synthesis failed.
        failure_kind: Provider failure classification (for example
            `insufficient_quota` or `invalid_api_key`).
        retryable: Whether a caller may reasonably retry after a delay.
    """

    RETRYABLE_KINDS = frozenset({"insufficient_quota", "rate_limited", "timeout", "transport"})

    def __init__(
        self,
        detail: str,
        *,
        sequence_index: int | None = None,
        failure_kind: str = "unknown",
        hint: str | None = None,
    ) -> None:
        super().__init__(stage="tts", detail=detail, hint=hint)
        self.sequence_index = sequence_index
        self.failure_kind = failure_kind
        self.retryable = failure_kind in self.RETRYABLE_KINDS
