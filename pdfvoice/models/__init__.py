"""Shared typed data models for pdfvoice.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    AudioSegment,
    ConversionResult,
    DetectedLanguage,
    ExtractionReport,
    InspectionReport,
    SynthesisRequest,
    TextChunk,
)

__all__ = [
    "AudioSegment",
    "ConversionResult",
    "DetectedLanguage",
    "ExtractionReport",
    "InspectionReport",
    "SynthesisRequest",
    "TextChunk",
]
