"""Top-level package for pdfvoice.

This package converts text-based PDF documents and pasted text into a single
speech audio file. The main orchestration entry point is `PdfVoicePipeline`.
"""

from .pipeline import PdfVoicePipeline

__all__ = ["PdfVoicePipeline", "__version__"]

__version__ = "0.3.2"
