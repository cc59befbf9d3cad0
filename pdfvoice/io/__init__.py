"""Input stage components for pdfvoice.

This package contains PDF page-text backends and the extractor that joins and
normalizes their output.
"""

from .pdf_text_extractor import (
    PageTextSource,
    PdfBackendUnavailable,
    PdftotextPageSource,
    PdfTextExtractor,
    PypdfPageSource,
    create_page_source,
)

__all__ = [
    "PageTextSource",
    "PdfBackendUnavailable",
    "PdfTextExtractor",
    "PdftotextPageSource",
    "PypdfPageSource",
    "create_page_source",
]
