"""Pipeline orchestration package for pdfvoice."""

from .orchestrator import PdfVoicePipeline

__all__ = ["PdfVoicePipeline"]
