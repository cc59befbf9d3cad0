"""Unit tests for PDF page-text extraction and backend fallthrough."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfvoice.errors import ExtractionError
from pdfvoice.io.pdf_text_extractor import (
    PdfBackendUnavailable,
    PdftotextPageSource,
    PdfTextExtractor,
    PypdfPageSource,
    create_page_source,
    join_fragments,
)


class _StaticSource:
    """Page source returning fixed page texts."""

    def __init__(self, pages: list[str], name: str = "static") -> None:
        self.pages = pages
        self.name = name

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        _ = pdf_bytes
        return list(self.pages)


class _UnavailableSource:
    """Page source whose backend cannot run in this environment."""

    name = "missing"

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        _ = pdf_bytes
        raise PdfBackendUnavailable("The `missing` backend is not installed.")


class _BrokenSource:
    """Page source that fails while parsing."""

    name = "broken"

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        _ = pdf_bytes
        raise ValueError("xref table is corrupt")


def test_pypdf_extraction_returns_pages_in_order(sample_pdf_bytes: bytes) -> None:
    """Text from both pages is returned in page order."""

    report = PdfTextExtractor().extract_with_report(sample_pdf_bytes)

    assert report.backend == "pypdf"
    assert report.page_count == 2
    assert "Dr. Smith reviewed the quarterly report." in report.text
    assert "Revenue grew by 12%" in report.text
    assert report.text.index("quarterly report") < report.text.index("Questions can be sent")


def test_pypdf_page_source_joins_fragments_per_page(sample_pdf_bytes: bytes) -> None:
    """Each page collapses its fragments into one single-spaced string."""

    pages = PypdfPageSource().extract_pages(sample_pdf_bytes)

    assert len(pages) == 2
    assert "  " not in pages[0]
    assert pages[1].startswith("The team will present the results next week.")


def test_scanned_pdf_without_text_layer_raises_extraction_error(
    scanned_pdf_bytes: bytes,
) -> None:
    """Image-only documents must never return empty text successfully."""

    with pytest.raises(ExtractionError) as exc_info:
        PdfTextExtractor().extract(scanned_pdf_bytes)

    assert exc_info.value.stage == "extract"
    assert "selectable text" in (exc_info.value.hint or "")


def test_unparseable_bytes_raise_extraction_error() -> None:
    """Parser failures are reported as extraction errors."""

    with pytest.raises(ExtractionError, match="could not be parsed"):
        PdfTextExtractor().extract(b"this is not a pdf document")


def test_extractor_falls_through_unavailable_backends() -> None:
    """Unavailable backends are skipped in configured order."""

    extractor = PdfTextExtractor(
        sources=[_UnavailableSource(), _StaticSource(["Fallback backend text."], name="second")]
    )

    report = extractor.extract_with_report(b"%PDF-stub")

    assert report.backend == "second"
    assert report.text == "Fallback backend text."


def test_extractor_reports_when_no_backend_is_available() -> None:
    """A hint is attached when every backend is unavailable."""

    extractor = PdfTextExtractor(sources=[_UnavailableSource()])

    with pytest.raises(ExtractionError, match="No PDF text backend is available") as exc_info:
        extractor.extract(b"%PDF-stub")

    assert "pdf_backends" in (exc_info.value.hint or "")


def test_extractor_does_not_fall_through_parse_failures() -> None:
    """A usable backend that fails to parse stops extraction."""

    extractor = PdfTextExtractor(
        sources=[_BrokenSource(), _StaticSource(["never reached text"])]
    )

    with pytest.raises(ExtractionError, match="`broken`"):
        extractor.extract(b"%PDF-stub")


def test_extractor_normalizes_joined_pages_and_skips_empty_pages() -> None:
    """Extraction artifacts are repaired before text leaves the extractor."""

    extractor = PdfTextExtractor(
        sources=[_StaticSource(["First\u200b   page\ttext", "", "Second page text"])]
    )

    assert extractor.extract(b"%PDF-stub") == "First page text\nSecond page text"


def test_extractor_minimum_length_is_configurable() -> None:
    """Short text passes when the threshold is lowered."""

    source = _StaticSource(["Tiny"])

    with pytest.raises(ExtractionError):
        PdfTextExtractor(sources=[source]).extract(b"%PDF-stub")
    assert PdfTextExtractor(sources=[source], min_text_length=3).extract(b"%PDF-stub") == "Tiny"


def test_join_fragments_collapses_repeated_whitespace() -> None:
    """Fragments join with single spaces and empty fragments are skipped."""

    assert join_fragments(["alpha", "", " beta\n", "  gamma  "]) == "alpha beta gamma"


def test_create_page_source_rejects_unknown_backend() -> None:
    """Only registered backend names are accepted."""

    assert create_page_source("pypdf").name == "pypdf"
    with pytest.raises(ValueError, match="Unsupported PDF backend"):
        create_page_source("ocr")


def test_pdftotext_source_reports_missing_binary_as_unavailable(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """A missing poppler binary makes the backend unavailable, not broken."""

    monkeypatch.setenv("PDFVOICE_PDFINFO_BIN", str(tmp_path / "missing-pdfinfo"))

    with pytest.raises(PdfBackendUnavailable, match="pdfinfo"):
        PdftotextPageSource().extract_pages(b"%PDF-1.4")
