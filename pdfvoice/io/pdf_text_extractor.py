"""PDF text extraction interfaces.

Responsibilities:
- Define the page-text capability the pipeline depends on.
- Provide `pypdf` and poppler `pdftotext` backends behind that capability.
- Join pages, normalize extraction artifacts, and reject PDFs without a usable
  text layer.
"""

from __future__ import annotations

import io
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol, Sequence

from pypdf import PdfReader

from ..errors import ExtractionError
from ..models.datatypes import ExtractionReport
from ..runtime_tools import resolve_executable
from ..text.normalizer import TextNormalizer

MIN_TEXT_LENGTH = 10
PAGE_SEPARATOR = "\n\n"

_REPEATED_WHITESPACE_RE = re.compile(r"\s{2,}")


class PdfBackendUnavailable(RuntimeError):
    """Raised when a page-text backend cannot run in this environment."""


class PageTextSource(Protocol):
    """Capability returning one text string per PDF page, in page order."""

    name: str

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Extract page texts from raw PDF bytes."""


def join_fragments(fragments: Sequence[str]) -> str:
    """Join positioned text fragments with single spaces."""

    joined = " ".join(fragment for fragment in fragments if fragment)
    return _REPEATED_WHITESPACE_RE.sub(" ", joined).strip()


class PypdfPageSource:
    """Page-text backend built on `pypdf` text visitors."""

    name = "pypdf"

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Collect visitor fragments for every page."""

        reader = PdfReader(io.BytesIO(pdf_bytes))
        pages: list[str] = []
        for page in reader.pages:
            fragments: list[str] = []

            def _collect(text: str, *_: object) -> None:
                fragments.append(text)

            page.extract_text(visitor_text=_collect)
            pages.append(join_fragments(fragments))
        return pages


class PdftotextPageSource:
    """Page-text backend using poppler's `pdfinfo` and `pdftotext` tools."""

    name = "pdftotext"

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Write bytes to a scratch file and run poppler per page."""

        with tempfile.TemporaryDirectory(prefix="pdfvoice-") as scratch:
            pdf_path = Path(scratch) / "input.pdf"
            pdf_path.write_bytes(pdf_bytes)
            page_count = self._page_count(pdf_path)
            pages: list[str] = []
            for page in range(1, page_count + 1):
                output = self._run(
                    [
                        resolve_executable("pdftotext"),
                        "-enc",
                        "UTF-8",
                        "-f",
                        str(page),
                        "-l",
                        str(page),
                        str(pdf_path),
                        "-",
                    ]
                )
                pages.append(join_fragments(output.replace("\f", "\n").splitlines()))
        return pages

    def _page_count(self, pdf_path: Path) -> int:
        output = self._run([resolve_executable("pdfinfo"), str(pdf_path)])
        match = re.search(r"(?m)^Pages:\s+(\d+)\s*$", output)
        if not match:
            raise ExtractionError("Could not determine the PDF page count.")
        return int(match.group(1))

    def _run(self, command: list[str]) -> str:
        try:
            result = subprocess.run(command, check=False, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise PdfBackendUnavailable(
                f"The `{Path(command[0]).name}` command is required but was not found."
            ) from exc
        if result.returncode != 0:
            details = result.stderr.strip() or "unknown error"
            raise ExtractionError(f"{Path(command[0]).name} failed: {details}")
        return result.stdout


_PAGE_SOURCES = {
    PypdfPageSource.name: PypdfPageSource,
    PdftotextPageSource.name: PdftotextPageSource,
}


def create_page_source(name: str) -> PageTextSource:
    """Create a page-text backend from its configured name."""

    try:
        return _PAGE_SOURCES[name]()
    except KeyError as exc:
        supported = ", ".join(sorted(_PAGE_SOURCES))
        raise ValueError(f"Unsupported PDF backend `{name}` (supported: {supported}).") from exc


class PdfTextExtractor:
    """Extract normalized document text from PDF bytes."""

    def __init__(
        self,
        sources: Sequence[PageTextSource] | None = None,
        normalizer: TextNormalizer | None = None,
        min_text_length: int = MIN_TEXT_LENGTH,
    ) -> None:
        """Initialize with ordered backends tried until one is available."""

        self.sources = list(sources) if sources else [PypdfPageSource()]
        self.normalizer = normalizer or TextNormalizer()
        self.min_text_length = min_text_length

    def extract(self, pdf_bytes: bytes) -> str:
        """Extract all text from a PDF, failing for image-only documents."""

        return self.extract_with_report(pdf_bytes).text

    def extract_with_report(self, pdf_bytes: bytes) -> ExtractionReport:
        """Extract normalized text plus page count and backend name."""

        pages, backend = self.extract_pages(pdf_bytes)
        raw_text = PAGE_SEPARATOR.join(page for page in pages if page)
        text = self.normalizer.normalize(raw_text)
        if len(text) < self.min_text_length:
            raise ExtractionError(
                "Could not extract readable text from PDF "
                f"({len(text)} characters found across {len(pages)} page(s))."
            )
        return ExtractionReport(text=text, page_count=len(pages), backend=backend)

    def extract_pages(self, pdf_bytes: bytes) -> tuple[list[str], str]:
        """Return raw page texts and the name of the backend that produced them."""

        unavailable: list[str] = []
        for source in self.sources:
            try:
                return source.extract_pages(pdf_bytes), source.name
            except PdfBackendUnavailable as exc:
                unavailable.append(str(exc))
            except ExtractionError:
                raise
            except Exception as exc:
                raise ExtractionError(
                    f"The PDF could not be parsed by `{source.name}`: {exc}"
                ) from exc

        details = " ".join(unavailable) or "No PDF backends configured."
        raise ExtractionError(
            f"No PDF text backend is available. {details}",
            hint="Install `pypdf` or poppler-utils, or adjust `pdf_backends`.",
        )
