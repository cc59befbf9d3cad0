"""Shared pytest fixtures for the full pdfvoice test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from loguru import logger

from tests.fixture_builders import FakeSynthesizer, build_blank_pdf, build_text_pdf


@pytest.fixture(autouse=True)
def _reset_loguru_sinks() -> Iterator[None]:
    """Drop sinks added by `RunLogger` so closed test streams are never written."""

    yield
    logger.remove()


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Provide a two-page English PDF with selectable text."""

    return build_text_pdf(
        [
            [
                "Dr. Smith reviewed the quarterly report.",
                "Revenue grew by 12% over the previous quarter.",
            ],
            [
                "The team will present the results next week.",
                "Questions can be sent to the API working group.",
            ],
        ]
    )


@pytest.fixture
def scanned_pdf_bytes() -> bytes:
    """Provide a PDF with no embedded text layer."""

    return build_blank_pdf(page_count=2)


@pytest.fixture
def fake_synthesizer() -> FakeSynthesizer:
    """Provide a recording synthesizer that never touches the network."""

    return FakeSynthesizer()
