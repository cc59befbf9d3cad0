"""Unit tests for external tool path resolution."""

from __future__ import annotations

import pytest

from pdfvoice import runtime_tools
from pdfvoice.runtime_tools import executable_env_key, resolve_executable


def test_executable_env_key_is_prefixed_and_sanitized() -> None:
    """Tool names map to `PDFVOICE_<NAME>_BIN` variables."""

    assert executable_env_key("pdftotext") == "PDFVOICE_PDFTOTEXT_BIN"
    assert executable_env_key("pdf-info") == "PDFVOICE_PDF_INFO_BIN"


def test_resolve_executable_prefers_environment_override() -> None:
    """An explicit override wins over `PATH` lookup."""

    env = {"PDFVOICE_PDFINFO_BIN": " /opt/poppler/bin/pdfinfo "}

    assert resolve_executable("pdfinfo", env=env) == "/opt/poppler/bin/pdfinfo"


def test_resolve_executable_uses_path_then_raw_name(monkeypatch: pytest.MonkeyPatch) -> None:
    """`PATH` lookups are used when found, otherwise the bare name is returned."""

    monkeypatch.setattr(
        runtime_tools.shutil,
        "which",
        lambda name: "/usr/bin/pdftotext" if name == "pdftotext" else None,
    )

    assert resolve_executable("pdftotext", env={}) == "/usr/bin/pdftotext"
    assert resolve_executable("pdfinfo", env={}) == "pdfinfo"
