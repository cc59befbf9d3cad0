"""Module entrypoint for running pdfvoice as ``python -m pdfvoice``."""

from __future__ import annotations

from pdfvoice.cli import main


if __name__ == "__main__":
    main()
