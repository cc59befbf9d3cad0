"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level runtime logs through `loguru`.
- Never log document text, audio payloads, or credentials.
"""

from __future__ import annotations

import re
import sys
from typing import TextIO

from loguru import logger

_UNSAFE_TOKEN_CHARS = re.compile(r"[^\w\-.:/]")


def _format_context(context: dict[str, object]) -> str:
    """Render counters as sorted `key=value` tokens safe to grep in shell output."""

    tokens = []
    for key in sorted(context):
        value = _UNSAFE_TOKEN_CHARS.sub("_", str(context[key]).strip()) or "none"
        tokens.append(f"{key}={value}")
    return "".join(f" {token}" for token in tokens)


class RunLogger:
    """Emit deterministic phase logs for pipeline activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Route `loguru` output to one sink with message-only formatting."""

        self._sink = sink or sys.stdout
        logger.remove()
        logger.add(self._sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        logger.log(level, line)

    def log_stage_start(self, stage: str) -> None:
        """Emit a stage-start runtime event."""

        self._emit("INFO", "start", stage)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete runtime event with optional counters."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure runtime event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def log_chunk(self, sequence_index: int, chars: int, audio_bytes: int) -> None:
        """Emit one per-chunk synthesis event."""

        self._emit("INFO", "chunk", "tts", index=sequence_index, chars=chars, bytes=audio_bytes)
