"""Telemetry and observability helpers.

This package emits deterministic phase logs for CLI-observable pipeline runs.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
