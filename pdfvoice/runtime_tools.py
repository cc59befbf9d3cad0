"""Runtime executable resolution helpers.

Responsibilities:
- Resolve external tool paths (poppler `pdftotext`/`pdfinfo`) for optional
  PDF backends.
- Allow deployments to pin a tool location through the environment.
"""

from __future__ import annotations

import os
import shutil
from typing import Mapping


def executable_env_key(command_name: str) -> str:
    """Return the environment variable that overrides one tool path."""

    token = "".join(char if char.isalnum() else "_" for char in command_name.strip())
    return f"PDFVOICE_{token.upper()}_BIN"


def resolve_executable(command_name: str, env: Mapping[str, str] | None = None) -> str:
    """Resolve an executable from an environment override, then `PATH`.

    Falls back to the raw command name so `subprocess` raises its native
    missing-binary error.
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name

    env_map = os.environ if env is None else env
    override = env_map.get(executable_env_key(normalized), "").strip()
    if override:
        return override

    resolved_path = shutil.which(normalized)
    if resolved_path is not None:
        return resolved_path
    return normalized
