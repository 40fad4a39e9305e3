"""
Shared CLI runner helper.

Runs a command in a subprocess and exits with its return code, so every
wrapper behaves the same under ``uv run`` or a plain virtualenv.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence


def run(cmd: Sequence[str]) -> None:
    """
    Run a command and propagate its exit code.

    Example:
        >>> run([sys.executable, "-m", "pytest", "-q"])
    """
    result = subprocess.run(cmd)
    raise SystemExit(result.returncode)
