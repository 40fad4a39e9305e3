"""
Minimal env-file loader used by settings and tests.

Only ``KEY=value`` lines are understood. Blank lines and ``#`` comments are
skipped, surrounding quotes are removed and unquoted values may carry an
inline `` # comment``.

Usage:
    from rule_canvas.core.dotenv import load_env_file

    load_env_file(".env.local", overwrite=False)
"""

from __future__ import annotations

import os
from pathlib import Path


def parse_env_line(line: str) -> tuple[str, str] | None:
    """Return ``(key, value)`` for an assignment line, None for anything else."""
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, _, value = line.partition("=")
    key = key.removeprefix("export ").strip()
    if not key:
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return key, value[1:-1]

    for marker in (" #", "\t#"):
        cut = value.find(marker)
        if cut != -1:
            value = value[:cut].rstrip()
            break
    return key, value


def load_env_file(path: str | Path = ".env", overwrite: bool = False) -> dict[str, str]:
    """Copy the assignments of an env file into ``os.environ``.

    Args:
        path: File to read. A missing file loads nothing.
        overwrite: Replace variables that are already set.

    Returns:
        The variables that were actually written.
    """
    env_path = Path(path)
    loaded: dict[str, str] = {}
    if not env_path.is_file():
        return loaded

    for raw in env_path.read_text(encoding="utf-8").splitlines():
        parsed = parse_env_line(raw)
        if parsed is None:
            continue
        key, value = parsed
        if key in os.environ and not overwrite:
            continue
        os.environ[key] = value
        loaded[key] = value

    return loaded
