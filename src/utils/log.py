from __future__ import annotations

import os
import sys
from typing import Any

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


def _enabled(level: str) -> bool:
    threshold = LEVELS.get(os.getenv("LOG_LEVEL", "INFO").strip().upper(), LEVELS["INFO"])
    return LEVELS.get(level, LEVELS["INFO"]) >= threshold


def log_line(tag: str, status: str, *, level: str = "INFO", **fields: Any) -> None:
    """Print a ``[TAG] status=... key=value`` line; warnings and errors go to stderr."""
    if not _enabled(level):
        return
    msg = f"[{tag}] status={status}"
    for key, value in fields.items():
        if value is None or value == "":
            continue
        msg += f" {key}={value}"
    stream = sys.stderr if LEVELS.get(level, 0) >= LEVELS["WARNING"] else sys.stdout
    print(msg, file=stream)
