"""
Package logging for SmartSwap.

All modules log under the "smartswap" namespace. The first get_logger() call
attaches a single stream handler to that namespace logger, so embedding
applications keep control of their own root logger. Records still propagate
to the root for hosts (and pytest's caplog) that collect them there.

Level comes from SMARTSWAP_LOG_LEVEL (default INFO) and is re-read on every
call, so tests can change it with monkeypatch.setenv.
"""

from __future__ import annotations

import logging
import os
from typing import Final

NAMESPACE: Final[str] = "smartswap"
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_handler: logging.Handler | None = None


def _resolve_level() -> int:
    level_name = os.getenv("SMARTSWAP_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; names outside the namespace are nested under it."""
    global _handler

    package_logger = logging.getLogger(NAMESPACE)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        package_logger.addHandler(_handler)
    package_logger.setLevel(_resolve_level())

    if name != NAMESPACE and not name.startswith(f"{NAMESPACE}."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)
