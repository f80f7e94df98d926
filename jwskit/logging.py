"""Logging setup for applications embedding jwskit."""

from __future__ import annotations

import logging
import os
from typing import Optional

from .config import get_config

_CONFIGURED = False

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _resolve_log_level(level: Optional[str] = None) -> int:
    raw = (level or os.getenv("JWSKIT_LOG_LEVEL") or get_config().log_level).strip().upper()
    if raw in _LEVELS:
        return getattr(logging, raw)
    return logging.WARNING


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the ``jwskit`` logger hierarchy once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _resolve_log_level(level)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("jwskit").setLevel(resolved)
    _CONFIGURED = True
