"""Logging setup for the alias proxy."""
from __future__ import annotations

import logging
import sys

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once per process.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    global _configured
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if _configured:
        logging.getLogger().setLevel(numeric_level)
        return

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    # httpx logs every upstream request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
