"""Logging setup shared by the parent and worker processes.

Modules log through ``logging.getLogger(__name__)``; entry points call
:func:`configure_logging` once.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

__all__ = ["LOG_FORMAT", "WORKER_LOG_FORMAT", "configure_logging"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Worker lines are re-logged by the parent, which adds its own timestamp.
WORKER_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: str | int = logging.INFO,
    *,
    fmt: str = LOG_FORMAT,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install a single stream handler on the graph_harness logger.

    Calling this again replaces the previous handler, so entry points
    can reconfigure without duplicating output.

    Args:
        level: Logging level name or number.
        fmt: Log record format.
        stream: Target stream (default: stderr).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("graph_harness")
    logger.setLevel(level if isinstance(level, int) else level.upper())

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    return logger
