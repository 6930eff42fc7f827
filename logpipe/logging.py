# logpipe/logging.py
"""
Diagnostics for the pipeline itself, using Loguru.

logpipe reports its own operational events (rotations, flush failures,
backend failures during fan-out) through loguru, never through its own
dispatcher. They are disabled on import; ``configure_logging`` turns them on.
"""
from __future__ import annotations

import sys
from typing import Optional, TextIO

from loguru import logger

# Id loguru gives the stderr handler it installs on import.
_DEFAULT_HANDLER_ID = 0

DIAGNOSTIC_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "| <level>{level: <8}</level> "
    "| pid={process} tid={thread.name} "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> "
    "- <level>{message}</level>"
)


def configure_logging(*, debug: bool = False, sink: Optional[TextIO] = None) -> int:
    """Route logpipe diagnostics to ``sink`` (stderr by default).

    Only records emitted from the ``logpipe`` package pass the sink's filter.
    Loguru's default stderr handler is removed if it is still installed; any
    handler the host added is left alone.

    Args:
        debug: Include DEBUG events (rotation timings, daemon lifecycle).
        sink: Text stream to write to.

    Returns:
        The loguru handler id, for ``logger.remove``.
    """
    try:
        logger.remove(_DEFAULT_HANDLER_ID)
    except ValueError:
        pass  # already removed by the host
    logger.enable("logpipe")
    return logger.add(
        sink or sys.stderr,
        level="DEBUG" if debug else "INFO",
        format=DIAGNOSTIC_FORMAT,
        filter="logpipe",
        enqueue=sink is None,
        backtrace=debug,
        diagnose=debug,
    )
