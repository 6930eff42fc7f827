# logpipe/observability.py
"""
Observability helpers: timed sections reported to the diagnostics log, and
dataclass snapshot → dict conversion.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterator

from loguru import logger


@dataclass
class Timer:
    """Duration of one section in milliseconds."""

    name: str
    start: float = 0.0
    duration_ms: float = 0.0

    def stop(self) -> float:
        self.duration_ms = (time.perf_counter() - self.start) * 1000.0
        return self.duration_ms


@contextmanager
def timed(name: str, **context: Any) -> Iterator[Timer]:
    """Time the enclosed block and report it at DEBUG on success.

    ``context`` values are appended to the message as ``key=value`` pairs.
    """
    t = Timer(name, start=time.perf_counter())
    yield t
    t.stop()
    details = " ".join(f"{k}={v}" for k, v in context.items())
    logger.opt(depth=2).debug("{name} took {ms:.2f}ms {details}", name=name, ms=t.duration_ms, details=details)


def to_dict(obj: Any) -> Dict[str, Any] | list[Any] | Any:
    """Recursively convert dataclasses to dicts, enums to their names."""
    if hasattr(obj, "__dataclass_fields__"):
        return {k: to_dict(v) for k, v in asdict(obj).items()}
    if isinstance(obj, (list, tuple)):
        return [to_dict(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): to_dict(v) for k, v in obj.items()}
    if isinstance(obj, Enum):
        return obj.name
    return obj
