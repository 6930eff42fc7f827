# logpipe/backends/base.py
"""
Capability protocols shared by sinks and backends.

Backends compose by wrapping (a leveled backend wraps any backend, a
formatting backend wraps any sink), so these are structural protocols rather
than base classes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from logpipe.core.record import Record
from logpipe.core.severity import Severity


@runtime_checkable
class Sink(Protocol):
    """Byte destination for rendered records."""

    color: bool

    def write(self, data: bytes) -> None:
        """Write one rendered record. Bytes of one call are never split."""
        ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class Backend(Protocol):
    """Anything that accepts records for output."""

    @property
    def needs_caller(self) -> bool:
        """True if output needs the record's call site."""
        ...

    def is_enabled_for(self, severity: Severity, module: str) -> bool: ...

    def log(self, record: Record) -> None: ...

    def close(self) -> None: ...
