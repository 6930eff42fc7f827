# logpipe/backends/formatting.py
"""
Backend that renders records with a Formatter and writes them to a Sink.
"""

from __future__ import annotations

from logpipe.backends.base import Sink
from logpipe.core.record import Record
from logpipe.core.severity import Severity
from logpipe.formatting.formatter import Formatter


class FormattingBackend:
    """Formats every record it receives and hands the bytes to ``sink``."""

    def __init__(self, sink: Sink, formatter: Formatter):
        self.sink = sink
        self.formatter = formatter

    def __repr__(self) -> str:
        return f"FormattingBackend({self.sink!r}, {self.formatter!r})"

    @property
    def needs_caller(self) -> bool:
        return self.formatter.needs_caller

    def is_enabled_for(self, severity: Severity, module: str) -> bool:
        return True

    def log(self, record: Record) -> None:
        self.sink.write(self.formatter.render(record, color=getattr(self.sink, "color", False)))

    def close(self) -> None:
        self.sink.close()
