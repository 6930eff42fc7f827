# logpipe/core/record.py
"""
Log record model, call-site capture and sensitive-value redaction.
"""

from __future__ import annotations

import itertools
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from types import FrameType
from typing import Any, Optional, Protocol, Tuple, runtime_checkable

from logpipe.core.severity import Severity

_sequence = itertools.count(1)


def next_record_id() -> int:
    """Process-wide monotonically increasing record id."""
    return next(_sequence)


@runtime_checkable
class Redactable(Protocol):
    """Anything that can present a masked form of itself."""

    def redacted(self) -> Any: ...


def redact(text: str) -> str:
    """Mask every character of ``text``."""
    return "*" * len(text)


class Sensitive:
    """Wraps a sensitive value.

    ``str()`` gives the real value; ``redacted()`` gives ``mask`` or, by
    default, the value with every character replaced by ``*``.
    """

    __slots__ = ("value", "mask")

    def __init__(self, value: Any, mask: Optional[str] = None):
        self.value = value
        self.mask = mask

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"Sensitive({self.redacted()!r})"

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    def redacted(self) -> str:
        return self.mask if self.mask is not None else redact(str(self.value))


def safe_str(value: Any) -> str:
    """``str(value)``, falling back to the default object representation."""
    try:
        return str(value)
    except Exception:
        return object.__repr__(value)


@dataclass(frozen=True)
class CallSite:
    """Source location of a log call."""

    filename: str
    lineno: int
    function: str
    qualname: str
    package: str

    @classmethod
    def from_frame(cls, frame: FrameType) -> "CallSite":
        code = frame.f_code
        return cls(
            filename=code.co_filename,
            lineno=frame.f_lineno,
            function=code.co_name,
            qualname=getattr(code, "co_qualname", code.co_name),
            package=frame.f_globals.get("__name__", "?"),
        )

    @classmethod
    def capture(cls, depth: int) -> Optional["CallSite"]:
        """Call site ``depth`` frames above the caller of this method."""
        try:
            frame = sys._getframe(depth + 1)
        except ValueError:
            return None
        return cls.from_frame(frame)


@dataclass(frozen=True)
class Record:
    """One immutable unit of log data produced by a single log call."""

    severity: Severity
    module: str
    template: str
    args: Tuple[Any, ...] = ()
    time: datetime = field(default_factory=lambda: datetime.now().astimezone())
    id: int = field(default_factory=next_record_id)
    pid: int = field(default_factory=os.getpid)
    caller: Optional[CallSite] = None

    def message(self, *, redact: bool = False) -> str:
        """Render the message template with its arguments.

        With ``redact`` set, the template and every argument exposing
        ``redacted()`` are replaced by that form before formatting. Never raises.
        """
        template = safe_str(_redacted(self.template) if redact else self.template)
        if not self.args:
            return template
        args = tuple(_redacted(a) if redact else a for a in self.args)
        try:
            return template.format(*args)
        except Exception:
            # Arguments do not fit the template: append them instead.
            return " ".join([template, *(safe_str(a) for a in args)])


def _redacted(value: Any) -> Any:
    if isinstance(value, Redactable):
        try:
            return value.redacted()
        except Exception:
            return "<redaction failed>"
    return value
