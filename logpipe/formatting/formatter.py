# logpipe/formatting/formatter.py
"""
Template-driven record formatter.

A template mixes literal text with ``%{verb}`` or ``%{verb:options}``
placeholders. Templates are compiled once; unknown verbs and unusable options
are rejected at construction time so that rendering never fails.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, FrozenSet, List, Optional, Tuple

from logpipe.core.record import CallSite, Record, safe_str
from logpipe.core.severity import Severity
from logpipe.errors import TemplateError
from logpipe.io.naming import program_name

DEFAULT_TEMPLATE = "%{message}"

# Lmmdd hh:mm:ss.uuuuuu pid file:line] msg
GLOG_TEMPLATE = "%{level:.1s}%{time:%m%d %H:%M:%S.%f} %{pid} %{shortfile}] %{message}"
GLOG_LEGEND = "[DINWEC]mmdd hh:mm:ss.uuuuuu pid file:line] msg"

_VERB_RE = re.compile(r"%\{(\w+)(?::(.*?))?\}")

_RESET = "\033[0m"
_COLORS = {
    Severity.CRITICAL: "\033[35m",  # magenta
    Severity.ERROR: "\033[31m",  # red
    Severity.WARNING: "\033[33m",  # yellow
    Severity.NOTICE: "\033[32m",  # green
    Severity.INFO: "\033[37m",  # white
    Severity.DEBUG: "\033[36m",  # cyan
}
_BOLD_COLORS = {sev: code.replace("[", "[1;", 1) for sev, code in _COLORS.items()}

_CALLER_VERBS = frozenset({"longfile", "shortfile", "longfunc", "shortfunc", "longpkg", "shortpkg"})
_UNKNOWN_CALLER = "???"


# Each getter takes (record, program) and returns the raw value to format.
_Getter = Callable[[Record, str], object]


def _caller_attr(render: Callable[[CallSite], str]) -> _Getter:
    def get(record: Record, _program: str) -> object:
        return render(record.caller) if record.caller is not None else _UNKNOWN_CALLER

    return get


_GETTERS = {
    "id": lambda r, _p: r.id,
    "pid": lambda r, _p: r.pid,
    "level": lambda r, _p: r.severity.name,
    "module": lambda r, _p: r.module,
    "program": lambda _r, p: p,
    "longfile": _caller_attr(lambda c: f"{c.filename}:{c.lineno}"),
    "shortfile": _caller_attr(lambda c: f"{os.path.basename(c.filename)}:{c.lineno}"),
    "longfunc": _caller_attr(lambda c: c.qualname),
    "shortfunc": _caller_attr(lambda c: c.function),
    "longpkg": _caller_attr(lambda c: c.package),
    "shortpkg": _caller_attr(lambda c: c.package.rsplit(".", 1)[-1]),
}

# Sample values used to validate format specs at compile time.
_SAMPLES = {"id": 1, "pid": 1}


@dataclass(frozen=True)
class _Part:
    """A compiled template piece: literal text or a verb with its option."""

    verb: Optional[str]
    text: str = ""


class Formatter:
    """Compiled format template turning a Record into one rendered line.

    Args:
        template: Template string with ``%{verb}`` placeholders.
        redact: Render sensitive message arguments through ``redacted()``.
        program: Value of the ``program`` verb; defaults to the executable name.
    """

    def __init__(self, template: str = DEFAULT_TEMPLATE, *, redact: bool = False, program: Optional[str] = None):
        self.template = template
        self.redact = redact
        self.program = program or program_name()
        self._parts: Tuple[_Part, ...] = tuple(_compile(template))
        self.verbs: FrozenSet[str] = frozenset(p.verb for p in self._parts if p.verb)

    def __repr__(self) -> str:
        return f"Formatter({self.template!r}, redact={self.redact})"

    @property
    def needs_caller(self) -> bool:
        """True if any verb needs the record's call site."""
        return not self.verbs.isdisjoint(_CALLER_VERBS)

    def render(self, record: Record, *, color: bool = False) -> bytes:
        """Render ``record`` as one newline-terminated UTF-8 line.

        Color verbs only produce escape codes when ``color`` is set.
        """
        out: List[str] = []
        for part in self._parts:
            if part.verb is None:
                out.append(part.text)
            elif part.verb == "color":
                if color:
                    out.append(_color_code(part.text, record.severity))
            else:
                out.append(self._render_verb(part, record))
        line = "".join(out)
        if not line.endswith("\n"):
            line += "\n"
        return line.encode("utf-8", errors="replace")

    def _render_verb(self, part: _Part, record: Record) -> str:
        if part.verb == "time":
            return _format_time(record.time, part.text)
        if part.verb == "message":
            value: object = record.message(redact=self.redact)
        else:
            value = _GETTERS[part.verb](record, self.program)
        if not part.text:
            return safe_str(value)
        try:
            return format(value, part.text)
        except Exception:
            return safe_str(value)


def _format_time(ts: datetime, layout: str) -> str:
    if not layout:
        return ts.isoformat()
    return ts.strftime(layout)


def _color_code(option: str, severity: Severity) -> str:
    if option == "reset":
        return _RESET
    if option == "bold":
        return _BOLD_COLORS[severity]
    return _COLORS[severity]


def _compile(template: str) -> List[_Part]:
    parts: List[_Part] = []
    pos = 0
    for m in _VERB_RE.finditer(template):
        if m.start() > pos:
            parts.append(_Part(verb=None, text=template[pos : m.start()]))
        verb, option = m.group(1), m.group(2) or ""
        _validate(verb, option, template)
        parts.append(_Part(verb=verb, text=option))
        pos = m.end()
    if pos < len(template):
        parts.append(_Part(verb=None, text=template[pos:]))
    return parts


def _validate(verb: str, option: str, template: str) -> None:
    if verb == "color":
        if option not in ("", "reset", "bold"):
            raise TemplateError(f"Unknown color option {option!r}", template)
        return
    if verb == "time":
        return
    if verb != "message" and verb not in _GETTERS:
        raise TemplateError(f"Unknown verb {verb!r} in format template", template)
    if option:
        try:
            format(_SAMPLES.get(verb, "sample"), option)
        except (ValueError, TypeError) as e:
            raise TemplateError(f"Invalid option {option!r} for verb {verb!r}: {e}", template) from e
