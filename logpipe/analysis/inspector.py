# logpipe/analysis/inspector.py
"""
Inspection of rotated log files: header parsing and record counts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from logpipe.io.file_reader import LogFileSource
from logpipe.io.naming import HEADER_LINES
from logpipe.observability import timed

HEADER_FIELDS = (
    ("created", "Log file created at: "),
    ("host", "Running on machine: "),
    ("binary", "Binary: "),
    ("line_format", "Log line format: "),
)
_INITIALS = {"D": "DEBUG", "I": "INFO", "N": "NOTICE", "W": "WARNING", "E": "ERROR", "C": "CRITICAL"}


@dataclass
class LogFileReport:
    """What a log file contains."""

    path: str
    file_size: int
    header: Dict[str, str] = field(default_factory=dict)
    header_bytes: int = 0
    record_lines: int = 0
    record_bytes: int = 0
    # Counted from the first character of each line (glog-style formats).
    severity_counts: Dict[str, int] = field(default_factory=dict)
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def inspect_log_file(path: str) -> LogFileReport:
    """Read ``path`` and describe its header and records."""
    with timed("inspect", path=path), LogFileSource(path).open() as mf:
        report = LogFileReport(path=path, file_size=mf.size)
        if mf.size == 0:
            report.problems.append("File is empty")
            return report
        lines = bytes(mf.view).split(b"\n")

    trailing_partial = lines.pop() if lines else b""
    header_lines, body = lines[:HEADER_LINES], lines[HEADER_LINES:]
    for (key, prefix), raw in zip(HEADER_FIELDS, header_lines):
        text = raw.decode("utf-8", errors="replace")
        if text.startswith(prefix):
            report.header[key] = text[len(prefix) :]
        else:
            report.problems.append(f"Header line {key!r} missing or malformed")
    if len(header_lines) < HEADER_LINES:
        report.problems.append(f"Header truncated: {len(header_lines)} of {HEADER_LINES} lines")
    report.header_bytes = sum(len(line) + 1 for line in header_lines)

    counts: Dict[str, int] = {}
    for line in body:
        initial = _INITIALS.get(chr(line[0])) if line else None
        if initial:
            counts[initial] = counts.get(initial, 0) + 1
    report.record_lines = len(body)
    report.record_bytes = sum(len(line) + 1 for line in body)
    report.severity_counts = counts
    if trailing_partial:
        report.problems.append(f"Last record is not newline-terminated ({len(trailing_partial)} bytes)")
    return report
