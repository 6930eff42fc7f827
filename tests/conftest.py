"""
Shared fixtures: isolated dispatchers, in-memory sinks, log directories.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List

import pytest

from logpipe.core.record import Record
from logpipe.core.severity import Severity
from logpipe.dispatcher import Dispatcher
from logpipe.io.naming import HEADER_LINES


class CollectingSink:
    """Sink that keeps every write in memory."""

    def __init__(self, color: bool = False):
        self.color = color
        self.writes: List[bytes] = []
        self.closed = False
        self._lock = threading.Lock()

    def write(self, data: bytes) -> None:
        with self._lock:
            self.writes.append(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    @property
    def text(self) -> str:
        return b"".join(self.writes).decode("utf-8")


class RecordingBackend:
    """Backend that stores the records it receives."""

    needs_caller = False

    def __init__(self):
        self.records: List[Record] = []
        self.closed = False

    def is_enabled_for(self, severity: Severity, module: str) -> bool:
        return True

    def log(self, record: Record) -> None:
        self.records.append(record)

    def close(self) -> None:
        self.closed = True


class FailingBackend(RecordingBackend):
    """Backend whose every log call raises ``error``."""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error

    def log(self, record: Record) -> None:
        raise self.error


def make_record(severity: Severity = Severity.INFO, module: str = "x", template: str = "info", *args) -> Record:
    return Record(severity=severity, module=module, template=template, args=args)


def strip_header(path: Path) -> bytes:
    """File contents after the fixed header block."""
    return path.read_bytes().split(b"\n", HEADER_LINES)[-1]


@pytest.fixture
def dispatcher() -> Dispatcher:
    d = Dispatcher()
    yield d
    d.shutdown()


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    d = tmp_path / "logs"
    d.mkdir()
    return d
