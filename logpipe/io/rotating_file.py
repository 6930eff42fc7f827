# logpipe/io/rotating_file.py
"""
Buffered, size-rotating log file sink.

Writers append to a large in-memory buffer under a single lock so they rarely
wait on disk; a FlushDaemon pushes the buffer to stable storage on a fixed
interval. The size limit is checked before each write, so one record is never
split across two files.
"""

from __future__ import annotations

import io
import os
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import BinaryIO, Callable, List, Optional, Sequence

from loguru import logger

from logpipe.errors import ConfigurationError, FatalStorageError, SinkClosedError
from logpipe.formatting.formatter import GLOG_LEGEND
from logpipe.io.flush_daemon import FlushDaemon
from logpipe.io.naming import build_header, create_log_file, default_log_dirs, program_name
from logpipe.observability import timed

MAX_SIZE = 1024 * 1024 * 1800
# Large so records accumulate without the logging thread blocking on disk
# I/O; the flush daemon blocks instead.
BUFFER_SIZE = 256 * 1024
FLUSH_INTERVAL = 3.0


class SinkState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    FAILED = "failed"


@dataclass
class SinkStats:
    """Point-in-time counters for a RotatingFileSink."""

    state: str
    path: Optional[str]
    files_opened: int
    bytes_in_file: int
    bytes_written: int
    records_written: int
    flushes: int
    flush_errors: int


class RotatingFileSink:
    """Writes records to a log file, starting a new file at ``max_size`` bytes.

    Args:
        log_dirs: Candidate directories, tried in order.
        program: Program part of the file names; defaults to the executable name.
        tag: Severity tag embedded in file names.
        max_size: Rotation threshold in bytes, header included.
        buffer_size: Size of the in-memory write buffer.
        flush_interval: Seconds between background flushes; ``None`` or 0
            disables the daemon (callers flush explicitly).
        legend: One-line description of the record format for the header.
        clock: Returns "now"; used for file names and header timestamps.
        symlink: Maintain a ``<program>.<tag>`` link to the newest file.
    """

    color = False

    def __init__(
        self,
        log_dirs: Optional[Sequence[str]] = None,
        *,
        program: Optional[str] = None,
        tag: str = "INFO",
        max_size: int = MAX_SIZE,
        buffer_size: int = BUFFER_SIZE,
        flush_interval: Optional[float] = FLUSH_INTERVAL,
        legend: str = GLOG_LEGEND,
        clock: Optional[Callable[[], datetime]] = None,
        symlink: bool = True,
    ):
        if max_size <= 0:
            raise ConfigurationError(f"max_size must be positive, got {max_size}")
        self.log_dirs: List[str] = list(log_dirs or default_log_dirs())
        self.program = program or program_name()
        self.tag = tag
        self.max_size = max_size
        self.buffer_size = buffer_size
        self.legend = legend
        self.symlink = symlink
        self._clock = clock or (lambda: datetime.now().astimezone())

        self._lock = threading.Lock()
        self._file: Optional[BinaryIO] = None
        self._nbytes = 0
        self._state = SinkState.CLOSED
        self._fatal: Optional[FatalStorageError] = None
        self.path: Optional[str] = None
        self.paths: List[str] = []
        self._bytes_written = 0
        self._records_written = 0
        self._flushes = 0
        self._flush_errors = 0

        with self._lock:
            self._rotate(self._clock())

        self._daemon: Optional[FlushDaemon] = None
        if flush_interval:
            self._daemon = FlushDaemon(self.flush, flush_interval, name=f"logpipe-flush-{self.program}.{tag}")
            self._daemon.start()

    def __repr__(self) -> str:
        return f"RotatingFileSink(path={self.path!r}, state={self._state.value})"

    def __enter__(self) -> "RotatingFileSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def state(self) -> SinkState:
        return self._state

    def write(self, data: bytes) -> None:
        """Append one record, rotating first if it would reach ``max_size``.

        Raises:
            SinkClosedError: the sink was closed.
            FatalStorageError: the data cannot be persisted.
        """
        with self._lock:
            self._check_writable()
            if self._nbytes + len(data) >= self.max_size:
                self._rotate(self._clock())
            try:
                self._file.write(data)
            except OSError as e:
                self._fail(f"log: write to {self.path} failed: {e}", e)
            self._nbytes += len(data)
            self._bytes_written += len(data)
            self._records_written += 1

    def rotate(self, now: Optional[datetime] = None) -> str:
        """Start a new file now; returns its path."""
        with self._lock:
            self._check_writable()
            self._rotate(now or self._clock())
            return self.path

    def flush(self) -> None:
        """Push buffered data to the OS and request a durability sync.

        Best effort: failures are logged and counted, never raised.
        """
        with self._lock:
            self._flush_all()

    sync = flush

    def close(self) -> None:
        """Stop the flush daemon, flush one last time and close the file."""
        if self._daemon is not None:
            self._daemon.stop()
        with self._lock:
            if self._state is SinkState.CLOSED:
                return
            self._flush_all()
            self._close_file()
            if self._state is SinkState.OPEN:
                self._state = SinkState.CLOSED
            logger.debug("Closed log sink {path}", path=self.path)

    def stats(self) -> SinkStats:
        with self._lock:
            return SinkStats(
                state=self._state.value,
                path=self.path,
                files_opened=len(self.paths),
                bytes_in_file=self._nbytes,
                bytes_written=self._bytes_written,
                records_written=self._records_written,
                flushes=self._flushes,
                flush_errors=self._flush_errors,
            )

    # -- internals, self._lock held --

    def _check_writable(self) -> None:
        if self._state is SinkState.FAILED:
            # The stored error keeps only the traceback of the original failure.
            raise FatalStorageError(str(self._fatal), path=self._fatal.path) from self._fatal
        if self._state is SinkState.CLOSED:
            raise SinkClosedError(f"log sink {self.path} is closed")

    def _rotate(self, now: datetime) -> None:
        with timed("rotate", tag=self.tag):
            if self._file is not None:
                self._flush_all()
                self._close_file()
            try:
                path, raw = create_log_file(self.log_dirs, self.program, self.tag, now, symlink=self.symlink)
            except OSError as e:
                self._fail(f"log: rotation failed: {e}", e)
            self._file = io.BufferedWriter(raw, buffer_size=self.buffer_size)
            self.path = path
            self.paths.append(path)
            self._nbytes = 0
            self._state = SinkState.OPEN

            header = build_header(now, self.legend)
            try:
                self._file.write(header)
                self._file.flush()
            except OSError as e:
                self._fail(f"log: writing header to {path} failed: {e}", e)
            self._nbytes += len(header)
        logger.info("Rotated log file to {path}", path=path)

    def _flush_all(self) -> None:
        if self._file is None or self._file.closed:
            return
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
            self._flushes += 1
        except OSError as e:
            self._flush_errors += 1
            logger.warning("Flushing {path} failed: {error}", path=self.path, error=e)

    def _close_file(self) -> None:
        f, self._file = self._file, None
        if f is None:
            return
        try:
            f.close()
        except OSError as e:
            logger.warning("Closing {path} failed: {error}", path=self.path, error=e)

    def _fail(self, message: str, cause: OSError) -> None:
        """Flush what can be flushed, then raise the fatal error."""
        self._flush_all()
        self._state = SinkState.FAILED
        self._fatal = FatalStorageError(message, path=self.path)
        logger.error(message)
        raise self._fatal from cause
