# logpipe/io/stream_sink.py
"""
Sink over an already-open writable stream (stderr, a pipe, a BytesIO...).
"""

from __future__ import annotations

import threading
from typing import IO, Any

from logpipe.errors import SinkClosedError


class StreamSink:
    """Writes rendered records to ``stream``.

    Text streams are written through their binary ``buffer`` when they have
    one, otherwise the bytes are decoded as UTF-8. Each ``write`` holds a lock
    so concurrent records are never interleaved. Errors from the stream
    propagate to the caller, and writing after ``close()`` raises
    SinkClosedError.

    Args:
        stream: Binary or text stream.
        color: Render color verbs for this sink.
        close_stream: Close ``stream`` in ``close()``; off by default so that
            shared streams like stderr survive shutdown.
    """

    def __init__(self, stream: IO[Any], *, color: bool = False, close_stream: bool = False):
        self.stream = stream
        self.color = color
        self.close_stream = close_stream
        self._lock = threading.Lock()
        self._closed = False

    def __repr__(self) -> str:
        return f"StreamSink({getattr(self.stream, 'name', self.stream)!r})"

    def write(self, data: bytes) -> None:
        with self._lock:
            if self._closed:
                raise SinkClosedError(f"stream sink {self!r} is closed")
            target = getattr(self.stream, "buffer", None)
            if target is not None:
                # Keep ordering with anything already queued on the text layer.
                self.stream.flush()
                target.write(data)
                target.flush()
            elif _is_binary(self.stream):
                self.stream.write(data)
            else:
                self.stream.write(data.decode("utf-8", errors="replace"))

    def flush(self) -> None:
        with self._lock:
            if not self._closed:
                self.stream.flush()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.stream.flush()
            if self.close_stream:
                self.stream.close()


def _is_binary(stream: IO[Any]) -> bool:
    mode = getattr(stream, "mode", None)
    if isinstance(mode, str):
        return "b" in mode
    # io.BytesIO and friends have no mode; text streams carry an encoding.
    return getattr(stream, "encoding", None) is None and not hasattr(stream, "newlines")
