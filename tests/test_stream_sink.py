"""
StreamSink over binary and text streams.
"""
from __future__ import annotations

import io

import pytest

from conftest import make_record
from logpipe.backends.formatting import FormattingBackend
from logpipe.core.severity import Severity
from logpipe.errors import SinkClosedError
from logpipe.formatting.formatter import Formatter
from logpipe.io.stream_sink import StreamSink


def test_binary_stream() -> None:
    buf = io.BytesIO()
    sink = StreamSink(buf)
    sink.write(b"one\n")
    sink.write(b"two\n")
    assert buf.getvalue() == b"one\ntwo\n"


def test_text_stream_without_buffer() -> None:
    buf = io.StringIO()
    StreamSink(buf).write("héllo\n".encode("utf-8"))
    assert buf.getvalue() == "héllo\n"


def test_text_wrapper_writes_through_buffer() -> None:
    raw = io.BytesIO()
    text = io.TextIOWrapper(raw, encoding="utf-8")
    text.write("first ")
    StreamSink(text).write(b"second\n")
    assert raw.getvalue() == b"first second\n"


def test_close_keeps_shared_stream_open() -> None:
    buf = io.BytesIO()
    StreamSink(buf).close()
    assert not buf.closed
    owned = io.BytesIO()
    sink = StreamSink(owned, close_stream=True)
    sink.close()
    sink.close()
    assert owned.closed


def test_color_sink_renders_escape_codes() -> None:
    buf = io.BytesIO()
    backend = FormattingBackend(StreamSink(buf, color=True), Formatter("%{color}%{level}%{color:reset}"))
    backend.log(make_record(Severity.WARNING))
    assert buf.getvalue() == b"\033[33mWARNING\033[0m\n"


def test_write_after_close_raises() -> None:
    buf = io.BytesIO()
    sink = StreamSink(buf)
    sink.write(b"kept\n")
    sink.close()
    with pytest.raises(SinkClosedError):
        sink.write(b"dropped\n")
    sink.flush()
    assert buf.getvalue() == b"kept\n"
