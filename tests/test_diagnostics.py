"""
Opting in to logpipe's own diagnostics.
"""
from __future__ import annotations

import io

from loguru import logger

from logpipe.dispatcher import Dispatcher
from logpipe.logging import configure_logging


def test_configure_logging_keeps_host_handlers() -> None:
    host = io.StringIO()
    ours = io.StringIO()
    host_id = logger.add(host, format="{message}")
    handler_id = configure_logging(debug=True, sink=ours)
    try:
        logger.info("host message")
        Dispatcher().set_backends()
    finally:
        logger.remove(handler_id)
        logger.remove(host_id)
        logger.disable("logpipe")
    assert "host message" in host.getvalue()
    assert "host message" not in ours.getvalue()
    assert "Registered 0 backend(s)" in ours.getvalue()


def test_configure_logging_twice() -> None:
    first = configure_logging(sink=io.StringIO())
    second = configure_logging(sink=io.StringIO())
    try:
        assert first != second
    finally:
        logger.remove(first)
        logger.remove(second)
        logger.disable("logpipe")
