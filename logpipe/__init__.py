"""
logpipe
=======

Leveled, template-formatted logging pipeline with multi-backend fan-out and a
buffered, size-rotating file sink flushed by a background daemon.
"""
from __future__ import annotations

from importlib.metadata import version as _pkg_version

import loguru

from logpipe.backends.formatting import FormattingBackend
from logpipe.backends.leveled import LeveledBackend
from logpipe.backends.multi import MultiBackend
from logpipe.core.record import Record, Sensitive, redact
from logpipe.core.severity import Severity
from logpipe.dispatcher import Dispatcher, get_dispatcher, set_backends
from logpipe.errors import (
    ConfigurationError,
    DispatchError,
    FatalStorageError,
    LogPipeError,
    SinkClosedError,
    TemplateError,
)
from logpipe.formatting.formatter import DEFAULT_TEMPLATE, GLOG_TEMPLATE, Formatter
from logpipe.io.rotating_file import RotatingFileSink
from logpipe.io.stream_sink import StreamSink
from logpipe.logger import Logger, get_logger

__all__ = [
    "__version__",
    "ConfigurationError",
    "DEFAULT_TEMPLATE",
    "DispatchError",
    "Dispatcher",
    "FatalStorageError",
    "Formatter",
    "FormattingBackend",
    "GLOG_TEMPLATE",
    "LeveledBackend",
    "LogPipeError",
    "Logger",
    "MultiBackend",
    "Record",
    "RotatingFileSink",
    "Sensitive",
    "Severity",
    "SinkClosedError",
    "StreamSink",
    "TemplateError",
    "get_dispatcher",
    "get_logger",
    "redact",
    "set_backends",
]

# Library code stays quiet until the host opts in via configure_logging().
loguru.logger.disable("logpipe")

try:
    # Read version dynamically from installed package metadata
    __version__: str = _pkg_version("logpipe")
except Exception:  # pragma: no cover - fallback for development environments
    __version__ = "0.0.0-dev"
