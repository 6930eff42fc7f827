# logpipe/logger.py
"""
Per-module logger handles.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from logpipe.core.record import CallSite, Record
from logpipe.core.severity import Severity
from logpipe.dispatcher import Dispatcher, get_dispatcher


class Logger:
    """Builds records for ``module`` and hands them to a dispatcher.

    Messages use ``str.format`` placeholders: ``log.info("user {} joined", name)``.

    Args:
        module: Module name used for per-module filtering.
        dispatcher: Target dispatcher; the process-wide one (looked up on
            every call) when omitted.
        extra_depth: Extra frames to skip when capturing the call site, for
            wrappers around this logger.
    """

    def __init__(self, module: str, *, dispatcher: Optional[Dispatcher] = None, extra_depth: int = 0):
        self.module = module
        self.dispatcher = dispatcher
        self.extra_depth = extra_depth

    def __repr__(self) -> str:
        return f"Logger({self.module!r})"

    def is_enabled_for(self, severity: Severity) -> bool:
        return self._dispatcher().is_enabled_for(severity, self.module)

    def log(self, severity: Severity | str, msg: str, *args: Any) -> None:
        self._log(Severity.parse(severity), msg, args)

    def debug(self, msg: str, *args: Any) -> None:
        self._log(Severity.DEBUG, msg, args)

    def info(self, msg: str, *args: Any) -> None:
        self._log(Severity.INFO, msg, args)

    def notice(self, msg: str, *args: Any) -> None:
        self._log(Severity.NOTICE, msg, args)

    def warning(self, msg: str, *args: Any) -> None:
        self._log(Severity.WARNING, msg, args)

    def error(self, msg: str, *args: Any) -> None:
        self._log(Severity.ERROR, msg, args)

    def critical(self, msg: str, *args: Any) -> None:
        self._log(Severity.CRITICAL, msg, args)

    def _dispatcher(self) -> Dispatcher:
        return self.dispatcher if self.dispatcher is not None else get_dispatcher()

    def _log(self, severity: Severity, msg: str, args: Tuple[Any, ...]) -> None:
        # One backend set for the whole call, even if it is replaced meanwhile.
        backends = self._dispatcher().snapshot()
        if not backends.is_enabled_for(severity, self.module):
            return
        # Frames: 0 = _log, 1 = the public method, 2 = the caller.
        caller = CallSite.capture(2 + self.extra_depth) if backends.needs_caller else None
        record = Record(severity=severity, module=self.module, template=msg, args=args, caller=caller)
        backends.log(record)


def get_logger(module: str, *, dispatcher: Optional[Dispatcher] = None) -> Logger:
    """Return a logger handle for ``module``."""
    return Logger(module, dispatcher=dispatcher)
