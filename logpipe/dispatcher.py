# logpipe/dispatcher.py
"""
Process-wide log multiplexer.

A Dispatcher holds the active backend set. It starts empty (every record is
dropped) and is reconfigured by replacing the whole set with
``set_backends``; readers always see either the old set or the new one.
One default instance serves the process; loggers can be given another one.
"""

from __future__ import annotations

import threading

from loguru import logger

from logpipe.backends.base import Backend
from logpipe.backends.multi import MultiBackend
from logpipe.core.record import Record
from logpipe.core.severity import Severity


class Dispatcher:
    """Fans records out to the registered backends."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._backend = MultiBackend()

    def __repr__(self) -> str:
        return f"Dispatcher({list(self._backend.backends)!r})"

    @property
    def backends(self):
        return self._backend.backends

    def set_backends(self, *backends: Backend) -> MultiBackend:
        """Replace the active backend set. Returns the new fan-out."""
        multi = MultiBackend(backends)
        with self._lock:
            self._backend = multi
        logger.debug("Registered {n} backend(s)", n=len(multi))
        return multi

    def snapshot(self) -> MultiBackend:
        """The active backend set. Stays valid after a later ``set_backends``."""
        return self._backend

    def is_enabled_for(self, severity: Severity, module: str) -> bool:
        return self._backend.is_enabled_for(severity, module)

    @property
    def needs_caller(self) -> bool:
        return self._backend.needs_caller

    def log(self, record: Record) -> None:
        """Deliver ``record`` to every backend in registration order.

        Raises:
            FatalStorageError: a backend's storage failed irrecoverably.
            DispatchError: one or more backends failed otherwise.
        """
        self._backend.log(record)

    def shutdown(self) -> None:
        """Drop all backends and close them (final flush included)."""
        with self._lock:
            old, self._backend = self._backend, MultiBackend()
        old.close()


_default = Dispatcher()


def get_dispatcher() -> Dispatcher:
    """The process-wide default dispatcher."""
    return _default


def set_backends(*backends: Backend) -> MultiBackend:
    """Replace the backends of the default dispatcher."""
    return _default.set_backends(*backends)
