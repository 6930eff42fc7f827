# logpipe/backends/multi.py
"""
Ordered fan-out over several backends.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from loguru import logger

from logpipe.backends.base import Backend
from logpipe.core.record import Record
from logpipe.core.severity import Severity
from logpipe.errors import DispatchError, FatalStorageError


class MultiBackend:
    """Delivers each record to every backend, in registration order.

    A failing backend never prevents delivery to the ones after it. Failures
    are collected and raised once the fan-out is complete: the first
    FatalStorageError if any occurred, otherwise a DispatchError.
    """

    def __init__(self, backends: Iterable[Backend] = ()):
        self.backends: Tuple[Backend, ...] = tuple(backends)

    def __repr__(self) -> str:
        return f"MultiBackend({list(self.backends)!r})"

    def __len__(self) -> int:
        return len(self.backends)

    @property
    def needs_caller(self) -> bool:
        return any(b.needs_caller for b in self.backends)

    def is_enabled_for(self, severity: Severity, module: str) -> bool:
        return any(b.is_enabled_for(severity, module) for b in self.backends)

    def log(self, record: Record) -> None:
        errors: List[Exception] = []
        for backend in self.backends:
            try:
                backend.log(record)
            except Exception as e:
                logger.debug("Backend {backend!r} failed on record {id}: {error}", backend=backend, id=record.id, error=e)
                errors.append(e)
        _raise_collected(errors)

    def close(self) -> None:
        """Close every backend, then raise collected failures."""
        errors: List[Exception] = []
        for backend in self.backends:
            try:
                backend.close()
            except Exception as e:
                logger.warning("Closing backend {backend!r} failed: {error}", backend=backend, error=e)
                errors.append(e)
        _raise_collected(errors)


def _raise_collected(errors: List[Exception]) -> None:
    if not errors:
        return
    for e in errors:
        if isinstance(e, FatalStorageError):
            raise e
    raise DispatchError(errors)
