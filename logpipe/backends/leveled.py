# logpipe/backends/leveled.py
"""
Per-module severity filtering in front of another backend.
"""

from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Mapping, Union

from logpipe.backends.base import Backend
from logpipe.core.record import Record
from logpipe.core.severity import Severity

SeverityLike = Union[Severity, str, int]


class LeveledBackend:
    """Forwards a record only if its severity reaches the module's threshold.

    Thresholds are keyed by module pattern. A pattern matches a module equal to
    it or nested below it (``"db"`` matches ``"db"`` and ``"db.pool"``); the
    longest matching pattern wins, and ``""`` is the fallback for everything.
    The threshold map is replaced wholesale on every change, so readers never
    see a half-applied update.
    """

    def __init__(self, backend: Backend, level: SeverityLike = Severity.DEBUG):
        self.backend = backend
        self._lock = threading.Lock()
        self._levels: Mapping[str, Severity] = MappingProxyType({"": Severity.parse(level)})

    def __repr__(self) -> str:
        return f"LeveledBackend({self.backend!r}, levels={dict(self._levels)})"

    @property
    def levels(self) -> Mapping[str, Severity]:
        """Read-only snapshot of the configured thresholds."""
        return self._levels

    def set_level(self, level: SeverityLike, module: str = "") -> None:
        """Set the minimum severity for ``module`` (``""`` is the default)."""
        severity = Severity.parse(level)
        with self._lock:
            levels = dict(self._levels)
            levels[module] = severity
            self._levels = MappingProxyType(levels)

    def set_levels(self, levels: Mapping[str, SeverityLike]) -> None:
        """Replace all thresholds; a missing default falls back to DEBUG."""
        parsed = {module: Severity.parse(level) for module, level in levels.items()}
        parsed.setdefault("", Severity.DEBUG)
        with self._lock:
            self._levels = MappingProxyType(parsed)

    def get_level(self, module: str = "") -> Severity:
        """Effective threshold for ``module``."""
        levels = self._levels
        name = module
        while name:
            if name in levels:
                return levels[name]
            name = name.rpartition(".")[0]
        return levels.get("", Severity.DEBUG)

    def is_enabled_for(self, severity: Severity, module: str) -> bool:
        return severity >= self.get_level(module)

    accepts = is_enabled_for

    @property
    def needs_caller(self) -> bool:
        return self.backend.needs_caller

    def log(self, record: Record) -> None:
        if self.is_enabled_for(record.severity, record.module):
            self.backend.log(record)

    def close(self) -> None:
        self.backend.close()
