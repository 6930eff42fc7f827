# logpipe/core/severity.py
"""
Ordered log severities.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Union

from logpipe.errors import ConfigurationError


class Severity(IntEnum):
    """Log level, ordered DEBUG < INFO < NOTICE < WARNING < ERROR < CRITICAL."""

    DEBUG = 10
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @property
    def initial(self) -> str:
        """Single-letter tag used in compact line formats (D, I, N, W, E, C)."""
        return self.name[0]

    @classmethod
    def parse(cls, value: Union["Severity", str, int]) -> "Severity":
        """Resolve a severity from an instance, a name or a numeric value.

        Raises:
            ConfigurationError: if the value does not name a severity.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise ConfigurationError(f"Invalid severity value: {value!r}") from None
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "WARN":
                name = "WARNING"
            try:
                return cls[name]
            except KeyError:
                raise ConfigurationError(f"Invalid severity name: {value!r}") from None
        raise ConfigurationError(f"Invalid severity: {value!r}")
