# logpipe/errors.py
"""Exception hierarchy for the logging pipeline."""

from __future__ import annotations

from typing import List, Optional


class LogPipeError(Exception):
    """Base exception for pipeline failures."""


class ConfigurationError(LogPipeError):
    """Invalid setup: bad severity name, bad config value, bad template."""


class TemplateError(ConfigurationError):
    """A format template references an unknown verb or an unusable option."""

    def __init__(self, message: str, template: str = "") -> None:
        self.template = template
        super().__init__(message)


class DispatchError(LogPipeError):
    """One or more backends failed to accept a record.

    Raised only after every registered backend had its turn.
    """

    def __init__(self, errors: List[BaseException]) -> None:
        self.errors = list(errors)
        summary = "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} backend(s) failed: {summary}")


class FatalStorageError(LogPipeError):
    """A sink can no longer persist data.

    Unrecoverable for the sink that raised it. The library never terminates
    the process; the host application decides what to do.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(message)


class SinkClosedError(LogPipeError):
    """Write attempted on a sink that was already closed."""
