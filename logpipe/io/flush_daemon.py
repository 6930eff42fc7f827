# logpipe/io/flush_daemon.py
"""
Cancellable periodic flush task bound to one sink.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from loguru import logger


class FlushDaemon:
    """Calls ``flush`` every ``interval`` seconds until stopped.

    The thread is a daemon thread so it never keeps the interpreter alive, but
    owners are expected to call ``stop()`` and then flush one final time.
    """

    def __init__(self, flush: Callable[[], None], interval: float, *, name: str = "logpipe-flush"):
        if interval <= 0:
            raise ValueError(f"flush interval must be positive, got {interval}")
        self._flush = flush
        self.interval = interval
        self.name = name
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"{self.name} already started")
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Started {name} (every {interval}s)", name=self.name, interval=self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to exit and wait for it. Safe to call twice."""
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            logger.debug("Stopped {name}", name=self.name)

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            self._flush()
