from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 300.0


class PeriodicSweeper:
    """Runs a cleanup callable on a daemon thread at a fixed interval.

    The loop waits for the interval, runs the callable to completion and only
    then waits again, so ticks never overlap. ``stop()`` wakes the thread and
    joins it.
    """

    def __init__(
        self,
        sweep: Callable[[], object],
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        *,
        name: str = "archi-cache-sweeper",
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._sweep = sweep
        self._interval = interval_seconds
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name=self._name)
        self._thread.start()
        logger.debug("Started %s (every %.1fs)", self._name, self._interval)

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            logger.debug("Stopped %s", self._name)

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self._sweep()
            except Exception:
                logger.exception("Cache sweep failed")
