"""Ticker - background thread driving ScheduleManager evaluations."""

import logging
import threading
from typing import Optional

from .schedule_manager import ScheduleManager

logger = logging.getLogger(__name__)

# Upper bound on tick granularity, in seconds
MAX_TICK_SECONDS = 60.0


class Ticker:
    """Calls ``ScheduleManager.tick`` on a single background thread.

    Evaluations run one after another on the same thread, so a run never
    overlaps another evaluation of the job. Any exception from a tick is
    logged and the loop keeps going.
    """

    def __init__(self, manager: ScheduleManager, interval_seconds: float = MAX_TICK_SECONDS):
        """Initialize the Ticker.

        Args:
            manager: ScheduleManager to evaluate.
            interval_seconds: Seconds between ticks, capped at 60.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._manager = manager
        self._interval = min(interval_seconds, MAX_TICK_SECONDS)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick_once(self) -> bool:
        """Run one evaluation, never raising.

        Returns:
            True if the job fired.
        """
        try:
            return self._manager.tick()
        except Exception:
            logger.exception("Schedule evaluation failed")
            return False

    def _loop(self) -> None:
        logger.info("Ticker started (every %ss)", self._interval)
        while not self._stop.is_set():
            self.tick_once()
            self._stop.wait(self._interval)
        logger.info("Ticker stopped")

    def start(self) -> None:
        """Start the background thread. No-op if already running."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="summary-ticker", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the thread to stop and wait for the current tick to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_forever(self) -> None:
        """Run the loop on the calling thread until ``stop`` is called."""
        self._stop.clear()
        try:
            self._loop()
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
            self._stop.set()
