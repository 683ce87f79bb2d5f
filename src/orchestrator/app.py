"""Composition root wiring settings, scheduler and the summary job."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.scheduler import Clock, ScheduleManager, SystemClock, Ticker
from src.settings import JsonFileSettingsStore, SettingsStore, settings_from_env

from .pipeline import SummaryJob

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """The running service: one clock, one store, one manager, one ticker."""

    clock: Clock
    store: SettingsStore
    manager: ScheduleManager
    ticker: Ticker
    job: SummaryJob

    def activate(self) -> None:
        """Schedule the job from the stored settings."""
        self.manager.on_activate()

    def deactivate(self) -> None:
        """Stop ticking and clear the pending job."""
        self.ticker.stop()
        self.manager.on_deactivate()

    def run_now(self):
        """Run the summary immediately, outside the schedule."""
        return self.job.run(self.store.get(), self.clock.now())


def build_application(
    settings_path: Optional[Path] = None,
    clock: Optional[Clock] = None,
    job: Optional[SummaryJob] = None,
    tick_seconds: Optional[float] = None,
) -> Application:
    """Build the service graph.

    The settings store gets the manager's change handler at construction,
    and the manager reads settings back through the store.

    Args:
        settings_path: Settings JSON file. Defaults to SUMMARY_SETTINGS_PATH.
        clock: Time source and job registry. Defaults to SystemClock.
        job: SummaryJob to run on each fire. Built from env if not provided.
        tick_seconds: Ticker period. Defaults to SUMMARY_TICK_SECONDS, or 60.
    """
    clock = clock or SystemClock()
    job = job or SummaryJob()
    if tick_seconds is None:
        tick_seconds = float(os.environ.get("SUMMARY_TICK_SECONDS", "60"))

    store: Optional[SettingsStore] = None

    def current_settings():
        return store.get()

    manager = ScheduleManager(clock, current_settings, runner=job.run)
    store = JsonFileSettingsStore(
        path=settings_path,
        defaults=settings_from_env(),
        on_change=manager.on_settings_changed,
    )
    ticker = Ticker(manager, interval_seconds=tick_seconds)
    logger.debug("Application built (settings at %s)", store.path)
    return Application(clock=clock, store=store, manager=manager, ticker=ticker, job=job)
