"""ScheduleManager - keeps the send_summary job in sync with settings."""

import logging
from datetime import datetime, time, timedelta
from typing import Any, Callable, Optional

from src.settings.models import Settings

from .clock import Clock
from .models import SEND_SUMMARY_JOB

logger = logging.getLogger(__name__)

# Summaries go out at 09:00 server time
DEFAULT_ANCHOR = time(9, 0)

SummaryRunner = Callable[[Settings, datetime], Any]


def next_anchor_occurrence(now: datetime, anchor: time = DEFAULT_ANCHOR) -> datetime:
    """Return the first ``anchor`` time of day at or after ``now``.

    The result keeps ``now``'s timezone.
    """
    candidate = now.replace(
        hour=anchor.hour, minute=anchor.minute, second=0, microsecond=0
    )
    if candidate < now:
        candidate += timedelta(days=1)
    return candidate


def next_fire_after(previous: datetime, interval: timedelta, now: datetime) -> datetime:
    """Step ``previous`` forward by whole intervals until it is after ``now``.

    Keeping fire times on the original anchor avoids drift. Missed cycles
    are skipped, so a long outage produces one catch-up run, not a burst.
    """
    following = previous + interval
    if following <= now:
        missed = (now - previous) // interval
        following = previous + interval * (missed + 1)
    return following


class ScheduleManager:
    """Owns the single recurring ``send_summary`` job.

    The manager never keeps its own copy of the schedule: the pending job
    lives in the injected Clock, and settings are read through
    ``get_settings`` on every evaluation.

    Example:
        manager = ScheduleManager(clock, store.get, runner=job.run)
        manager.on_activate()
        manager.tick()  # called by the Ticker
    """

    def __init__(
        self,
        clock: Clock,
        get_settings: Callable[[], Settings],
        runner: Optional[SummaryRunner] = None,
        anchor: time = DEFAULT_ANCHOR,
        job_name: str = SEND_SUMMARY_JOB,
    ):
        """Initialize the ScheduleManager.

        Args:
            clock: Time source and pending job registry.
            get_settings: Returns the current settings snapshot.
            runner: Called with (settings, now) when the job fires.
            anchor: Time of day each cycle is anchored to.
            job_name: Registry name of the job.
        """
        self._clock = clock
        self._get_settings = get_settings
        self._runner = runner
        self._anchor = anchor
        self._job_name = job_name

    @property
    def job_name(self) -> str:
        return self._job_name

    def set_runner(self, runner: SummaryRunner) -> None:
        """Attach the callable invoked when the job fires."""
        self._runner = runner

    def next_fire_at(self) -> Optional[datetime]:
        """Return the pending fire time, or None if nothing is scheduled."""
        job = self._clock.get_job(self._job_name)
        return job.next_fire_at if job else None

    def _schedule(self, settings: Settings, now: datetime) -> None:
        when = next_anchor_occurrence(now, self._anchor)
        self._clock.schedule_at(self._job_name, when, settings.frequency)
        logger.info(
            "Scheduled %s summary for %s", settings.frequency.value, when.isoformat()
        )

    # -------------------- Lifecycle --------------------

    def on_activate(self, now: Optional[datetime] = None) -> None:
        """Schedule the job if it is enabled and not already pending."""
        settings = self._get_settings()
        if not settings.enabled:
            logger.info("Summary disabled, nothing to schedule on activation")
            return
        if self._clock.is_pending(self._job_name):
            return
        self._schedule(settings, now or self._clock.now())

    def on_deactivate(self) -> None:
        """Clear any pending job."""
        self._clock.cancel(self._job_name)
        logger.info("Cleared %s schedule on deactivation", self._job_name)

    def on_settings_changed(
        self,
        old: Optional[Settings],
        new: Settings,
        now: Optional[datetime] = None,
    ) -> None:
        """Reschedule when the frequency changes or settings are first written.

        The pending job is replaced, never accumulated, so repeating the
        same update leaves exactly one pending job.

        Args:
            old: Previous settings, or None on the first write.
            new: Settings just written.
            now: Evaluation time. Defaults to the clock's current time.
        """
        if old is not None and old.frequency == new.frequency:
            return
        self._clock.cancel(self._job_name)
        if new.enabled:
            self._schedule(new, now or self._clock.now())
        else:
            logger.info("Summary disabled, schedule cleared")

    def reconcile(self, now: datetime, settings: Optional[Settings] = None) -> None:
        """Bring the registry in line with the stored settings.

        Recreates a pending job lost to an external clear or a restart,
        clears the job while summaries are disabled, and reschedules a job
        whose recurrence no longer matches the stored frequency. The last
        case covers settings written by another process, whose store never
        notifies this manager.
        """
        settings = settings or self._get_settings()
        job = self._clock.get_job(self._job_name)
        pending = job is not None
        if settings.enabled and not pending:
            logger.warning("No pending %s job while enabled, rescheduling", self._job_name)
            self._schedule(settings, now)
        elif settings.enabled and job.recurrence != settings.frequency:
            logger.info(
                "Frequency changed from %s to %s, rescheduling %s",
                job.recurrence.value,
                settings.frequency.value,
                self._job_name,
            )
            self._clock.cancel(self._job_name)
            self._schedule(settings, now)
        elif not settings.enabled and pending:
            self._clock.cancel(self._job_name)
            logger.info("Summary disabled, cleared pending %s job", self._job_name)

    # -------------------- Evaluation --------------------

    def tick(self, now: Optional[datetime] = None) -> bool:
        """Evaluate the schedule once and fire the job if it is due.

        The following fire time is registered before the run starts, so a
        failing run never causes a second fire for the same due time.

        Args:
            now: Evaluation time. Defaults to the clock's current time.

        Returns:
            True if the job fired.
        """
        now = now or self._clock.now()
        settings = self._get_settings()
        self.reconcile(now, settings)

        job = self._clock.get_job(self._job_name)
        if job is None or not job.is_due(now):
            return False

        following = next_fire_after(job.next_fire_at, job.recurrence.interval, now)
        self._clock.schedule_at(self._job_name, following, job.recurrence)
        logger.info(
            "Firing %s (due %s), next run at %s",
            self._job_name,
            job.next_fire_at.isoformat(),
            following.isoformat(),
        )
        self._fire(settings, now)
        return True

    def _fire(self, settings: Settings, now: datetime) -> None:
        if not settings.enabled:
            logger.info("Summary disabled at fire time, skipping run")
            return
        if self._runner is None:
            logger.warning("No runner attached to %s, skipping run", self._job_name)
            return
        try:
            self._runner(settings, now)
        except Exception:
            logger.exception("Summary run failed at %s", now.isoformat())
