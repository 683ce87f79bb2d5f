"""Clock interfaces holding the pending job registry."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from src.settings.models import Frequency

from .models import ScheduledJob

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    """Current server-local time as a timezone-aware datetime.

    The tzinfo is a fixed UTC offset, not a zone with DST rules. Fire
    times stepped from it keep that offset, so after a DST change the job
    runs at 08:00 or 10:00 wall-clock time until the process restarts and
    re-anchors on 09:00 under the new offset.
    """
    return datetime.now().astimezone()


class Clock(ABC):
    """Interface for the time source and its registry of pending jobs.

    Implementations must keep at most one pending job per name:
    ``schedule_at`` replaces any job already registered under the name.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time."""
        pass

    @abstractmethod
    def schedule_at(
        self, job_name: str, when: datetime, recurrence: Frequency
    ) -> ScheduledJob:
        """Register ``job_name`` to fire at ``when``, replacing any pending job.

        Args:
            job_name: Name of the job.
            when: Next fire time.
            recurrence: Recurrence rule for following fires.

        Returns:
            The registered job.
        """
        pass

    @abstractmethod
    def cancel(self, job_name: str) -> bool:
        """Clear the pending job, if any.

        Returns:
            True if a pending job was removed.
        """
        pass

    @abstractmethod
    def get_job(self, job_name: str) -> Optional[ScheduledJob]:
        """Return the pending job, or None."""
        pass

    def is_pending(self, job_name: str) -> bool:
        """Check if a job is registered under ``job_name``."""
        return self.get_job(job_name) is not None


class SystemClock(Clock):
    """Wall-clock time with an in-process job registry.

    The registry lives in memory, so a restart loses the pending job;
    ``ScheduleManager.reconcile`` recreates it on the next tick.
    """

    def __init__(self, now_fn: Optional[Callable[[], datetime]] = None):
        """Initialize the clock.

        Args:
            now_fn: Time source. Defaults to server-local time. Tests pass
                a fixed or steppable function.
        """
        self._now_fn = now_fn or local_now
        self._jobs: dict[str, ScheduledJob] = {}

    def now(self) -> datetime:
        return self._now_fn()

    def schedule_at(
        self, job_name: str, when: datetime, recurrence: Frequency
    ) -> ScheduledJob:
        job = ScheduledJob(name=job_name, next_fire_at=when, recurrence=recurrence)
        self._jobs[job_name] = job
        logger.debug("Scheduled %s at %s (%s)", job_name, when.isoformat(), recurrence.value)
        return job

    def cancel(self, job_name: str) -> bool:
        removed = self._jobs.pop(job_name, None) is not None
        if removed:
            logger.debug("Cleared pending job %s", job_name)
        return removed

    def get_job(self, job_name: str) -> Optional[ScheduledJob]:
        return self._jobs.get(job_name)

    def pending_jobs(self) -> list[ScheduledJob]:
        """Return every pending job, across all names."""
        return list(self._jobs.values())
