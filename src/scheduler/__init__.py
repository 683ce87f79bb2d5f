"""Scheduler module for the recurring summary job.

Public API:
    ScheduleManager: Keeps the send_summary job in sync with settings.
    Ticker: Background thread that evaluates the schedule.
    Clock: Interface for time and the pending job registry.
    SystemClock: Wall-clock implementation with an in-memory registry.
    ScheduledJob: A pending job and its next fire time.
    SEND_SUMMARY_JOB: Name of the summary job.
"""

from .clock import Clock, SystemClock, local_now
from .models import SEND_SUMMARY_JOB, ScheduledJob
from .schedule_manager import (
    DEFAULT_ANCHOR,
    ScheduleManager,
    next_anchor_occurrence,
    next_fire_after,
)
from .ticker import MAX_TICK_SECONDS, Ticker

__all__ = [
    "ScheduleManager",
    "Ticker",
    "Clock",
    "SystemClock",
    "ScheduledJob",
    "SEND_SUMMARY_JOB",
    "DEFAULT_ANCHOR",
    "MAX_TICK_SECONDS",
    "local_now",
    "next_anchor_occurrence",
    "next_fire_after",
]
