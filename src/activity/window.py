"""Lookback window calculation."""

from datetime import datetime, timedelta

from src.settings.models import Frequency

from .models import ActivityWindow

LOOKBACKS = {
    Frequency.DAILY: timedelta(hours=24),
    Frequency.WEEKLY: timedelta(hours=7 * 24),
    Frequency.MONTHLY: timedelta(hours=30 * 24),
}

LABELS = {
    Frequency.DAILY: "Last 24 Hours",
    Frequency.WEEKLY: "Last 7 Days",
    Frequency.MONTHLY: "Last 30 Days",
}


def lookback(frequency: Frequency) -> timedelta:
    """Length of the window for ``frequency``."""
    return LOOKBACKS[frequency]


def window(frequency: Frequency, now: datetime) -> ActivityWindow:
    """Build the window ending at ``now``.

    The window slides with the evaluation time; it is not rounded to
    midnight.

    Example:
        >>> w = window(Frequency.WEEKLY, datetime(2024, 6, 10, 9, 0))
        >>> w.start, w.label
        (datetime.datetime(2024, 6, 3, 9, 0), 'Last 7 Days')
    """
    return ActivityWindow(
        start=now - LOOKBACKS[frequency],
        end=now,
        label=LABELS[frequency],
    )
