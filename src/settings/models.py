"""Data models for the settings module."""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any


class Frequency(Enum):
    """How often the activity summary is sent."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def interval(self) -> timedelta:
        """Recurrence interval. Monthly is a fixed 30 days, not a calendar month."""
        return _INTERVALS[self]

    @classmethod
    def parse(cls, value: Any) -> "Frequency":
        """Parse a stored frequency value, falling back to DAILY.

        Args:
            value: A Frequency, its string value, or None.

        Returns:
            The matching Frequency, or DAILY if unset or unknown.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.DAILY


_INTERVALS = {
    Frequency.DAILY: timedelta(days=1),
    Frequency.WEEKLY: timedelta(days=7),
    Frequency.MONTHLY: timedelta(days=30),
}


def _parse_enabled(value: Any) -> bool:
    """Accept the checkbox-style "1" as well as real booleans."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return False


@dataclass(frozen=True)
class Settings:
    """Snapshot of the summary configuration.

    Attributes:
        enabled: Whether summaries are sent at all.
        recipient: Email address the summary is delivered to.
        frequency: How often the summary is sent.
    """

    enabled: bool = False
    recipient: str = ""
    frequency: Frequency = Frequency.DAILY

    @property
    def has_recipient(self) -> bool:
        """Check if a non-blank recipient is configured."""
        return bool(self.recipient and self.recipient.strip())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary using the stored option keys."""
        return {
            "enabled": self.enabled,
            "email": self.recipient,
            "frequency": self.frequency.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """Deserialize from dictionary.

        Accepts both ``enabled`` and the legacy ``enable`` key, and both
        ``email`` and ``recipient`` for the address.
        """
        enabled = data.get("enabled", data.get("enable", False))
        recipient = data.get("email", data.get("recipient", "")) or ""
        return cls(
            enabled=_parse_enabled(enabled),
            recipient=str(recipient).strip(),
            frequency=Frequency.parse(data.get("frequency")),
        )
