"""Data models for the scheduler module."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from src.settings.models import Frequency

# Name of the one recurring job this service owns
SEND_SUMMARY_JOB = "send_summary"


@dataclass(frozen=True)
class ScheduledJob:
    """A pending recurring job.

    Attributes:
        name: Job name. At most one pending job exists per name.
        next_fire_at: When the job is next due, or None if not scheduled.
        recurrence: Recurrence rule used to compute the following fire time.
    """

    name: str
    next_fire_at: Optional[datetime]
    recurrence: Frequency

    def is_due(self, now: datetime) -> bool:
        """Check if the job should fire at ``now``."""
        return self.next_fire_at is not None and self.next_fire_at <= now

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "next_fire_at": self.next_fire_at.isoformat() if self.next_fire_at else None,
            "recurrence": self.recurrence.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduledJob":
        """Deserialize from dictionary."""
        next_fire_at = None
        if data.get("next_fire_at"):
            next_fire_at = datetime.fromisoformat(data["next_fire_at"])
        return cls(
            name=data["name"],
            next_fire_at=next_fire_at,
            recurrence=Frequency.parse(data.get("recurrence")),
        )
