"""Data models for summary run results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass
class StepResult:
    """Result of a single pipeline step."""

    name: str
    success: bool
    duration_seconds: float
    details: dict[str, Any]
    error: str | None = None
    skipped: bool = False


@dataclass
class RunResult:
    """Aggregate result of one summary run.

    Attributes:
        started_at: When the run began (the evaluation time).
        finished_at: When the run ended.
        steps: Per-step results in execution order.
        skipped_reason: Set when the run was skipped before any step.
    """

    started_at: datetime
    finished_at: Optional[datetime] = None
    steps: list[StepResult] = field(default_factory=list)
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    @property
    def sent(self) -> bool:
        """Check if the dispatch step ran and succeeded."""
        return any(s.name == "dispatch" and s.success for s in self.steps)

    @property
    def success(self) -> bool:
        return not self.skipped and all(step.success for step in self.steps)

    def step(self, name: str) -> Optional[StepResult]:
        """Return the step named ``name``, if it ran or was skipped."""
        for s in self.steps:
            if s.name == name:
                return s
        return None
