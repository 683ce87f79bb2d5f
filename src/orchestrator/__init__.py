"""Pipeline orchestrator for the activity summary.

Connects the ActivityAggregator, ReportRenderer and Dispatcher into a
single run with per-step error isolation, and wires that run into the
scheduler.
"""

from .app import Application, build_application
from .models import RunResult, StepResult
from .pipeline import SummaryJob, validate_settings

__all__ = [
    "Application",
    "build_application",
    "SummaryJob",
    "validate_settings",
    "RunResult",
    "StepResult",
]
