"""SummaryJob - runs aggregate, render and dispatch for one fire."""

import logging
import os
import time
from datetime import datetime
from typing import Callable, Optional

from src.activity import (
    ActivityAggregator,
    ActivityReport,
    WordPressAccountSource,
    WordPressClient,
    WordPressCommentSource,
    WordPressContentSource,
    window,
)
from src.digest import Dispatcher, MessageBody, ReportRenderer
from src.settings import InvalidSettingsError, Settings

from .models import RunResult, StepResult

logger = logging.getLogger(__name__)

DEFAULT_SITE_NAME = "My Site"


def validate_settings(settings: Settings) -> None:
    """Check that a run can go ahead with ``settings``.

    Raises:
        InvalidSettingsError: If summaries are disabled or no recipient is set.
    """
    if not settings.enabled:
        raise InvalidSettingsError("summaries are disabled")
    if not settings.has_recipient:
        raise InvalidSettingsError("no recipient email address is configured")


class SummaryJob:
    """Builds and sends one activity summary.

    Steps run in order with per-step error isolation: a failing step is
    logged and recorded, later steps are marked skipped, and nothing is
    raised to the caller. An aggregation failure means no message is
    sent; there is no partial report.

    Example:
        result = SummaryJob(aggregator).run(settings, now)
        print(f"Sent: {result.sent}")
    """

    def __init__(
        self,
        aggregator: Optional[ActivityAggregator] = None,
        renderer: Optional[ReportRenderer] = None,
        dispatcher: Optional[Dispatcher] = None,
        site_name: Optional[str] = None,
    ):
        """Initialize the SummaryJob.

        Args:
            aggregator: Activity aggregator. Built from WP_* env vars if
                not provided.
            renderer: Report renderer.
            dispatcher: Summary dispatcher. Uses MAIL_TRANSPORT if not provided.
            site_name: Name shown in the summary. Defaults to SITE_NAME env var.
        """
        self._aggregator = aggregator
        self._renderer = renderer or ReportRenderer()
        self._dispatcher = dispatcher
        self._site_name = site_name or os.environ.get("SITE_NAME", DEFAULT_SITE_NAME)

    def _get_aggregator(self) -> ActivityAggregator:
        if self._aggregator is None:
            timeout = float(os.environ.get("SUMMARY_QUERY_TIMEOUT", "30"))
            client = WordPressClient(timeout=timeout)
            self._aggregator = ActivityAggregator(
                WordPressContentSource(client),
                WordPressCommentSource(client),
                WordPressAccountSource(client),
                timeout=timeout,
            )
        return self._aggregator

    def _get_dispatcher(self) -> Dispatcher:
        if self._dispatcher is None:
            self._dispatcher = Dispatcher(
                timeout=float(os.environ.get("SUMMARY_SEND_TIMEOUT", "30"))
            )
        return self._dispatcher

    @staticmethod
    def _skip_step(name: str) -> StepResult:
        """Record a step as skipped due to a prior failure."""
        return StepResult(
            name=name,
            success=False,
            duration_seconds=0.0,
            details={},
            skipped=True,
        )

    def _run_step(self, name: str, fn: Callable[[], dict]) -> StepResult:
        """Run a pipeline step with timing and error isolation."""
        start = time.monotonic()
        try:
            details = fn()
            return StepResult(
                name=name,
                success=True,
                duration_seconds=round(time.monotonic() - start, 2),
                details=details,
            )
        except Exception as e:
            logger.exception("Step '%s' failed", name)
            return StepResult(
                name=name,
                success=False,
                duration_seconds=round(time.monotonic() - start, 2),
                details={},
                error=str(e),
            )

    def run(self, settings: Settings, now: datetime) -> RunResult:
        """Execute one summary run.

        Steps:
            1. Aggregate activity over the window ending at ``now``
            2. Render the report
            3. Dispatch it to the configured recipient

        Args:
            settings: Settings snapshot taken at fire time.
            now: Evaluation time; the window ends here.

        Returns:
            RunResult with per-step metrics.
        """
        result = RunResult(started_at=now)

        try:
            validate_settings(settings)
        except InvalidSettingsError as e:
            logger.warning("Skipping summary run: %s", e.reason)
            result.skipped_reason = e.reason
            result.finished_at = datetime.now(now.tzinfo)
            return result

        period = window(settings.frequency, now)
        report: Optional[ActivityReport] = None
        body: Optional[MessageBody] = None

        def aggregate_step() -> dict:
            nonlocal report
            report = self._get_aggregator().aggregate(period, self._site_name)
            return {
                "window_start": period.start.isoformat(),
                "window_end": period.end.isoformat(),
                "items": len(report.new_items),
                "comments": len(report.new_comments),
                "accounts": len(report.new_accounts),
            }

        def render_step() -> dict:
            nonlocal body
            body = self._renderer.render(report)
            return {"subject": body.subject, "html_length": len(body.html)}

        def dispatch_step() -> dict:
            delivery = self._get_dispatcher().send(settings.recipient, body)
            return {"recipient": delivery.recipient, "message_id": delivery.message_id}

        steps = [
            ("aggregate", aggregate_step),
            ("render", render_step),
            ("dispatch", dispatch_step),
        ]
        for index, (name, fn) in enumerate(steps):
            step = self._run_step(name, fn)
            result.steps.append(step)
            if not step.success:
                result.steps.extend(self._skip_step(rest) for rest, _ in steps[index + 1:])
                break

        result.finished_at = datetime.now(now.tzinfo)
        if result.success:
            logger.info("Summary for %s sent to %s", period.label, settings.recipient)
        else:
            logger.error("Summary run for %s failed; schedule unchanged", period.label)
        return result
