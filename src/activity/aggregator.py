"""ActivityAggregator - collects a window's activity from all sources."""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable

from .exceptions import SourceQueryError, SourceTimeoutError
from .models import ActivityReport, ActivityWindow
from .sources import AccountSource, CommentSource, ContentSource

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 30.0


class ActivityAggregator:
    """Queries content, comment and account sources for one window.

    The three queries are independent and read-only, so they run
    concurrently. The report is only built once all of them have
    answered; if any fails or times out, no report is produced.

    Example:
        aggregator = ActivityAggregator(posts, comments, users, timeout=10)
        report = aggregator.aggregate(window(Frequency.DAILY, now), "My Site")
        print(report.total)
    """

    def __init__(
        self,
        content_source: ContentSource,
        comment_source: CommentSource,
        account_source: AccountSource,
        timeout: float = DEFAULT_QUERY_TIMEOUT,
    ):
        """Initialize the ActivityAggregator.

        Args:
            content_source: Source of published content items.
            comment_source: Source of approved comments.
            account_source: Source of registered accounts.
            timeout: Seconds to wait for all three queries together.
        """
        self._content_source = content_source
        self._comment_source = comment_source
        self._account_source = account_source
        self._timeout = timeout

    def _queries(self, period: ActivityWindow) -> dict[str, Callable[[], list]]:
        start, end = period.start, period.end
        return {
            "content": lambda: self._content_source.query_published_since(start, end),
            "comments": lambda: self._comment_source.query_approved_since(start, end),
            "accounts": lambda: self._account_source.query_registered_since(start, end),
        }

    def _collect(self, name: str, future: Future) -> list:
        if not future.done():
            raise SourceTimeoutError(name, self._timeout)
        try:
            return list(future.result())
        except SourceQueryError:
            raise
        except Exception as e:
            raise SourceQueryError(name, str(e)) from e

    def aggregate(self, period: ActivityWindow, site_name: str = "") -> ActivityReport:
        """Build the activity report for ``period``.

        Args:
            period: Window to report on.
            site_name: Name shown in the report.

        Returns:
            ActivityReport with every matching entity from each source.

        Raises:
            SourceQueryError: If any source fails.
            SourceTimeoutError: If any source does not answer in time.
        """
        started = time.monotonic()
        queries = self._queries(period)
        executor = ThreadPoolExecutor(max_workers=len(queries), thread_name_prefix="activity-source")
        try:
            futures = {name: executor.submit(fn) for name, fn in queries.items()}
            wait(futures.values(), timeout=self._timeout)
            results = {name: self._collect(name, f) for name, f in futures.items()}
        finally:
            # Do not block on a hung query; its result is discarded
            executor.shutdown(wait=False, cancel_futures=True)

        report = ActivityReport(
            period=period,
            new_items=tuple(results["content"]),
            new_comments=tuple(results["comments"]),
            new_accounts=tuple(results["accounts"]),
            site_name=site_name,
        )
        logger.info(
            "Aggregated %s activity: %d items, %d comments, %d accounts (%.2fs)",
            period.label,
            len(report.new_items),
            len(report.new_comments),
            len(report.new_accounts),
            time.monotonic() - started,
        )
        return report
