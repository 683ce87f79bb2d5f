"""Activity module for collecting recent site activity.

Public API:
    ActivityAggregator: Queries all sources for one window.
    window: Builds the lookback window for a frequency.
    ActivityWindow, ActivityReport: Window and report models.
    ContentItem, Comment, Account: Read-only entity projections.
    ContentSource, CommentSource, AccountSource: Source interfaces.
    InMemoryContentSource, InMemoryCommentSource, InMemoryAccountSource:
        List-backed sources.
    WordPressClient and WordPress*Source: REST API sources.
    ActivityError: Base exception for module errors.
    SourceQueryError: A source query failed.
    SourceTimeoutError: A source query timed out.
"""

from .aggregator import ActivityAggregator
from .exceptions import ActivityError, SourceQueryError, SourceTimeoutError
from .models import Account, ActivityReport, ActivityWindow, Comment, ContentItem
from .sources import (
    AccountSource,
    CommentSource,
    ContentSource,
    InMemoryAccountSource,
    InMemoryCommentSource,
    InMemoryContentSource,
    SourceRecord,
    drain_pages,
)
from .window import LABELS, LOOKBACKS, lookback, window
from .wordpress import (
    WordPressAccountSource,
    WordPressClient,
    WordPressCommentSource,
    WordPressContentSource,
)

__all__ = [
    "ActivityAggregator",
    "window",
    "lookback",
    "LOOKBACKS",
    "LABELS",
    "ActivityWindow",
    "ActivityReport",
    "ContentItem",
    "Comment",
    "Account",
    "ContentSource",
    "CommentSource",
    "AccountSource",
    "SourceRecord",
    "InMemoryContentSource",
    "InMemoryCommentSource",
    "InMemoryAccountSource",
    "drain_pages",
    "WordPressClient",
    "WordPressContentSource",
    "WordPressCommentSource",
    "WordPressAccountSource",
    "ActivityError",
    "SourceQueryError",
    "SourceTimeoutError",
]
