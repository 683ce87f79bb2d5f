"""Activity source interfaces and in-memory implementations.

Each source answers one question about the window ``[start, end]``
(both bounds inclusive) and must return every match, draining whatever
pagination the backend uses.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Generic, Iterable, TypeVar

from .models import Account, Comment, ContentItem

T = TypeVar("T")

# A page of results and whether another page follows
Page = tuple[list[T], bool]


def drain_pages(fetch_page: Callable[[int], Page]) -> list[T]:
    """Collect every result from a 1-indexed paginated query.

    Stops when a page reports no successor or comes back empty.
    """
    results: list[T] = []
    page = 1
    while True:
        items, has_more = fetch_page(page)
        results.extend(items)
        if not has_more or not items:
            break
        page += 1
    return results


class ContentSource(ABC):
    """Interface for published content items."""

    name = "content"

    @abstractmethod
    def query_published_since(self, start: datetime, end: datetime) -> list[ContentItem]:
        """Return all items published within ``[start, end]``."""
        pass


class CommentSource(ABC):
    """Interface for approved comments."""

    name = "comments"

    @abstractmethod
    def query_approved_since(self, start: datetime, end: datetime) -> list[Comment]:
        """Return all approved comments created within ``[start, end]``."""
        pass


class AccountSource(ABC):
    """Interface for registered accounts."""

    name = "accounts"

    @abstractmethod
    def query_registered_since(self, start: datetime, end: datetime) -> list[Account]:
        """Return all accounts registered within ``[start, end]``."""
        pass


@dataclass(frozen=True)
class SourceRecord(Generic[T]):
    """An entity with the time it was created.

    Attributes:
        created_at: Publish, approval or registration time.
        item: The projected entity.
        visible: False for drafts and unapproved comments.
    """

    created_at: datetime
    item: T
    visible: bool = True


class _InMemorySource(Generic[T]):
    """Shared paging and filtering for the in-memory sources."""

    def __init__(self, records: Iterable[SourceRecord[T]] = (), page_size: int = 100):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._records = list(records)
        self._page_size = page_size

    def add(self, record: SourceRecord[T]) -> None:
        self._records.append(record)

    def _query(self, start: datetime, end: datetime) -> list[T]:
        matches = [
            r.item
            for r in self._records
            if r.visible and start <= r.created_at <= end
        ]

        def fetch_page(page: int) -> Page:
            offset = (page - 1) * self._page_size
            chunk = matches[offset:offset + self._page_size]
            return chunk, offset + self._page_size < len(matches)

        return drain_pages(fetch_page)


class InMemoryContentSource(_InMemorySource[ContentItem], ContentSource):
    """Content source backed by a list of records. Useful for testing."""

    def query_published_since(self, start: datetime, end: datetime) -> list[ContentItem]:
        return self._query(start, end)


class InMemoryCommentSource(_InMemorySource[Comment], CommentSource):
    """Comment source backed by a list of records. Useful for testing."""

    def query_approved_since(self, start: datetime, end: datetime) -> list[Comment]:
        return self._query(start, end)


class InMemoryAccountSource(_InMemorySource[Account], AccountSource):
    """Account source backed by a list of records. Useful for testing."""

    def query_registered_since(self, start: datetime, end: datetime) -> list[Account]:
        return self._query(start, end)
