"""Data models for the activity module."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ContentItem:
    """A published content item (post).

    Attributes:
        title: Item title as plain text.
        url: Permalink to the item.
        author: Display name of the author.
    """

    title: str
    url: str
    author: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"title": self.title, "url": self.url, "author": self.author}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentItem":
        """Deserialize from dictionary."""
        return cls(
            title=data.get("title", ""),
            url=data.get("url", ""),
            author=data.get("author", ""),
        )


@dataclass(frozen=True)
class Comment:
    """An approved comment.

    Attributes:
        author_name: Name the commenter left.
        parent_item_title: Title of the item the comment belongs to.
        url: Permalink to the comment.
    """

    author_name: str
    parent_item_title: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "author_name": self.author_name,
            "parent_item_title": self.parent_item_title,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        """Deserialize from dictionary."""
        return cls(
            author_name=data.get("author_name", ""),
            parent_item_title=data.get("parent_item_title", ""),
            url=data.get("url", ""),
        )


@dataclass(frozen=True)
class Account:
    """A newly registered user account."""

    display_name: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"display_name": self.display_name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        """Deserialize from dictionary."""
        return cls(
            display_name=data.get("display_name", ""),
            email=data.get("email", ""),
        )


@dataclass(frozen=True)
class ActivityWindow:
    """Sliding time window a summary covers.

    Attributes:
        start: Inclusive lower bound.
        end: Inclusive upper bound, the evaluation time.
        label: Human-readable period, e.g. "Last 7 Days".
    """

    start: datetime
    end: datetime
    label: str

    def contains(self, moment: datetime) -> bool:
        """Check if ``moment`` falls inside ``[start, end]``."""
        return self.start <= moment <= self.end

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "label": self.label,
        }


@dataclass(frozen=True)
class ActivityReport:
    """Everything that happened on the site during one window.

    Attributes:
        period: The window the report covers.
        new_items: Content items published in the window.
        new_comments: Comments approved in the window.
        new_accounts: Accounts registered in the window.
        site_name: Name of the site the report is about.
    """

    period: ActivityWindow
    new_items: tuple[ContentItem, ...] = field(default_factory=tuple)
    new_comments: tuple[Comment, ...] = field(default_factory=tuple)
    new_accounts: tuple[Account, ...] = field(default_factory=tuple)
    site_name: str = ""

    @property
    def total(self) -> int:
        """Number of new entities across all categories."""
        return len(self.new_items) + len(self.new_comments) + len(self.new_accounts)

    @property
    def is_empty(self) -> bool:
        """Check if nothing happened during the window."""
        return self.total == 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "period": self.period.to_dict(),
            "new_items": [i.to_dict() for i in self.new_items],
            "new_comments": [c.to_dict() for c in self.new_comments],
            "new_accounts": [a.to_dict() for a in self.new_accounts],
            "site_name": self.site_name,
        }
