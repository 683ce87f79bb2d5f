"""Activity sources backed by the WordPress REST API."""

import logging
import os
from datetime import datetime, timedelta, timezone
from html import unescape
from typing import Any, Optional

import httpx

from .exceptions import SourceQueryError
from .models import Account, Comment, ContentItem
from .sources import (
    AccountSource,
    CommentSource,
    ContentSource,
    Page,
    drain_pages,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_TIMEOUT = 30.0

# The REST API treats after/before as exclusive and compares them with the
# site-local post_date/comment_date columns, not the GMT ones. Widen by the
# largest UTC offset plus a second and filter on the exact GMT timestamps
# client-side so both bounds are inclusive in any site timezone.
_BOUND_SLACK = timedelta(hours=14, seconds=1)


def _parse_gmt(value: Optional[str]) -> Optional[datetime]:
    """Parse a WordPress GMT timestamp into an aware UTC datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_utc(moment: datetime) -> datetime:
    """Convert to UTC; naive values are taken as server-local time."""
    return moment.astimezone(timezone.utc)


def _rendered(field: Any) -> str:
    """Extract plain text from a ``{"rendered": ...}`` field."""
    if isinstance(field, dict):
        field = field.get("rendered", "")
    return unescape(field or "").strip()


class WordPressClient:
    """Thin paginated client for the ``wp/v2`` REST namespace.

    Authenticates with an application password when credentials are
    configured; the users endpoint needs them to expose emails and
    registration dates.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        username: Optional[str] = None,
        app_password: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Site root URL. Defaults to WP_BASE_URL env var.
            username: Defaults to WP_USERNAME env var.
            app_password: Defaults to WP_APP_PASSWORD env var.
            page_size: Results per request (max 100). Defaults to
                WP_PAGE_SIZE env var, or 100.
            timeout: Per-request timeout in seconds.
            transport: Custom httpx transport (for testing).
        """
        base_url = base_url or os.environ.get("WP_BASE_URL", "")
        if not base_url:
            raise ValueError("WordPress base URL is not configured (set WP_BASE_URL)")
        username = username or os.environ.get("WP_USERNAME")
        app_password = app_password or os.environ.get("WP_APP_PASSWORD")
        if page_size is None:
            page_size = int(os.environ.get("WP_PAGE_SIZE", DEFAULT_PAGE_SIZE))
        self._page_size = max(1, min(page_size, DEFAULT_PAGE_SIZE))

        auth = (username, app_password) if username and app_password else None
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/wp-json/wp/v2",
            auth=auth,
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def fetch_page(self, endpoint: str, params: dict[str, Any], page: int) -> tuple[list[dict], int]:
        """Fetch one page from ``endpoint``.

        Returns:
            The decoded items and the total page count reported by the server.

        Raises:
            httpx.HTTPError: On transport failures and non-2xx responses.
        """
        response = self._client.get(
            endpoint, params={**params, "page": page, "per_page": self._page_size}
        )
        # WordPress answers 400 rest_post_invalid_page_number past the last page
        if response.status_code == 400 and page > 1:
            return [], page - 1
        response.raise_for_status()
        total_pages = int(response.headers.get("X-WP-TotalPages", "1") or 1)
        return response.json(), total_pages

    def fetch_all(self, endpoint: str, params: dict[str, Any]) -> list[dict]:
        """Fetch every page of ``endpoint``."""

        def fetch(page: int) -> Page:
            items, total_pages = self.fetch_page(endpoint, params, page)
            return items, page < total_pages

        return drain_pages(fetch)


class _WordPressSource:
    name = "wordpress"

    def __init__(self, client: WordPressClient):
        self._client = client

    def _window_params(self, start: datetime, end: datetime) -> dict[str, str]:
        return {
            "after": (_as_utc(start) - _BOUND_SLACK).isoformat(),
            "before": (_as_utc(end) + _BOUND_SLACK).isoformat(),
        }

    def _fetch(self, endpoint: str, params: dict[str, Any]) -> list[dict]:
        try:
            return self._client.fetch_all(endpoint, params)
        except httpx.HTTPError as e:
            raise SourceQueryError(self.name, str(e)) from e


class WordPressContentSource(_WordPressSource, ContentSource):
    """Published posts from ``/wp/v2/posts``."""

    name = ContentSource.name

    def query_published_since(self, start: datetime, end: datetime) -> list[ContentItem]:
        params = {
            **self._window_params(start, end),
            "status": "publish",
            "orderby": "date",
            "order": "asc",
            "_embed": "author",
        }
        lower, upper = _as_utc(start), _as_utc(end)
        items = []
        for post in self._fetch("/posts", params):
            published = _parse_gmt(post.get("date_gmt"))
            if published is None or not lower <= published <= upper:
                continue
            authors = post.get("_embedded", {}).get("author") or [{}]
            items.append(
                ContentItem(
                    title=_rendered(post.get("title")),
                    url=post.get("link", ""),
                    author=authors[0].get("name", ""),
                )
            )
        logger.debug("WordPress returned %d published posts", len(items))
        return items


class WordPressCommentSource(_WordPressSource, CommentSource):
    """Approved comments from ``/wp/v2/comments``."""

    name = CommentSource.name

    def query_approved_since(self, start: datetime, end: datetime) -> list[Comment]:
        params = {
            **self._window_params(start, end),
            "status": "approve",
            "orderby": "date",
            "order": "asc",
            "_embed": "up",
        }
        lower, upper = _as_utc(start), _as_utc(end)
        comments = []
        for raw in self._fetch("/comments", params):
            created = _parse_gmt(raw.get("date_gmt"))
            if created is None or not lower <= created <= upper:
                continue
            parents = raw.get("_embedded", {}).get("up") or [{}]
            comments.append(
                Comment(
                    author_name=raw.get("author_name", ""),
                    parent_item_title=_rendered(parents[0].get("title")),
                    url=raw.get("link", ""),
                )
            )
        logger.debug("WordPress returned %d approved comments", len(comments))
        return comments


class WordPressAccountSource(_WordPressSource, AccountSource):
    """Registered users from ``/wp/v2/users``.

    The users endpoint has no date filter, so users are listed newest
    first and paging stops at the first page reaching past ``start``.
    """

    name = AccountSource.name

    def query_registered_since(self, start: datetime, end: datetime) -> list[Account]:
        params = {"context": "edit", "orderby": "registered_date", "order": "desc"}
        lower, upper = _as_utc(start), _as_utc(end)
        accounts = []
        page = 1
        try:
            while True:
                users, total_pages = self._client.fetch_page("/users", params, page)
                reached_older = False
                for user in users:
                    registered = _parse_gmt(user.get("registered_date"))
                    if registered is None:
                        continue
                    if registered < lower:
                        reached_older = True
                        continue
                    if registered <= upper:
                        accounts.append(
                            Account(display_name=user.get("name", ""), email=user.get("email", ""))
                        )
                if reached_older or not users or page >= total_pages:
                    break
                page += 1
        except httpx.HTTPError as e:
            raise SourceQueryError(self.name, str(e)) from e
        logger.debug("WordPress returned %d registered users", len(accounts))
        return accounts
