"""Exceptions for the activity module."""


class ActivityError(Exception):
    """Base exception for activity aggregation errors."""

    pass


class SourceQueryError(ActivityError):
    """Raised when one of the activity sources fails to answer."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Query against {source} source failed: {reason}")


class SourceTimeoutError(SourceQueryError):
    """Raised when a source does not answer within the query timeout."""

    def __init__(self, source: str, timeout: float):
        self.timeout = timeout
        super().__init__(source, f"no response within {timeout}s")
