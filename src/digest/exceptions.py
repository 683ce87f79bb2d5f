"""Exceptions for the digest module."""


class DigestError(Exception):
    """Base exception for digest errors."""

    pass


class DispatchError(DigestError):
    """Raised when the mail transport fails to accept the summary."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to dispatch summary: {reason}")


class DispatchTimeoutError(DispatchError):
    """Raised when the mail transport does not answer in time."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"mail transport did not answer within {timeout}s")


class AuthenticationError(DigestError):
    """Raised when Gmail authentication fails."""

    pass


class ScopeMismatchError(AuthenticationError):
    """Raised when token scopes don't match required scopes.

    This typically happens when the code requests different scopes
    than what the existing token was authorized for.
    """

    def __init__(self, required_scopes: list[str], token_scopes: list[str]):
        self.required_scopes = required_scopes
        self.token_scopes = token_scopes
        missing = set(required_scopes) - set(token_scopes)
        super().__init__(
            f"Token scopes mismatch. Missing scopes: {missing}. "
            f"Required: {required_scopes}, Token has: {token_scopes}. "
            "Delete the token file and re-authenticate with correct scopes."
        )


class NonInteractiveAuthError(AuthenticationError):
    """Raised when authentication requires user interaction but running in non-interactive mode."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"Authentication requires user interaction but GMAIL_NON_INTERACTIVE=1 is set. "
            f"Reason: {reason}. "
            "Either run on a machine with a browser to re-authenticate, or update the stored token."
        )
