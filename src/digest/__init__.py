"""Digest module for rendering and delivering activity summaries.

Public API:
    ReportRenderer: Turns an ActivityReport into a MessageBody.
    Dispatcher: Hands a MessageBody to the mail transport once.
    MailTransport: Transport interface.
    GmailTransport: Sends through the Gmail API.
    SmtpTransport: Sends through an SMTP relay.
    GmailAuthenticator: OAuth helper for the Gmail send scope.
    MessageBody: Rendered subject, HTML and text.
    DeliveryResult: Result of a dispatch.
    DigestError: Base exception for module errors.
    DispatchError: Raised when delivery fails.
    DispatchTimeoutError: Raised when delivery times out.
"""

from .dispatcher import Dispatcher
from .exceptions import (
    AuthenticationError,
    DigestError,
    DispatchError,
    DispatchTimeoutError,
    NonInteractiveAuthError,
    ScopeMismatchError,
)
from .gmail_auth import GmailAuthenticator
from .models import DeliveryResult, MessageBody
from .renderer import NO_COMMENTS, NO_POSTS, NO_USERS, ReportRenderer
from .transports import GmailTransport, MailTransport, SmtpTransport, transport_from_env

__all__ = [
    "ReportRenderer",
    "Dispatcher",
    "MailTransport",
    "GmailTransport",
    "SmtpTransport",
    "transport_from_env",
    "GmailAuthenticator",
    "MessageBody",
    "DeliveryResult",
    "NO_POSTS",
    "NO_COMMENTS",
    "NO_USERS",
    "DigestError",
    "DispatchError",
    "DispatchTimeoutError",
    "AuthenticationError",
    "ScopeMismatchError",
    "NonInteractiveAuthError",
]
