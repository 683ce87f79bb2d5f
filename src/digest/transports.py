"""Mail transports the dispatcher can hand summaries to."""

import base64
import logging
import os
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from .exceptions import DispatchError
from .gmail_auth import GmailAuthenticator

logger = logging.getLogger(__name__)


def build_message(to: str, subject: str, html_body: str, text_body: str = "", sender: str = "") -> MIMEMultipart:
    """Build a multipart/alternative message with UTF-8 text and HTML parts."""
    message = MIMEMultipart("alternative")
    message["To"] = to
    message["Subject"] = subject
    if sender:
        message["From"] = sender
    if text_body:
        message.attach(MIMEText(text_body, "plain", "utf-8"))
    message.attach(MIMEText(html_body, "html", "utf-8"))
    return message


class MailTransport(ABC):
    """Interface for delivering one email."""

    @abstractmethod
    def send(self, to: str, subject: str, html_body: str, text_body: str = "") -> Optional[str]:
        """Send an email.

        Returns:
            Transport message ID, if the transport provides one.

        Raises:
            DispatchError: If the transport rejects the message.
        """
        pass


class GmailTransport(MailTransport):
    """Sends through the Gmail API as the authorized user."""

    def __init__(
        self,
        authenticator: Optional[GmailAuthenticator] = None,
        service: Optional[Resource] = None,
    ):
        """Initialize the transport.

        Args:
            authenticator: GmailAuthenticator with the send scope.
                Created with default paths if not provided.
            service: Pre-built Gmail API service. Overrides authenticator.
        """
        self._authenticator = authenticator
        self._service = service

    def _get_service(self) -> Resource:
        if self._service is None:
            if self._authenticator is None:
                self._authenticator = GmailAuthenticator()
            self._service = self._authenticator.get_service()
        return self._service

    def send(self, to: str, subject: str, html_body: str, text_body: str = "") -> Optional[str]:
        message = build_message(to, subject, html_body, text_body)
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode()
        try:
            result = (
                self._get_service()
                .users()
                .messages()
                .send(userId="me", body={"raw": raw})
                .execute()
            )
        except HttpError as e:
            raise DispatchError(str(e)) from e
        return result.get("id")


class SmtpTransport(MailTransport):
    """Sends through an SMTP relay with STARTTLS or implicit TLS."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_ssl: bool = False,
        timeout: float = 30.0,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender or username or ""
        self._use_ssl = use_ssl
        self._timeout = timeout

    @classmethod
    def from_env(cls) -> "SmtpTransport":
        """Build from SMTP_* environment variables.

        Environment variables:
            SMTP_HOST: Relay host (required).
            SMTP_PORT: Defaults to 587, or 465 with SMTP_USE_SSL.
            SMTP_USERNAME / SMTP_PASSWORD: Login credentials (optional).
            SMTP_FROM: From address. Defaults to SMTP_USERNAME.
            SMTP_USE_SSL: "1" for implicit TLS instead of STARTTLS.
        """
        host = os.environ.get("SMTP_HOST")
        if not host:
            raise ValueError("SMTP_HOST is not set")
        use_ssl = os.environ.get("SMTP_USE_SSL", "").lower() in ("1", "true", "yes")
        return cls(
            host=host,
            port=int(os.environ.get("SMTP_PORT", "465" if use_ssl else "587")),
            username=os.environ.get("SMTP_USERNAME"),
            password=os.environ.get("SMTP_PASSWORD"),
            sender=os.environ.get("SMTP_FROM"),
            use_ssl=use_ssl,
        )

    def _connect(self) -> smtplib.SMTP:
        if self._use_ssl:
            return smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout)
        server = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        server.starttls()
        return server

    def send(self, to: str, subject: str, html_body: str, text_body: str = "") -> Optional[str]:
        message = build_message(to, subject, html_body, text_body, sender=self._sender)
        try:
            with self._connect() as server:
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.sendmail(self._sender, [to], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchError(str(e)) from e
        logger.debug("SMTP relay %s accepted message for %s", self._host, to)
        return None


def transport_from_env() -> MailTransport:
    """Pick the transport named by MAIL_TRANSPORT (gmail or smtp)."""
    kind = os.environ.get("MAIL_TRANSPORT", "gmail").lower()
    if kind == "smtp":
        return SmtpTransport.from_env()
    if kind == "gmail":
        return GmailTransport()
    raise ValueError(f"Unknown MAIL_TRANSPORT '{kind}' (expected gmail or smtp)")
