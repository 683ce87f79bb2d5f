"""OAuth helper for sending summaries through the Gmail API."""

import os
from pathlib import Path
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import Resource, build

from .exceptions import NonInteractiveAuthError, ScopeMismatchError

# Sending is the only Gmail permission the summary needs
GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"

CONFIG_DIR = Path(__file__).parent.parent.parent / "config"


def _path_from_env(explicit: Optional[Path], env_var: str, default: Path) -> Path:
    if explicit:
        return explicit
    if os.environ.get(env_var):
        return Path(os.environ[env_var])
    return default


class GmailAuthenticator:
    """Loads, refreshes and stores the Gmail send token.

    The token is created through the installed-app OAuth flow the first
    time; afterwards it is refreshed silently. When running as a daemon
    set GMAIL_NON_INTERACTIVE=1 so a missing token fails fast instead of
    waiting for a browser.
    """

    def __init__(
        self,
        credentials_path: Optional[Path] = None,
        token_path: Optional[Path] = None,
        interactive: bool = True,
    ):
        """Initialize the authenticator.

        Args:
            credentials_path: OAuth client secrets file. Defaults to
                GMAIL_CREDENTIALS_PATH env var, or config/credentials.json.
            token_path: Where the send token is cached. Defaults to
                GMAIL_TOKEN_PATH env var, or config/gmail_send_token.json.
            interactive: If False, never open a browser for OAuth.
        """
        self._credentials_path = _path_from_env(
            credentials_path, "GMAIL_CREDENTIALS_PATH", CONFIG_DIR / "credentials.json"
        )
        self._token_path = _path_from_env(
            token_path, "GMAIL_TOKEN_PATH", CONFIG_DIR / "gmail_send_token.json"
        )
        self._scopes = [GMAIL_SEND_SCOPE]
        self._interactive = interactive and not os.environ.get("GMAIL_NON_INTERACTIVE")
        self._service: Optional[Resource] = None

    def _load_token(self) -> Optional[Credentials]:
        if not self._token_path.exists():
            return None
        creds = Credentials.from_authorized_user_file(str(self._token_path), self._scopes)
        granted = creds.granted_scopes or creds.scopes or []
        if GMAIL_SEND_SCOPE in granted:
            return creds
        if not self._interactive:
            raise ScopeMismatchError(required_scopes=self._scopes, token_scopes=list(granted))
        # Stale token for other scopes; authorize again
        self._token_path.unlink()
        return None

    def _authorize(self) -> Credentials:
        if not self._credentials_path.exists():
            raise FileNotFoundError(
                f"Credentials file not found at {self._credentials_path}. "
                "Download OAuth client credentials from Google Cloud Console."
            )
        flow = InstalledAppFlow.from_client_secrets_file(
            str(self._credentials_path), self._scopes
        )
        return flow.run_local_server(port=0)

    def get_credentials(self) -> Credentials:
        """Return valid credentials, refreshing or authorizing as needed.

        Raises:
            FileNotFoundError: If the client secrets file is missing.
            ScopeMismatchError: If the cached token lacks the send scope.
            NonInteractiveAuthError: If authorization needs a browser.
        """
        creds = self._load_token()
        if creds and creds.valid:
            return creds

        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        elif self._interactive:
            creds = self._authorize()
        else:
            raise NonInteractiveAuthError(
                "No valid token exists" if not creds else "Token expired without refresh token"
            )

        self._token_path.parent.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        return creds

    def get_service(self) -> Resource:
        """Get or create the Gmail API service (cached after the first call)."""
        if self._service is None:
            self._service = build("gmail", "v1", credentials=self.get_credentials())
        return self._service
