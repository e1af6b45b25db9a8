"""Authentication helpers for Gmail API."""

from __future__ import annotations

import logging

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import Resource, build

from .constants import CONFIG_DIR, CREDENTIALS_PATH, SCOPES, TOKEN_PATH
from .display import console

logger = logging.getLogger(__name__)


def _load_token() -> Credentials | None:
    if not TOKEN_PATH.exists():
        return None
    try:
        return Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES)
    except ValueError as exc:
        logger.warning("Ignoring unreadable token %s: %s", TOKEN_PATH, exc)
        return None


def get_gmail_service() -> Resource:
    """Return an authenticated Gmail API service object.

    Uses the cached token at TOKEN_PATH, refreshing it when expired.
    Without a usable token the OAuth browser flow is launched, which needs
    the client secrets at CREDENTIALS_PATH.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    creds = _load_token()

    if creds and creds.expired and creds.refresh_token:
        logger.debug("Refreshing expired token")
        creds.refresh(Request())
    elif not creds or not creds.valid:
        if not CREDENTIALS_PATH.exists():
            raise FileNotFoundError(
                f"Credentials file not found at {CREDENTIALS_PATH}.\n"
                "Create an OAuth client (Desktop app) in the Google Cloud Console, "
                "enable the Gmail API and save the client secrets as:\n"
                f"  {CREDENTIALS_PATH}"
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_PATH), SCOPES)
        creds = flow.run_local_server(port=0)

    TOKEN_PATH.write_text(creds.to_json())

    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def check_auth() -> bool:
    """Return True when the Gmail API is reachable with the stored credentials."""
    try:
        service = get_gmail_service()
        profile = service.users().getProfile(userId="me").execute()
    except FileNotFoundError as exc:
        console.print(f"[red]Authentication failed:[/red] {exc}")
        return False
    except Exception as exc:  # noqa: BLE001
        logger.debug("Authentication check failed", exc_info=True)
        console.print(f"[red]Authentication failed:[/red] {exc}")
        return False

    console.print(f"[green]Authenticated as {profile['emailAddress']}[/green]")
    return True
