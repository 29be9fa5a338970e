"""Google account login for spreadsheet sync.

The spreadsheet is found by title through Drive, so the cached token must
carry the drive.file scope as well as spreadsheets. A token saved by an
older, sheets-only login is thrown away and the browser login runs again.
"""

import logging
from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]
TOKEN_FILE = "sheets_token.json"
CLIENT_SECRETS_FILE = "credentials.json"


def load_token(token_path: Path):
    """Cached credentials, or None when missing or granted too few scopes."""
    if not token_path.exists():
        return None

    creds = Credentials.from_authorized_user_file(str(token_path))
    if not creds.has_scopes(SCOPES):
        logger.warning(f"Cached Google token {token_path} lacks Sheets/Drive access, signing in again")
        return None
    return creds


def get_credentials(config_dir: Path) -> Credentials:
    """Get, refresh, or interactively obtain Sheets and Drive credentials."""
    token_path = config_dir / TOKEN_FILE
    credentials_path = config_dir / CLIENT_SECRETS_FILE

    creds = load_token(token_path)
    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        logger.info("Refreshing expired Google credentials")
        creds.refresh(Request())
    else:
        if not credentials_path.exists():
            raise ConfigurationError(
                f"Credentials file not found: {credentials_path}. "
                "Download an OAuth client credentials.json from Google Cloud Console."
            )
        logger.info("Starting OAuth flow for Google Sheets")
        flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
        creds = flow.run_local_server(port=0)

    config_dir.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json(), encoding="utf-8")
    logger.info(f"Saved Google credentials to {token_path}")
    return creds


def build_services(creds: Credentials):
    """Build the Sheets and Drive API clients for one session."""
    sheets = build("sheets", "v4", credentials=creds)
    drive = build("drive", "v3", credentials=creds)
    return sheets, drive
