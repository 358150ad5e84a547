"""
Google service-account plumbing shared by the Drive and Sheets clients.

httplib2 transports are not thread-safe, so clients ask ``GoogleSession``
for a fresh timeout-bounded ``AuthorizedHttp`` per call. A stalled Google
call then fails after the configured timeout instead of blocking the
request forever.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import httplib2
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build

from .exceptions import ConfigurationError

DRIVE_SCOPES = ("https://www.googleapis.com/auth/drive",)
SHEETS_SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)


def load_credentials(credentials_file: str, scopes: Sequence[str]):
    """
    Load service-account credentials from a JSON key file.

    Raises:
        ConfigurationError: If the key file is missing or unreadable
    """
    path = Path(credentials_file)
    if not path.exists():
        raise ConfigurationError("GOOGLE_CREDENTIALS_FILE", f"file not found: {path}")
    try:
        return service_account.Credentials.from_service_account_file(str(path), scopes=list(scopes))
    except ValueError as exc:
        raise ConfigurationError("GOOGLE_CREDENTIALS_FILE", f"invalid key file: {exc}")


class GoogleSession:
    """Discovery resource plus a per-call HTTP transport factory."""

    def __init__(self, api: str, version: str, credentials, timeout_seconds: float):
        self.credentials = credentials
        self.timeout_seconds = timeout_seconds
        self.service = build(api, version, http=self.new_http(), cache_discovery=False)

    def new_http(self) -> AuthorizedHttp:
        return AuthorizedHttp(self.credentials, http=httplib2.Http(timeout=self.timeout_seconds))

    @classmethod
    def from_service_account(cls, api: str, version: str, credentials_file: str,
                             scopes: Sequence[str], timeout_seconds: float) -> "GoogleSession":
        credentials = load_credentials(credentials_file, scopes)
        return cls(api, version, credentials, timeout_seconds)
