"""
Core module for PrintPrep.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- drive_client: Google Drive artifact storage
- sheets_client: Google Sheets order ledger
- commerce_client: Storefront order lookup
- mailer: SMTP customer notifications
"""

from .exceptions import (
    PrintPrepError,
    ConfigurationError,
    ValidationError,
    GeometryError,
    DecodeError,
    InvalidPdfError,
    HeicDecodeError,
    PublishError,
    PartialPublishError,
    CommerceLookupError,
    ArtifactsNotFoundError,
    RelocationError,
    LedgerError,
    UpstreamTimeoutError,
)
from .drive_client import DriveStorageClient
from .sheets_client import SheetsLedgerClient
from .commerce_client import CommerceClient
from .mailer import SMTPMailer

__all__ = [
    "PrintPrepError",
    "ConfigurationError",
    "ValidationError",
    "GeometryError",
    "DecodeError",
    "InvalidPdfError",
    "HeicDecodeError",
    "PublishError",
    "PartialPublishError",
    "CommerceLookupError",
    "ArtifactsNotFoundError",
    "RelocationError",
    "LedgerError",
    "UpstreamTimeoutError",
    "DriveStorageClient",
    "SheetsLedgerClient",
    "CommerceClient",
    "SMTPMailer",
]
