"""
Configuration for PrintPrep.

Flask reads the ``Config`` classes; services never touch ``app.config``
directly. create_app() builds the frozen ``PipelineSettings`` and
``IntegrationSettings`` once at startup and hands them to each service.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Tuple

from dotenv import load_dotenv

from core.exceptions import ConfigurationError

# Load .env file early so environment variables are available for Config class
# This must happen before the Config class is defined
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent

# Units accepted for border_size. Geometry is always "border inside the canvas".
BORDER_UNITS = ("mm", "px")

# Fewer than 3x loses too much detail on A-series paper.
MIN_PDF_RENDER_SCALE = 3.0


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 25 * 1024 * 1024))  # 25 MB bodies
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Debug mode
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"

    # ==========================================================================
    # Print pipeline
    # ==========================================================================
    # PRINT_DPI: resolution used to turn paper sizes (mm) into pixels.
    #   300 is the usual print standard; 600 gives 23.622 px per mm.
    #
    # BORDER_UNIT: unit of the border_size request field.
    #   "mm" - converted with round(mm * dpi / 25.4)
    #   "px" - used as raw pixels
    #   The border is always drawn INSIDE the paper canvas; the image is
    #   shrunk to make room for it.
    #
    # PDF_RENDER_SCALE: zoom used to rasterize the first PDF page (>= 3).
    # ==========================================================================
    PRINT_DPI = int(os.environ.get("PRINT_DPI", "300"))
    BORDER_UNIT = os.environ.get("BORDER_UNIT", "mm")
    MAX_BORDER_SIZE = float(os.environ.get("MAX_BORDER_SIZE", "100"))
    PDF_RENDER_SCALE = float(os.environ.get("PDF_RENDER_SCALE", "3"))

    # ==========================================================================
    # External collaborators
    # ==========================================================================
    GOOGLE_CREDENTIALS_FILE = os.environ.get(
        "GOOGLE_CREDENTIALS_FILE", str(BASE_DIR / "keys.json")
    )
    PENDING_FOLDER_ID = os.environ.get("PENDING_FOLDER_ID", "")
    CONFIRMED_FOLDER_ID = os.environ.get("CONFIRMED_FOLDER_ID", "")
    LEDGER_SPREADSHEET_ID = os.environ.get("LEDGER_SPREADSHEET_ID", "")
    LEDGER_RANGE = os.environ.get("LEDGER_RANGE", "Sheet1!A:J")
    # Re-confirming an order appends a second ledger row unless this is set.
    LEDGER_SKIP_DUPLICATES = _env_flag("LEDGER_SKIP_DUPLICATES")

    COMMERCE_BASE_URL = os.environ.get("COMMERCE_BASE_URL", "")
    COMMERCE_CONSUMER_KEY = os.environ.get("COMMERCE_CONSUMER_KEY", "")
    COMMERCE_CONSUMER_SECRET = os.environ.get("COMMERCE_CONSUMER_SECRET", "")

    SMTP_HOST = os.environ.get("SMTP_HOST", "")
    SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
    SMTP_USERNAME = os.environ.get("SMTP_USERNAME", "")
    SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
    SMTP_USE_TLS = _env_flag("SMTP_USE_TLS", "1")
    MAIL_FROM = os.environ.get("MAIL_FROM", "")

    # Applies to every storage, ledger, commerce and mail call.
    UPSTREAM_TIMEOUT_SECONDS = float(os.environ.get("UPSTREAM_TIMEOUT_SECONDS", "30"))


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration (low DPI keeps generated canvases small)."""
    DEBUG = False
    TESTING = True
    PRINT_DPI = 30
    PENDING_FOLDER_ID = "pending-folder"
    CONFIRMED_FOLDER_ID = "confirmed-folder"
    LEDGER_SPREADSHEET_ID = "ledger-sheet"
    LEDGER_SKIP_DUPLICATES = False


# =============================================================================
# IMMUTABLE SETTINGS
# =============================================================================

@dataclass(frozen=True)
class PipelineSettings:
    """
    Read-only settings for the print-preparation pipeline.

    Built once in create_app() and shared by every request. Frozen, so
    concurrent requests can read it without locking.
    """

    dpi: int = 300
    border_unit: str = "mm"
    max_border_size: float = 100.0
    pdf_render_scale: float = 3.0

    def __post_init__(self):
        if self.dpi <= 0:
            raise ConfigurationError("PRINT_DPI", f"must be positive, got {self.dpi}")
        if self.border_unit not in BORDER_UNITS:
            raise ConfigurationError(
                "BORDER_UNIT", f"must be one of {', '.join(BORDER_UNITS)}, got {self.border_unit!r}"
            )
        if self.max_border_size < 0:
            raise ConfigurationError("MAX_BORDER_SIZE", "must not be negative")
        if self.pdf_render_scale < MIN_PDF_RENDER_SCALE:
            raise ConfigurationError(
                "PDF_RENDER_SCALE", f"must be at least {MIN_PDF_RENDER_SCALE:g}, got {self.pdf_render_scale}"
            )

    @property
    def pixels_per_mm(self) -> float:
        return self.dpi / 25.4

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PipelineSettings":
        """Create from a Flask config mapping."""
        return cls(
            dpi=int(config.get("PRINT_DPI", 300)),
            border_unit=str(config.get("BORDER_UNIT", "mm")).strip().lower(),
            max_border_size=float(config.get("MAX_BORDER_SIZE", 100)),
            pdf_render_scale=float(config.get("PDF_RENDER_SCALE", 3)),
        )


@dataclass(frozen=True)
class IntegrationSettings:
    """Read-only identifiers and credentials for the external collaborators."""

    credentials_file: str = ""
    pending_folder_id: str = ""
    confirmed_folder_id: str = ""
    ledger_spreadsheet_id: str = ""
    ledger_range: str = "Sheet1!A:J"
    ledger_skip_duplicates: bool = False
    commerce_base_url: str = ""
    commerce_consumer_key: str = ""
    commerce_consumer_secret: str = ""
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = ""
    timeout_seconds: float = 30.0

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ConfigurationError("UPSTREAM_TIMEOUT_SECONDS", "must be positive")

    def require(self, *names: str) -> None:
        """
        Fail fast if any named setting is empty.

        Raises:
            ConfigurationError: For the first missing setting
        """
        for name in names:
            if not getattr(self, name):
                raise ConfigurationError(name.upper(), "is required")

    @property
    def mail_enabled(self) -> bool:
        return bool(self.smtp_host and self.mail_from)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "IntegrationSettings":
        """Create from a Flask config mapping."""
        return cls(
            credentials_file=config.get("GOOGLE_CREDENTIALS_FILE", ""),
            pending_folder_id=config.get("PENDING_FOLDER_ID", ""),
            confirmed_folder_id=config.get("CONFIRMED_FOLDER_ID", ""),
            ledger_spreadsheet_id=config.get("LEDGER_SPREADSHEET_ID", ""),
            ledger_range=config.get("LEDGER_RANGE", "Sheet1!A:J"),
            ledger_skip_duplicates=bool(config.get("LEDGER_SKIP_DUPLICATES", False)),
            commerce_base_url=config.get("COMMERCE_BASE_URL", ""),
            commerce_consumer_key=config.get("COMMERCE_CONSUMER_KEY", ""),
            commerce_consumer_secret=config.get("COMMERCE_CONSUMER_SECRET", ""),
            smtp_host=config.get("SMTP_HOST", ""),
            smtp_port=int(config.get("SMTP_PORT", 587)),
            smtp_username=config.get("SMTP_USERNAME", ""),
            smtp_password=config.get("SMTP_PASSWORD", ""),
            smtp_use_tls=bool(config.get("SMTP_USE_TLS", True)),
            mail_from=config.get("MAIL_FROM", ""),
            timeout_seconds=float(config.get("UPSTREAM_TIMEOUT_SECONDS", 30)),
        )


def load_settings(config: Mapping[str, Any]) -> Tuple[PipelineSettings, IntegrationSettings]:
    """Build both settings objects from a config mapping."""
    return PipelineSettings.from_config(config), IntegrationSettings.from_config(config)
