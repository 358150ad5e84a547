"""
PrintPrep - Flask Application Entry Point.

This is a slim app factory that:
1. Loads immutable pipeline and integration settings (fail-fast)
2. Builds the storage, ledger, commerce and mail clients
3. Creates the print and confirmation services
4. Registers route blueprints
5. Sets up CORS and JSON error handlers

ARCHITECTURE:
    Request threads (Flask)
    ├── /add-border    -> PrintService -> ArtifactPublisher -> Drive
    └── /confirm-order -> OrderConfirmationService -> Commerce, Drive, Sheets, SMTP

Services are built once and shared. They hold only frozen settings and
clients; every image buffer lives in a single request's scope.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from logging_config import setup_logging, get_logger
from config import load_settings
from core.commerce_client import CommerceClient
from core.drive_client import DriveStorageClient
from core.exceptions import ConfigurationError, PrintPrepError
from core.mailer import SMTPMailer
from core.sheets_client import SheetsLedgerClient
from services.artifact_publisher import ArtifactPublisher
from services.confirmation_service import OrderConfirmationService
from services.print_service import PrintService
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _get_base_path() -> Path:
    """
    Get the base path for the application.

    In a frozen bundle: Returns the directory containing the executable
    In development: Returns the directory containing app.py
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    else:
        return Path(__file__).parent


def create_app(
    config_object: str = "config.Config",
    storage=None,
    ledger=None,
    commerce=None,
    mailer=None,
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    FAIL-FAST: invalid settings or unreadable credentials stop startup.
    Collaborators passed in (tests, alternative backends) replace the
    Google/WooCommerce/SMTP clients that would otherwise be built.

    Args:
        config_object: Import path of the config class
        storage: Object with create_file/find_files/move_file
        ledger: Object with append_row/has_order
        commerce: Object with get_order
        mailer: Object with send, or None to build from SMTP settings

    Returns:
        Configured Flask application

    Raises:
        ConfigurationError: Invalid or missing settings
    """
    # Use override=True so .env file always takes precedence over shell environment
    env_file = _get_base_path() / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json.sort_keys = False

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )

    # Set Flask's logger to use our configured logger
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting PrintPrep in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # SETTINGS (FAIL-FAST)
    # =========================================================================

    try:
        pipeline_settings, integration = load_settings(app.config)
    except ConfigurationError as e:
        logger.error(f"FATAL: Cannot start application - {e}")
        raise

    app.config["PIPELINE_SETTINGS"] = pipeline_settings
    app.config["INTEGRATION_SETTINGS"] = integration

    # =========================================================================
    # EXTERNAL CLIENTS
    # =========================================================================

    try:
        integration.require("pending_folder_id", "confirmed_folder_id")

        if storage is None:
            storage = DriveStorageClient.from_service_account(
                integration.credentials_file, integration.timeout_seconds
            )
        if ledger is None:
            integration.require("ledger_spreadsheet_id")
            ledger = SheetsLedgerClient.from_service_account(
                integration.credentials_file,
                integration.ledger_spreadsheet_id,
                integration.ledger_range,
                integration.timeout_seconds,
            )
        if commerce is None:
            integration.require("commerce_base_url", "commerce_consumer_key",
                                "commerce_consumer_secret")
            commerce = CommerceClient(
                integration.commerce_base_url,
                integration.commerce_consumer_key,
                integration.commerce_consumer_secret,
                timeout_seconds=integration.timeout_seconds,
            )
    except ConfigurationError as e:
        logger.error(f"FATAL: Cannot start application - {e}")
        raise

    if mailer is None and integration.mail_enabled:
        mailer = SMTPMailer(
            integration.smtp_host,
            integration.smtp_port,
            integration.mail_from,
            username=integration.smtp_username,
            password=integration.smtp_password,
            use_tls=integration.smtp_use_tls,
            timeout_seconds=integration.timeout_seconds,
        )
    if mailer is None:
        logger.warning("SMTP not configured, confirmation emails disabled")

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    publisher = ArtifactPublisher(storage, integration.pending_folder_id)
    app.config["PRINT_SERVICE"] = PrintService(pipeline_settings, publisher)

    app.config["CONFIRMATION_SERVICE"] = OrderConfirmationService(
        commerce,
        storage,
        ledger,
        integration.confirmed_folder_id,
        mailer=mailer,
        skip_duplicate_ledger_rows=integration.ledger_skip_duplicates,
    )
    logger.info("Services initialized")

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    CORS(app, origins="*", methods=["GET", "POST", "OPTIONS"])
    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(RequestEntityTooLarge)
    def handle_file_too_large(e):
        max_mb = app.config.get("MAX_CONTENT_LENGTH", 25 * 1024 * 1024) / (1024 * 1024)
        return jsonify({"error": f"Request too large. Maximum body size is {max_mb:.0f} MB."}), 413

    @app.errorhandler(PrintPrepError)
    def handle_print_prep_error(e):
        logger.error(f"Unhandled {type(e).__name__}: {e}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description, "kind": e.name.lower().replace(" ", "_")}), e.code

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return jsonify({"error": "An unexpected error occurred.", "kind": "internal"}), 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
        debug=debug_mode,
    )
