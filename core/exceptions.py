"""
Custom exceptions for PrintPrep.

Exception Hierarchy:
    PrintPrepError (base)
    ├── ConfigurationError       - Invalid or missing settings (startup failure)
    ├── ValidationError          - Malformed/missing request fields (400)
    ├── GeometryError            - Unknown paper size / resize strategy (400)
    ├── DecodeError              - Corrupt or unsupported source payload (500)
    │   ├── InvalidPdfError      - Payload tagged as PDF without a PDF header (400)
    │   └── HeicDecodeError      - HEIC/HEIF decode failure (500)
    ├── PublishError             - Storage / ledger / commerce call failed (500)
    │   ├── PartialPublishError  - Processed artifact stored, original failed
    │   ├── CommerceLookupError  - Order lookup failed
    │   ├── ArtifactsNotFoundError - No stored files for the order
    │   ├── RelocationError      - Some files moved, a later move failed
    │   └── LedgerError          - Ledger append failed
    └── UpstreamTimeoutError     - External call exceeded its timeout (504)

Usage:
    Startup errors (ConfigurationError) cause the app to fail fast.
    Request errors are turned into JSON payloads by the route error handlers
    using ``status_code``, ``kind`` and ``to_dict()``.
"""

from typing import Optional, Dict, Any, List


class PrintPrepError(Exception):
    """
    Base exception for all PrintPrep errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    status_code = 500
    kind = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Structured payload for JSON responses (never a stack trace)."""
        data: Dict[str, Any] = {"error": self.message, "kind": self.kind}
        if self.details:
            data["details"] = self.details
        return data


# =============================================================================
# STARTUP ERRORS - Application will not start if these occur
# =============================================================================

class ConfigurationError(PrintPrepError):
    """
    A setting is missing or out of range.

    Raised while building PipelineSettings / IntegrationSettings in
    create_app(). The app refuses to start rather than run half-configured.
    """

    kind = "configuration"

    def __init__(self, setting: str, reason: str):
        message = f"Invalid configuration for {setting}: {reason}"
        super().__init__(message, {"setting": setting})
        self.setting = setting


# =============================================================================
# CLIENT ERRORS - Reported as 400, never retried
# =============================================================================

class ValidationError(PrintPrepError):
    """
    One or more request fields are missing, malformed or out of range.

    ``fields`` maps each offending field name to its message. The first
    message becomes the top-level ``error`` text.
    """

    status_code = 400
    kind = "validation"

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        details = {"fields": dict(fields)} if fields else {}
        super().__init__(message, details)
        self.fields = dict(fields or {})


class GeometryError(PrintPrepError):
    """Unknown paper size, unknown resize strategy, or a border too wide for the paper."""

    status_code = 400
    kind = "geometry"


# =============================================================================
# DECODE ERRORS - The payload could not be turned into a canonical raster
# =============================================================================

class DecodeError(PrintPrepError):
    """
    The source payload is corrupt or in an unsupported format.

    Carries the declared media type so callers can tell format problems
    apart from compositing or storage failures.
    """

    kind = "decode"

    def __init__(self, message: str, media_type: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        error_details = dict(details or {})
        if media_type:
            error_details["media_type"] = media_type
        super().__init__(message, error_details)
        self.media_type = media_type


class InvalidPdfError(DecodeError):
    """Payload tagged ``application/pdf`` does not start with a PDF header."""

    status_code = 400
    kind = "invalid_pdf"

    def __init__(self, message: str = "Payload is not a valid PDF document (missing %PDF- header)."):
        super().__init__(message, media_type="application/pdf")


class HeicDecodeError(DecodeError):
    """HEIC/HEIF (or octet-stream) payload could not be decoded."""

    kind = "heic_decode"


# =============================================================================
# UPSTREAM ERRORS - External collaborators (storage, ledger, commerce)
# =============================================================================

class PublishError(PrintPrepError):
    """
    A storage, ledger or commerce call failed.

    There is no automatic retry or rollback. Subclasses record whatever
    partial result is already known so an operator can reconcile by hand.
    """

    kind = "publish"


class PartialPublishError(PublishError):
    """
    The processed artifact was stored but the original upload failed.

    The processed file is NOT deleted; its id and link are reported in
    ``details['published']``.
    """

    kind = "partial_publish"

    def __init__(self, message: str, published: Dict[str, Any],
                 failed: str = "original"):
        details = {"published": dict(published), "failed": failed}
        super().__init__(message, details)
        self.published = dict(published)
        self.failed = failed


class CommerceLookupError(PublishError):
    """Order lookup against the commerce API failed."""

    kind = "commerce_lookup"

    def __init__(self, order_id: str, reason: str):
        message = f"Failed to look up order {order_id}: {reason}"
        super().__init__(message, {"order_id": order_id})
        self.order_id = order_id


class ArtifactsNotFoundError(PublishError):
    """No stored files match the order id."""

    kind = "artifacts_not_found"

    def __init__(self, order_id: str):
        message = f"No files found for order {order_id}"
        super().__init__(message, {"order_id": order_id, "movedFiles": []})
        self.order_id = order_id


class RelocationError(PublishError):
    """
    Moving stored files to the confirmed folder failed part-way.

    ``moved_files`` lists the files that were already moved before the
    failure.
    """

    kind = "relocation"

    def __init__(self, order_id: str, reason: str, moved_files: List[Dict[str, Any]],
                 failed_file: Optional[str] = None):
        message = f"Failed to move files for order {order_id}: {reason}"
        details: Dict[str, Any] = {
            "order_id": order_id,
            "movedFiles": list(moved_files),
        }
        if failed_file:
            details["failed_file"] = failed_file
        super().__init__(message, details)
        self.order_id = order_id
        self.moved_files = list(moved_files)


class LedgerError(PublishError):
    """Appending (or reading) the order ledger failed."""

    kind = "ledger"


class UpstreamTimeoutError(PrintPrepError):
    """
    An external call exceeded its configured timeout.

    The operation may still have completed on the remote side.
    """

    status_code = 504
    kind = "timeout"

    def __init__(self, operation: str, timeout_seconds: float):
        message = f"{operation} timed out after {timeout_seconds:.1f}s"
        details = {
            "operation": operation,
            "timeout_seconds": timeout_seconds,
        }
        super().__init__(message, details)
        self.operation = operation
        self.timeout_seconds = timeout_seconds
