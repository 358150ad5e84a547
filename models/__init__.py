"""
Data models for PrintPrep.

This module contains immutable dataclasses for:
- PrintRequest: Validated /add-border request (paper, orientation, border)
- PaperDimensions / CanonicalImage / CompositeResult: Pipeline rasters
- Artifact / ArtifactPair: Stored files
- OrderLedgerRow / ConfirmationResult / NotificationResult: Order confirmation

Request-scoped models are frozen so they can be passed between helpers
without defensive copies.
"""

from .print_request import PrintRequest, PaperSelector, Orientation, ResizeStrategy
from .image import PaperDimensions, CanonicalImage, CompositeResult
from .artifacts import Artifact, ArtifactPair
from .confirmation import (
    ConfirmationResult,
    ConfirmationStatus,
    NotificationResult,
    OrderLedgerRow,
    PAID_STATUSES,
)

__all__ = [
    # Request models
    "PrintRequest",
    "PaperSelector",
    "Orientation",
    "ResizeStrategy",
    # Raster models
    "PaperDimensions",
    "CanonicalImage",
    "CompositeResult",
    # Storage models
    "Artifact",
    "ArtifactPair",
    # Confirmation models
    "ConfirmationResult",
    "ConfirmationStatus",
    "NotificationResult",
    "OrderLedgerRow",
    "PAID_STATUSES",
]
