"""
Services layer for PrintPrep.

This module contains the business logic services:
- PrintService: Decode -> normalize -> resolve -> compose -> publish
- ArtifactPublisher: Two-phase processed/original upload
- OrderConfirmationService: Lookup -> guard -> relocate -> ledger -> notify

Services are created once in create_app() with immutable settings and
their collaborators injected, then shared by all request threads.
"""

from .artifact_publisher import ArtifactPublisher
from .print_service import PrintService, PrintJobResult
from .confirmation_service import OrderConfirmationService

__all__ = [
    "ArtifactPublisher",
    "PrintService",
    "PrintJobResult",
    "OrderConfirmationService",
]
