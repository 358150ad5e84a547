"""
Order confirmation workflow.

Driven by a single external trigger ("confirm order <id>"):

    Lookup   -> fetch the order from the commerce API
    Guard    -> only "processing"/"completed" orders continue
    Relocate -> move every stored file named "<order id>_..." to the
                confirmed folder
    Ledger   -> append one 10-column row
    Notify   -> best-effort customer email (own result channel)

Re-running confirmation for an order is safe for storage (files already in
the confirmed folder are left in place) but appends another ledger row
unless ``skip_duplicate_ledger_rows`` is set.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from core.exceptions import ArtifactsNotFoundError, PrintPrepError, RelocationError
from models.artifacts import Artifact
from models.confirmation import (
    ConfirmationResult,
    ConfirmationStatus,
    NotificationResult,
    OrderLedgerRow,
    PAID_STATUSES,
)
from logging_config import get_logger, get_order_logger


# Module logger
logger = get_logger(__name__)


class OrderConfirmationService:
    """Moves a paid order's artifacts, records it in the ledger, emails the customer."""

    def __init__(
        self,
        commerce,
        storage,
        ledger,
        confirmed_folder_id: str,
        mailer=None,
        skip_duplicate_ledger_rows: bool = False,
    ):
        """
        Args:
            commerce: ``get_order(order_id) -> dict``
            storage: ``find_files(token) -> [Artifact]`` and ``move_file(artifact, folder_id)``
            ledger: ``append_row(values)`` and ``has_order(order_number)``
            confirmed_folder_id: Destination folder for paid orders
            mailer: ``send(recipient, subject, body)`` or None to skip notifications
            skip_duplicate_ledger_rows: Skip the append when the order is already in the ledger
        """
        self._commerce = commerce
        self._storage = storage
        self._ledger = ledger
        self._confirmed_folder_id = confirmed_folder_id
        self._mailer = mailer
        self._skip_duplicates = skip_duplicate_ledger_rows

    def confirm(self, order_id: str) -> ConfirmationResult:
        """
        Run the workflow for one order.

        Returns:
            ConfirmationResult - NOT_PAID (nothing touched) or CONFIRMED

        Raises:
            CommerceLookupError / UpstreamTimeoutError: Lookup failed
            ArtifactsNotFoundError: No stored files for the order
            RelocationError: Some files moved, a later move failed
            LedgerError: Append failed after files were moved
        """
        order_logger = get_order_logger(order_id)

        # Lookup
        order = self._commerce.get_order(order_id)
        status = str(order.get("status", "")).lower()

        # Guard
        if status not in PAID_STATUSES:
            order_logger.info(f"Order not confirmed yet (status={status!r}), nothing moved")
            return ConfirmationResult.not_paid(order_id, order)

        # Relocate
        moved = self._relocate(order_id, order_logger)

        # Ledger append
        row = OrderLedgerRow.from_order(order, processed_file=_processed_name(moved))
        appended = self._append_ledger(row, order_logger)

        # Notify (never raises)
        notification = self._notify(order, order_logger)

        order_logger.info(
            f"Order confirmed: {len(moved)} files moved, ledger "
            f"{'appended' if appended else 'skipped'}, notification "
            f"{'sent' if notification.sent else 'not sent'}"
        )
        return ConfirmationResult(
            order_id=order_id,
            status=ConfirmationStatus.CONFIRMED,
            order_status=status,
            order=order,
            moved_files=moved,
            ledger_row=row,
            ledger_appended=appended,
            notification=notification,
        )

    def _relocate(self, order_id: str, log: logging.Logger) -> List[Artifact]:
        # The search is a substring match; order 12 must not pick up 123_...
        prefix = f"{order_id}_"
        files = [artifact for artifact in self._storage.find_files(order_id)
                 if artifact.name.startswith(prefix)]
        if not files:
            log.warning("No stored files found for order")
            raise ArtifactsNotFoundError(order_id)

        moved: List[Artifact] = []
        for artifact in files:
            try:
                moved.append(self._storage.move_file(artifact, self._confirmed_folder_id))
            except PrintPrepError as exc:
                log.error(f"Move of {artifact.name} failed after {len(moved)} files moved: {exc}")
                raise RelocationError(
                    order_id,
                    exc.message,
                    [item.to_dict() for item in moved],
                    failed_file=artifact.name,
                )
        return moved

    def _append_ledger(self, row: OrderLedgerRow, log: logging.Logger) -> bool:
        if self._skip_duplicates and self._ledger.has_order(row.order_number):
            log.info(f"Order {row.order_number} already in ledger, append skipped")
            return False
        self._ledger.append_row(row.as_row())
        return True

    def _notify(self, order: Dict[str, Any], log: logging.Logger) -> NotificationResult:
        recipient = str((order.get("billing") or {}).get("email", "") or "")
        if self._mailer is None:
            return NotificationResult(sent=False, recipient=recipient, skipped=True,
                                      error="notifications not configured")
        if not recipient:
            log.warning("Order has no billing email, notification skipped")
            return NotificationResult(sent=False, skipped=True, error="no recipient")

        number = order.get("number") or order.get("id", "")
        first_name = (order.get("billing") or {}).get("first_name", "")
        try:
            self._mailer.send(
                recipient,
                f"Your print order #{number} is confirmed",
                _notification_body(first_name, number),
            )
        except Exception as exc:
            log.warning(f"Notification to {recipient} failed: {exc}")
            return NotificationResult(sent=False, recipient=recipient, error=str(exc))

        return NotificationResult(sent=True, recipient=recipient)


def _processed_name(files: List[Artifact]) -> str:
    for artifact in files:
        if "_processed_" in artifact.name:
            return artifact.name
    return files[0].name if files else ""


def _notification_body(first_name: Optional[str], number: Any) -> str:
    greeting = f"Hi {first_name}," if first_name else "Hello,"
    return (
        f"{greeting}\n\n"
        f"We have received payment for order #{number}. Your print files are "
        f"confirmed and queued for production.\n\n"
        f"Thank you for your order."
    )
