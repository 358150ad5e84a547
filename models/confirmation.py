"""
Order confirmation data models.

These models describe the outcome of one /confirm-order call: the ledger row
that was appended, the files that were moved and the side-effect result of
the customer notification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

from .artifacts import Artifact


# Commerce statuses that mean the order has been paid
PAID_STATUSES = frozenset({"processing", "completed"})

LEDGER_COLUMNS: Tuple[str, ...] = (
    "date",
    "order_number",
    "status",
    "paper_type",
    "paper_size",
    "border_size",
    "orientation",
    "processed_file",
    "customer_name",
    "shipping_address",
)


class ConfirmationStatus(Enum):
    """
    Outcome of a confirmation attempt.

    Lifecycle:
        lookup -> (NOT_PAID | relocate -> ledger -> notify -> CONFIRMED)
    """

    CONFIRMED = "confirmed"
    """Files moved and ledger row appended."""

    NOT_PAID = "not_paid"
    """Order exists but its status is not yet processing/completed."""


@dataclass(frozen=True)
class OrderLedgerRow:
    """
    One append-only ledger record for a confirmed order.

    Always exactly ten columns, in LEDGER_COLUMNS order.
    """

    date: str
    order_number: str
    status: str
    paper_type: str
    paper_size: str
    border_size: str
    orientation: str
    processed_file: str
    customer_name: str
    shipping_address: str

    def as_row(self) -> List[str]:
        """Values in column order for the spreadsheet append call."""
        return [getattr(self, column) for column in LEDGER_COLUMNS]

    @classmethod
    def from_order(
        cls,
        order: Dict[str, Any],
        processed_file: str,
        now: Optional[datetime] = None,
    ) -> "OrderLedgerRow":
        """
        Build a row from a commerce order resource.

        Print options are read from the first line item's meta data; the
        storefront stores them under human-readable keys.
        """
        now = now or datetime.now(timezone.utc)
        options = _line_item_options(order)
        billing = order.get("billing", {}) or {}
        shipping = order.get("shipping", {}) or {}

        customer_name = " ".join(
            part for part in (billing.get("first_name", ""), billing.get("last_name", "")) if part
        )
        address_parts = (
            shipping.get("address_1", ""),
            shipping.get("address_2", ""),
            shipping.get("city", ""),
            shipping.get("state", ""),
            shipping.get("postcode", ""),
            shipping.get("country", ""),
        )
        shipping_address = ", ".join(part for part in address_parts if part)

        return cls(
            date=now.strftime("%Y-%m-%d %H:%M:%S"),
            order_number=str(order.get("number") or order.get("id", "")),
            status=str(order.get("status", "")),
            paper_type=options.get("paper type", ""),
            paper_size=options.get("paper size", ""),
            border_size=options.get("border size", ""),
            orientation=options.get("orientation", ""),
            processed_file=processed_file,
            customer_name=customer_name,
            shipping_address=shipping_address,
        )


def _line_item_options(order: Dict[str, Any]) -> Dict[str, str]:
    """Lower-cased meta key -> value for the first line item."""
    items = order.get("line_items") or []
    if not items:
        return {}
    options = {}
    for meta in items[0].get("meta_data", []) or []:
        key = str(meta.get("display_key") or meta.get("key") or "").strip().lower()
        value = meta.get("display_value", meta.get("value", ""))
        if key:
            options[key] = str(value)
    return options


@dataclass(frozen=True)
class NotificationResult:
    """
    Result of the best-effort customer email.

    This is the notify step's own error channel: a failed send is recorded
    here and reported to the caller, but never fails the confirmation.
    """

    sent: bool
    recipient: str = ""
    skipped: bool = False
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sent": self.sent,
            "recipient": self.recipient,
            "skipped": self.skipped,
            "error": self.error,
        }


@dataclass
class ConfirmationResult:
    """Result of OrderConfirmationService.confirm()."""

    order_id: str
    status: ConfirmationStatus
    order_status: str
    order: Dict[str, Any] = field(default_factory=dict)
    moved_files: List[Artifact] = field(default_factory=list)
    ledger_row: Optional[OrderLedgerRow] = None
    ledger_appended: bool = False
    notification: Optional[NotificationResult] = None

    @property
    def confirmed(self) -> bool:
        return self.status is ConfirmationStatus.CONFIRMED

    @classmethod
    def not_paid(cls, order_id: str, order: Dict[str, Any]) -> "ConfirmationResult":
        """Create a result for an order that has not been paid yet."""
        return cls(
            order_id=order_id,
            status=ConfirmationStatus.NOT_PAID,
            order_status=str(order.get("status", "")),
            order=order,
        )

    def to_response(self) -> Dict[str, Any]:
        """JSON body for /confirm-order."""
        if not self.confirmed:
            return {
                "message": "Order is not confirmed yet.",
                "confirmed": False,
                "status": self.order_status,
            }
        return {
            "message": "Order is confirmed and files moved!",
            "confirmed": True,
            "status": self.order_status,
            "movedFiles": [artifact.to_dict() for artifact in self.moved_files],
            "ledgerAppended": self.ledger_appended,
            "notification": self.notification.to_dict() if self.notification else None,
            "order": self.order,
        }
