"""
Invoice: an immutable billing snapshot of an order.

The total is captured once, when the invoice is issued. Later changes to
the order (quantity, priority, pricing rules) do not change an existing
invoice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from core.sequence import IdSequence
from models.order import Order
from models.system_config import SystemConfig

INVOICE_ID_START = 2000
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_invoice_ids = IdSequence(INVOICE_ID_START)


@dataclass(frozen=True)
class Invoice:
    """
    Billed amount for one order.

    Use Invoice.issue() rather than the constructor so the total is
    computed from the order with the current pricing rules.
    """

    order: Optional[Order]
    total_cost: float
    date_issued: datetime = field(default_factory=datetime.now)
    base_setup_cost: float = 0.0
    """Setup fee in effect at issue time, shown in the cost breakdown."""

    invoice_id: int = field(default_factory=_invoice_ids.next_id)

    @classmethod
    def issue(
        cls,
        order: Order,
        config: Optional[SystemConfig] = None,
        issued_at: Optional[datetime] = None,
    ) -> "Invoice":
        config = config or SystemConfig()
        return cls(
            order=order,
            total_cost=order.calculate_price(config),
            date_issued=issued_at or datetime.now(),
            base_setup_cost=config.base_setup_cost,
        )

    @staticmethod
    def reset_id_counter() -> None:
        """Rewind the invoice ID sequence to 2000. Test isolation only."""
        _invoice_ids.reset()

    @property
    def formatted_date(self) -> str:
        return self.date_issued.strftime(DATE_FORMAT)

    @property
    def material_cost(self) -> float:
        if self.order is None or self.order.material is None:
            return 0.0
        return self.order.material.cost_per_gram * self.order.grams_required

    def generate_summary(self) -> str:
        if self.order is None:
            return f"Invoice #{self.invoice_id} - No order associated"

        order = self.order
        return (
            "INVOICE SUMMARY\n"
            "===============\n"
            f"Invoice ID: {self.invoice_id}\n"
            f"Date Issued: {self.formatted_date}\n"
            f"Order ID: {order.order_id}\n"
            f"Customer: {order.user.username if order.user else 'Unknown'}\n"
            f"Material: {order.material.name if order.material else 'Unknown'}\n"
            f"Quantity: {order.quantity}\n"
            f"Total Cost: ${self.total_cost:.2f}\n"
            f"Status: {order.status}\n"
        )

    def export_text(self) -> str:
        """Full printable invoice."""
        if self.order is None:
            return f"Invoice #{self.invoice_id} - No order associated"

        order = self.order
        rule = "=" * 40
        return (
            f"{rule}\n"
            "3D PRINTING SERVICE INVOICE\n"
            f"{rule}\n"
            "\n"
            f"Invoice ID: {self.invoice_id}\n"
            f"Date Issued: {self.formatted_date}\n"
            "\n"
            "ORDER DETAILS:\n"
            "--------------\n"
            f"Order ID: {order.order_id}\n"
            f"Customer: {order.user.username if order.user else 'Unknown'}\n"
            f"Email: {order.user.email if order.user else 'Unknown'}\n"
            f"Material: {order.material.name if order.material else 'Unknown'}\n"
            f"Dimensions: {order.dimensions}\n"
            f"Quantity: {order.quantity}\n"
            f"Special Instructions: {order.special_instructions}\n"
            "\n"
            "COST BREAKDOWN:\n"
            "---------------\n"
            f"Material Cost: ${self.material_cost:.2f}\n"
            f"Base Setup Cost: ${self.base_setup_cost:.2f}\n"
            f"Total Cost: ${self.total_cost:.2f}\n"
            "\n"
            f"ORDER STATUS: {order.status}\n"
            "\n"
            "Thank you for choosing our 3D printing service!\n"
            f"{rule}\n"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoice_id": self.invoice_id,
            "order_id": self.order.order_id if self.order else None,
            "total_cost": self.total_cost,
            "date_issued": self.formatted_date,
        }
