"""
Order data model and pricing.

An Order links a customer, a material and a geometry spec, and carries
the pricing, status and priority state of one print job.

Lifecycle:
    1. Created by OrderService when a customer submits a job
    2. Status and priority updated by staff
    3. Priced (again) whenever calculate_price() is called
    4. Removed only by explicit registry removal (e.g. a factory reset)

Status and priority are free-form strings. OrderStatus and OrderPriority
list the well-known values, but any non-blank value (e.g. 'processing-50%')
is accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from core.sequence import IdSequence
from models.material import Material
from models.system_config import SystemConfig
from models.user import User

ORDER_ID_START = 1000

GRAMS_PER_ITEM = 10
"""Material usage assumption: every printed item takes 10g."""

DEFAULT_DIMENSIONS_CM: Tuple[float, float, float] = (10.0, 10.0, 10.0)
MIN_HOURS_PER_ITEM = 0.1
CUBIC_CM_PER_HOUR = 1000.0

BULK_QUANTITY = 10
BULK_DISCOUNT = 0.05
VIP_DISCOUNT = 0.10

_order_ids = IdSequence(ORDER_ID_START)


class OrderStatus:
    """Well-known status values."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderPriority:
    """Well-known priority values."""

    NORMAL = "normal"
    RUSH = "rush"
    VIP = "vip"


def parse_dimensions(dimensions: Optional[str]) -> Tuple[float, float, float]:
    """
    Parse 'LxWxHcm' into three numbers.

    Case-insensitive, ignores spaces and a 'cm' unit. Anything that does
    not yield exactly three numbers falls back to a 10x10x10 cm block.
    """
    if not dimensions:
        return DEFAULT_DIMENSIONS_CM
    cleaned = dimensions.lower().replace("cm", "").replace(" ", "")
    parts = cleaned.split("x")
    if len(parts) != 3:
        return DEFAULT_DIMENSIONS_CM
    try:
        length, width, height = (float(p) for p in parts)
    except ValueError:
        return DEFAULT_DIMENSIONS_CM
    return length, width, height


@dataclass(eq=False)
class Order:
    """
    A customer's print job.

    ``order_id`` is drawn from a process-wide sequence starting at 1000.
    Passing an explicit ``order_id`` (as the order store does on reload)
    keeps that ID and moves the sequence past it.
    """

    user: Optional[User] = None
    material: Optional[Material] = None
    dimensions: str = ""
    """Object size as 'LxWxHcm', e.g. '10x5x3cm'."""

    quantity: int = 0
    special_instructions: str = ""
    status: str = OrderStatus.PENDING
    priority: str = OrderPriority.NORMAL
    estimated_print_hours: float = 0.0
    """Cached result of the last estimate_print_time_hours() call."""

    order_id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.order_id is None:
            self.order_id = _order_ids.next_id()
        else:
            _order_ids.advance_past(self.order_id)
        if self.dimensions and not self.estimated_print_hours:
            self.estimate_print_time_hours()

    @staticmethod
    def reset_id_counter() -> None:
        """Rewind the order ID sequence to 1000. Test isolation only."""
        _order_ids.reset()

    @staticmethod
    def peek_next_id() -> int:
        return _order_ids.peek()

    # -------------------------------------------------------------------------
    # Estimation and pricing
    # -------------------------------------------------------------------------

    @property
    def grams_required(self) -> int:
        return max(self.quantity, 0) * GRAMS_PER_ITEM

    def estimate_print_time_hours(self) -> float:
        """
        Naive print time from the bounding volume.

        1000 cubic cm is one hour of printing, every item takes at least
        0.1 h, and items print one after another. The result is cached on
        ``estimated_print_hours``.
        """
        length, width, height = parse_dimensions(self.dimensions)
        per_item_hours = max(MIN_HOURS_PER_ITEM, (length * width * height) / CUBIC_CM_PER_HOUR)
        self.estimated_print_hours = per_item_hours * max(1, self.quantity)
        return self.estimated_print_hours

    def calculate_price(self, config: Optional[SystemConfig] = None) -> float:
        """
        Total price including discounts, surcharges and tax.

        The adjustments are applied multiplicatively in this fixed order:
        bulk discount, VIP discount, rush surcharge, tax.

        Args:
            config: Business rules to price with; defaults apply when omitted

        Returns:
            Price, or 0.0 if the order has no material or no quantity
        """
        if self.material is None or self.quantity <= 0:
            return 0.0

        config = config or SystemConfig()
        rules = config.to_dict()

        hours = self.estimate_print_time_hours()
        material_cost = self.material.cost_per_gram * self.grams_required
        subtotal = (
            material_cost
            + rules["base_setup_cost"]
            + rules["electricity_cost_per_hour"] * hours
            + rules["machine_time_cost_per_hour"] * hours
        )

        if self.quantity >= BULK_QUANTITY:
            subtotal *= 1.0 - BULK_DISCOUNT

        if self.user is not None and self.user.is_vip:
            subtotal *= 1.0 - VIP_DISCOUNT

        if self.is_rush and rules["allow_rush_orders"]:
            subtotal *= 1.0 + rules["rush_order_surcharge"]

        return subtotal * (1.0 + rules["tax_rate"])

    # -------------------------------------------------------------------------
    # Status and priority
    # -------------------------------------------------------------------------

    @property
    def is_rush(self) -> bool:
        return (self.priority or "").lower() == OrderPriority.RUSH

    def update_status(self, new_status: Optional[str]) -> bool:
        """Set any non-blank status. Returns False and changes nothing otherwise."""
        if new_status is None or not new_status.strip():
            return False
        self.status = new_status.strip()
        return True

    def set_priority(self, priority: Optional[str]) -> bool:
        """Normalize to lower case; blank values leave the priority unchanged."""
        if priority is None or not priority.strip():
            return False
        self.priority = priority.strip().lower()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Plain data for display and export layers."""
        return {
            "order_id": self.order_id,
            "username": self.user.username if self.user else None,
            "material": self.material.name if self.material else None,
            "dimensions": self.dimensions,
            "quantity": self.quantity,
            "special_instructions": self.special_instructions,
            "status": self.status,
            "priority": self.priority,
            "estimated_print_hours": self.estimated_print_hours,
        }

    def __str__(self) -> str:
        return (
            f"Order #{self.order_id} "
            f"({self.user.username if self.user else 'unknown'}, "
            f"{self.material.name if self.material else 'no material'}, "
            f"{self.quantity}x {self.dimensions}, {self.status})"
        )
