"""
Order placement, lifecycle updates and invoicing.

place_order() is the strict entry point: it raises InvalidOrderError or
InsufficientMaterialError. submit_order() wraps it for the GUI layer and
never raises; it returns the new Order or None.

Placement steps:
    1. Validate material, dimensions, quantity and the quantity limit
    2. Build the order; 'rush' in the instructions sets rush priority
       when rush orders are enabled
    3. Price it and check the order-value limit
    4. Consume quantity * 10 grams of stock (atomic check-and-deduct)
    5. Register the order (stock is returned if this fails) and enqueue it

Thread Safety:
    Stock is consumed through the Inventory lock and orders are registered
    through the OrderRegistry lock, so concurrent submissions neither
    oversell stock nor share IDs. Invoices live in an InvoiceLedger guarded
    by its own lock.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from core.exceptions import InsufficientMaterialError, InvalidOrderError, PrintFlowError
from models.invoice import Invoice
from models.material import Material
from models.order import Order, OrderPriority
from models.system_config import SystemConfig
from models.user import User
from persistence.order_store import OrderRegistry
from services.inventory_service import Inventory
from logging_config import get_logger


logger = get_logger(__name__)

RUSH_KEYWORD = "rush"


class InvoiceLedger:
    """
    Thread-safe in-memory store of issued invoices.

    Invoices are not persisted; they can be re-issued from the orders.
    """

    def __init__(self):
        self._invoices: Dict[int, Invoice] = {}
        self._lock = threading.Lock()

    def put(self, invoice: Invoice) -> None:
        with self._lock:
            self._invoices[invoice.invoice_id] = invoice

    def get(self, invoice_id: int) -> Optional[Invoice]:
        with self._lock:
            return self._invoices.get(invoice_id)

    def for_order(self, order_id: int) -> List[Invoice]:
        with self._lock:
            return [
                inv for inv in self._invoices.values()
                if inv.order is not None and inv.order.order_id == order_id
            ]

    def all(self) -> List[Invoice]:
        with self._lock:
            return list(self._invoices.values())

    def clear(self) -> int:
        with self._lock:
            count = len(self._invoices)
            self._invoices.clear()
            return count


class OrderService:
    """
    Business operations on orders.

    Attributes:
        orders: Registry the placed orders are stored in
        inventory: Stock ledger orders draw from
        config: Pricing rules and order limits
    """

    def __init__(self, orders: OrderRegistry, inventory: Inventory, config: SystemConfig):
        self.orders = orders
        self.inventory = inventory
        self.config = config
        self.invoices = InvoiceLedger()

    # =========================================================================
    # PLACEMENT
    # =========================================================================

    def place_order(
        self,
        user: Optional[User],
        material: Optional[Material],
        dimensions: Optional[str],
        quantity: int,
        special_instructions: str = "",
        priority: Optional[str] = None,
    ) -> Order:
        """
        Validate, price, reserve stock for and register a new order.

        Args:
            user: Ordering customer (may be None for walk-in orders)
            material: Material to print with
            dimensions: 'LxWxHcm'
            quantity: Number of items
            special_instructions: Free text; mentioning 'rush' requests rush priority
            priority: Explicit priority, overrides rush detection

        Returns:
            The registered, enqueued Order

        Raises:
            InvalidOrderError: If validation or a configured limit fails
            InsufficientMaterialError: If stock cannot cover quantity * 10 grams
        """
        if material is None:
            raise InvalidOrderError("Order has no material")
        if dimensions is None or not dimensions.strip():
            raise InvalidOrderError("Order has no dimensions")
        if quantity <= 0:
            raise InvalidOrderError("Quantity must be positive", {"quantity": quantity})

        max_quantity = self.config.max_order_quantity
        if quantity > max_quantity:
            raise InvalidOrderError(
                f"Quantity {quantity} exceeds the maximum of {max_quantity}",
                {"quantity": quantity, "max_order_quantity": max_quantity},
            )

        instructions = special_instructions or ""
        order = Order(
            user=user,
            material=material,
            dimensions=dimensions.strip(),
            quantity=quantity,
            special_instructions=instructions,
        )
        if RUSH_KEYWORD in instructions.lower() and self.config.allow_rush_orders:
            order.set_priority(OrderPriority.RUSH)
        if priority:
            order.set_priority(priority)

        price = order.calculate_price(self.config)
        max_value = self.config.max_order_value
        if price > max_value:
            raise InvalidOrderError(
                f"Order value {price:.2f} exceeds the maximum of {max_value:.2f}",
                {"order_value": price, "max_order_value": max_value},
            )

        grams = order.grams_required
        if not self.inventory.consume(material, grams):
            raise InsufficientMaterialError(material.name, grams, self.inventory.get_stock(material))

        if not self.orders.add(order):
            self.inventory.add_stock(material, grams)
            raise InvalidOrderError(
                f"Order {order.order_id} could not be registered",
                {"order_id": order.order_id},
            )
        self.orders.enqueue(order)

        logger.info(
            f"Order {order.order_id} placed: {quantity}x {order.dimensions} in {material.name}, "
            f"priority={order.priority}, price={price:.2f}"
        )
        return order

    def submit_order(
        self,
        user: Optional[User],
        material: Optional[Material],
        dimensions: Optional[str],
        quantity: int,
        special_instructions: str = "",
    ) -> Optional[Order]:
        """Like place_order(), but returns None instead of raising."""
        try:
            return self.place_order(user, material, dimensions, quantity, special_instructions)
        except PrintFlowError as e:
            logger.warning(f"Order rejected: {e}")
            return None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def get_order(self, order_id: int) -> Optional[Order]:
        return self.orders.get(order_id)

    def update_status(self, order_id: int, new_status: str) -> bool:
        order = self.orders.get(order_id)
        if order is None or not order.update_status(new_status):
            return False
        logger.info(f"Order {order_id} status -> {order.status}")
        return True

    def set_priority(self, order_id: int, priority: str) -> bool:
        order = self.orders.get(order_id)
        if order is None:
            return False
        return order.set_priority(priority)

    def next_in_queue(self) -> Optional[Order]:
        """Take the next order off the front of the print queue."""
        return self.orders.dequeue_next()

    def queue_size(self) -> int:
        return self.orders.queue_size()

    # =========================================================================
    # INVOICES
    # =========================================================================

    def issue_invoice(self, order_id: int) -> Optional[Invoice]:
        """Price the order with the current rules and record an invoice."""
        order = self.orders.get(order_id)
        if order is None:
            logger.warning(f"Cannot invoice unknown order {order_id}")
            return None
        invoice = Invoice.issue(order, self.config)
        self.invoices.put(invoice)
        logger.info(f"Invoice {invoice.invoice_id} issued for order {order_id}: {invoice.total_cost:.2f}")
        return invoice

    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        return self.invoices.get(invoice_id)

    def invoices_for_order(self, order_id: int) -> List[Invoice]:
        return self.invoices.for_order(order_id)
