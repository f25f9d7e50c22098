"""
Order registry and FIFO print queue.

Orders are persisted to orders.txt, one line per order with the user and
material denormalized into it:

    orderID|username|email|role|materialName|materialCostPerGram|
    materialPrintTemp|materialColor|dimensions|quantity|
    specialInstructions|status|priority|estimatedPrintHours

The print queue is persisted separately to order_queue.txt as one order
ID per line, front of the queue first.

On load, an order keeps its stored ID. When user and material registries
are supplied, the order is re-bound to the registered User and Material
with the same natural key; otherwise (or if no such entry exists) it gets
a standalone copy built from the denormalized fields.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Sequence

from core.data_file_manager import DataFileManager
from core.exceptions import RecordFormatError
from core.record_codec import parse_float, parse_int
from models.material import Material
from models.order import Order
from models.user import User
from persistence.base import FileBackedRegistry
from persistence.material_store import MaterialRegistry
from persistence.user_store import UserRegistry
from logging_config import get_logger


logger = get_logger(__name__)


class OrderRegistry(FileBackedRegistry[Order]):
    """Orders keyed by order ID, plus the print queue."""

    FILENAME = "orders.txt"
    QUEUE_FILENAME = "order_queue.txt"
    TITLE = "Order Data Export"
    FORMAT_SPEC = (
        "orderID|username|email|role|materialName|materialCostPerGram|materialPrintTemp|"
        "materialColor|dimensions|quantity|specialInstructions|status|priority|estimatedPrintHours"
    )
    MIN_FIELDS = 14

    def __init__(
        self,
        file_manager: DataFileManager,
        users: Optional[UserRegistry] = None,
        materials: Optional[MaterialRegistry] = None,
    ):
        super().__init__(file_manager)
        self._users = users
        self._materials = materials
        self._queue: Deque[int] = deque()

    # -------------------------------------------------------------------------
    # Entity mapping
    # -------------------------------------------------------------------------

    def key_of(self, entity: Order) -> int:
        return entity.order_id

    def serialize(self, entity: Order) -> Sequence[object]:
        user = entity.user
        material = entity.material
        return [
            entity.order_id,
            user.username if user else "",
            user.email if user else "",
            user.role if user else "",
            material.name if material else "",
            repr(float(material.cost_per_gram)) if material else "",
            material.print_temp if material else "",
            material.color if material else "",
            entity.dimensions,
            entity.quantity,
            entity.special_instructions,
            entity.status,
            entity.priority,
            repr(float(entity.estimated_print_hours)),
        ]

    def deserialize(self, fields: List[str], line: str) -> Order:
        order_id = parse_int(fields[0], "orderID", line)
        status = fields[11]
        if not status.strip():
            raise RecordFormatError(line, "status is empty")

        hours = 0.0
        if fields[13].strip():
            hours = parse_float(fields[13], "estimatedPrintHours", line)

        return Order(
            user=self._bind_user(fields),
            material=self._bind_material(fields, line),
            dimensions=fields[8],
            quantity=parse_int(fields[9], "quantity", line),
            special_instructions=fields[10],
            status=status.strip(),
            priority=(fields[12].strip().lower() or "normal"),
            estimated_print_hours=hours,
            order_id=order_id,
        )

    def _bind_user(self, fields: List[str]) -> Optional[User]:
        username = fields[1]
        if not username:
            return None
        if self._users is not None:
            registered = self._users.get(username)
            if registered is not None:
                return registered
        return User(username=username, email=fields[2], role=fields[3] or "customer")

    def _bind_material(self, fields: List[str], line: str) -> Optional[Material]:
        name = fields[4]
        if not name:
            return None
        if self._materials is not None:
            registered = self._materials.get(name)
            if registered is not None:
                return registered
        return Material(
            name=name,
            cost_per_gram=parse_float(fields[5], "materialCostPerGram", line),
            print_temp=parse_int(fields[6], "materialPrintTemp", line),
            color=fields[7],
        )

    def get_by_id(self, order_id: int) -> Optional[Order]:
        return self.get(order_id)

    def get_by_user(self, username: str) -> List[Order]:
        return [o for o in self.get_all() if o.user is not None and o.user.username == username]

    def remove(self, key: int) -> bool:
        with self._lock:
            removed = super().remove(key)
            if removed and key in self._queue:
                self._queue.remove(key)
            return removed

    def clear(self) -> None:
        with self._lock:
            super().clear()
            self._queue.clear()

    # -------------------------------------------------------------------------
    # Print queue
    # -------------------------------------------------------------------------

    def enqueue(self, order: Optional[Order]) -> bool:
        """Append a registered order to the back of the print queue (once)."""
        if order is None:
            return False
        with self._lock:
            if order.order_id not in self._items or order.order_id in self._queue:
                return False
            self._queue.append(order.order_id)
        return True

    def dequeue_next(self) -> Optional[Order]:
        with self._lock:
            while self._queue:
                order = self._items.get(self._queue.popleft())
                if order is not None:
                    return order
        return None

    def peek_next(self) -> Optional[Order]:
        with self._lock:
            for order_id in self._queue:
                order = self._items.get(order_id)
                if order is not None:
                    return order
        return None

    def queue_size(self) -> int:
        with self._lock:
            return len(self._queue)

    def queued_orders(self) -> List[Order]:
        with self._lock:
            return [self._items[i] for i in self._queue if i in self._items]

    def save_queue(self) -> bool:
        with self._lock:
            records = [[order_id] for order_id in self._queue]
            return self._write_records(records, self.QUEUE_FILENAME)

    def load_queue(self) -> bool:
        """
        Rebuild the queue from order_queue.txt; unknown or malformed IDs are skipped.

        If the file cannot be read, the current queue is kept (minus orders
        that are no longer registered) and False is returned.
        """
        with self._lock:
            lines = self._read_lines(self.QUEUE_FILENAME)
            if lines is None:
                self._queue = deque(i for i in self._queue if i in self._items)
                logger.error(f"Could not read {self.QUEUE_FILENAME}, keeping {len(self._queue)} queued orders")
                return False

            self._queue.clear()
            for line in lines:
                try:
                    order_id = parse_int(line, "orderID", line)
                except RecordFormatError as e:
                    logger.warning(f"Skipping bad line in {self.QUEUE_FILENAME}: {e}")
                    continue
                if order_id not in self._items:
                    logger.warning(f"Queued order {order_id} is not registered, skipping")
                    continue
                if order_id not in self._queue:
                    self._queue.append(order_id)
            logger.info(f"Enqueued {len(self._queue)} orders from {self.QUEUE_FILENAME}")
        return True

    # -------------------------------------------------------------------------
    # Persistence (orders and queue together)
    # -------------------------------------------------------------------------

    def save(self) -> bool:
        with self._lock:
            orders_saved = super().save()
            queue_saved = self.save_queue()
        return orders_saved and queue_saved

    def load(self) -> bool:
        """Load orders, then the queue. Nothing changes if orders.txt cannot be read."""
        with self._lock:
            if not super().load():
                return False
            return self.load_queue()

    def backup(self) -> bool:
        orders_backed_up = super().backup()
        queue_backed_up = self.backup_queue()
        return orders_backed_up and queue_backed_up

    def backup_queue(self) -> bool:
        return self._files.create_backup(self.QUEUE_FILENAME)

    def list_queue_backups(self) -> List[str]:
        return self._files.list_backups_for_file(self.QUEUE_FILENAME)
