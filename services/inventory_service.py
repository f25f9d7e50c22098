"""
Material stock ledger.

Tracks grams in stock per material name. A material that has never been
stocked explicitly reports DEFAULT_STOCK_GRAMS (1000g): absence of an
entry is NOT zero stock. Only explicit entries are persisted by
InventoryStore.

Thread Safety:
    One RLock guards the ledger. consume() checks and deducts inside the
    same critical section, so two orders racing for the last grams of a
    material can never both succeed.

Usage:
    inventory = Inventory()
    inventory.set_stock("PLA", 5000)
    if inventory.consume(material, order.grams_required):
        ...
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Optional, Union

from models.material import Material
from logging_config import get_logger


logger = get_logger(__name__)

DEFAULT_STOCK_GRAMS = 1000
"""Stock reported for a material with no explicit ledger entry."""

LOW_STOCK_THRESHOLD = 500

MaterialRef = Union[Material, str, None]


def _key(material: MaterialRef) -> Optional[str]:
    if material is None:
        return None
    if isinstance(material, Material):
        return material.name
    return material


class Inventory:
    """
    Grams in stock keyed by material name.

    Every method accepts either a Material or a material name.
    """

    def __init__(self, default_stock: int = DEFAULT_STOCK_GRAMS):
        self._default_stock = default_stock
        self._stock: Dict[str, int] = {}
        self._lock = threading.RLock()

    @property
    def default_stock(self) -> int:
        return self._default_stock

    def set_stock(self, material: MaterialRef, grams: int) -> bool:
        """Set an explicit stock level. Ignored for a missing material or negative grams."""
        key = _key(material)
        if key is None or grams < 0:
            return False
        with self._lock:
            self._stock[key] = int(grams)
        return True

    def get_stock(self, material: MaterialRef) -> int:
        key = _key(material)
        if key is None:
            return 0
        with self._lock:
            return self._stock.get(key, self._default_stock)

    def has_explicit_stock(self, material: MaterialRef) -> bool:
        key = _key(material)
        with self._lock:
            return key in self._stock

    def has_sufficient(self, material: MaterialRef, grams: int) -> bool:
        if _key(material) is None:
            return False
        if grams <= 0:
            return True
        return self.get_stock(material) >= grams

    def consume(self, material: MaterialRef, grams: int) -> bool:
        """
        Deduct ``grams`` from stock, all or nothing.

        Returns:
            False (and changes nothing) for a missing material, a
            non-positive amount or insufficient stock
        """
        key = _key(material)
        if key is None or grams <= 0:
            return False
        with self._lock:
            current = self._stock.get(key, self._default_stock)
            if current < grams:
                logger.debug(f"Cannot consume {grams}g of {key}: only {current}g in stock")
                return False
            self._stock[key] = current - grams
            return True

    def add_stock(self, material: MaterialRef, grams: int) -> bool:
        """Restock (or return stock from a cancelled order)."""
        key = _key(material)
        if key is None or grams <= 0:
            return False
        with self._lock:
            self._stock[key] = self._stock.get(key, self._default_stock) + grams
        return True

    def all_stock(self) -> Dict[str, int]:
        """Copy of the explicit ledger entries (defaults are not listed)."""
        with self._lock:
            return dict(self._stock)

    def low_stock(self, threshold: int = LOW_STOCK_THRESHOLD) -> Dict[str, int]:
        with self._lock:
            return {name: grams for name, grams in self._stock.items() if grams < threshold}

    def total_value(self, materials: Iterable[Material]) -> float:
        """Value of the explicit entries, priced with the given materials' costs."""
        cost_by_name = {m.name: m.cost_per_gram for m in materials}
        with self._lock:
            return sum(
                cost_by_name[name] * grams
                for name, grams in self._stock.items()
                if name in cost_by_name
            )

    def sync_with_materials(self, materials: Iterable[Material], default_stock: Optional[int] = None) -> int:
        """
        Give every listed material an explicit entry if it has none.

        Returns:
            Number of entries created
        """
        grams = self._default_stock if default_stock is None else default_stock
        created = 0
        with self._lock:
            for material in materials:
                if material.name not in self._stock:
                    self._stock[material.name] = grams
                    created += 1
        return created

    def rename(self, old_name: str, new_name: str) -> bool:
        """
        Move the stock entry of ``old_name`` to ``new_name``.

        Renaming a Material object does not call this on its own; the
        entry stays under the old name until it is migrated.
        """
        if not old_name or not new_name:
            return False
        with self._lock:
            if old_name not in self._stock:
                return False
            if new_name in self._stock and new_name != old_name:
                logger.warning(f"Cannot move stock of {old_name}: {new_name} already has an entry")
                return False
            self._stock[new_name] = self._stock.pop(old_name)
        return True

    def remove(self, material: MaterialRef) -> bool:
        key = _key(material)
        with self._lock:
            return self._stock.pop(key, None) is not None

    def replace_all(self, stock: Dict[str, int]) -> None:
        """Swap in a whole ledger (used when loading from disk)."""
        with self._lock:
            self._stock = dict(stock)

    def clear(self) -> None:
        with self._lock:
            self._stock.clear()

    def count(self) -> int:
        with self._lock:
            return len(self._stock)
