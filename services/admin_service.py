"""
Administrative operations: materials, pricing rules and order oversight.

Every change is written through to its store right away, so an admin
edit survives a crash even if save_all() never runs.
"""

from __future__ import annotations

from typing import List, Optional

from core.exceptions import InvalidMaterialError
from models.material import Material
from models.order import Order
from models.system_config import SystemConfig
from persistence.config_store import ConfigStore
from persistence.inventory_store import InventoryStore
from persistence.material_store import MaterialRegistry
from persistence.order_store import OrderRegistry
from services.inventory_service import DEFAULT_STOCK_GRAMS, Inventory
from logging_config import get_logger


logger = get_logger(__name__)

MIN_COST_PER_GRAM = 0.01
MAX_COST_PER_GRAM = 1000.0
MIN_PRINT_TEMP = 50
MAX_PRINT_TEMP = 500


def validate_material(name: Optional[str], cost_per_gram: float, print_temp: int, color: Optional[str]) -> None:
    """
    Raises:
        InvalidMaterialError: On a blank name or color, or a cost or
            temperature outside the accepted range
    """
    if name is None or not name.strip():
        raise InvalidMaterialError(name, "name cannot be empty")
    if not MIN_COST_PER_GRAM <= cost_per_gram <= MAX_COST_PER_GRAM:
        raise InvalidMaterialError(
            name, f"cost per gram must be between {MIN_COST_PER_GRAM} and {MAX_COST_PER_GRAM}"
        )
    if not MIN_PRINT_TEMP <= print_temp <= MAX_PRINT_TEMP:
        raise InvalidMaterialError(
            name, f"print temperature must be between {MIN_PRINT_TEMP} and {MAX_PRINT_TEMP}"
        )
    if color is None or not color.strip():
        raise InvalidMaterialError(name, "color cannot be empty")


class AdminService:
    """Operations reserved for administrators."""

    def __init__(
        self,
        materials: MaterialRegistry,
        inventory_store: InventoryStore,
        orders: OrderRegistry,
        config_store: ConfigStore,
    ):
        self.materials = materials
        self.inventory_store = inventory_store
        self.orders = orders
        self.config_store = config_store

    @property
    def inventory(self) -> Inventory:
        return self.inventory_store.inventory

    @property
    def config(self) -> SystemConfig:
        return self.config_store.config

    # =========================================================================
    # MATERIALS
    # =========================================================================

    def add_material(self, name: str, cost_per_gram: float, print_temp: int, color: str) -> Optional[Material]:
        """
        Validate and register a material, seeding 1000g of stock for it.

        Returns:
            The new Material, or None if validation failed or the name is taken
        """
        try:
            validate_material(name, cost_per_gram, print_temp, color)
        except InvalidMaterialError as e:
            logger.warning(f"Material rejected: {e}")
            return None

        material = Material(name.strip(), float(cost_per_gram), int(print_temp), color.strip())
        if not self.materials.add(material):
            logger.warning(f"Material rejected: {material.name} already exists")
            return None

        self.inventory.set_stock(material, DEFAULT_STOCK_GRAMS)
        self.materials.save()
        self.inventory_store.save()
        logger.info(f"Added material {material.display_name}")
        return material

    def rename_material(self, old_name: str, new_name: str) -> bool:
        """
        Rename a material and move its stock entry along with it.

        Orders already placed keep referring to the same Material object,
        so they pick up the new name too.
        """
        if new_name is None or not new_name.strip():
            return False
        new_name = new_name.strip()

        material = self.materials.get(old_name)
        if material is None or self.materials.exists(new_name):
            return False

        material.name = new_name
        if not self.materials.update(old_name, material):
            material.name = old_name
            return False

        self.inventory.rename(old_name, new_name)
        self.materials.save()
        self.inventory_store.save()
        self.orders.save()
        logger.info(f"Renamed material {old_name} -> {new_name}")
        return True

    def set_stock(self, material_name: str, grams: int) -> bool:
        if not self.inventory.set_stock(material_name, grams):
            return False
        return self.inventory_store.save()

    # =========================================================================
    # PRICING RULES
    # =========================================================================

    def modify_pricing_constants(self, electricity_cost: float, machine_time_cost: float, base_setup_cost: float) -> bool:
        """
        Update the three hourly/flat pricing constants.

        Invalid values are ignored individually; returns False if any was.
        """
        applied = [
            self.config.set_electricity_cost_per_hour(electricity_cost),
            self.config.set_machine_time_cost_per_hour(machine_time_cost),
            self.config.set_base_setup_cost(base_setup_cost),
        ]
        self.config_store.save()
        return all(applied)

    def update_tax_rate(self, rate: float) -> bool:
        if not self.config.set_tax_rate(rate):
            return False
        return self.config_store.save()

    def set_rush_policy(self, allow: bool, surcharge: Optional[float] = None) -> bool:
        self.config.set_allow_rush_orders(allow)
        ok = True
        if surcharge is not None:
            ok = self.config.set_rush_order_surcharge(surcharge)
        self.config_store.save()
        return ok

    def set_order_limits(self, max_quantity: Optional[int] = None, max_value: Optional[float] = None) -> bool:
        ok = True
        if max_quantity is not None:
            ok = self.config.set_max_order_quantity(max_quantity) and ok
        if max_value is not None:
            ok = self.config.set_max_order_value(max_value) and ok
        self.config_store.save()
        return ok

    def reset_configuration(self) -> bool:
        self.config.reset_to_defaults()
        return self.config_store.save()

    # =========================================================================
    # OVERSIGHT
    # =========================================================================

    def view_all_orders(self) -> List[Order]:
        return self.orders.get_all()
