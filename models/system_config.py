"""
Business-rule settings used by pricing and order validation.

A SystemConfig is an explicit object handed to whoever prices or
validates orders; there is no process-wide instance. Administrators
change it through setters that silently ignore out-of-range values, and
ConfigStore persists it to system_config.txt.

Thread Safety:
    Setters and snapshot reads take an internal lock. Last writer wins.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, fields
from typing import Any, Dict


DEFAULT_ELECTRICITY_COST_PER_HOUR = 0.15
DEFAULT_MACHINE_TIME_COST_PER_HOUR = 2.50
DEFAULT_BASE_SETUP_COST = 5.00
DEFAULT_TAX_RATE = 0.08
DEFAULT_CURRENCY = "USD"
DEFAULT_MAX_ORDER_QUANTITY = 100
DEFAULT_MAX_ORDER_VALUE = 1000.00
DEFAULT_ALLOW_RUSH_ORDERS = True
DEFAULT_RUSH_ORDER_SURCHARGE = 0.25


@dataclass(eq=False)
class SystemConfig:
    """
    Pricing constants, tax, currency, order limits and rush-order policy.

    Direct attribute assignment bypasses validation; use the set_* methods
    (or ConfigStore) for anything that comes from a user.
    """

    electricity_cost_per_hour: float = DEFAULT_ELECTRICITY_COST_PER_HOUR
    """Electricity cost per machine hour."""

    machine_time_cost_per_hour: float = DEFAULT_MACHINE_TIME_COST_PER_HOUR
    """Machine wear/amortization per hour."""

    base_setup_cost: float = DEFAULT_BASE_SETUP_COST
    """Flat fee added to every order."""

    tax_rate: float = DEFAULT_TAX_RATE
    """Tax as a fraction (0.08 = 8%)."""

    currency: str = DEFAULT_CURRENCY
    """ISO currency code, upper case."""

    max_order_quantity: int = DEFAULT_MAX_ORDER_QUANTITY
    """Largest quantity accepted in one order."""

    max_order_value: float = DEFAULT_MAX_ORDER_VALUE
    """Largest total price accepted in one order."""

    allow_rush_orders: bool = DEFAULT_ALLOW_RUSH_ORDERS
    """Whether the rush surcharge and rush priority are in effect."""

    rush_order_surcharge: float = DEFAULT_RUSH_ORDER_SURCHARGE
    """Rush surcharge as a fraction (0.25 = +25%)."""

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SystemConfig):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    # -------------------------------------------------------------------------
    # Validated setters
    # -------------------------------------------------------------------------

    def set_electricity_cost_per_hour(self, cost: float) -> bool:
        return self._set_if(cost >= 0, "electricity_cost_per_hour", float(cost))

    def set_machine_time_cost_per_hour(self, cost: float) -> bool:
        return self._set_if(cost >= 0, "machine_time_cost_per_hour", float(cost))

    def set_base_setup_cost(self, cost: float) -> bool:
        return self._set_if(cost >= 0, "base_setup_cost", float(cost))

    def set_tax_rate(self, rate: float) -> bool:
        return self._set_if(0 <= rate <= 1, "tax_rate", float(rate))

    def set_currency(self, currency: str) -> bool:
        if currency is None or not currency.strip():
            return False
        return self._set_if(True, "currency", currency.strip().upper())

    def set_max_order_quantity(self, quantity: int) -> bool:
        return self._set_if(quantity > 0, "max_order_quantity", int(quantity))

    def set_max_order_value(self, value: float) -> bool:
        return self._set_if(value > 0, "max_order_value", float(value))

    def set_allow_rush_orders(self, allow: bool) -> bool:
        return self._set_if(True, "allow_rush_orders", bool(allow))

    def set_rush_order_surcharge(self, surcharge: float) -> bool:
        return self._set_if(surcharge >= 0, "rush_order_surcharge", float(surcharge))

    def _set_if(self, valid: bool, name: str, value: Any) -> bool:
        if not valid:
            return False
        with self._lock:
            setattr(self, name, value)
        return True

    # -------------------------------------------------------------------------
    # Bulk operations
    # -------------------------------------------------------------------------

    def reset_to_defaults(self) -> None:
        defaults = SystemConfig()
        with self._lock:
            for name, value in defaults.to_dict().items():
                setattr(self, name, value)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                f.name: getattr(self, f.name)
                for f in fields(self)
                if not f.name.startswith("_")
            }

    def summary(self) -> str:
        """Human-readable block of all settings, for admin screens."""
        values = self.to_dict()
        return (
            "SYSTEM CONFIGURATION SUMMARY\n"
            "=============================\n"
            "\n"
            "PRICING CONSTANTS:\n"
            f"- Electricity Cost: ${values['electricity_cost_per_hour']:.2f} per hour\n"
            f"- Machine Time Cost: ${values['machine_time_cost_per_hour']:.2f} per hour\n"
            f"- Base Setup Cost: ${values['base_setup_cost']:.2f}\n"
            "\n"
            "TAX & CURRENCY:\n"
            f"- Tax Rate: {values['tax_rate'] * 100:.1f}%\n"
            f"- Currency: {values['currency']}\n"
            "\n"
            "ORDER LIMITS:\n"
            f"- Max Order Quantity: {values['max_order_quantity']} items\n"
            f"- Max Order Value: ${values['max_order_value']:.2f}\n"
            "\n"
            "RUSH ORDER SETTINGS:\n"
            f"- Rush Orders Allowed: {'Yes' if values['allow_rush_orders'] else 'No'}\n"
            f"- Rush Order Surcharge: {values['rush_order_surcharge'] * 100:.1f}%\n"
        )
