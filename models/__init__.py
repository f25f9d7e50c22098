"""
Data models for PrintFlow.

This module contains the dataclasses for:
- Material: printable material, keyed by name
- User: customer or administrator identity and role
- Order: a print job with pricing, status and priority
- Invoice: frozen billing snapshot of an order
- SystemConfig: pricing constants and business rules
"""

from .material import Material
from .user import User
from .order import Order, OrderPriority, OrderStatus
from .invoice import Invoice
from .system_config import SystemConfig

__all__ = [
    "Material",
    "User",
    # Order models
    "Order",
    "OrderPriority",
    "OrderStatus",
    "Invoice",
    "SystemConfig",
]
