"""
Services layer for PrintFlow.

This module contains the business logic services:
- Inventory: material stock ledger (default 1000g per material)
- OrderService: order placement, status updates and invoicing
- AdminService: materials and pricing rules
- DataService: save/load of all stores, backup sets and maintenance

Services receive their stores and SystemConfig explicitly; nothing here
is process-global.
"""

from .inventory_service import Inventory, DEFAULT_STOCK_GRAMS
from .order_service import OrderService, InvoiceLedger
from .admin_service import AdminService, validate_material
from .data_service import DataService

__all__ = [
    "Inventory",
    "DEFAULT_STOCK_GRAMS",
    "OrderService",
    "InvoiceLedger",
    "AdminService",
    "validate_material",
    "DataService",
]
