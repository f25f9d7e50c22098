"""
Flat-file persistence for PrintFlow.

One store per data file, all sharing a DataFileManager:
- MaterialRegistry: materials.txt
- UserRegistry: users.txt
- OrderRegistry: orders.txt and order_queue.txt
- InventoryStore: inventory.txt
- ConfigStore: system_config.txt
"""

from .base import FileBackedRegistry, FileBackedStore
from .material_store import MaterialRegistry
from .user_store import UserRegistry
from .order_store import OrderRegistry
from .inventory_store import InventoryStore
from .config_store import ConfigStore

__all__ = [
    "FileBackedRegistry",
    "FileBackedStore",
    "MaterialRegistry",
    "UserRegistry",
    "OrderRegistry",
    "InventoryStore",
    "ConfigStore",
]
