"""
Whole-system data management: save, load, backup sets and maintenance.

A backup set is every data file backed up under one shared timestamp,
e.g. ``materials_20250101_120000.txt``, ``orders_20250101_120000.txt``,
and so on. Sets are listed, described, restored and pruned by timestamp.

Files are handled in dependency order: configuration first (it affects
pricing), then materials and users, then inventory, then orders and the
print queue (orders re-bind to the loaded materials and users).
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional

from core.data_file_manager import TIMESTAMP_FORMAT, DataFileManager, base_name, parse_backup_name
from models.material import Material
from models.user import User
from persistence.config_store import ConfigStore
from persistence.inventory_store import InventoryStore
from persistence.material_store import MaterialRegistry
from persistence.order_store import OrderRegistry
from persistence.user_store import UserRegistry
from services.inventory_service import LOW_STOCK_THRESHOLD
from logging_config import get_logger


logger = get_logger(__name__)

DEFAULT_MATERIALS = (
    Material("PLA", 0.05, 200, "Blue"),
    Material("ABS", 0.08, 250, "Red"),
    Material("PETG", 0.07, 240, "Clear"),
)

DEFAULT_USERS = (
    User("admin", "admin@printflow.com", "admin"),
    User("john_doe", "john@example.com", "customer"),
    User("jane_smith", "jane@example.com", "vip"),
)

DEFAULT_STOCK = {"PLA": 5000, "ABS": 3000, "PETG": 2000}


class DataService:
    """
    Coordinates every store that shares one DataFileManager.

    Attributes:
        files: The shared DataFileManager
        config_store, materials, users, inventory_store, orders: The stores
    """

    def __init__(
        self,
        files: DataFileManager,
        config_store: ConfigStore,
        materials: MaterialRegistry,
        users: UserRegistry,
        inventory_store: InventoryStore,
        orders: OrderRegistry,
    ):
        self.files = files
        self.config_store = config_store
        self.materials = materials
        self.users = users
        self.inventory_store = inventory_store
        self.orders = orders

    @property
    def data_filenames(self) -> List[str]:
        """Every data file, in dependency order."""
        return [
            self.config_store.FILENAME,
            self.materials.FILENAME,
            self.users.FILENAME,
            self.inventory_store.FILENAME,
            self.orders.FILENAME,
            self.orders.QUEUE_FILENAME,
        ]

    # =========================================================================
    # SAVE / LOAD
    # =========================================================================

    def save_all(self) -> bool:
        results = {
            "configuration": self.config_store.save(),
            "materials": self.materials.save(),
            "users": self.users.save(),
            "inventory": self.inventory_store.save(),
            "orders": self.orders.save(),
        }
        return self._report("Save", results)

    def load_all(self) -> bool:
        results = {
            "configuration": self.config_store.load(),
            "materials": self.materials.load(),
            "users": self.users.load(),
            "inventory": self.inventory_store.load(),
            "orders": self.orders.load(),
        }
        return self._report("Load", results)

    @staticmethod
    def _report(operation: str, results: Dict[str, bool]) -> bool:
        failed = [name for name, ok in results.items() if not ok]
        if failed:
            logger.error(f"{operation} of all data FAILED for: {', '.join(failed)}")
            return False
        logger.info(f"{operation} of all data completed")
        return True

    # =========================================================================
    # BACKUP SETS
    # =========================================================================

    def backup_all(self) -> Optional[str]:
        """
        Back up every existing data file under one shared timestamp.

        Returns:
            The set's timestamp, or None if nothing could be backed up or
            any existing file failed to back up
        """
        when = self.files.now()
        # one timestamp for the whole set, free for every file in it
        while any(self.files.backup_exists(self.files.backup_filename_for(f, when)) for f in self.data_filenames):
            when += timedelta(seconds=1)
        timestamp = when.strftime(TIMESTAMP_FORMAT)

        backed_up = 0
        failed = []
        for filename in self.data_filenames:
            if not self.files.file_exists(filename):
                logger.debug(f"Skipping backup of {filename}: file does not exist")
                continue
            if self.files.create_backup_named(filename, when) is None:
                failed.append(filename)
            else:
                backed_up += 1

        if failed:
            logger.error(f"Backup set {timestamp} incomplete, failed: {', '.join(failed)}")
            return None
        if not backed_up:
            logger.warning("Nothing to back up")
            return None
        logger.info(f"Created backup set {timestamp} ({backed_up} files)")
        return timestamp

    def restore_all(self, timestamp: Optional[str] = None) -> bool:
        """
        Restore every data file from one backup set (or each file's latest
        backup when no timestamp is given), then reload everything.

        Files with no backup are reported as failures but do not stop the
        others from being restored.
        """
        results: Dict[str, bool] = {}
        for filename in self.data_filenames:
            if timestamp is None:
                results[filename] = self.files.restore_from_latest_backup(filename)
            else:
                backup_filename = f"{base_name(filename)}_{timestamp}.txt"
                results[filename] = self.files.restore_from_backup(backup_filename, filename)

        restored = self._report("Restore", results)
        loaded = self.load_all()
        return restored and loaded

    def list_backup_sets(self) -> List[str]:
        """Timestamps of all backup sets, oldest first."""
        known = {base_name(f) for f in self.data_filenames}
        timestamps = set()
        for name in self.files.list_backup_files():
            parts = parse_backup_name(name)
            if parts is not None and parts["base"] in known:
                timestamps.add(parts["timestamp"])
        return sorted(timestamps)

    def backup_set_info(self) -> Dict[str, Dict[str, Any]]:
        """
        Per backup set: which files it holds and their sizes.

        Returns:
            {timestamp: {"existing_files", "total_files", "complete",
            "<base>_size" for each present file}}
        """
        info: Dict[str, Dict[str, Any]] = {}
        for timestamp in self.list_backup_sets():
            entry: Dict[str, Any] = {}
            existing = 0
            for filename in self.data_filenames:
                base = base_name(filename)
                details = self.files.get_backup_info(f"{base}_{timestamp}.txt")
                if details is not None:
                    existing += 1
                    entry[f"{base}_size"] = details["file_size_bytes"]
            entry["existing_files"] = existing
            entry["total_files"] = len(self.data_filenames)
            entry["complete"] = existing == len(self.data_filenames)
            info[timestamp] = entry
        return info

    def cleanup_old_backup_sets(self, keep_count: int) -> int:
        """
        Delete whole backup sets, keeping the newest ``keep_count``.

        Returns:
            Number of backup files deleted
        """
        timestamps = self.list_backup_sets()
        keep_count = max(keep_count, 0)
        if len(timestamps) <= keep_count:
            logger.info(f"No cleanup needed, only {len(timestamps)} backup sets exist")
            return 0

        deleted = 0
        for timestamp in timestamps[: len(timestamps) - keep_count]:
            for filename in self.data_filenames:
                if self.files.delete_backup(f"{base_name(filename)}_{timestamp}.txt"):
                    deleted += 1
        logger.info(f"Backup set cleanup removed {deleted} files")
        return deleted

    def cleanup_all_old_backups(self, keep_count: int) -> int:
        """Per-file retention: keep the newest ``keep_count`` backups of each file."""
        return self.files.cleanup_all_old_backups(keep_count)

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def clear_all(self) -> None:
        """Empty every registry and reset the configuration (files are left alone)."""
        self.config_store.config.reset_to_defaults()
        self.materials.clear()
        self.users.clear()
        self.inventory_store.inventory.clear()
        self.orders.clear()
        logger.info("All in-memory data cleared")

    def initialize_with_default_data(self) -> bool:
        """
        Seed a fresh installation with starter materials, users and stock.

        Does nothing (and succeeds) if materials or users already exist.
        """
        self.config_store.create_default()

        if self.materials.count() > 0 or self.users.count() > 0:
            logger.info("System already has data, skipping initialization")
            return True

        for material in DEFAULT_MATERIALS:
            self.materials.add(Material(material.name, material.cost_per_gram, material.print_temp, material.color))
        for user in DEFAULT_USERS:
            self.users.add(User(user.username, user.email, user.role))
        inventory = self.inventory_store.inventory
        for name, grams in DEFAULT_STOCK.items():
            inventory.set_stock(name, grams)

        saved = self.save_all()
        logger.info(f"Default data initialization: {'SUCCESS' if saved else 'FAILED'}")
        return saved

    def health_check(self) -> bool:
        """
        Check that the data directory and configuration are usable and the
        system has materials, users and stock entries.

        Low stock is reported as a warning but does not fail the check.
        """
        checks = {
            "data directory": self.files.ensure_data_directory(),
            "backup directory": self.files.ensure_backup_directory(),
            "configuration file": self.config_store.file_exists() and self.config_store.validate_file(),
            "materials": self.materials.count() > 0,
            "users": self.users.count() > 0,
            "inventory": self.inventory_store.inventory.count() > 0,
        }
        for name, ok in checks.items():
            logger.info(f"Health check - {name}: {'OK' if ok else 'FAILED'}")

        low_stock = self.inventory_store.inventory.low_stock(LOW_STOCK_THRESHOLD)
        for material_name, grams in low_stock.items():
            logger.warning(f"Low stock: {material_name} has {grams} grams")

        logger.info(f"Orders: {self.orders.count()}, queue size: {self.orders.queue_size()}")

        healthy = all(checks.values())
        logger.info(f"System health check: {'HEALTHY' if healthy else 'ISSUES FOUND'}")
        return healthy

    def statistics(self) -> Dict[str, Any]:
        inventory = self.inventory_store.inventory
        return {
            "materials_count": self.materials.count(),
            "users_count": self.users.count(),
            "inventory_items_count": inventory.count(),
            "orders_count": self.orders.count(),
            "queue_size": self.orders.queue_size(),
            "total_inventory_value": inventory.total_value(self.materials.get_all()),
            "customer_count": len(self.users.get_by_role("customer")),
            "admin_count": len(self.users.get_by_role("admin")),
            "vip_count": len(self.users.get_by_role("vip")),
        }
