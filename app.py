"""
PrintFlow - application entry point.

This is a slim app factory that:
1. Configures logging for the selected environment
2. Creates the shared DataFileManager and one store per data file
3. Creates the order, admin and data services around them
4. Loads all persisted data (seeding starter data on a fresh install)
5. Registers a save-on-exit hook

The GUI and CLI front ends call create_app() once and use the services
on the returned PrintFlowApp. Nothing is stored in module globals.
"""

from __future__ import annotations

import atexit
import logging
import sys
from dataclasses import dataclass
from typing import Optional, Type

from config import Config, get_config
from core.data_file_manager import DataFileManager
from models.system_config import SystemConfig
from persistence.config_store import ConfigStore
from persistence.inventory_store import InventoryStore
from persistence.material_store import MaterialRegistry
from persistence.order_store import OrderRegistry
from persistence.user_store import UserRegistry
from services.admin_service import AdminService
from services.data_service import DataService
from services.inventory_service import Inventory
from services.order_service import OrderService
from logging_config import setup_logging, get_logger


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


@dataclass
class PrintFlowApp:
    """Everything a front end needs, wired together."""

    settings: Type[Config]
    system_config: SystemConfig
    files: DataFileManager
    inventory: Inventory
    materials: MaterialRegistry
    users: UserRegistry
    orders: OrderRegistry
    order_service: OrderService
    admin_service: AdminService
    data_service: DataService

    def shutdown(self) -> bool:
        """Persist everything and prune old backups."""
        logger.info("Shutting down...")
        saved = self.data_service.save_all()
        self.files.cleanup_all_old_backups(self.settings.BACKUP_KEEP_COUNT)
        logger.info("Shutdown complete")
        return saved


def create_app(config_class: Optional[Type[Config]] = None, register_exit_hook: bool = True) -> PrintFlowApp:
    """
    Application factory - builds and loads a PrintFlowApp.

    Args:
        config_class: Settings class; chosen from PRINTFLOW_ENV when omitted
        register_exit_hook: Save all data when the interpreter exits

    Returns:
        Loaded application
    """
    settings = config_class or get_config()

    log_level = logging.DEBUG if settings.DEBUG else logging.INFO
    setup_logging(
        log_level=log_level,
        log_dir=settings.LOG_DIR,
        enable_file_logging=settings.ENABLE_FILE_LOGGING,
    )
    logger.info(f"Starting PrintFlow in {settings.ENVIRONMENT} mode")

    # =========================================================================
    # STORAGE
    # =========================================================================

    files = DataFileManager(settings.DATA_DIR, settings.BACKUP_DIR)
    files.ensure_data_directory()
    files.ensure_backup_directory()

    system_config = SystemConfig()
    inventory = Inventory()

    config_store = ConfigStore(files, system_config)
    materials = MaterialRegistry(files)
    users = UserRegistry(files)
    inventory_store = InventoryStore(files, inventory)
    orders = OrderRegistry(files, users=users, materials=materials)

    # =========================================================================
    # SERVICES
    # =========================================================================

    data_service = DataService(files, config_store, materials, users, inventory_store, orders)
    order_service = OrderService(orders, inventory, system_config)
    admin_service = AdminService(materials, inventory_store, orders, config_store)

    if not data_service.load_all():
        logger.warning("Some data could not be loaded; continuing with what was read")

    if settings.SEED_DEFAULT_DATA:
        data_service.initialize_with_default_data()

    app = PrintFlowApp(
        settings=settings,
        system_config=system_config,
        files=files,
        inventory=inventory,
        materials=materials,
        users=users,
        orders=orders,
        order_service=order_service,
        admin_service=admin_service,
        data_service=data_service,
    )

    # =========================================================================
    # CLEANUP REGISTRATION
    # =========================================================================

    if register_exit_hook:
        atexit.register(app.shutdown)

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    healthy = app.data_service.health_check()
    for key, value in app.data_service.statistics().items():
        logger.info(f"{key}: {value}")
    sys.exit(0 if healthy else 1)
