"""Persists the explicit entries of the stock ledger to inventory.txt."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from core.data_file_manager import DataFileManager
from core.exceptions import RecordFormatError
from core.record_codec import decode_record, parse_int
from persistence.base import FileBackedStore
from logging_config import get_logger

if TYPE_CHECKING:
    from services.inventory_service import Inventory


logger = get_logger(__name__)


class InventoryStore(FileBackedStore):
    """
    File handler for an Inventory ledger.

    Materials without an explicit entry are not written, so they keep
    reporting the default stock after a reload.
    """

    FILENAME = "inventory.txt"
    TITLE = "Inventory Data Export"
    FORMAT_SPEC = "materialName|stockGrams"

    def __init__(self, file_manager: DataFileManager, inventory: Inventory):
        super().__init__(file_manager)
        self.inventory = inventory

    def save(self) -> bool:
        with self._lock:
            stock = self.inventory.all_stock()
            saved = self._write_records([[name, grams] for name, grams in stock.items()])
        if saved:
            logger.info(f"Saved {len(stock)} inventory entries to {self.FILENAME}")
        return saved

    def load(self) -> bool:
        """
        Replace the ledger with the file's entries. Bad lines are skipped.

        Returns False and leaves the ledger untouched if the file cannot be read.
        """
        with self._lock:
            lines = self._read_lines()
            if lines is None:
                logger.error(f"Could not read {self.FILENAME}, keeping the current stock levels")
                return False

            stock: Dict[str, int] = {}
            for line in lines:
                try:
                    fields = decode_record(line, 2)
                    name = fields[0]
                    grams = parse_int(fields[1], "stockGrams", line)
                    if not name or grams < 0:
                        raise RecordFormatError(line, "material name is empty or stock is negative")
                except RecordFormatError as e:
                    logger.warning(f"Skipping bad line in {self.FILENAME}: {e}")
                    continue
                stock[name] = grams
            self.inventory.replace_all(stock)
        logger.info(f"Loaded {len(stock)} inventory entries from {self.FILENAME}")
        return True
