"""
File-backed stores and registries.

FileBackedStore ties one data file to the shared DataFileManager and
provides the backup/restore plumbing every store needs.
FileBackedRegistry adds an ordered, lock-guarded in-memory collection
keyed by a natural key, with CRUD plus save/load in the pipe-delimited
record format.

Subclasses provide:
    FILENAME     - data file name, e.g. 'materials.txt'
    TITLE        - first header line
    FORMAT_SPEC  - field list written to the header
    MIN_FIELDS   - fields a line needs to be decoded
    key_of(), serialize(), deserialize()

Load semantics:
    load() reads the file, then replaces the registry contents. A missing
    or empty file loads as zero entries and counts as success. A line that
    cannot be decoded (bad fields or invalid UTF-8) is skipped with a
    warning; the rest of the file still loads. A file that exists but
    cannot be read makes load() return False and leaves the registry as
    it was, so a later save() cannot overwrite the file with nothing.
"""

from __future__ import annotations

import threading
from typing import Dict, Generic, Hashable, List, Optional, Sequence, TypeVar

from core.data_file_manager import DataFileManager
from core.exceptions import RecordFormatError
from core.record_codec import build_header, decode_record, encode_record, iter_data_lines
from logging_config import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class FileBackedStore:
    """One data file plus its backups."""

    FILENAME: str = ""
    TITLE: str = ""
    FORMAT_SPEC: str = ""

    def __init__(self, file_manager: DataFileManager):
        self._files = file_manager
        self._lock = threading.RLock()

    @property
    def file_manager(self) -> DataFileManager:
        return self._files

    @property
    def file_path(self) -> str:
        return str(self._files.get_file_path(self.FILENAME))

    def file_exists(self) -> bool:
        return self._files.file_exists(self.FILENAME)

    def backup(self) -> bool:
        return self._files.create_backup(self.FILENAME)

    def list_backups(self) -> List[str]:
        return self._files.list_backups_for_file(self.FILENAME)

    def restore(self, backup_filename: str) -> bool:
        """Copy a backup over the data file and reload from it."""
        with self._lock:
            if not self._files.restore_from_backup(backup_filename, self.FILENAME):
                return False
            return self.load()

    def restore_latest(self) -> bool:
        with self._lock:
            if not self._files.restore_from_latest_backup(self.FILENAME):
                return False
            return self.load()

    def save(self) -> bool:
        raise NotImplementedError

    def load(self) -> bool:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Helpers for subclasses
    # -------------------------------------------------------------------------

    def _write_records(self, records: Sequence[Sequence[object]], filename: Optional[str] = None) -> bool:
        lines = [build_header(self.TITLE, self.FORMAT_SPEC)]
        lines.extend(encode_record(fields) + "\n" for fields in records)
        return self._files.write_file(filename or self.FILENAME, "".join(lines))

    def _read_lines(self, filename: Optional[str] = None) -> Optional[List[str]]:
        """Data lines of the file; empty if it is missing, None if it could not be read."""
        lines = self._files.read_lines(filename or self.FILENAME)
        if lines is None:
            return None
        return list(iter_data_lines("\n".join(lines)))


class FileBackedRegistry(FileBackedStore, Generic[T]):
    """
    Ordered in-memory collection of one entity type, persisted to one file.

    Entities keep insertion order, so save() writes them back in the order
    they were added (or loaded).
    """

    MIN_FIELDS: int = 1

    def __init__(self, file_manager: DataFileManager):
        super().__init__(file_manager)
        self._items: Dict[Hashable, T] = {}

    # -------------------------------------------------------------------------
    # Entity mapping (subclass hooks)
    # -------------------------------------------------------------------------

    def key_of(self, entity: T) -> Hashable:
        raise NotImplementedError

    def serialize(self, entity: T) -> Sequence[object]:
        raise NotImplementedError

    def deserialize(self, fields: List[str], line: str) -> T:
        """Build an entity from decoded fields. Raises RecordFormatError."""
        raise NotImplementedError

    def validate(self, entity: T) -> bool:
        return True

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def add(self, entity: Optional[T]) -> bool:
        """Register an entity. Duplicates (by natural key) are rejected, not overwritten."""
        if entity is None or not self.validate(entity):
            return False
        key = self.key_of(entity)
        with self._lock:
            if key in self._items:
                logger.debug(f"{type(self).__name__}: duplicate key {key!r} rejected")
                return False
            self._items[key] = entity
        return True

    def get(self, key: Hashable) -> Optional[T]:
        with self._lock:
            return self._items.get(key)

    def get_all(self) -> List[T]:
        with self._lock:
            return list(self._items.values())

    def exists(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._items

    def remove(self, key: Hashable) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def update(self, key: Hashable, entity: T) -> bool:
        """
        Replace the entity stored under ``key``, keeping its position.

        The replacement may carry a different key as long as that key is
        not already taken by another entity.
        """
        if entity is None or not self.validate(entity):
            return False
        new_key = self.key_of(entity)
        with self._lock:
            if key not in self._items:
                return False
            if new_key != key and new_key in self._items:
                return False
            self._items = {
                (new_key if k == key else k): (entity if k == key else v)
                for k, v in self._items.items()
            }
        return True

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self) -> bool:
        with self._lock:
            records = [self.serialize(entity) for entity in self._items.values()]
            saved = self._write_records(records)
        if saved:
            logger.info(f"Saved {len(records)} records to {self.FILENAME}")
        return saved

    def load(self) -> bool:
        with self._lock:
            lines = self._read_lines()
            if lines is None:
                logger.error(f"Could not read {self.FILENAME}, keeping {len(self._items)} records in memory")
                return False

            self._items.clear()
            loaded = 0
            skipped = 0
            for line in lines:
                try:
                    entity = self.deserialize(decode_record(line, self.MIN_FIELDS), line)
                except RecordFormatError as e:
                    logger.warning(f"Skipping bad line in {self.FILENAME}: {e}")
                    skipped += 1
                    continue
                if not self.add(entity):
                    logger.warning(f"Skipping duplicate or invalid record in {self.FILENAME}: {line}")
                    skipped += 1
                    continue
                loaded += 1

        if skipped:
            logger.warning(f"Loaded {loaded} records from {self.FILENAME} ({skipped} skipped)")
        else:
            logger.info(f"Loaded {loaded} records from {self.FILENAME}")
        return True
