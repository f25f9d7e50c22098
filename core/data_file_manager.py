"""
Low-level file utility shared by every store.

Owns two directories: the data directory holding one text file per
entity type, and a separate backup directory holding timestamped copies
named ``<base>_<yyyyMMdd_HHmmss>.txt``. The timestamp is fixed-width and
zero-padded, so sorting backup names lexicographically sorts them
chronologically. A backup is never overwritten once written.

Failure policy:
    Disk trouble must never crash the business layer. Every public
    method catches OSError, logs it, and returns False / None / an empty
    list / 0 instead of raising.

Thread Safety:
    All writes, backups, restores and deletes run under one RLock, so two
    stores saving at the same moment never interleave on disk.
"""

from __future__ import annotations

import os
import re
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from logging_config import get_logger


logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
BACKUP_SUFFIX = ".txt"
TEMP_SUFFIX = ".tmp"

_BACKUP_NAME = re.compile(r"^(?P<base>.+)_(?P<timestamp>\d{8}_\d{6})\.txt$")


def base_name(filename: str) -> str:
    """``materials.txt`` -> ``materials``."""
    if filename.endswith(BACKUP_SUFFIX):
        return filename[: -len(BACKUP_SUFFIX)]
    return filename


def parse_backup_name(backup_filename: str) -> Optional[Dict[str, str]]:
    """
    Split a backup filename into its parts.

    Returns:
        {"base": ..., "timestamp": ..., "original_filename": ...} or None
        if the name does not follow the backup naming scheme
    """
    match = _BACKUP_NAME.match(backup_filename)
    if not match:
        return None
    return {
        "base": match.group("base"),
        "timestamp": match.group("timestamp"),
        "original_filename": match.group("base") + BACKUP_SUFFIX,
    }


class DataFileManager:
    """
    File I/O, backup, restore and retention for the flat-file data store.

    Attributes:
        data_dir: Directory holding the live data files
        backup_dir: Directory holding timestamped backups
    """

    def __init__(
        self,
        data_dir: Union[str, Path] = "data",
        backup_dir: Union[str, Path] = "backups",
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Args:
            data_dir: Data directory (created on first use)
            backup_dir: Backup directory (created on first use)
            clock: Source of "now" for backup timestamps; tests inject a
                fake clock to get distinct, predictable names
        """
        self.data_dir = Path(data_dir)
        self.backup_dir = Path(backup_dir)
        self.clock = clock
        self._lock = threading.RLock()

    # =========================================================================
    # DIRECTORIES
    # =========================================================================

    def ensure_data_directory(self) -> bool:
        return self._ensure_directory(self.data_dir, "data")

    def ensure_backup_directory(self) -> bool:
        return self._ensure_directory(self.backup_dir, "backup")

    @staticmethod
    def _ensure_directory(path: Path, label: str) -> bool:
        try:
            path.mkdir(parents=True, exist_ok=True)
            return path.is_dir()
        except OSError as e:
            logger.error(f"Error creating {label} directory {path}: {e}")
            return False

    # =========================================================================
    # DATA FILES
    # =========================================================================

    def get_file_path(self, filename: str) -> Path:
        return self.data_dir / filename

    def write_file(self, filename: str, data: str) -> bool:
        """
        Replace a data file with ``data``.

        The content is written to a temporary sibling first and then moved
        over the target, so readers never see a half-written file.
        """
        if not self.ensure_data_directory():
            return False

        target = self.get_file_path(filename)
        temp_path = target.with_name(target.name + TEMP_SUFFIX)
        with self._lock:
            try:
                with open(temp_path, "w", encoding="utf-8", newline="\n") as f:
                    f.write(data)
                os.replace(temp_path, target)
                return True
            except OSError as e:
                logger.error(f"Error writing to file {filename}: {e}")
                self._discard(temp_path)
                return False

    def read_file(self, filename: str) -> Optional[str]:
        """
        Read a data file.

        Returns:
            File contents, or None if the file does not exist or cannot be read
        """
        if not self.ensure_data_directory():
            return None

        path = self.get_file_path(filename)
        try:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading from file {filename}: {e}")
            return None

    def read_lines(self, filename: str) -> Optional[List[str]]:
        """
        Read a data file as text lines, decoding each line on its own.

        A line that is not valid UTF-8 is skipped with a warning; the rest
        of the file is still returned.

        Returns:
            The lines ([] if the file does not exist), or None if the file
            exists but could not be read
        """
        if not self.ensure_data_directory():
            return None

        path = self.get_file_path(filename)
        try:
            if not path.exists():
                return []
            raw = path.read_bytes()
        except OSError as e:
            logger.error(f"Error reading from file {filename}: {e}")
            return None

        lines: List[str] = []
        for number, raw_line in enumerate(raw.split(b"\n"), start=1):
            try:
                lines.append(raw_line.decode("utf-8").rstrip("\r"))
            except UnicodeDecodeError as e:
                logger.warning(f"Skipping undecodable line {number} in {filename}: {e}")
        return lines

    def file_exists(self, filename: str) -> bool:
        if not self.ensure_data_directory():
            return False
        return self.get_file_path(filename).is_file()

    def delete_file(self, filename: str) -> bool:
        if not self.ensure_data_directory():
            return False

        path = self.get_file_path(filename)
        with self._lock:
            try:
                if not path.exists():
                    return False
                path.unlink()
                return True
            except OSError as e:
                logger.error(f"Error deleting file {filename}: {e}")
                return False

    def list_data_files(self) -> List[str]:
        if not self.ensure_data_directory():
            return []
        try:
            return sorted(
                p.name for p in self.data_dir.iterdir()
                if p.is_file() and not p.name.endswith(TEMP_SUFFIX)
            )
        except OSError as e:
            logger.error(f"Error listing data files: {e}")
            return []

    # =========================================================================
    # BACKUPS
    # =========================================================================

    def now(self) -> datetime:
        """Current time as seen by backup naming."""
        return self.clock()

    def backup_filename_for(self, filename: str, when: Optional[datetime] = None) -> str:
        when = when or self.clock()
        return f"{base_name(filename)}_{when.strftime(TIMESTAMP_FORMAT)}{BACKUP_SUFFIX}"

    def create_backup(self, filename: str) -> bool:
        """
        Copy a data file into the backup directory under a timestamped name.

        Returns False without creating anything if the data file does not
        exist yet.
        """
        return self.create_backup_named(filename) is not None

    def backup_exists(self, backup_filename: str) -> bool:
        return (self.backup_dir / backup_filename).exists()

    def create_backup_named(self, filename: str, when: Optional[datetime] = None) -> Optional[str]:
        """
        Like create_backup(), but returns the backup filename (or None).

        An existing backup is never overwritten: if the name for ``when`` is
        taken, the timestamp moves forward one second until it is free.
        """
        if not self.ensure_backup_directory():
            return None

        source = self.get_file_path(filename)
        with self._lock:
            try:
                if not source.is_file():
                    logger.debug(f"No backup of {filename}: file does not exist")
                    return None
                when = when or self.clock()
                backup_filename = self.backup_filename_for(filename, when)
                while self.backup_exists(backup_filename):
                    when += timedelta(seconds=1)
                    backup_filename = self.backup_filename_for(filename, when)
                self._copy_atomic(source.read_bytes(), self.backup_dir / backup_filename)
                logger.info(f"Created backup {backup_filename}")
                return backup_filename
            except OSError as e:
                logger.error(f"Error creating backup for {filename}: {e}")
                return None

    def list_backup_files(self) -> List[str]:
        if not self.ensure_backup_directory():
            return []
        try:
            return sorted(
                p.name for p in self.backup_dir.iterdir()
                if p.is_file() and not p.name.endswith(TEMP_SUFFIX)
            )
        except OSError as e:
            logger.error(f"Error listing backup files: {e}")
            return []

    def list_backups_for_file(self, filename: str) -> List[str]:
        """
        Backups of one data file, oldest first.

        Only names of the exact form ``<base>_<yyyyMMdd_HHmmss>.txt``
        match, so ``orders`` never picks up ``orders_archive_...`` files.
        """
        base = base_name(filename)
        matches = []
        for name in self.list_backup_files():
            parts = parse_backup_name(name)
            if parts is not None and parts["base"] == base:
                matches.append(name)
        return sorted(matches)

    def restore_from_backup(self, backup_filename: str, target_filename: Optional[str] = None) -> bool:
        """
        Copy a backup over a data file.

        Whatever currently occupies the target is backed up first, so a
        restore can itself be undone.

        Args:
            backup_filename: Name of a file in the backup directory
            target_filename: Data file to overwrite; derived from the
                backup name when omitted

        Returns:
            True if the target now holds the backup's content
        """
        if not self.ensure_backup_directory() or not self.ensure_data_directory():
            return False

        backup_path = self.backup_dir / backup_filename
        with self._lock:
            try:
                if not backup_path.is_file():
                    logger.error(f"Backup file not found: {backup_filename}")
                    return False

                if target_filename is None:
                    parts = parse_backup_name(backup_filename)
                    target_filename = parts["original_filename"] if parts else backup_filename

                content = backup_path.read_bytes()

                target_path = self.get_file_path(target_filename)
                if target_path.exists():
                    self.create_backup_named(target_filename)

                self._copy_atomic(content, target_path)
                logger.info(f"Restored {backup_filename} to {target_filename}")
                return True
            except OSError as e:
                logger.error(f"Error restoring from backup {backup_filename}: {e}")
                return False

    def restore_from_latest_backup(self, filename: str) -> bool:
        backups = self.list_backups_for_file(filename)
        if not backups:
            logger.warning(f"No backups found for file: {filename}")
            return False
        return self.restore_from_backup(backups[-1], filename)

    def get_backup_info(self, backup_filename: str) -> Optional[Dict[str, Any]]:
        """
        Describe one backup file.

        Returns:
            Dictionary with original_filename, timestamp, date_time,
            formatted_date, file_size_bytes, file_size_kb and last_modified,
            or None if the backup does not exist
        """
        if not self.ensure_backup_directory():
            return None

        path = self.backup_dir / backup_filename
        try:
            if not path.is_file():
                return None
            stat = path.stat()
        except OSError as e:
            logger.error(f"Error getting backup info for {backup_filename}: {e}")
            return None

        info: Dict[str, Any] = {
            "backup_filename": backup_filename,
            "file_size_bytes": stat.st_size,
            "file_size_kb": stat.st_size / 1024.0,
            "last_modified": datetime.fromtimestamp(stat.st_mtime),
        }
        parts = parse_backup_name(backup_filename)
        if parts:
            info["original_filename"] = parts["original_filename"]
            info["timestamp"] = parts["timestamp"]
            try:
                taken_at = datetime.strptime(parts["timestamp"], TIMESTAMP_FORMAT)
                info["date_time"] = taken_at
                info["formatted_date"] = taken_at.strftime("%Y-%m-%d %H:%M:%S")
            except ValueError:
                info["date_time"] = None
                info["formatted_date"] = "Unknown"
        return info

    def delete_backup(self, backup_filename: str) -> bool:
        path = self.backup_dir / backup_filename
        with self._lock:
            try:
                if not path.is_file():
                    return False
                path.unlink()
                logger.info(f"Deleted old backup: {backup_filename}")
                return True
            except OSError as e:
                logger.error(f"Error deleting backup {backup_filename}: {e}")
                return False

    def cleanup_old_backups(self, filename: str, keep_count: int) -> int:
        """
        Delete the oldest backups of ``filename`` beyond ``keep_count``.

        Returns:
            Number of backups deleted (0 if already at or below keep_count)
        """
        keep_count = max(keep_count, 0)
        backups = self.list_backups_for_file(filename)
        if len(backups) <= keep_count:
            return 0

        deleted = 0
        for backup_filename in backups[: len(backups) - keep_count]:
            if self.delete_backup(backup_filename):
                deleted += 1
        return deleted

    def cleanup_all_old_backups(self, keep_count: int) -> int:
        """Apply cleanup_old_backups() to every file in the data directory."""
        total = 0
        for filename in self.list_data_files():
            total += self.cleanup_old_backups(filename, keep_count)
        if total:
            logger.info(f"Backup cleanup removed {total} files (keeping {keep_count} per file)")
        return total

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _copy_atomic(content: bytes, destination: Path) -> None:
        temp_path = destination.with_name(destination.name + TEMP_SUFFIX)
        try:
            temp_path.write_bytes(content)
            os.replace(temp_path, destination)
        except OSError:
            DataFileManager._discard(temp_path)
            raise

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove temporary file {path}: {e}")
