"""
Persists SystemConfig to system_config.txt.

Unlike the entity files this one is a ``key=value`` file with section
comments, so administrators can read and edit it by hand:

    # PRICING CONSTANTS
    electricity_cost_per_hour=0.15
    ...

Values go through the SystemConfig setters on load, so an out-of-range
value in the file is ignored (and reported) rather than applied.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Dict, Optional

from core.data_file_manager import DataFileManager
from core.record_codec import COMMENT_PREFIX, FORMAT_VERSION
from models.system_config import SystemConfig
from persistence.base import FileBackedStore
from logging_config import get_logger


logger = get_logger(__name__)

KEY_VALUE_SEPARATOR = "="
_VALID_KEY = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")

REQUIRED_KEYS = (
    "electricity_cost_per_hour",
    "machine_time_cost_per_hour",
    "base_setup_cost",
    "tax_rate",
    "currency",
    "max_order_quantity",
    "max_order_value",
    "allow_rush_orders",
    "rush_order_surcharge",
)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_str(value: str) -> str:
    return value


_PARSERS: Dict[str, Callable[[str], object]] = {
    "electricity_cost_per_hour": float,
    "machine_time_cost_per_hour": float,
    "base_setup_cost": float,
    "tax_rate": float,
    "currency": _parse_str,
    "max_order_quantity": int,
    "max_order_value": float,
    "allow_rush_orders": _parse_bool,
    "rush_order_surcharge": float,
}


def parse_config_text(text: str) -> Dict[str, str]:
    """Collect ``key=value`` pairs, skipping comments, blank lines and invalid keys."""
    values: Dict[str, str] = {}
    for raw in text.split("\n"):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX) or KEY_VALUE_SEPARATOR not in line:
            continue
        key, value = line.split(KEY_VALUE_SEPARATOR, 1)
        key = key.strip()
        if not _VALID_KEY.match(key):
            logger.warning(f"Invalid configuration key: {key!r}")
            continue
        values[key] = value.strip()
    return values


class ConfigStore(FileBackedStore):
    """File handler for a SystemConfig instance."""

    FILENAME = "system_config.txt"

    def __init__(self, file_manager: DataFileManager, config: SystemConfig):
        super().__init__(file_manager)
        self.config = config

    def render(self, generated_at: Optional[datetime] = None) -> str:
        values = self.config.to_dict()
        generated_at = generated_at or datetime.now()

        def kv(key: str) -> str:
            value = values[key]
            if isinstance(value, bool):
                value = str(value).lower()
            return f"{key}{KEY_VALUE_SEPARATOR}{value}\n"

        return (
            "# System Configuration File\n"
            f"# Format-Version: {FORMAT_VERSION}\n"
            "# Format: key=value (one per line)\n"
            "# Lines starting with # are comments\n"
            f"# Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
            "\n"
            "# PRICING CONSTANTS\n"
            + kv("electricity_cost_per_hour")
            + kv("machine_time_cost_per_hour")
            + kv("base_setup_cost")
            + "\n# TAX & CURRENCY\n"
            + kv("tax_rate")
            + kv("currency")
            + "\n# ORDER LIMITS\n"
            + kv("max_order_quantity")
            + kv("max_order_value")
            + "\n# RUSH ORDER SETTINGS\n"
            + kv("allow_rush_orders")
            + kv("rush_order_surcharge")
        )

    def save(self) -> bool:
        with self._lock:
            saved = self._files.write_file(self.FILENAME, self.render())
        if saved:
            logger.info(f"Saved system configuration to {self.FILENAME}")
        return saved

    def create_default(self) -> bool:
        """Write the current settings only if no configuration file exists yet."""
        if self.file_exists():
            return True
        return self.save()

    def load(self) -> bool:
        """
        Apply the file's settings to the config.

        A missing file leaves the current settings (normally the defaults)
        in effect and counts as success. Unknown keys and values the
        setters reject are logged and skipped; the rest still apply.

        Returns:
            False if the file could not be read (nothing is applied) or any
            value in it could not be applied
        """
        with self._lock:
            lines = self._files.read_lines(self.FILENAME)
            if lines is None:
                logger.error(f"Could not read {self.FILENAME}, keeping the current settings")
                return False
            if not lines and not self.file_exists():
                logger.info(f"{self.FILENAME} not found, using default settings")
                return True

            all_applied = True
            for key, value in parse_config_text("\n".join(lines)).items():
                if not self._apply(key, value):
                    logger.warning(f"Ignoring configuration {key}={value}")
                    all_applied = False
        logger.info(f"Loaded system configuration from {self.FILENAME}")
        return all_applied

    def _apply(self, key: str, value: str) -> bool:
        parser = _PARSERS.get(key)
        if parser is None:
            return False
        try:
            parsed = parser(value)
        except ValueError:
            return False
        setter = getattr(self.config, f"set_{key}")
        return setter(parsed)

    def validate_file(self) -> bool:
        """True if the file exists, has every required key and every value parses."""
        text = self._files.read_file(self.FILENAME)
        if text is None:
            return False

        values = parse_config_text(text)
        for key in REQUIRED_KEYS:
            if key not in values:
                logger.warning(f"Missing required configuration key: {key}")
                return False
        for key, value in values.items():
            parser = _PARSERS.get(key)
            if parser is None:
                continue
            try:
                parser(value)
            except ValueError:
                logger.warning(f"Invalid value for configuration key {key}: {value}")
                return False
        return True

    def status(self) -> str:
        exists = self.file_exists()
        lines = [
            "CONFIGURATION FILE STATUS",
            "========================",
            f"File exists: {'Yes' if exists else 'No'}",
        ]
        if exists:
            lines.append(f"File path: {self.file_path}")
            lines.append(f"File valid: {'Yes' if self.validate_file() else 'No'}")
        return "\n".join(lines) + "\n"
