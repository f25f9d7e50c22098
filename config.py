"""
Configuration for PrintFlow.

Environment settings only: where the data and backup files live, how many
backups to keep, and how to log. Pricing and business rules are NOT here;
they are persisted in system_config.txt and edited by administrators
(see models.system_config).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env early so the Config class below sees the values
load_dotenv(override=False)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default configuration."""

    ENVIRONMENT = os.environ.get("PRINTFLOW_ENV", "development")
    DEBUG = _env_flag("PRINTFLOW_DEBUG", "1")
    TESTING = False

    # Flat-file storage
    DATA_DIR = os.environ.get("PRINTFLOW_DATA_DIR", str(BASE_DIR / "data"))
    BACKUP_DIR = os.environ.get("PRINTFLOW_BACKUP_DIR", str(BASE_DIR / "backups"))

    # Number of timestamped backups kept per data file when pruning
    BACKUP_KEEP_COUNT = int(os.environ.get("PRINTFLOW_BACKUP_KEEP", "5"))

    # Seed demo materials/users on first start when the registries are empty
    SEED_DEFAULT_DATA = _env_flag("PRINTFLOW_SEED_DEFAULTS", "1")

    # Logging
    LOG_DIR = os.environ.get("PRINTFLOW_LOG_DIR", str(BASE_DIR / "logs"))
    ENABLE_FILE_LOGGING = _env_flag("PRINTFLOW_FILE_LOGGING", "0")


class ProductionConfig(Config):
    """Production configuration."""
    ENVIRONMENT = "production"
    DEBUG = False
    TESTING = False
    ENABLE_FILE_LOGGING = True
    SEED_DEFAULT_DATA = False


class DevelopmentConfig(Config):
    """Development configuration."""
    ENVIRONMENT = "development"
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    ENVIRONMENT = "testing"
    DEBUG = False
    TESTING = True
    ENABLE_FILE_LOGGING = False
    SEED_DEFAULT_DATA = False


CONFIG_BY_ENVIRONMENT = {
    "production": ProductionConfig,
    "development": DevelopmentConfig,
    "testing": TestingConfig,
}


def get_config(environment=None):
    """Settings class for ``environment`` (default: PRINTFLOW_ENV)."""
    name = (environment or os.environ.get("PRINTFLOW_ENV", "development")).strip().lower()
    return CONFIG_BY_ENVIRONMENT.get(name, DevelopmentConfig)
