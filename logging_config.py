"""
Logging setup for PrintFlow.

All loggers live under the ``printflow`` namespace and every line names
the thread that wrote it, since orders, stock consumption and file saves
can run on several submitter threads at once:

    2025-12-03 10:15:31 [WARNING ] [Submit-2] printflow.services.order_service - Rejected order

Call setup_logging() once from the app factory; modules only need
``logger = get_logger(__name__)``.
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union


ROOT_LOGGER_NAME = "printflow"

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(thread_name)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class ThreadContextFilter(logging.Filter):
    """Stamps ``thread_name`` and ``thread_id`` on each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        record.thread_id = threading.get_ident()
        return True


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def setup_logging(
    app_name: str = ROOT_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure the ``printflow`` logger tree.

    Logs always go to stdout. With file logging on, everything also goes
    to ``<log_dir>/<app_name>.log`` and errors to ``<app_name>_error.log``.
    Calling this again replaces the previous handlers.

    Args:
        app_name: Root logger name
        log_level: Minimum level for stdout and the main log file
        log_dir: Where log files go (default: ./logs beside this module)
        enable_file_logging: Write log files as well as stdout

    Returns:
        The configured root logger
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    handlers = []
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    app_log_file = None
    if enable_file_logging:
        log_dir = Path(log_dir) if log_dir is not None else Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        app_log_file = log_dir / f"{app_name}.log"
        handlers.append(_rotating_handler(app_log_file, log_level))
        handlers.append(_rotating_handler(log_dir / f"{app_name}_error.log", logging.ERROR))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    thread_filter = ThreadContextFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(thread_filter)
        logger.addHandler(handler)

    if app_log_file is not None:
        logger.info(f"File logging enabled: {app_log_file}")
    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, e.g. ``printflow.persistence.order_store``."""
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_thread_name(name: str) -> None:
    """Rename the current thread; the name shows up in every log line it writes."""
    threading.current_thread().name = name
