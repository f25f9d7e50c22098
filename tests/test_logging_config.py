"""Tests for the logging setup."""

import logging
import threading

import pytest

from logging_config import get_logger, set_thread_name, setup_logging


@pytest.fixture
def root_logger():
    logger = logging.getLogger("printflow")
    yield logger
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


class TestSetupLogging:

    def test_console_only(self, root_logger):
        setup_logging(enable_file_logging=False)
        assert len(root_logger.handlers) == 1
        assert root_logger.propagate is False

    def test_file_logs_and_error_log(self, root_logger, tmp_path):
        setup_logging(log_dir=str(tmp_path / "logs"))
        get_logger("tests").error("disk on fire")
        get_logger("tests").info("all quiet")
        for handler in root_logger.handlers:
            handler.flush()

        full_log = (tmp_path / "logs" / "printflow.log").read_text()
        error_log = (tmp_path / "logs" / "printflow_error.log").read_text()
        assert f"[{threading.current_thread().name}] printflow.tests - disk on fire" in full_log
        assert "all quiet" in full_log
        assert "disk on fire" in error_log
        assert "all quiet" not in error_log

    def test_setup_again_replaces_handlers(self, root_logger, tmp_path):
        setup_logging(log_dir=tmp_path)
        setup_logging(enable_file_logging=False)
        assert len(root_logger.handlers) == 1


class TestLoggers:

    def test_names_are_under_printflow(self):
        assert get_logger("services.order_service").name == "printflow.services.order_service"
        assert get_logger("printflow.app").name == "printflow.app"

    def test_thread_name_is_logged(self, root_logger, tmp_path):
        setup_logging(log_dir=tmp_path)

        def work():
            set_thread_name("Submit-7")
            get_logger("tests").info("placed")

        worker = threading.Thread(target=work)
        worker.start()
        worker.join()
        for handler in root_logger.handlers:
            handler.flush()
        assert "[Submit-7] printflow.tests - placed" in (tmp_path / "printflow.log").read_text()
