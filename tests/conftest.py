"""Shared fixtures for the PrintFlow test suite."""

from datetime import datetime, timedelta

import pytest

from core.data_file_manager import DataFileManager
from models.invoice import Invoice
from models.material import Material
from models.order import Order
from models.system_config import SystemConfig
from models.user import User


class StepClock:
    """Fake clock that moves forward one second per call."""

    def __init__(self, start=datetime(2025, 1, 1, 12, 0, 0), step=timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self):
        value = self.current
        self.current += self.step
        return value


@pytest.fixture(autouse=True)
def reset_id_sequences():
    """Every test starts with order IDs at 1000 and invoice IDs at 2000."""
    Order.reset_id_counter()
    Invoice.reset_id_counter()
    yield
    Order.reset_id_counter()
    Invoice.reset_id_counter()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def file_manager(tmp_path, clock):
    """DataFileManager rooted in a temporary directory."""
    return DataFileManager(tmp_path / "data", tmp_path / "backups", clock=clock)


@pytest.fixture
def system_config():
    return SystemConfig()


@pytest.fixture
def pla():
    return Material("PLA", 0.05, 200, "Blue")


@pytest.fixture
def cheap_material():
    return Material("Test", 0.02, 200, "White")


@pytest.fixture
def customer():
    return User("john_doe", "john@example.com", "customer")


@pytest.fixture
def vip_customer():
    return User("jane_smith", "jane@example.com", "vip")
