"""Tests for AdminService and material validation."""

import pytest

from core.exceptions import InvalidMaterialError
from models.order import Order
from models.system_config import SystemConfig
from persistence.config_store import ConfigStore
from persistence.inventory_store import InventoryStore
from persistence.material_store import MaterialRegistry
from persistence.order_store import OrderRegistry
from services.admin_service import AdminService, validate_material
from services.inventory_service import Inventory


@pytest.fixture
def admin(file_manager):
    materials = MaterialRegistry(file_manager)
    return AdminService(
        materials,
        InventoryStore(file_manager, Inventory()),
        OrderRegistry(file_manager, materials=materials),
        ConfigStore(file_manager, SystemConfig()),
    )


class TestValidateMaterial:

    def test_valid(self):
        validate_material("PLA", 0.05, 200, "Blue")

    @pytest.mark.parametrize("name,cost,temp,color", [
        ("", 0.05, 200, "Blue"),
        ("   ", 0.05, 200, "Blue"),
        (None, 0.05, 200, "Blue"),
        ("PLA", 0.0, 200, "Blue"),
        ("PLA", 1000.01, 200, "Blue"),
        ("PLA", 0.05, 49, "Blue"),
        ("PLA", 0.05, 501, "Blue"),
        ("PLA", 0.05, 200, ""),
    ])
    def test_invalid(self, name, cost, temp, color):
        with pytest.raises(InvalidMaterialError):
            validate_material(name, cost, temp, color)

    def test_bounds_are_inclusive(self):
        validate_material("Cheap", 0.01, 50, "x")
        validate_material("Dear", 1000, 500, "x")


class TestMaterials:

    def test_add_material_seeds_stock_and_saves(self, admin, file_manager):
        material = admin.add_material("  Nylon ", 0.12, 260, " Black ")
        assert material.name == "Nylon"
        assert material.color == "Black"
        assert admin.inventory.get_stock("Nylon") == 1000
        assert admin.inventory.has_explicit_stock("Nylon")
        assert "Nylon|0.12|260|Black" in file_manager.read_file("materials.txt")
        assert "Nylon|1000" in file_manager.read_file("inventory.txt")

    def test_invalid_material_is_rejected(self, admin):
        assert admin.add_material("Bad", 5000, 200, "Red") is None
        assert admin.materials.count() == 0

    def test_duplicate_name_is_rejected(self, admin):
        admin.add_material("PLA", 0.05, 200, "Blue")
        admin.inventory.set_stock("PLA", 42)
        assert admin.add_material("PLA", 0.06, 210, "Red") is None
        assert admin.inventory.get_stock("PLA") == 42

    def test_rename_moves_stock_and_orders(self, admin):
        material = admin.add_material("PLA", 0.05, 200, "Blue")
        admin.set_stock("PLA", 300)
        order = Order(material=material, dimensions="1x1x1cm", quantity=1)
        admin.orders.add(order)

        assert admin.rename_material("PLA", "PLA+") is True
        assert admin.materials.get("PLA+") is material
        assert not admin.materials.exists("PLA")
        assert admin.inventory.get_stock("PLA+") == 300
        assert order.material.name == "PLA+"

    def test_rename_to_taken_or_blank_name_fails(self, admin):
        admin.add_material("PLA", 0.05, 200, "Blue")
        admin.add_material("ABS", 0.08, 250, "Red")
        assert admin.rename_material("PLA", "ABS") is False
        assert admin.rename_material("PLA", " ") is False
        assert admin.rename_material("missing", "New") is False
        assert admin.materials.get("PLA").name == "PLA"

    def test_set_stock(self, admin, file_manager):
        assert admin.set_stock("PETG", 250) is True
        assert "PETG|250" in file_manager.read_file("inventory.txt")
        assert admin.set_stock("PETG", -1) is False


class TestPricingRules:

    def test_modify_pricing_constants(self, admin, file_manager):
        assert admin.modify_pricing_constants(0.2, 3.0, 6.0) is True
        assert admin.config.electricity_cost_per_hour == 0.2
        assert admin.config.machine_time_cost_per_hour == 3.0
        assert admin.config.base_setup_cost == 6.0
        assert "base_setup_cost=6.0" in file_manager.read_file("system_config.txt")

    def test_invalid_constant_is_skipped(self, admin):
        assert admin.modify_pricing_constants(-1, 3.0, 6.0) is False
        assert admin.config.electricity_cost_per_hour == 0.15
        assert admin.config.machine_time_cost_per_hour == 3.0

    def test_update_tax_rate(self, admin):
        assert admin.update_tax_rate(0.1) is True
        assert admin.update_tax_rate(1.5) is False
        assert admin.config.tax_rate == 0.1

    def test_rush_policy(self, admin):
        assert admin.set_rush_policy(False, 0.5) is True
        assert admin.config.allow_rush_orders is False
        assert admin.config.rush_order_surcharge == 0.5
        assert admin.set_rush_policy(True, -0.1) is False
        assert admin.config.allow_rush_orders is True

    def test_order_limits(self, admin):
        assert admin.set_order_limits(max_quantity=10, max_value=50.0) is True
        assert admin.set_order_limits(max_quantity=0) is False
        assert admin.config.max_order_quantity == 10
        assert admin.config.max_order_value == 50.0

    def test_reset_configuration(self, admin):
        admin.update_tax_rate(0.3)
        assert admin.reset_configuration() is True
        assert admin.config == SystemConfig()

    def test_changes_survive_reload(self, admin, file_manager):
        admin.update_tax_rate(0.12)
        reloaded = SystemConfig()
        ConfigStore(file_manager, reloaded).load()
        assert reloaded.tax_rate == 0.12


class TestOversight:

    def test_view_all_orders(self, admin, pla):
        first = Order(material=pla, dimensions="1x1x1cm", quantity=1)
        second = Order(material=pla, dimensions="1x1x1cm", quantity=2)
        admin.orders.add(first)
        admin.orders.add(second)
        assert admin.view_all_orders() == [first, second]
