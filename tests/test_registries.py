"""
Tests for the file-backed registries and stores.

Round trips go through real files in tmp_path: save, clear, load, and
compare the entity sets.
"""

from unittest.mock import patch

import pytest

from models.material import Material
from models.order import Order
from models.system_config import SystemConfig
from models.user import User
from persistence.config_store import ConfigStore
from persistence.inventory_store import InventoryStore
from persistence.material_store import MaterialRegistry
from persistence.order_store import OrderRegistry
from persistence.user_store import UserRegistry
from services.inventory_service import Inventory


# Fixtures

@pytest.fixture
def materials(file_manager):
    return MaterialRegistry(file_manager)


@pytest.fixture
def users(file_manager):
    return UserRegistry(file_manager)


@pytest.fixture
def orders(file_manager, users, materials):
    return OrderRegistry(file_manager, users=users, materials=materials)


def unreadable_files():
    """Every data file exists but reading it fails."""
    return patch("pathlib.Path.read_bytes", side_effect=OSError("Input/output error"))


def data_lines(file_manager, filename):
    text = file_manager.read_file(filename) or ""
    return [line for line in text.splitlines() if line and not line.startswith("#")]


class TestRegistryCrud:
    """CRUD behaviour shared by every registry (exercised on materials)."""

    def test_add_and_get(self, materials, pla):
        assert materials.add(pla) is True
        assert materials.get("PLA") is pla
        assert materials.exists("PLA")
        assert materials.count() == 1

    def test_duplicate_is_rejected_without_overwrite(self, materials, pla):
        materials.add(pla)
        assert materials.add(Material("PLA", 9.99, 100, "Black")) is False
        assert materials.get("PLA").cost_per_gram == 0.05

    def test_add_none(self, materials):
        assert materials.add(None) is False

    def test_get_all_keeps_insertion_order(self, materials):
        for name in ("PETG", "ABS", "PLA"):
            materials.add(Material(name, 0.05, 200, "x"))
        assert [m.name for m in materials.get_all()] == ["PETG", "ABS", "PLA"]

    def test_remove(self, materials, pla):
        materials.add(pla)
        assert materials.remove("PLA") is True
        assert materials.remove("PLA") is False
        assert materials.count() == 0

    def test_update_keeps_position(self, materials):
        for name in ("A", "B", "C"):
            materials.add(Material(name, 0.05, 200, "x"))
        assert materials.update("B", Material("B2", 0.06, 210, "y")) is True
        assert [m.name for m in materials.get_all()] == ["A", "B2", "C"]

    def test_update_rejects_taken_key(self, materials):
        materials.add(Material("A", 0.05, 200, "x"))
        materials.add(Material("B", 0.05, 200, "x"))
        assert materials.update("A", Material("B", 0.07, 200, "x")) is False
        assert materials.update("missing", Material("Z", 0.07, 200, "x")) is False

    def test_clear(self, materials, pla):
        materials.add(pla)
        materials.clear()
        assert materials.get_all() == []


class TestMaterialRegistryPersistence:

    def test_round_trip(self, materials, file_manager):
        originals = [
            Material("PLA", 0.05, 200, "Blue"),
            Material("Weird|Name", 0.1234, 215, "Line\nBreak"),
            Material("#Hash", 1.0, 300, ""),
        ]
        for m in originals:
            materials.add(m)
        assert materials.save() is True

        materials.clear()
        assert materials.load() is True
        assert [m.to_dict() for m in materials.get_all()] == [m.to_dict() for m in originals]

    def test_save_then_load_reproduces_file(self, materials, file_manager, pla):
        materials.add(pla)
        materials.save()
        first = data_lines(file_manager, "materials.txt")
        materials.load()
        materials.save()
        assert data_lines(file_manager, "materials.txt") == first

    def test_header_has_format_version(self, materials, file_manager, pla):
        materials.add(pla)
        materials.save()
        text = file_manager.read_file("materials.txt")
        assert "# Format-Version: 1" in text
        assert "# Format: name|costPerGram|printTemp|color" in text

    def test_missing_file_loads_empty(self, materials, pla):
        materials.add(pla)
        assert materials.load() is True
        assert materials.count() == 0

    def test_empty_file_loads_empty(self, materials, file_manager):
        file_manager.write_file("materials.txt", "")
        assert materials.load() is True
        assert materials.count() == 0

    def test_bad_lines_are_skipped(self, materials, file_manager):
        file_manager.write_file(
            "materials.txt",
            "# header\n"
            "PLA|0.05|200|Blue\n"
            "broken line\n"
            "ABS|not-a-number|250|Red\n"
            "PETG|0.07|240|Clear\n",
        )
        assert materials.load() is True
        assert [m.name for m in materials.get_all()] == ["PLA", "PETG"]

    def test_undecodable_line_is_skipped_and_the_rest_survive_a_save(self, materials, file_manager):
        file_manager.ensure_data_directory()
        (file_manager.data_dir / "materials.txt").write_bytes(
            b"PLA|0.05|200|Blue\nABS|0.08|250|R\xffed\nPETG|0.07|240|Clear\n"
        )
        assert materials.load() is True
        assert [m.name for m in materials.get_all()] == ["PLA", "PETG"]

        assert materials.save() is True
        materials.clear()
        materials.load()
        assert [m.name for m in materials.get_all()] == ["PLA", "PETG"]

    def test_unreadable_file_keeps_registry_and_file(self, materials, file_manager, pla):
        file_manager.write_file("materials.txt", "PETG|0.07|240|Clear\n")
        materials.add(pla)
        with unreadable_files():
            assert materials.load() is False
        assert [m.name for m in materials.get_all()] == ["PLA"]
        assert file_manager.read_file("materials.txt") == "PETG|0.07|240|Clear\n"

    def test_duplicate_lines_keep_the_first(self, materials, file_manager):
        file_manager.write_file("materials.txt", "PLA|0.05|200|Blue\nPLA|0.09|200|Red\n")
        materials.load()
        assert materials.count() == 1
        assert materials.get("PLA").color == "Blue"

    def test_backup_and_restore(self, materials, file_manager, pla):
        materials.add(pla)
        materials.save()
        assert materials.backup() is True

        materials.add(Material("ABS", 0.08, 250, "Red"))
        materials.save()

        backups = materials.list_backups()
        assert len(backups) == 1
        assert materials.restore(backups[0]) is True
        assert [m.name for m in materials.get_all()] == ["PLA"]

    def test_restore_latest(self, materials, pla):
        materials.add(pla)
        materials.save()
        materials.backup()
        materials.clear()
        materials.save()
        assert materials.restore_latest() is True
        assert materials.exists("PLA")


class TestUserRegistry:

    def test_round_trip(self, users, customer, vip_customer):
        users.add(customer)
        users.add(vip_customer)
        users.save()
        users.clear()
        users.load()
        assert [u.to_dict() for u in users.get_all()] == [customer.to_dict(), vip_customer.to_dict()]

    @pytest.mark.parametrize("user", [
        User("", "a@b.com", "customer"),
        User("bob", "no-at-sign", "customer"),
        User("bob", "bob@example.com", " "),
    ])
    def test_invalid_users_are_rejected(self, users, user):
        assert users.validate_user(user) is False
        assert users.add(user) is False

    def test_get_by_role_is_case_insensitive(self, users, customer, vip_customer):
        users.add(customer)
        users.add(vip_customer)
        users.add(User("boss", "boss@example.com", "ADMIN"))
        assert [u.username for u in users.get_by_role("admin")] == ["boss"]
        assert [u.username for u in users.get_by_role("vip")] == ["jane_smith"]


class TestLookups:

    def test_get_by_name_and_username(self, materials, users, pla, customer):
        materials.add(pla)
        users.add(customer)
        assert materials.get_by_name("PLA") is pla
        assert materials.get_by_name(None) is None
        assert users.get_by_username("john_doe") is customer
        assert users.get_by_username("nobody") is None

    def test_orders_by_id_and_user(self, orders, customer, vip_customer, pla):
        mine = Order(user=customer, material=pla, dimensions="1x1x1cm", quantity=1)
        theirs = Order(user=vip_customer, material=pla, dimensions="1x1x1cm", quantity=1)
        orders.add(mine)
        orders.add(theirs)
        assert orders.get_by_id(mine.order_id) is mine
        assert orders.get_by_user("john_doe") == [mine]
        assert orders.get_by_user("ghost") == []


class TestOrderRegistry:

    def _order(self, user, material, quantity=2, instructions=""):
        return Order(user=user, material=material, dimensions="10x5x3cm", quantity=quantity,
                     special_instructions=instructions)

    def test_round_trip_keeps_ids_and_fields(self, orders, customer, pla):
        first = self._order(customer, pla, instructions="fine | detail\nplease")
        second = self._order(None, None, quantity=1)
        second.update_status("processing-50%")
        second.set_priority("rush")
        orders.add(first)
        orders.add(second)
        assert orders.save() is True

        expected = [o.to_dict() for o in orders.get_all()]
        orders.clear()
        assert orders.load() is True
        assert [o.to_dict() for o in orders.get_all()] == expected

    def test_reload_advances_id_sequence(self, orders, customer, pla):
        orders.add(self._order(customer, pla))
        orders.add(Order(user=customer, material=pla, dimensions="1x1x1", quantity=1, order_id=1750))
        orders.save()

        Order.reset_id_counter()
        orders.load()
        assert Order().order_id == 1751

    def test_reload_binds_to_registered_entities(self, orders, users, materials, customer, pla):
        users.add(customer)
        materials.add(pla)
        orders.add(self._order(customer, pla))
        orders.save()

        orders.load()
        reloaded = orders.get_all()[0]
        assert reloaded.user is customer
        assert reloaded.material is pla

    def test_reload_without_registries_builds_copies(self, file_manager, customer, pla):
        registry = OrderRegistry(file_manager)
        registry.add(self._order(customer, pla))
        registry.save()
        registry.load()
        reloaded = registry.get_all()[0]
        assert reloaded.user == customer
        assert reloaded.material == pla
        assert reloaded.user is not customer

    def test_order_line_has_fourteen_fields(self, orders, file_manager, customer, pla):
        orders.add(self._order(customer, pla))
        orders.save()
        line = data_lines(file_manager, "orders.txt")[0]
        assert line.count("|") == 13

    def test_bad_order_line_is_skipped(self, orders, file_manager):
        good = "1000|bob|bob@x.com|customer|PLA|0.05|200|Blue|10x5x3cm|2||pending|normal|0.3"
        file_manager.write_file("orders.txt", f"{good}\nnot|enough|fields\nx|||||||||2||pending|normal|0\n")
        assert orders.load() is True
        assert [o.order_id for o in orders.get_all()] == [1000]

    def test_queue_is_fifo_and_persisted(self, orders, customer, pla):
        placed = [self._order(customer, pla) for _ in range(3)]
        for order in placed:
            orders.add(order)
            orders.enqueue(order)
        assert orders.dequeue_next() is placed[0]
        orders.save()

        orders.clear()
        orders.load()
        assert orders.queue_size() == 2
        assert orders.dequeue_next().order_id == placed[1].order_id
        assert orders.dequeue_next().order_id == placed[2].order_id
        assert orders.dequeue_next() is None

    def test_enqueue_requires_registration_and_is_unique(self, orders, customer, pla):
        order = self._order(customer, pla)
        assert orders.enqueue(order) is False
        orders.add(order)
        assert orders.enqueue(order) is True
        assert orders.enqueue(order) is False
        assert orders.queue_size() == 1

    def test_remove_also_dequeues(self, orders, customer, pla):
        order = self._order(customer, pla)
        orders.add(order)
        orders.enqueue(order)
        orders.remove(order.order_id)
        assert orders.queue_size() == 0

    def test_unknown_queue_ids_are_skipped(self, orders, file_manager, customer, pla):
        order = self._order(customer, pla)
        orders.add(order)
        orders.save()
        file_manager.write_file("order_queue.txt", f"9999\nabc\n{order.order_id}\n")
        orders.load()
        assert [o.order_id for o in orders.queued_orders()] == [order.order_id]

    def test_unreadable_orders_file_keeps_orders_and_queue(self, orders, customer, pla):
        order = self._order(customer, pla)
        orders.add(order)
        orders.enqueue(order)
        orders.save()
        with unreadable_files():
            assert orders.load() is False
        assert orders.get(order.order_id) is order
        assert orders.queued_orders() == [order]

    def test_unreadable_queue_file_keeps_queue(self, orders, customer, pla):
        order = self._order(customer, pla)
        orders.add(order)
        orders.enqueue(order)
        orders.save()
        with unreadable_files():
            assert orders.load_queue() is False
        assert orders.queued_orders() == [order]

    def test_backup_covers_orders_and_queue(self, orders, file_manager, customer, pla):
        orders.add(self._order(customer, pla))
        orders.save()
        assert orders.backup() is True
        assert len(orders.list_backups()) == 1
        assert len(orders.list_queue_backups()) == 1


class TestInventoryStore:

    def test_round_trip_of_explicit_entries(self, file_manager):
        inventory = Inventory()
        inventory.set_stock("PLA", 5000)
        inventory.set_stock("ABS", 0)
        store = InventoryStore(file_manager, inventory)
        assert store.save() is True

        inventory.clear()
        assert store.load() is True
        assert inventory.all_stock() == {"PLA": 5000, "ABS": 0}
        assert inventory.get_stock("PETG") == 1000

    def test_bad_lines_are_skipped(self, file_manager):
        file_manager.write_file("inventory.txt", "PLA|100\nABS|lots\nPETG|-5\n|7\nTPU|20\n")
        inventory = Inventory()
        InventoryStore(file_manager, inventory).load()
        assert inventory.all_stock() == {"PLA": 100, "TPU": 20}

    def test_missing_file_clears_ledger(self, file_manager):
        inventory = Inventory()
        inventory.set_stock("PLA", 1)
        assert InventoryStore(file_manager, inventory).load() is True
        assert inventory.count() == 0

    def test_unreadable_file_keeps_ledger(self, file_manager):
        file_manager.write_file("inventory.txt", "PLA|100\n")
        inventory = Inventory()
        inventory.set_stock("ABS", 250)
        with unreadable_files():
            assert InventoryStore(file_manager, inventory).load() is False
        assert inventory.all_stock() == {"ABS": 250}


class TestConfigStore:

    def test_round_trip(self, file_manager):
        config = SystemConfig()
        config.set_tax_rate(0.2)
        config.set_currency("eur")
        config.set_allow_rush_orders(False)
        config.set_max_order_quantity(7)
        store = ConfigStore(file_manager, config)
        assert store.save() is True

        loaded = SystemConfig()
        assert ConfigStore(file_manager, loaded).load() is True
        assert loaded == config

    def test_file_is_key_value_with_sections(self, file_manager):
        ConfigStore(file_manager, SystemConfig()).save()
        text = file_manager.read_file("system_config.txt")
        assert "# PRICING CONSTANTS" in text
        assert "tax_rate=0.08" in text
        assert "allow_rush_orders=true" in text

    def test_missing_file_keeps_defaults(self, file_manager):
        config = SystemConfig()
        store = ConfigStore(file_manager, config)
        assert store.load() is True
        assert config == SystemConfig()
        assert store.file_exists() is False

    def test_unreadable_file_keeps_settings(self, file_manager):
        file_manager.write_file("system_config.txt", "tax_rate=0.2\n")
        config = SystemConfig()
        config.set_tax_rate(0.1)
        with unreadable_files():
            assert ConfigStore(file_manager, config).load() is False
        assert config.tax_rate == 0.1

    def test_invalid_values_are_skipped(self, file_manager):
        file_manager.write_file(
            "system_config.txt",
            "tax_rate=7\n"
            "currency=gbp\n"
            "max_order_quantity=lots\n"
            "1bad_key=3\n"
            "unknown_key=1\n",
        )
        config = SystemConfig()
        assert ConfigStore(file_manager, config).load() is False
        assert config.tax_rate == 0.08
        assert config.currency == "GBP"
        assert config.max_order_quantity == 100

    def test_validate_file(self, file_manager):
        store = ConfigStore(file_manager, SystemConfig())
        assert store.validate_file() is False
        store.save()
        assert store.validate_file() is True

        file_manager.write_file("system_config.txt", "tax_rate=0.1\n")
        assert store.validate_file() is False

    def test_status(self, file_manager):
        store = ConfigStore(file_manager, SystemConfig())
        assert "File exists: No" in store.status()
        store.save()
        status = store.status()
        assert "File exists: Yes" in status
        assert "File valid: Yes" in status

    def test_backup_and_restore(self, file_manager):
        config = SystemConfig()
        store = ConfigStore(file_manager, config)
        store.save()
        store.backup()

        config.set_tax_rate(0.5)
        store.save()
        assert store.restore(store.list_backups()[0]) is True
        assert config.tax_rate == 0.08
