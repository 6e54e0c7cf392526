"""Shared fixtures for the grocery inventory tests."""

from datetime import date, timedelta

import pytest

from inventory_manager import InventoryManager
from models import Category, Product, Supplier


@pytest.fixture
def inventory():
    """A fresh in-memory inventory."""
    manager = InventoryManager("sqlite://")
    yield manager
    manager.close()


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def supplier(inventory: InventoryManager) -> Supplier:
    return inventory.add_supplier("ABC Farms", "abc@farms.lk")


@pytest.fixture
def loose_supplier() -> Supplier:
    """A supplier that is not stored in any inventory."""
    return Supplier(id=1, name="ABC Farms", contact="abc@farms.lk")


@pytest.fixture
def milk(loose_supplier: Supplier, today: date) -> Product:
    """Perishable, low on stock and expired yesterday."""
    return Product.perishable(1, "Milk", 350.00, 3, Category.DAIRY, loose_supplier,
                              (today - timedelta(days=1)).isoformat())


@pytest.fixture
def rice(loose_supplier: Supplier) -> Product:
    return Product.non_perishable(2, "Basmati Rice 5kg", 2400.00, 30, Category.DRIED_FOOD,
                                  loose_supplier, "2 years")
