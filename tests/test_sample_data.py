import random
from datetime import date

from services.inventory import InventoryManager
from services.sample_data import DEMO_STORAGES, EXPIRED_NAMES, make_expired_ingredient, seed_demo_inventory
from services.units import Unit

TODAY = date(2024, 3, 1)


def test_expired_ingredient_is_in_the_past():
    rng = random.Random(11)
    for _ in range(20):
        batch = make_expired_ingredient(rng, TODAY)
        assert batch.name in EXPIRED_NAMES
        assert 4 <= -batch.days_until_expiry(TODAY) <= 16
        assert 1 <= batch.amount <= 3
        assert 50 <= batch.unit_price <= 144
        assert batch.unit is (Unit.L if batch.name == "Expired Milk" else Unit.KG)


def test_seed_creates_demo_storages_and_stock():
    manager = seed_demo_inventory(InventoryManager(), random.Random(3), today=TODAY)
    assert sorted(manager.storage_names()) == sorted(DEMO_STORAGES)
    assert manager.get_ledger("Office Fridge").ingredients() == []
    assert manager.get_ledger("Cold Room").names() == ["Cream", "Potatoes"]
    fridge_names = manager.get_ledger("Fridge").names()
    for name in ("Butter", "Chocolate", "Milk"):
        assert name in fridge_names
    assert all(storage == "Fridge" for storage, _ in manager.aggregate_expired(TODAY))
    assert manager.aggregate_expired(TODAY)


def test_seed_is_deterministic_for_a_seed():
    first = seed_demo_inventory(InventoryManager(), random.Random(5), today=TODAY)
    second = seed_demo_inventory(InventoryManager(), random.Random(5), today=TODAY)

    def describe(manager):
        return [(b.name, b.amount, b.expiry) for b in manager.get_ledger("Fridge").ingredients()]

    assert describe(first) == describe(second)
