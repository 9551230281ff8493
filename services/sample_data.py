"""Demo inventory for trying the shell out. Every random choice comes from the injected `rng`."""
import logging
import random
from datetime import date, timedelta
from typing import Optional

from services.ingredients import Ingredient
from services.inventory import InventoryManager
from services.measurement import Measurement
from services.units import Unit

logger = logging.getLogger(__name__)

EXPIRED_NAMES = ("Expired Milk", "Expired Chicken", "Expired Egg", "Moldy Bread")

DEMO_STORAGES = ("Fridge", "Cold Room", "Office Fridge")

# name, amount, unit, price per standard unit, days until expiry
DEMO_STOCK = {
    "Fridge": [
        ("Chocolate", 300, Unit.G, 10, 4),
        ("Milk", 1.5, Unit.L, 22, 6),
        ("Butter", 250, Unit.G, 95, 21),
    ],
    "Cold Room": [
        ("Potatoes", 5, Unit.KG, 18, 30),
        ("Cream", 3, Unit.DL, 60, 5),
    ],
}


def make_expired_ingredient(rng: random.Random, today: Optional[date] = None) -> Ingredient:
    """Build an ingredient whose expiry lies 4 to 16 days in the past."""
    today = today or date.today()
    name = rng.choice(EXPIRED_NAMES)
    unit = Unit.L if name == "Expired Milk" else Unit.KG
    return Ingredient(
        name=name,
        measurement=Measurement(rng.randint(1, 3), unit),
        unit_price=round(rng.uniform(50, 144), 2),
        expiry=today - timedelta(days=rng.randint(4, 16)),
    )


def seed_demo_inventory(
    manager: InventoryManager,
    rng: random.Random,
    today: Optional[date] = None,
    expired_count: int = 2,
) -> InventoryManager:
    today = today or date.today()
    for storage in DEMO_STORAGES:
        if manager.get_ledger(storage) is None:
            manager.create_ledger(storage)

    for storage, stock in DEMO_STOCK.items():
        ledger = manager.get_ledger(storage)
        for name, amount, unit, price, days in stock:
            ledger.add(Ingredient.create(name, amount, unit, price, days, today=today))

    fridge = manager.get_ledger("Fridge")
    for _ in range(expired_count):
        fridge.add(make_expired_ingredient(rng, today))

    logger.info("Seeded demo inventory with %d entries.", manager.entry_count())
    return manager
