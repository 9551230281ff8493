from datetime import date, timedelta

from services.ingredients import Ingredient
from services.text_format import bullet_list, card, format_ingredient, format_ledger, kv, money
from services.units import Unit

TODAY = date(2024, 3, 1)


def test_format_fresh_ingredient():
    chocolate = Ingredient.create("Chocolate", 300, Unit.G, 10, 4, today=TODAY)
    assert format_ingredient(chocolate, TODAY) == (
        f"  - Chocolate: 300 g - Best before: {TODAY + timedelta(days=4)} (in 4 days) Value: 3.00 kr"
    )


def test_format_expired_ingredient_with_currency():
    milk = Ingredient.create("Milk", 2, Unit.L, 15, 0, today=TODAY - timedelta(days=5))
    text = format_ingredient(milk, TODAY, currency="EUR")
    assert text.startswith("  * Milk: 2 l")
    assert "(Expired 5 days ago)" in text
    assert text.endswith("Value: 30.00 EUR")


def test_format_empty_ledger():
    assert format_ledger("Office Fridge", [], TODAY) == " Office Fridge\n   (Empty)"


def test_helpers():
    assert kv("Entries", 4) == "Entries: 4"
    assert money(3) == "3.00 kr"
    assert bullet_list(["a", "", "b"], bullet="#") == "  # a\n  # b"
    assert card("Stats", ["x", "", None]) == "#### Stats ####\nx"
