from datetime import date, timedelta

import pytest

from services.errors import InvalidIngredientError, MergeRejectedError
from services.ingredients import Ingredient, display_name, normalize_name
from services.units import Unit

TODAY = date(2024, 3, 1)


def _ingredient(name="Milk", amount=1, unit=Unit.L, price=20, days=5):
    return Ingredient.create(name, amount, unit, price, days, today=TODAY)


def test_create_sets_expiry_from_days():
    milk = _ingredient(days=5)
    assert milk.expiry == TODAY + timedelta(days=5)
    assert milk.days_until_expiry(TODAY) == 5
    assert not milk.is_expired(TODAY)


def test_expired_only_after_expiry_day():
    milk = _ingredient(days=0)
    assert not milk.is_expired(TODAY)
    assert milk.is_expired(TODAY + timedelta(days=1))


def test_value_uses_standard_amount():
    chocolate = _ingredient("Chocolate", 300, Unit.G, 10, 4)
    assert chocolate.value == pytest.approx(3.0)


def test_names_are_case_and_space_insensitive():
    assert normalize_name("  Cold   Room ") == "cold room"
    assert display_name("cold room") == "Cold Room"
    assert _ingredient("  Whole   Milk ").key == "whole milk"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "  "},
        {"amount": -1},
        {"price": -1},
        {"price": 1000.01},
        {"days": -1},
        {"unit": Unit.UNKNOWN},
    ],
)
def test_create_rejects_invalid_values(kwargs):
    with pytest.raises(InvalidIngredientError):
        _ingredient(**kwargs)


def test_merge_sums_amount_and_keeps_highest_price():
    first = _ingredient("Sugar", 500, Unit.G, 12, 10)
    second = _ingredient("sugar", 600, Unit.G, 15, 10)
    assert first.can_merge(second)
    first.merge(second)
    assert first.unit is Unit.KG
    assert first.amount == pytest.approx(1.1)
    assert first.unit_price == pytest.approx(15)


def test_merge_rejects_different_expiry():
    first = _ingredient(days=3)
    second = _ingredient(days=4)
    assert not first.can_merge(second)
    with pytest.raises(MergeRejectedError):
        first.merge(second)


def test_merge_rejects_different_kind():
    first = _ingredient("Honey", 1, Unit.KG)
    second = _ingredient("Honey", 1, Unit.L)
    with pytest.raises(MergeRejectedError):
        first.merge(second)
    assert first.amount == pytest.approx(1)


def test_merge_rejects_missing_other():
    with pytest.raises(MergeRejectedError):
        _ingredient().merge(None)


@pytest.mark.parametrize("price", [float("nan"), float("inf"), "nan"])
def test_create_rejects_non_finite_price(price):
    with pytest.raises(InvalidIngredientError):
        _ingredient(price=price)


def test_create_rejects_expiry_beyond_calendar():
    with pytest.raises(InvalidIngredientError):
        _ingredient(days=99999999)
    with pytest.raises(InvalidIngredientError):
        Ingredient.create("Salt", 1, Unit.KG, 5, 30, today=date.max - timedelta(days=1))
