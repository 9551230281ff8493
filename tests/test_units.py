import pytest

from services import units
from services.units import ConversionError, Kind, Unit


def test_convert_grams_to_kilograms():
    assert units.convert(500, Unit.G, Unit.KG) == pytest.approx(0.5)
    assert units.convert(1.5, Unit.KG, Unit.G) == pytest.approx(1500)


def test_convert_volume_units():
    assert units.convert(2, Unit.L, Unit.DL) == pytest.approx(20)
    assert units.convert(250, Unit.ML, Unit.DL) == pytest.approx(2.5)
    assert units.convert(3, Unit.DL, Unit.ML) == pytest.approx(300)


def test_convert_rounds_half_away_from_zero():
    assert units.convert(1005, Unit.G, Unit.KG) == pytest.approx(1.01)
    assert units.convert(123.456, Unit.KG, Unit.KG) == pytest.approx(123.46)
    assert units.round_amount(0.125) == pytest.approx(0.13)
    assert units.round_amount(-0.125) == pytest.approx(-0.13)


def test_convert_across_kinds_fails():
    with pytest.raises(ConversionError):
        units.convert(1, Unit.KG, Unit.L)
    with pytest.raises(ConversionError):
        units.convert(1, Unit.UNKNOWN, Unit.G)


@pytest.mark.parametrize("kind", [Kind.MASS, Kind.VOLUME])
def test_round_trip_from_coarser_unit_stays_within_tolerance(kind):
    ordered = sorted(units.units_of(kind), key=lambda unit: unit.per_standard)
    for position, coarse in enumerate(ordered):
        for fine in ordered[position:]:
            for amount in (0, 0.01, 1, 2.57, 12.34, 999.99):
                there = units.convert(amount, coarse, fine)
                back = units.convert(there, fine, coarse)
                assert back == pytest.approx(amount, abs=0.02)


def test_standard_units():
    assert units.standard_unit(Kind.MASS) is Unit.KG
    assert units.standard_unit(Kind.VOLUME) is Unit.L
    assert units.to_standard(250, Unit.ML) == pytest.approx(0.25)


def test_find_unit_accepts_aliases_and_case():
    assert units.find_unit("KG") is Unit.KG
    assert units.find_unit(" grams ") is Unit.G
    assert units.find_unit("Litre") is Unit.L
    assert units.find_unit("dl") is Unit.DL
    assert units.find_unit("cups") is Unit.UNKNOWN


def test_parse_quantity_with_and_without_space():
    assert units.parse_quantity_unit("500 g") == (500.0, Unit.G)
    assert units.parse_quantity_unit("1.5kg") == (1.5, Unit.KG)
    assert units.parse_quantity_unit("2,5 dl") == (2.5, Unit.DL)


@pytest.mark.parametrize("text", ["", "500", "-1 kg", "lots of sugar", "3 cups"])
def test_parse_quantity_rejects_bad_input(text):
    with pytest.raises(units.UnitNormalizationError):
        units.parse_quantity_unit(text)


@pytest.mark.parametrize("text", ["9" * 400 + " g", "2000000 g"])
def test_parse_quantity_rejects_oversized_amounts(text):
    with pytest.raises(units.UnitNormalizationError):
        units.parse_quantity_unit(text)


def test_round_amount_handles_large_finite_values():
    assert units.round_amount(1e300) == 1e300
    assert units.round_amount(123456789012345678901234567890.0) == pytest.approx(1.2345678901234568e29)
