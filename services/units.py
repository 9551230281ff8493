import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Kind(Enum):
    MASS = "mass"
    VOLUME = "volume"


class Unit(Enum):
    """Closed set of measurement units.

    Each member carries its kind and its multiplier relative to the standard
    unit of that kind (KG for mass, L for volume). UNKNOWN only exists while
    parsing user input and is rejected by Measurement.
    """

    KG = ("kg", Kind.MASS, 1)
    G = ("g", Kind.MASS, 1000)
    L = ("l", Kind.VOLUME, 1)
    DL = ("dl", Kind.VOLUME, 10)
    ML = ("ml", Kind.VOLUME, 1000)
    UNKNOWN = ("unknown", None, None)

    def __init__(self, symbol: str, kind: Optional[Kind], per_standard: Optional[int]):
        self.symbol = symbol
        self.kind = kind
        self.per_standard = per_standard

    def __str__(self) -> str:
        return self.symbol


STANDARD_UNITS: Dict[Kind, Unit] = {
    Kind.MASS: Unit.KG,
    Kind.VOLUME: Unit.L,
}

# Merges promote to the standard unit once the amount reaches this value.
PROMOTION_THRESHOLD = 1000

# Largest amount accepted from user input, in the unit it was typed in.
MAX_QUANTITY = 1_000_000

# Wide enough for every finite float, so quantize never runs out of digits.
_ROUNDING = Context(prec=400, rounding=ROUND_HALF_UP)

UNIT_ALIASES: Dict[str, Unit] = {
    "kg": Unit.KG,
    "kgs": Unit.KG,
    "kilo": Unit.KG,
    "kilos": Unit.KG,
    "kilogram": Unit.KG,
    "kilograms": Unit.KG,
    "g": Unit.G,
    "gr": Unit.G,
    "gram": Unit.G,
    "grams": Unit.G,
    "l": Unit.L,
    "liter": Unit.L,
    "liters": Unit.L,
    "litre": Unit.L,
    "litres": Unit.L,
    "dl": Unit.DL,
    "deciliter": Unit.DL,
    "deciliters": Unit.DL,
    "decilitre": Unit.DL,
    "decilitres": Unit.DL,
    "ml": Unit.ML,
    "milliliter": Unit.ML,
    "milliliters": Unit.ML,
    "millilitre": Unit.ML,
    "millilitres": Unit.ML,
}

QUANTITY_RE = re.compile(
    r"^\s*(?P<qty>-?\d+(?:[.,]\d+)?)\s*(?P<unit>[a-z]+)?\s*$",
    re.IGNORECASE,
)


class UnitNormalizationError(ValueError):
    pass


class ConversionError(ValueError):
    def __init__(self, source: Unit, target: Unit):
        self.source = source
        self.target = target
        super().__init__(f"Cannot convert {source.name} to {target.name}: units are of different kinds.")


def round_amount(value: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), context=_ROUNDING))


def standard_unit(kind: Kind) -> Unit:
    return STANDARD_UNITS[kind]


def units_of(kind: Kind) -> List[Unit]:
    return [unit for unit in Unit if unit.kind is kind]


def convert(amount: float, source: Unit, target: Unit) -> float:
    if source.kind is None or target.kind is None or source.kind is not target.kind:
        raise ConversionError(source, target)
    if source is target:
        return round_amount(amount)
    return round_amount(amount / source.per_standard * target.per_standard)


def to_standard(amount: float, unit: Unit) -> float:
    if unit.kind is None:
        raise ConversionError(unit, unit)
    return convert(amount, unit, standard_unit(unit.kind))


def find_unit(token: str) -> Unit:
    """Map a unit token to a Unit, or Unit.UNKNOWN when it is not recognised."""
    raw = " ".join(str(token or "").strip().lower().split()).rstrip(".")
    if raw in UNIT_ALIASES:
        return UNIT_ALIASES[raw]
    return Unit.UNKNOWN


def unit_symbols() -> List[str]:
    return [unit.symbol for unit in Unit if unit is not Unit.UNKNOWN]


def parse_quantity_unit(text: str) -> Tuple[float, Unit]:
    raw = " ".join(str(text or "").split()).strip()
    if not raw:
        raise UnitNormalizationError("Quantity text is empty.")

    match = QUANTITY_RE.match(raw)
    if not match:
        raise UnitNormalizationError("Could not parse quantity and unit, try e.g. '500 g'.")

    qty = float(match.group("qty").replace(",", "."))
    if not math.isfinite(qty) or qty > MAX_QUANTITY:
        raise UnitNormalizationError(f"Quantity is too large (max {MAX_QUANTITY}).")
    if qty < 0:
        raise UnitNormalizationError("Quantity cannot be negative.")

    token = match.group("unit")
    if token is None:
        raise UnitNormalizationError("Unit is required.")

    unit = find_unit(token)
    if unit is Unit.UNKNOWN:
        raise UnitNormalizationError(
            f"Unsupported unit '{token}'. Valid units: {', '.join(unit_symbols())}."
        )
    return qty, unit
