import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from services import units
from services.errors import InvalidIngredientError, MergeRejectedError
from services.measurement import Measurement
from services.units import Kind, Unit

logger = logging.getLogger(__name__)

MAX_UNIT_PRICE = 1000.0
MAX_DAYS_UNTIL_EXPIRY = 36500


def normalize_name(name: str) -> str:
    """Case and whitespace insensitive key for ingredient and storage names."""
    return " ".join(str(name or "").strip().lower().split())


def display_name(name: str) -> str:
    return " ".join(word.capitalize() for word in normalize_name(name).split())


def _validate_price(unit_price: float) -> float:
    try:
        price = float(unit_price)
    except (TypeError, ValueError):
        raise InvalidIngredientError("Unit price must be numeric.")
    if not math.isfinite(price):
        raise InvalidIngredientError("Unit price must be a finite number.")
    if price < 0:
        raise InvalidIngredientError("Unit price cannot be negative.")
    if price > MAX_UNIT_PRICE:
        raise InvalidIngredientError(f"Please enter a more reasonable unit price (max {MAX_UNIT_PRICE:g}).")
    return units.round_amount(price)


@dataclass
class Ingredient:
    """A batch of one ingredient.

    unit_price is per standard unit of the measurement's kind (per kg or per l).
    """

    name: str
    measurement: Measurement
    unit_price: float
    expiry: date

    def __post_init__(self) -> None:
        if not str(self.name or "").strip():
            raise InvalidIngredientError("Name cannot be empty.")
        self.name = " ".join(self.name.split())
        if not isinstance(self.expiry, date):
            raise InvalidIngredientError("Expiry must be a date.")
        self.unit_price = _validate_price(self.unit_price)

    @classmethod
    def create(
        cls,
        name: str,
        amount: float,
        unit: Unit,
        unit_price: float,
        days_until_expiry: int,
        today: Optional[date] = None,
    ) -> "Ingredient":
        if days_until_expiry < 0:
            raise InvalidIngredientError("Days to expiry cannot be negative.")
        if days_until_expiry > MAX_DAYS_UNTIL_EXPIRY:
            raise InvalidIngredientError(f"Days to expiry cannot exceed {MAX_DAYS_UNTIL_EXPIRY}.")
        try:
            measurement = Measurement(amount, unit)
        except ValueError as exc:
            raise InvalidIngredientError(str(exc))
        try:
            expiry = (today or date.today()) + timedelta(days=int(days_until_expiry))
        except OverflowError:
            raise InvalidIngredientError("Days to expiry is too far in the future.")
        return cls(name=name, measurement=measurement, unit_price=unit_price, expiry=expiry)

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    @property
    def amount(self) -> float:
        return self.measurement.amount

    @property
    def unit(self) -> Unit:
        return self.measurement.unit

    @property
    def kind(self) -> Kind:
        return self.measurement.kind

    @property
    def value(self) -> float:
        return units.round_amount(self.measurement.standard_amount() * self.unit_price)

    def is_expired(self, today: Optional[date] = None) -> bool:
        return (today or date.today()) > self.expiry

    def days_until_expiry(self, today: Optional[date] = None) -> int:
        return (self.expiry - (today or date.today())).days

    def can_merge(self, other: "Ingredient") -> bool:
        return other is not None and self.key == other.key and self.expiry == other.expiry

    def merge(self, other: "Ingredient") -> None:
        """Absorb `other` into this batch. `other` should be discarded afterwards."""
        if other is None:
            raise MergeRejectedError("Nothing to merge.")
        if not self.can_merge(other):
            raise MergeRejectedError(
                f"Cannot merge {other.name} (best before {other.expiry}) into "
                f"{self.name} (best before {self.expiry})."
            )
        if other.kind is not self.kind:
            raise MergeRejectedError(
                f"Cannot merge {other.name}: it is measured by {other.kind.value}, "
                f"the stored batch by {self.kind.value}."
            )
        self.measurement.merge(other.measurement)
        self.unit_price = max(self.unit_price, other.unit_price)
        logger.debug("Merged %s into %s, now %s", other.name, self.name, self.measurement)
