"""Amount + unit pair and the merge arithmetic built on services.units."""
import logging
import math
from dataclasses import dataclass

from services import units
from services.units import Kind, Unit

logger = logging.getLogger(__name__)


@dataclass
class Measurement:
    amount: float
    unit: Unit

    def __post_init__(self) -> None:
        if not isinstance(self.unit, Unit) or self.unit is Unit.UNKNOWN:
            raise ValueError("Invalid unit, please use one of: " + ", ".join(units.unit_symbols()))
        if self.amount is None or self.amount < 0:
            raise ValueError("Amount cannot be negative.")
        self.amount = float(self.amount)
        if not math.isfinite(self.amount):
            raise ValueError("Amount must be a finite number.")

    @property
    def kind(self) -> Kind:
        return self.unit.kind

    def __str__(self) -> str:
        return f"{self.amount:g} {self.unit}"

    def converted(self, target: Unit) -> "Measurement":
        """Return a copy expressed in `target`; raises ConversionError across kinds."""
        return Measurement(units.convert(self.amount, self.unit, target), target)

    def standard_amount(self) -> float:
        return units.to_standard(self.amount, self.unit)

    def standardize(self) -> None:
        target = units.standard_unit(self.kind)
        if self.unit is not target:
            logger.debug("Promoting %s to %s", self, target)
        self.amount = units.convert(self.amount, self.unit, target)
        self.unit = target

    def merge(self, incoming: "Measurement") -> None:
        """Add `incoming` to this measurement, keeping this measurement's unit.

        The result is promoted to the standard unit once the amount reaches
        the promotion threshold in the current unit.
        """
        converted = incoming.converted(self.unit)
        self.amount = units.round_amount(self.amount + converted.amount)
        if self.amount >= units.PROMOTION_THRESHOLD:
            self.standardize()
