"""Line-oriented prompts that re-ask until the answer is usable."""
from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Sequence, Tuple

from services import units
from services.units import Unit, UnitNormalizationError

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]
Writer = Callable[[str], None]


class AbortInput(Exception):
    def __init__(self, message: str = "Operation aborted."):
        super().__init__(message)


class Console:
    def __init__(
        self,
        reader: Reader = input,
        writer: Writer = print,
        *,
        abort_token: str = "abort",
        prompt: str = "> ",
    ):
        self._reader = reader
        self._writer = writer
        self.abort_token = abort_token.strip().lower()
        self.prompt = prompt

    def write(self, text: object = "") -> None:
        self._writer(str(text))

    def read_command_line(self) -> str:
        # EOFError propagates: end of input ends the session.
        return self._reader(self.prompt)

    def _read_answer(self, message: str) -> str:
        if message:
            self.write(message)
        answer = self._reader(self.prompt).strip()
        if answer.lower() == self.abort_token:
            raise AbortInput()
        return answer

    def ask_text(self, message: str) -> str:
        while True:
            answer = self._read_answer(message)
            if answer:
                return answer
            self.write("Input cannot be blank.")

    def ask_float(
        self,
        message: str,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
    ) -> float:
        while True:
            answer = self.ask_text(message)
            try:
                value = float(answer.replace(",", "."))
            except ValueError:
                self.write("Please enter a number.")
                continue
            if not math.isfinite(value):
                self.write("Please enter a finite number.")
                continue
            if minimum is not None and value < minimum:
                self.write(f"The value must be at least {minimum:g}.")
                continue
            if maximum is not None and value > maximum:
                self.write(f"The value must be at most {maximum:g}.")
                continue
            return value

    def ask_int(
        self,
        message: str,
        minimum: Optional[int] = None,
        maximum: Optional[int] = None,
    ) -> int:
        while True:
            answer = self.ask_text(message)
            try:
                value = int(answer)
            except ValueError:
                self.write("Please enter a whole number.")
                continue
            if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
                low = "" if minimum is None else str(minimum)
                high = "" if maximum is None else str(maximum)
                self.write(f"Please enter a number in the range {low}..{high}.")
                continue
            return value

    def ask_quantity(self, message: str) -> Tuple[float, Unit]:
        while True:
            answer = self.ask_text(message)
            try:
                return units.parse_quantity_unit(answer)
            except UnitNormalizationError as exc:
                logger.debug("Rejected quantity %r: %s", answer, exc)
                self.write(str(exc))

    def choose(self, options: Sequence[object], message: str = "Please select an option:") -> int:
        """Show a numbered list and return the zero-based index of the chosen item."""
        for number, option in enumerate(options, start=1):
            self.write(f"{number}: {option}")
        return self.ask_int(message, minimum=1, maximum=len(options)) - 1
