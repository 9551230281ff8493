from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from pantry_ledger.logging import line_context
from services import metrics
from services.commands import CommandContext, CommandInput, IllegalCommandCombination, dispatch, parse_command
from services.commands_registry import command_help
from services.console import AbortInput, Console
from services.errors import LedgerError
from services.inventory import InventoryManager
from services.units import ConversionError

logger = logging.getLogger(__name__)

WELCOME = (
    "Thank you for using the pantry ledger!\n"
    "Earth thanks you for taking care of her.\n"
    "Type 'help' to see the available commands."
)


class Shell:
    """Read-parse-dispatch loop over one InventoryManager."""

    def __init__(
        self,
        manager: InventoryManager,
        console: Console,
        *,
        currency: str = "kr",
        clock: Callable[[], date] = date.today,
    ):
        self.console = console
        self.context = CommandContext(manager=manager, console=console, currency=currency, clock=clock)

    @property
    def running(self) -> bool:
        return self.context.running

    def handle_line(self, line: str) -> None:
        request = parse_command(line)
        if request is None:
            self.console.write("Input cannot be blank.")
            return
        with line_context(request.command.value):
            self._dispatch(request, line)

    def _dispatch(self, request: CommandInput, line: str) -> None:
        try:
            dispatch(request, self.context)
        except AbortInput as exc:
            self.console.write(str(exc))
        except IllegalCommandCombination as exc:
            metrics.record_error("dispatch", "illegal_combination")
            logger.info("%s", exc)
            self.console.write(str(exc))
            self.console.write(command_help(exc.command))
        except LedgerError as exc:
            metrics.record_error("ledger", type(exc).__name__)
            logger.info("Rejected %s: %s", request.command.value, exc)
            self.console.write(str(exc))
        except ConversionError as exc:
            metrics.record_error("units", "conversion")
            logger.exception("Unit conversion failed while handling %r", line)
            self.console.write(f"Error: {exc}")
        except ValueError as exc:
            metrics.record_error("input", "value")
            logger.warning("Invalid input for %s: %s", request.command.value, exc)
            self.console.write(str(exc))

    def run(self) -> None:
        self.console.write(WELCOME)
        while self.running:
            try:
                self.handle_line(self.console.read_command_line())
            except (EOFError, KeyboardInterrupt):
                # End of input, also in the middle of a prompt sequence.
                logger.info("Input closed, leaving the session.")
                break
