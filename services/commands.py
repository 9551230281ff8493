import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional

from services import metrics
from services.argparse_simple import split_command_line
from services.commands_registry import (
    CommandWord,
    command_help,
    general_help,
    get_handler,
    register,
)
from services.console import Console
from services.errors import UnknownStorageError
from services.ingredients import MAX_DAYS_UNTIL_EXPIRY, MAX_UNIT_PRICE, Ingredient
from services.inventory import InventoryManager
from services.ledger import AddResult, Ledger
from services.text_format import bullet_list, card, format_ingredient, format_ledger, kv, money
from services.units import standard_unit

logger = logging.getLogger(__name__)


@dataclass
class CommandInput:
    command: CommandWord
    subcommand: Optional[str] = None
    argument: Optional[str] = None
    token: str = ""

    def has_subcommand(self) -> bool:
        return bool(self.subcommand)

    def has_argument(self) -> bool:
        return bool(self.argument and self.argument.strip())


@dataclass
class CommandContext:
    manager: InventoryManager
    console: Console
    currency: str = "kr"
    clock: Callable[[], date] = date.today
    running: bool = True


class IllegalCommandCombination(Exception):
    def __init__(self, command: CommandWord, subcommand: Optional[str]):
        self.command = command
        self.subcommand = subcommand
        words = f"{command.value} {subcommand}" if subcommand else command.value
        super().__init__(f"Unexpected command: '{words}'")


Action = Callable[[CommandContext, CommandInput], None]


def parse_command(text: str) -> Optional[CommandInput]:
    """Split a raw line into keyword, subcommand and free-text argument.

    Returns None for blank input. Unrecognised keywords become UNKNOWN.
    """
    parts = split_command_line(text)
    if not parts:
        return None
    return CommandInput(
        command=CommandWord.from_token(parts[0]),
        subcommand=parts[1] if len(parts) > 1 else None,
        argument=parts[2] if len(parts) > 2 else None,
        token=parts[0],
    )


def dispatch(request: CommandInput, ctx: CommandContext) -> None:
    handler = get_handler(request.command)
    logger.debug("Dispatching %s (subcommand=%r)", request.command.value, request.subcommand)
    start_ts = time.perf_counter()
    success = False
    try:
        handler(ctx, request)
        success = True
    finally:
        duration_ms = (time.perf_counter() - start_ts) * 1000
        metrics.record_command(request.command.value, duration_ms, success=success)


def _run_subcommand(ctx: CommandContext, request: CommandInput, actions: Dict[str, Action]) -> None:
    if not request.has_subcommand():
        ctx.console.write(command_help(request.command))
        return
    action = actions.get(request.subcommand.lower())
    if action is None:
        raise IllegalCommandCombination(request.command, request.subcommand)
    action(ctx, request)


def _argument(ctx: CommandContext, request: CommandInput, message: str) -> str:
    if not request.has_argument():
        request.argument = ctx.console.ask_text(message)
    return request.argument.strip()


def _fmt(ctx: CommandContext, ingredient: Ingredient) -> str:
    return format_ingredient(ingredient, ctx.clock(), ctx.currency)


# --- add ---


def _add_storage(ctx: CommandContext, request: CommandInput) -> None:
    name = _argument(ctx, request, "Please enter new storage name:")
    ledger = ctx.manager.create_ledger(name)
    ctx.console.write(f"Successfully added storage {ledger.storage_name}.")


def _collect_ingredient(ctx: CommandContext, name: str) -> Ingredient:
    console = ctx.console
    console.write("#### Add ingredient ####")
    amount, unit = console.ask_quantity("Please enter the amount with unit (e.g. 500 g):")
    per = standard_unit(unit.kind)
    price = console.ask_float(f"Please enter the price per {per}:", minimum=0, maximum=MAX_UNIT_PRICE)
    days = console.ask_int("Please enter the days until expiry:", minimum=0, maximum=MAX_DAYS_UNTIL_EXPIRY)
    return Ingredient.create(name, amount, unit, price, days, today=ctx.clock())


def _add_ingredient(ctx: CommandContext, request: CommandInput) -> None:
    ledger = ctx.manager.require_current()
    name = _argument(ctx, request, "Please enter the ingredient name:")
    ingredient = _collect_ingredient(ctx, name)
    result = ledger.add(ingredient)
    if result is AddResult.MERGED:
        merged = next(b for b in ledger.get(ingredient.name) if b.expiry == ingredient.expiry)
        ctx.console.write(f"Merged {ingredient.name} into the existing batch, now {merged.measurement}.")
    elif result is AddResult.NEW_BATCH:
        ctx.console.write(
            f"Added {ingredient.name} to {ledger.storage_name} as a separate batch "
            f"(best before {ingredient.expiry})."
        )
    else:
        ctx.console.write(f"Successfully added {ingredient.name} to {ledger.storage_name}.")


ADD_ACTIONS: Dict[str, Action] = {
    "storage": _add_storage,
    "ingredient": _add_ingredient,
}


@register(CommandWord.ADD)
def handle_add(ctx: CommandContext, request: CommandInput) -> None:
    _run_subcommand(ctx, request, ADD_ACTIONS)


# --- remove ---


def _remove_storage(ctx: CommandContext, request: CommandInput) -> None:
    name = _argument(ctx, request, "Please enter the storage name to remove:")
    was_current = ctx.manager.current is not None and ctx.manager.current is ctx.manager.get_ledger(name)
    if not ctx.manager.remove_ledger(name):
        raise UnknownStorageError(f"There is no storage named {name}.")
    ctx.console.write(f"Successfully removed storage {name}.")
    if was_current:
        ctx.console.write("No storage is selected now, use the 'go to' command.")


def _remove_ingredient(ctx: CommandContext, request: CommandInput) -> None:
    ledger = ctx.manager.require_current()
    if not request.has_argument():
        ctx.console.write(bullet_list(ledger.names()))
    name = _argument(ctx, request, "Please enter the ingredient name to remove:")
    batches = ledger.get(name)
    if not batches:
        ctx.console.write(f"There is no {name} at {ledger.storage_name}.")
        return
    target = batches[0]
    if len(batches) > 1:
        ctx.console.write("Please select the batch to remove:")
        target = batches[ctx.console.choose([_fmt(ctx, b).strip() for b in batches])]
    ctx.manager.remove_ingredient(target)
    ctx.console.write(f"Successfully removed {target.name} from {ledger.storage_name}.")


def _remove_expired(ctx: CommandContext, request: CommandInput) -> None:
    removed, lost = ctx.manager.remove_expired_from_current(ctx.clock())
    if not removed:
        ctx.console.write("No expired ingredients were found.")
        return
    ctx.console.write(f"{len(removed)} expired ingredients were removed:")
    ctx.console.write("\n".join(_fmt(ctx, batch) for batch in removed))
    ctx.console.write(kv("Value lost", money(lost, ctx.currency)))


REMOVE_ACTIONS: Dict[str, Action] = {
    "storage": _remove_storage,
    "ingredient": _remove_ingredient,
    "expired": _remove_expired,
}


@register(CommandWord.REMOVE)
def handle_remove(ctx: CommandContext, request: CommandInput) -> None:
    _run_subcommand(ctx, request, REMOVE_ACTIONS)


# --- go ---


def _go_to(ctx: CommandContext, request: CommandInput) -> None:
    name = _argument(ctx, request, "Please enter the storage name:")
    if ctx.manager.set_current(name):
        ctx.console.write(f"You are now at {ctx.manager.current.storage_name}.")
    else:
        ctx.console.write(f"Fail to locate destination {name}.")


def _go_back(ctx: CommandContext, request: CommandInput) -> None:
    ledger = ctx.manager.go_back()
    if ledger is None:
        ctx.console.write("You are back outside of any storage.")
    else:
        ctx.console.write(f"You are now at {ledger.storage_name}.")


GO_ACTIONS: Dict[str, Action] = {
    "to": _go_to,
    "back": _go_back,
}


@register(CommandWord.GO)
def handle_go(ctx: CommandContext, request: CommandInput) -> None:
    _run_subcommand(ctx, request, GO_ACTIONS)


# --- find ---


def _find_ingredient(ctx: CommandContext, request: CommandInput) -> None:
    ledger = ctx.manager.require_current()
    if not request.has_argument():
        ctx.console.write(bullet_list(ledger.names()))
    fragment = _argument(ctx, request, "Please enter the ingredient name to find:")
    matches = ctx.manager.find_in_current(fragment)
    if not matches:
        ctx.console.write(f"{fragment} isn't present at {ledger.storage_name}.")
        return
    ctx.console.write("\n".join(_fmt(ctx, batch) for batch in matches))


def _find_all(ctx: CommandContext, request: CommandInput) -> None:
    fragment = _argument(ctx, request, "Please enter the ingredient name to find:")
    found = ctx.manager.find_everywhere(fragment)
    if not found:
        ctx.console.write(f"{fragment} isn't present at any of the storages.")
        return
    lines: List[str] = [f"{fragment} is present at:"]
    for storage_name, matches in found.items():
        lines.append(f" {storage_name}")
        lines.extend(_fmt(ctx, batch) for batch in matches)
    ctx.console.write("\n".join(lines))


FIND_ACTIONS: Dict[str, Action] = {
    "ingredient": _find_ingredient,
    "all": _find_all,
}


@register(CommandWord.FIND)
def handle_find(ctx: CommandContext, request: CommandInput) -> None:
    _run_subcommand(ctx, request, FIND_ACTIONS)


# --- list ---


def _ledger_block(ctx: CommandContext, ledger: Ledger) -> str:
    return format_ledger(ledger.storage_name, ledger.ingredients(), ctx.clock(), ctx.currency)


def _list_inventory(ctx: CommandContext, request: CommandInput) -> None:
    ledgers = ctx.manager.ledgers()
    if not ledgers:
        ctx.console.write("There are no storages yet, use 'add storage <name>'.")
        return
    ctx.console.write(card("Inventory", [_ledger_block(ctx, ledger) for ledger in ledgers]))


def _list_storage(ctx: CommandContext, request: CommandInput) -> None:
    ledger = ctx.manager.require_current()
    ctx.console.write(card("Current Storage", [_ledger_block(ctx, ledger)]))


def _list_storages(ctx: CommandContext, request: CommandInput) -> None:
    current = ctx.manager.current
    names = [
        f"{ledger.storage_name} (current)" if ledger is current else ledger.storage_name
        for ledger in ctx.manager.ledgers()
    ]
    ctx.console.write(card("Storages", [bullet_list(names, bullet="#") or "  (None)"]))


def _list_expired(ctx: CommandContext, request: CommandInput) -> None:
    expired = ctx.manager.aggregate_expired(ctx.clock())
    if not expired:
        ctx.console.write("No expired ingredients.")
        return
    grouped: Dict[str, List[Ingredient]] = defaultdict(list)
    for storage_name, batch in expired:
        grouped[storage_name].append(batch)
    blocks = [
        format_ledger(storage_name, batches, ctx.clock(), ctx.currency)
        for storage_name, batches in grouped.items()
    ]
    ctx.console.write(card("Expired", blocks))


LIST_ACTIONS: Dict[str, Action] = {
    "inventory": _list_inventory,
    "storage": _list_storage,
    "storages": _list_storages,
    "expired": _list_expired,
}


@register(CommandWord.LIST)
def handle_list(ctx: CommandContext, request: CommandInput) -> None:
    _run_subcommand(ctx, request, LIST_ACTIONS)


# --- standalone keywords ---


@register(CommandWord.STATS)
def handle_stats(ctx: CommandContext, request: CommandInput) -> None:
    manager = ctx.manager
    current = manager.current
    metrics.metrics.gauge("storages", len(manager.ledgers()))
    lines = [
        kv("Storages", len(manager.ledgers())),
        kv("Current storage", current.storage_name if current else "-"),
        kv("Entries", manager.entry_count()),
        kv("Expired entries", len(manager.aggregate_expired(ctx.clock()))),
        kv("Total value", money(manager.aggregate_total_value(), ctx.currency)),
        kv("Commands this session", int(metrics.metrics.sum_counters("commands_total"))),
    ]
    ctx.console.write(card("Stats", lines))


# Erase the terminal and move the cursor home.
CLEAR_SCREEN = "\033[2J\033[H"


@register(CommandWord.CLEAR)
def handle_clear(ctx: CommandContext, request: CommandInput) -> None:
    ctx.console.write(CLEAR_SCREEN)


@register(CommandWord.HELP)
def handle_help(ctx: CommandContext, request: CommandInput) -> None:
    if not request.has_subcommand():
        ctx.console.write(general_help())
        return
    word = CommandWord.from_token(request.subcommand)
    if word is CommandWord.UNKNOWN:
        raise IllegalCommandCombination(CommandWord.HELP, request.subcommand)
    ctx.console.write(command_help(word))


@register(CommandWord.EXIT)
def handle_exit(ctx: CommandContext, request: CommandInput) -> None:
    ctx.running = False
    ctx.console.write("Thank you for using the app, goodbye!")


@register(CommandWord.UNKNOWN)
def handle_unknown(ctx: CommandContext, request: CommandInput) -> None:
    ctx.console.write(f"Unknown command '{request.token}'. Type 'help' to see the available commands.")

