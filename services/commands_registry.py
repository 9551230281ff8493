from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set


class CommandWord(Enum):
    ADD = "add"
    REMOVE = "remove"
    GO = "go"
    FIND = "find"
    LIST = "list"
    STATS = "stats"
    CLEAR = "clear"
    HELP = "help"
    EXIT = "exit"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: Optional[str]) -> "CommandWord":
        key = str(token or "").strip().lower()
        for word in cls:
            if word is not cls.UNKNOWN and word.value == key:
                return word
        return cls.UNKNOWN


CommandHandler = Callable[[Any, Any], None]

GROUP_ORDER: List[str] = [
    "Storages",
    "Ingredients",
    "Overview",
    "Session",
]


@dataclass
class CommandSpec:
    command_id: str
    word: CommandWord
    usage: str
    description: str
    group: str


def _c(command_id: str, word: CommandWord, usage: str, description: str, group: str) -> CommandSpec:
    return CommandSpec(
        command_id=command_id,
        word=word,
        usage=usage,
        description=description,
        group=group,
    )


COMMANDS: Dict[str, CommandSpec] = {
    # Storages
    "add_storage": _c("add_storage", CommandWord.ADD, "add storage <name>", "create a storage", "Storages"),
    "remove_storage": _c("remove_storage", CommandWord.REMOVE, "remove storage <name>", "delete a storage and its contents", "Storages"),
    "go_to": _c("go_to", CommandWord.GO, "go to <storage>", "select the current storage", "Storages"),
    "go_back": _c("go_back", CommandWord.GO, "go back", "return to the previously selected storage", "Storages"),
    # Ingredients
    "add_ingredient": _c("add_ingredient", CommandWord.ADD, "add ingredient <name>", "add an ingredient to the current storage", "Ingredients"),
    "remove_ingredient": _c("remove_ingredient", CommandWord.REMOVE, "remove ingredient <name>", "remove an ingredient from the current storage", "Ingredients"),
    "remove_expired": _c("remove_expired", CommandWord.REMOVE, "remove expired", "discard expired ingredients in the current storage", "Ingredients"),
    "find_ingredient": _c("find_ingredient", CommandWord.FIND, "find ingredient <name>", "search the current storage", "Ingredients"),
    "find_all": _c("find_all", CommandWord.FIND, "find all <name>", "search every storage", "Ingredients"),
    # Overview
    "list_inventory": _c("list_inventory", CommandWord.LIST, "list inventory", "contents of every storage", "Overview"),
    "list_storage": _c("list_storage", CommandWord.LIST, "list storage", "contents of the current storage", "Overview"),
    "list_storages": _c("list_storages", CommandWord.LIST, "list storages", "names of all storages", "Overview"),
    "list_expired": _c("list_expired", CommandWord.LIST, "list expired", "expired ingredients in every storage", "Overview"),
    "stats": _c("stats", CommandWord.STATS, "stats", "inventory value and session statistics", "Overview"),
    # Session
    "clear": _c("clear", CommandWord.CLEAR, "clear", "clear the screen", "Session"),
    "help": _c("help", CommandWord.HELP, "help [command]", "show command help", "Session"),
    "exit": _c("exit", CommandWord.EXIT, "exit", "leave the application", "Session"),
}

HANDLERS: Dict[CommandWord, CommandHandler] = {}


def register(word: CommandWord) -> Callable[[CommandHandler], CommandHandler]:
    def decorator(handler: CommandHandler) -> CommandHandler:
        HANDLERS[word] = handler
        return handler

    return decorator


def get_handler(word: CommandWord) -> CommandHandler:
    return HANDLERS.get(word, HANDLERS[CommandWord.UNKNOWN])


def command_specs() -> List[CommandSpec]:
    return list(COMMANDS.values())


def get_specs_for_word(word: CommandWord) -> List[CommandSpec]:
    return [spec for spec in command_specs() if spec.word is word]


def grouped_command_lines() -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {name: [] for name in GROUP_ORDER}
    for spec in command_specs():
        grouped.setdefault(spec.group, []).append(f"{spec.usage} - {spec.description}")
    return {k: v for k, v in grouped.items() if v}


def general_help() -> str:
    lines: List[str] = ["Available commands:"]
    for group, entries in grouped_command_lines().items():
        lines.append(f"{group}:")
        lines.extend(f"  {entry}" for entry in entries)
    lines.append("Additionally, try 'help <command>'.")
    return "\n".join(lines)


def command_help(word: CommandWord) -> str:
    specs = get_specs_for_word(word)
    if not specs:
        return "Unknown command. " + general_help()
    lines = [f"Usage of '{word.value}':"]
    lines.extend(f"  {spec.usage} - {spec.description}" for spec in specs)
    return "\n".join(lines)


def validate_registry() -> List[str]:
    issues: List[str] = []
    seen_usage: Set[str] = set()

    for key, spec in COMMANDS.items():
        if not str(spec.command_id or "").strip():
            issues.append(f"Command has empty id: {spec.usage}")
        elif spec.command_id != key:
            issues.append(f"Command id '{spec.command_id}' registered under '{key}'")

        usage = str(spec.usage or "").strip().lower()
        if not usage.startswith(spec.word.value):
            issues.append(f"Usage of {spec.command_id} must start with '{spec.word.value}'")
        if usage in seen_usage:
            issues.append(f"Duplicate usage: {usage}")
        seen_usage.add(usage)

        if spec.group not in GROUP_ORDER:
            issues.append(f"Unknown command group '{spec.group}' on {spec.command_id}")

    for word in CommandWord:
        if word not in HANDLERS:
            issues.append(f"Missing handler: {word.value}")
        if word is not CommandWord.UNKNOWN and not get_specs_for_word(word):
            issues.append(f"Missing help entry: {word.value}")

    return issues
