from __future__ import annotations

import argparse
import logging
import os
import random
from typing import List, Optional

from pantry_ledger.config import (
    demo_enabled,
    get_abort_token,
    get_currency,
    get_demo_seed,
    get_prompt,
    load_config,
    reload_config,
)
from pantry_ledger.logging import configure_logging
from pantry_ledger.shell import Shell
from services import metrics
from services.commands_registry import validate_registry
from services.console import Console
from services.inventory import InventoryManager
from services.sample_data import seed_demo_inventory

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track ingredients across storages from the command line.")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--demo", action="store_true", help="Start with a demo inventory")
    parser.add_argument("--random-seed", type=int, help="Seed for the demo inventory")
    parser.add_argument("--log-level", help="Override the configured log level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.config:
        os.environ["PANTRY_LEDGER_CONFIG"] = args.config
        config = reload_config()
    else:
        config = load_config()
    if args.log_level:
        config = {**config, "logging": {**config.get("logging", {}), "level": args.log_level}}
    configure_logging(config)

    for issue in validate_registry():
        logger.error("Command registry issue: %s", issue)

    manager = InventoryManager()
    if args.demo or demo_enabled(config):
        seed = args.random_seed if args.random_seed is not None else get_demo_seed(config)
        with metrics.metrics.timer("demo_seed"):
            seed_demo_inventory(manager, random.Random(seed))

    logger.info("Starting session with %d storages.", len(manager.ledgers()))

    console = Console(abort_token=get_abort_token(config), prompt=get_prompt(config))
    Shell(manager, console, currency=get_currency(config)).run()
    logger.debug("Session finished: %s", metrics.metrics.get_all_metrics())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
