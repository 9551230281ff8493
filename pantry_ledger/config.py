from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR / "config.yaml"

TRUTHY = {"1", "true", "yes", "on"}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    level = os.getenv("PANTRY_LEDGER_LOG_LEVEL")
    if level:
        overrides.setdefault("logging", {})["level"] = level

    log_file = os.getenv("PANTRY_LEDGER_LOG_FILE")
    if log_file:
        overrides.setdefault("paths", {})["log_file"] = log_file

    demo = os.getenv("PANTRY_LEDGER_DEMO", "").strip().lower()
    if demo:
        overrides.setdefault("demo", {})["seed"] = demo in TRUTHY

    currency = os.getenv("PANTRY_LEDGER_CURRENCY")
    if currency:
        overrides.setdefault("display", {})["currency"] = currency

    return overrides


def resolve_path(path_value: str, *, base_dir: Optional[Path] = None) -> Path:
    candidate = Path(path_value)
    if not candidate.is_absolute():
        candidate = (base_dir or BASE_DIR) / candidate
    return candidate.resolve()


@lru_cache(maxsize=1)
def load_config() -> Dict[str, Any]:
    # Load .env once through a single interface.
    load_dotenv(dotenv_path=BASE_DIR / ".env")

    config_path = os.getenv("PANTRY_LEDGER_CONFIG")
    path = resolve_path(config_path, base_dir=Path.cwd()) if config_path else DEFAULT_CONFIG_PATH

    data: Dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict):
            data = loaded

    return _deep_merge(data, _env_overrides())


def reload_config() -> Dict[str, Any]:
    load_config.cache_clear()
    return load_config()


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name, {})
    return value if isinstance(value, dict) else {}


def get_log_path(config: Optional[Dict[str, Any]] = None) -> Optional[Path]:
    """Log file location, or None when only the stream handler should be used."""
    cfg = config if config is not None else load_config()
    log_path = _section(cfg, "paths").get("log_file")
    if not log_path:
        return None
    return resolve_path(str(log_path))


def get_currency(config: Optional[Dict[str, Any]] = None) -> str:
    cfg = config if config is not None else load_config()
    return str(_section(cfg, "display").get("currency") or "kr")


def get_abort_token(config: Optional[Dict[str, Any]] = None) -> str:
    cfg = config if config is not None else load_config()
    return str(_section(cfg, "input").get("abort_token") or "abort").strip().lower()


def get_prompt(config: Optional[Dict[str, Any]] = None) -> str:
    cfg = config if config is not None else load_config()
    return str(_section(cfg, "input").get("prompt") or "> ")


def demo_enabled(config: Optional[Dict[str, Any]] = None) -> bool:
    cfg = config if config is not None else load_config()
    value = _section(cfg, "demo").get("seed", False)
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


def get_demo_seed(config: Optional[Dict[str, Any]] = None) -> Optional[int]:
    cfg = config if config is not None else load_config()
    value = _section(cfg, "demo").get("random_seed")
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
