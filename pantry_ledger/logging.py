from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any

from pantry_ledger.config import get_log_path, load_config

# Set for the duration of one input line; "-" outside the shell loop.
_line_id: ContextVar[str] = ContextVar("line_id", default="-")
_keyword: ContextVar[str] = ContextVar("keyword", default="-")


@contextmanager
def line_context(keyword: str | None = None, line_id: str | None = None) -> Generator[str, None, None]:
    """Tag every record logged while one command line is handled."""
    id_token = _line_id.set(line_id or uuid.uuid4().hex[:8])
    keyword_token = _keyword.set(keyword or "-")
    try:
        yield _line_id.get()
    finally:
        _keyword.reset(keyword_token)
        _line_id.reset(id_token)


class LineContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.line_id = _line_id.get()
        record.keyword = _keyword.get()
        return True


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, keyed by the input line it belongs to."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "line": getattr(record, "line_id", "-"),
            "keyword": getattr(record, "keyword", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(config: dict[str, Any] | None = None) -> None:
    cfg = config if config is not None else load_config()
    log_cfg = cfg.get("logging") if isinstance(cfg.get("logging"), dict) else {}
    level = getattr(logging, str(log_cfg.get("level", "WARNING")).upper(), logging.WARNING)

    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        return

    if log_cfg.get("json_format"):
        fmt: logging.Formatter = JsonLineFormatter()
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(line_id)s %(keyword)s] %(name)s: %(message)s")

    # stderr, so standard output carries only the session itself.
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_path = get_log_path(cfg)
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_path, maxBytes=1024 * 1024, backupCount=2, encoding="utf-8"))

    line_filter = LineContextFilter()
    for handler in handlers:
        handler.setFormatter(fmt)
        handler.addFilter(line_filter)
        root.addHandler(handler)
