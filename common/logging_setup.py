from __future__ import annotations

"""
JSON-lines logging for the loader, the HTTP service and the CLI.

Every module logs through `get_logger("pkg.module")` and attaches structured
context with `extra=fields(entry=..., reason=...)`. The service writes to
stdout; the CLI passes `stream=sys.stderr` so its JSON report stays clean.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Optional, TextIO


class JsonFormatter(logging.Formatter):
    """
    Renders a record as one line, e.g.
      {"t": 1700000000123, "lvl": "WARNING", "name": "ingest.extract",
       "msg": "tag reader timed out", "extra": {"entry": "a.jpg", "timeout_s": 2.0}}
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "t": int(record.created * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        ctx = getattr(record, "extra", None)
        if isinstance(ctx, dict):
            payload["extra"] = ctx
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # numpy scalars, Paths and enums fall back to str()
        return json.dumps(payload, ensure_ascii=False, default=str)


_handler: Optional[logging.Handler] = None


def _resolve_level(name: Optional[str]) -> int:
    lvl = logging.getLevelName((name or os.environ.get("LOG_LEVEL") or "INFO").upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def setup_logging(level: Optional[str] = None, *, stream: Optional[TextIO] = None, force: bool = False) -> None:
    """
    Install the JSON handler on the root logger.

    `level` wins over $LOG_LEVEL, which wins over INFO; unknown names mean INFO.
    The first call installs the handler and later calls return early, so module
    imports can call it freely. Entry points pass `force=True` once the config
    is loaded to apply its level or a different stream. Only the handler this
    module installed is replaced; handlers added by pytest or uvicorn stay.
    """
    global _handler
    root = logging.getLogger()
    if _handler is not None and not force:
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))
    _handler = handler


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)


def fields(**kw: Any) -> Dict[str, Any]:
    """`extra=` payload picked up by JsonFormatter: log.info("msg", extra=fields(n=3))."""
    return {"extra": kw}
