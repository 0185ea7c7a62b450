"""Logging configuration helpers."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, TextIO

__all__ = ["JsonFormatter", "setup_logging"]

_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON documents.

    Attributes passed through ``extra`` are copied verbatim into the
    payload so that structured fields such as ``event`` or ``context``
    survive serialisation.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=True)


def _coerce_level(level: int | str | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if isinstance(resolved, int):
        return resolved
    raise ValueError(f"Unknown log level: {level!r}")


def setup_logging(
    level: int | str | None = None,
    fmt: Optional[str] = None,
    *,
    stream: Optional[TextIO] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> logging.Logger:
    """Configure the ``imucal`` logger hierarchy.

    ``config`` may carry a ``[logging]`` table with ``level`` and
    ``format`` keys; explicit arguments take precedence over it.
    """

    options = dict(config or {})
    resolved_level = _coerce_level(level if level is not None else options.get("level"))
    resolved_format = fmt or str(options.get("format", "text"))

    handler = logging.StreamHandler(stream or sys.stderr)
    if resolved_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    logger = logging.getLogger("imucal")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(resolved_level)
    logger.propagate = False
    return logger
