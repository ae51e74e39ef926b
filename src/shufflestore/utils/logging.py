# src/shufflestore/utils/logging.py
"""Root logger setup for shufflestore.

The deck and the shuffler log lifecycle events with structured ``extra``
fields (``path``, ``stage``, ``lines``...). :class:`ExtraFormatter` appends
those fields to the message so they survive into plain-text logs.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(process)d] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def parse_level(level: str | int) -> int:
    """Normalize a logging level string or integer to ``logging`` constants.

    Unknown names fall back to ``INFO``.
    """
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        return value if isinstance(value, int) else logging.INFO
    return int(level)


class ExtraFormatter(logging.Formatter):
    """Formatter that appends ``key=value`` pairs passed via ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and not k.startswith("_")}
        if not fields:
            return text
        return text + " | " + " ".join(f"{k}={v}" for k, v in sorted(fields.items()))


def configure_logging(*, level: str | int = "INFO", log_file: str | Path | None = None) -> int:
    """Route root logging to stderr and, optionally, a UTF-8 file.

    Earlier handlers are replaced, so calling this again moves output to the
    new destination. Returns the numeric level that was applied.
    """
    numeric = parse_level(level)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        p = Path(log_file)
        p.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(p, encoding="utf-8"))

    formatter = ExtraFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=numeric, handlers=handlers, force=True)
    return numeric


__all__ = ["ExtraFormatter", "configure_logging", "parse_level"]
