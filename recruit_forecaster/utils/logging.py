"""
Logging setup for the recruitment posting forecaster.

``configure_logging(config)`` is called once by each CLI command, before any
history is loaded. Library modules only ever do::

    logger = logging.getLogger(__name__)

and never touch handlers themselves, so the engine stays silent (apart from
DEBUG records) when embedded in another application.

With ``json_format = true`` under ``[logging]`` in ``config/default.toml``
each record becomes one JSON object per line::

    {"ts": "2026-03-02T09:00:00Z", "level": "INFO", "logger": "recruit_forecaster.ingestion.postings_csv", "msg": "..."}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recruit_forecaster.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# LogRecord attributes that are not user-supplied ``extra=`` fields.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}

_NOISY_LOGGERS = ("httpx", "httpcore")


class _JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line: ``ts``, ``level``, ``logger``, ``msg``.

    ``extra=`` fields are merged in at the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key, val in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = val
        return json.dumps(payload, default=str, ensure_ascii=False)


def build_formatter(json_format: bool) -> logging.Formatter:
    """Return the JSON or plain-text formatter."""
    if json_format:
        return _JsonFormatter()
    return logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from a ``LoggingConfig``.

    Installs a stdout handler and, when ``config.log_file`` is non-empty, a
    UTF-8 file handler (parent directories are created). Organization names
    in the source data are Korean, hence the explicit encoding.

    Args:
        config: ``AppConfig.logging``.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = build_formatter(config.json_format)

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers.append(console)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
