"""
Structured logging configuration for the museum calendar backend.

Production runs write one JSON document per line to rotating files; every
other environment prints a short human-readable line to stdout.

Loggers:
- api: HTTP requests and exception handlers
- services: Event store, relation graph, query engine and calendar builder
- db: Engine setup, sessions, provider queries
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional


LOGGER_NAMESPACE = "muscal"
LOGGER_NAMES = ("api", "services", "db")

# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    Formatter emitting each record as a single JSON object.

    Keys: timestamp (ISO 8601, UTC), level, logger, message, module,
    function, line, and ``exception`` when the record carries exc_info.
    Keys passed through ``extra`` are merged in, as is a dict passed as
    ``extra={"extra_fields": {...}}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and key != "extra_fields":
                log_data[key] = value

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_data.update(extra_fields)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Format: [TIMESTAMP] LEVEL - LOGGER - MESSAGE

    Example: [2024-07-01 10:30:45] INFO - muscal.services - Created event: evt_01j...
    """

    def __init__(self):
        super().__init__(
            fmt="[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def _get_log_level() -> int:
    """
    Read MUSCAL_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Unknown values fall back to INFO.
    """
    level_str = os.environ.get("MUSCAL_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def _get_log_dir() -> Path:
    """Return MUSCAL_LOG_DIR (default ./logs), creating it if needed."""
    log_dir = Path(os.environ.get("MUSCAL_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _is_production() -> bool:
    """True when MUSCAL_ENV is ``production`` (default: development)."""
    env = os.environ.get("MUSCAL_ENV", "development").lower()
    return env == "production"


def configure_logging() -> Dict[str, logging.Logger]:
    """
    Configure the named ``muscal.*`` loggers.

    Behavior:
    - Production (MUSCAL_ENV=production):
      * JSON records to ``<log dir>/<name>.log``
      * Rotation at 10MB, 5 backups kept
    - Development / test (default):
      * Console output on stdout, no files

    Returns:
        Mapping of short logger name ("api", "services", "db") to Logger
    """
    log_level = _get_log_level()
    is_prod = _is_production()
    log_dir = _get_log_dir() if is_prod else None

    loggers = {}

    for logger_name in LOGGER_NAMES:
        logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{logger_name}")
        logger.setLevel(log_level)
        logger.propagate = False
        logger.handlers.clear()

        if is_prod:
            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / f"{logger_name}.log",
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8"
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)
        else:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(ConsoleFormatter())
            logger.addHandler(console_handler)

        loggers[logger_name] = logger

    return loggers


_loggers: Optional[Dict[str, logging.Logger]] = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger by short name.

    Args:
        name: One of "api", "services", "db"

    Returns:
        Configured Logger instance

    Raises:
        ValueError: If the name is not one of the configured loggers
    """
    global _loggers

    if _loggers is None:
        _loggers = configure_logging()

    if name not in _loggers:
        raise ValueError(
            f"Unknown logger name: {name}. "
            f"Valid names: {', '.join(_loggers.keys())}"
        )

    return _loggers[name]


def init_logging() -> Dict[str, logging.Logger]:
    """(Re)configure all loggers; called from the application lifespan."""
    global _loggers
    _loggers = configure_logging()
    return _loggers
