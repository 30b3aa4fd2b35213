"""
Logging setup for extconf.

Every module logs through ``logging.getLogger(__name__)``; this configures
the ``extconf`` parent logger for command-line use:
- stderr (console) at the requested level
- {log_dir}/extconf.log: main log, 5MB rotation, keeps 3 backups
- {log_dir}/extconf.errors.log: errors only, 2MB rotation, keeps 2 backups
- {log_dir}/extconf.json: structured JSON, 5MB rotation, keeps 2 backups
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "extconf"


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(
    level: Union[int, str] = logging.INFO, log_dir: Optional[Path] = None
) -> logging.Logger:
    """
    Configure the extconf logger.

    Handlers are replaced on every call, so repeated setup does not
    duplicate output.

    Args:
        level: Console level (name or number)
        log_dir: Directory for rotating log files; console only when None

    Returns:
        The configured ``extconf`` logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    text_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(text_formatter)
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        main_handler = RotatingFileHandler(
            log_dir / "extconf.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        main_handler.setLevel(logging.DEBUG)
        main_handler.setFormatter(text_formatter)
        logger.addHandler(main_handler)

        error_handler = RotatingFileHandler(
            log_dir / "extconf.errors.log", maxBytes=2 * 1024 * 1024, backupCount=2, encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(text_formatter)
        logger.addHandler(error_handler)

        json_handler = RotatingFileHandler(
            log_dir / "extconf.json", maxBytes=5 * 1024 * 1024, backupCount=2, encoding="utf-8"
        )
        json_handler.setLevel(logging.INFO)
        json_handler.setFormatter(JsonFormatter())
        logger.addHandler(json_handler)

    logger.setLevel(logging.DEBUG if log_dir is not None else level)
    return logger
