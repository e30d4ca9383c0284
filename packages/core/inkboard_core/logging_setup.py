"""Structured local logging for render runs.

Records under the ``inkboard`` logger are written one JSON object per line to
``<config dir>/logs/inkboard.log``, rotated at midnight. Handler setup is driven
entirely by :class:`~inkboard_core.config.LoggingConfig`.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import LoggingConfig, config_path

_LOGGER_NAME = "inkboard"
_LOG_FILE = "inkboard.log"
_RENDER_FIELDS = ("event", "layout", "duration_ms")


def log_dir() -> Path:
    path = config_path().parent / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


class JsonFormatter(logging.Formatter):
    """One JSON line per record, carrying the render fields passed via ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update({key: getattr(record, key) for key in _RENDER_FIELDS if hasattr(record, key)})
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def _level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    settings: LoggingConfig | None = None,
    console: bool | None = None,
    directory: Path | None = None,
) -> logging.Logger:
    """Attach the rotating JSON file handler, plus a console handler when enabled.

    ``console`` overrides ``settings.console`` for callers such as the CLI that
    reserve stdout for their own output. Calling again is a no-op until
    :func:`shutdown_logging` has removed the handlers.
    """
    settings = settings or LoggingConfig()
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(_level(settings.level))
    if directory is not None:
        directory.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=str((directory or log_dir()) / _LOG_FILE),
        when="midnight",
        backupCount=max(2, settings.keep_log_files),
        encoding="utf-8",
    )
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)

    if settings.console if console is None else console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(stream_handler)

    logger.info("logging configured", extra={"event": "logging_configured"})
    return logger


def shutdown_logging() -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)
