"""
Logging configuration for SlideSmith.

Configures both the stdlib loggers used by uvicorn, SQLAlchemy and httpx and
the loguru sinks used by the pipeline, so the API and the CLI write to the
same console and (optionally) the same rotating file.
"""

import logging.config
import os
import sys
from typing import Any

from loguru import logger as loguru_logger

from slidesmith.configs.config import config

_DATEFMT = "%Y-%m-%d %H:%M:%S"
_ROTATE_BYTES = 10 * 1024 * 1024
_BACKUPS = 5

# Third-party loggers and the level they are capped at
_LIBRARY_LEVELS = {
    "uvicorn": None,
    "uvicorn.access": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "httpx": "WARNING",
}


def _stdlib_config(log_level: str, file_path: str | None) -> dict[str, Any]:
    handlers = ["console"] + (["file"] if file_path else [])
    loggers: dict[str, Any] = {
        "slidesmith": {"level": log_level, "handlers": handlers, "propagate": False}
    }
    for name, level in _LIBRARY_LEVELS.items():
        loggers[name] = {
            "level": level or log_level,
            "handlers": handlers,
            "propagate": False,
        }

    handler_defs: dict[str, Any] = {
        "console": {
            "level": log_level,
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        }
    }
    if file_path:
        handler_defs["file"] = {
            "level": "DEBUG",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": file_path,
            "maxBytes": _ROTATE_BYTES,
            "backupCount": _BACKUPS,
            "formatter": "detailed",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": _DATEFMT,
            },
            "detailed": {
                "format": (
                    "%(asctime)s - %(name)s - %(levelname)s - "
                    "%(module)s:%(funcName)s:%(lineno)d - %(message)s"
                ),
                "datefmt": _DATEFMT,
            },
        },
        "handlers": handler_defs,
        "loggers": loggers,
        "root": {"level": log_level, "handlers": handlers},
    }


def _configure_loguru(log_level: str, file_path: str | None) -> None:
    loguru_logger.remove()
    loguru_logger.add(sys.stdout, level=log_level)
    if file_path:
        loguru_logger.add(
            file_path,
            level="DEBUG",
            rotation="10 MB",
            retention=_BACKUPS,
            backtrace=False,
            diagnose=False,
        )


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    enable_file_logging: bool = False,
    log_dir: str | None = None,
    component: str = "default",
) -> str | None:
    """Configure stdlib logging and loguru for one process.

    ``component`` names the default log file (``api.log``, ``cli.log``).
    Returns the log file path when file logging is enabled.
    """
    level = (log_level or config.log_level).upper()

    file_path: str | None = None
    if enable_file_logging:
        directory = log_dir or config.log_dir
        os.makedirs(directory, exist_ok=True)
        file_path = os.path.join(directory, log_file or f"{component}.log")

    logging.config.dictConfig(_stdlib_config(level, file_path))
    _configure_loguru(level, file_path)
    loguru_logger.debug(f"Logging configured for {component} at {level}")
    return file_path
