"""
Logging for stablematch, built on Loguru.

Library modules only ask for bound loggers; sinks are installed once by the
CLI (or by an embedding application) through ``setup_logging``.
"""

import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from stablematch.utils.config import LoggingSettings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<level>{message}</level>"
)


def _add_console_sink(level: str, diagnose: bool) -> int:
    return logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=True,
        backtrace=diagnose,
        diagnose=diagnose,
    )


def _add_file_sink(log_settings: LoggingSettings, level: str, diagnose: bool) -> int:
    log_file = Path(log_settings.file_path)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return logger.add(
        log_file,
        format=log_settings.format,
        level=level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        diagnose=diagnose,
        # Solver runs log from worker threads
        enqueue=True,
    )


def setup_logging(level: Optional[str] = None) -> str:
    """
    Install the configured sinks, replacing any existing ones.

    Args:
        level: Overrides ``LOG_LEVEL`` when given

    Returns:
        The effective level name
    """
    settings = get_settings()
    log_settings = settings.logging
    effective = (level or log_settings.level).upper()
    diagnose = settings.debug and settings.environment == "development"

    logger.remove()
    logger.configure(extra={"name": "stablematch"})

    if log_settings.console_output:
        _add_console_sink(effective, diagnose)
    if log_settings.file_path is not None:
        _add_file_sink(log_settings, effective, diagnose)

    logger.debug(f"Logging initialized at {effective}")
    return effective


def get_logger(name: str) -> Any:
    """Return the shared logger bound to ``name`` (usually ``__name__``)."""
    return logger.bind(name=name)


class LoggerMixin:
    """Gives a class a ``logger`` property bound to its qualified name."""

    @property
    def logger(self) -> Any:
        if "_logger" not in self.__dict__:
            cls = type(self)
            self._logger = get_logger(f"{cls.__module__}.{cls.__qualname__}")
        return self._logger
