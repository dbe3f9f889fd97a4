"""Logging setup.

Library modules only call :func:`get_logger`. Handlers are installed once,
on the ``smartgrade`` package logger, by whoever owns the process (normally
the CLI). Diagnostics go to stderr so they never mix with command output.
"""

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "smartgrade"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def resolve_level(level: int | str) -> int:
    """Accept ``logging.DEBUG`` as well as names such as ``"debug"`` from config.

    Raises:
        ValueError: If the name is not a logging level
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(
    level: int | str = logging.WARNING,
    log_file: Path | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Level number or name
        log_file: Optional file receiving the same records
        format_string: Custom format string for log messages

    Returns:
        The configured package logger
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
