"""Logger hierarchy for policy discovery, scanning and the provider clients."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "secpolicy"
_CONSOLE_FORMAT = "[secpolicy] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger, e.g. `get_logger("discovery")` -> `secpolicy.discovery`."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route secpolicy records to stderr, and to `log_file` when given.

    Verbose mode surfaces per-file discovery decisions, fallback lookups and
    GitHub API requests, which are logged at debug level.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated checks in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    handlers[0].setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
