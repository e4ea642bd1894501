"""Logging utilities for ldocgen runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .models import Diagnostic

_LOGGER_NAME = "ldocgen"
_CONSOLE_FORMAT = "[ldocgen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the ldocgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console (and optional file) handlers on the ldocgen logger.

    ``verbose`` surfaces per-declaration diagnostics (DEBUG); ``quiet`` keeps
    only warnings and failures on the console. The file sink always records
    everything down to DEBUG.
    """
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING
    else:
        console_level = logging.INFO

    logger = logging.getLogger(_LOGGER_NAME)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_handler(logging.StreamHandler(), console_level, _CONSOLE_FORMAT))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), logging.DEBUG, _FILE_FORMAT)
        )
    logger.setLevel(logging.DEBUG if log_file is not None else console_level)
    return logger


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def log_diagnostics(
    logger: logging.Logger, source: object, diagnostics: Iterable["Diagnostic"]
) -> None:
    """Emit one DEBUG record per recoverable warning raised while converting ``source``."""
    for diagnostic in diagnostics:
        location = f"{source}:{diagnostic.line}" if diagnostic.line else str(source)
        logger.debug("%s [%s] %s", location, diagnostic.kind.value, diagnostic.message)


__all__ = ["configure_logging", "get_logger", "log_diagnostics"]
