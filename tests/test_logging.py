"""Tests for ldocgen.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from ldocgen.logging import configure_logging, get_logger, log_diagnostics
from ldocgen.models import Diagnostic, DiagnosticKind


def test_console_level_follows_flags() -> None:
    assert configure_logging().handlers[0].level == logging.INFO
    assert configure_logging(verbose=True).handlers[0].level == logging.DEBUG
    logger = configure_logging(quiet=True)
    assert logger.handlers[0].level == logging.WARNING
    assert len(logger.handlers) == 1


def test_log_file_records_diagnostics(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "run.log"
    logger = configure_logging(quiet=True, log_file=log_file)

    log_diagnostics(
        get_logger("test"),
        "init.lua",
        [Diagnostic(kind=DiagnosticKind.PARSE_MISMATCH, message="@param a does not match", line=4)],
    )
    for handler in logger.handlers:
        handler.flush()

    assert "init.lua:4 [parse-mismatch] @param a does not match" in log_file.read_text(encoding="utf-8")
    configure_logging()
