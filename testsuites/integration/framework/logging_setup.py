"""
Loguru setup shared by the runner and the CLI.

Two console sinks are installed:
    - stderr: regular log records (suite progress, client traffic, warnings)
    - stdout: records bound with ``channel="report"``, printed message-only

Usage:
    from testsuites.integration.framework.logging_setup import init_logger

    init_logger(level="DEBUG")
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


REPORT_CHANNEL = "report"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "{message}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"

_logger_initialized = False


def _is_report(record) -> bool:
    return record["extra"].get("channel") == REPORT_CHANNEL


def _is_not_report(record) -> bool:
    return not _is_report(record)


def report_logger():
    """Logger bound to the report channel (stdout, message only)."""
    return logger.bind(channel=REPORT_CHANNEL)


def init_logger(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    force: bool = False,
) -> None:
    """
    Initialize loguru sinks for a harness run.

    Args:
        level: Console level for regular records (DEBUG, INFO, ...)
        log_file: Optional file receiving every regular record at DEBUG
        rotation: Loguru rotation policy for the file sink
        retention: Loguru retention policy for the file sink
        force: Reinstall sinks even if already initialized
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level.upper(),
        filter=_is_not_report,
        colorize=True,
    )
    logger.add(
        sys.stdout,
        format="{message}",
        level="INFO",
        filter=_is_report,
        colorize=False,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level="DEBUG",
            filter=_is_not_report,
            rotation=rotation,
            retention=retention,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {level.upper()}")


__all__ = ["REPORT_CHANNEL", "init_logger", "report_logger"]
