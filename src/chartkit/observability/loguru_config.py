"""Loguru configuration with timing for chart aggregation.

This module provides centralized loguru configuration with:
- Colored console output
- Optional structured JSON log file
- Component-bound loggers
- A context manager for timing bucketing calls

chartkit is a library: nothing is configured on import. Applications call
``configure_loguru`` (or ``configure_from_config``) once at startup.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

    from ..core.config import Config

__all__ = [
    "configure_from_config",
    "configure_loguru",
    "get_logger",
    "timing_context",
]

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_loguru(
    *,
    level: str = "INFO",
    log_file: Path | str | None = None,
    rotation: str = "100 MB",
    retention: str = "10 days",
    enable_console: bool = True,
) -> None:
    """Configure loguru sinks.

    Parameters
    ----------
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_file
        Optional JSONL log file
    rotation
        Log rotation policy (e.g., "100 MB", "1 day")
    retention
        Log retention policy (e.g., "10 days", "1 week")
    enable_console
        Enable console output

    Example
    -------
    >>> from chartkit.observability import configure_loguru
    >>> configure_loguru(level="DEBUG")
    """
    # Remove default handler
    logger.remove()
    logger.configure(extra={"component": "chartkit"})

    if enable_console:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format="{message}",
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=True,  # JSON serialization
            backtrace=True,
            diagnose=False,
        )

    logger.debug("Loguru configured", level=level, log_file=str(log_file) if log_file else None)


def configure_from_config(config: Config) -> None:
    """Configure loguru from the ``logging`` section of a loaded config."""
    configure_loguru(
        level=str(config.get("logging.level", "INFO")).upper(),
        log_file=config.get("logging.path"),
    )


def get_logger(component: str = "chartkit") -> Any:
    """Get logger instance bound to specific component.

    Parameters
    ----------
    component
        Component name (aggregation, config, ...)

    Returns
    -------
    Logger
        Loguru logger bound to component
    """
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "chartkit",
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Context manager timing an operation at DEBUG level.

    Parameters
    ----------
    operation
        Name of the operation being timed
    component
        Component name for filtering logs
    **metadata
        Additional metadata to log

    Yields
    ------
    dict
        Context dictionary that can be updated with additional data

    Example
    -------
    >>> with timing_context("group_by_day", component="aggregation") as ctx:
    ...     series = aggregator.group_by_day()
    ...     ctx["buckets"] = len(series)
    """
    start_ns = time.perf_counter_ns()
    context: dict[str, Any] = dict(metadata)
    bound = logger.bind(component=component, timing=True, operation=operation)

    bound.debug(f"START: {operation}", phase="start", **metadata)

    try:
        yield context
    finally:
        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        bound.debug(
            f"END: {operation}",
            phase="end",
            duration_ms=duration_ms,
            **context,
        )
