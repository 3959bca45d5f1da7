"""Observability module for chartkit.

Provides loguru setup, component loggers and timing instrumentation.
"""

from .loguru_config import (
    configure_from_config,
    configure_loguru,
    get_logger,
    timing_context,
)

__all__ = [
    "configure_from_config",
    "configure_loguru",
    "get_logger",
    "timing_context",
]
