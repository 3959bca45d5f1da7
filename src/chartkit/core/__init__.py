"""Core components of chartkit: errors, time and configuration."""

from .config import Config, get_config, load_config, reset_config
from .errors import ChartkitError, ConfigurationError, FieldNotFoundError, ParseError
from .time import Clock, days_in_month, load_timezone, parse_timestamp, shift_months, to_wall_clock

__all__ = [
    "ChartkitError",
    "Clock",
    "Config",
    "ConfigurationError",
    "FieldNotFoundError",
    "ParseError",
    "days_in_month",
    "get_config",
    "load_config",
    "load_timezone",
    "parse_timestamp",
    "reset_config",
    "shift_months",
    "to_wall_clock",
]
