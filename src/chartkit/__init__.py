"""chartkit: bucket timestamped records into chart-ready labels and values."""

from .aggregation import (
    AggregateOp,
    AggregationConfig,
    Aggregator,
    Bucket,
    ChartSeries,
    Granularity,
)
from .core.config import Config, get_config, load_config
from .core.errors import ChartkitError, ConfigurationError, FieldNotFoundError, ParseError
from .core.time import Clock

__version__ = "0.1.0"

__all__ = [
    # Aggregation
    "AggregateOp",
    "AggregationConfig",
    "Aggregator",
    "Bucket",
    "ChartSeries",
    "Granularity",
    # Configuration
    "Clock",
    "Config",
    "get_config",
    "load_config",
    # Errors
    "ChartkitError",
    "ConfigurationError",
    "FieldNotFoundError",
    "ParseError",
]
