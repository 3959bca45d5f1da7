"""Time-bucketed aggregation of records into chart series."""

from .aggregator import PREAGGREGATED_FIELD, AggregationConfig, Aggregator, ChartSeries
from .buckets import (
    Bucket,
    Granularity,
    bucket_key,
    day_buckets,
    hour_buckets,
    last_day_buckets,
    last_month_buckets,
    month_buckets,
    year_buckets,
)
from .records import get_field, resolve_path
from .reducers import AggregateOp, reduce_records

__all__ = [
    # Aggregator
    "PREAGGREGATED_FIELD",
    "AggregationConfig",
    "Aggregator",
    "ChartSeries",
    # Buckets
    "Bucket",
    "Granularity",
    "bucket_key",
    "day_buckets",
    "hour_buckets",
    "last_day_buckets",
    "last_month_buckets",
    "month_buckets",
    "year_buckets",
    # Records and reducers
    "AggregateOp",
    "get_field",
    "reduce_records",
    "resolve_path",
]
