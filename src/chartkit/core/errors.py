"""Error taxonomy for chart aggregation.

All failures surface immediately to the caller of a bucketing method;
a single malformed record aborts the whole call.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "ChartkitError",
    "ConfigurationError",
    "FieldNotFoundError",
    "ParseError",
]


class ChartkitError(Exception):
    """Base class for all chartkit errors."""

    pass


class ParseError(ChartkitError):
    """Raised when a record field cannot be interpreted.

    Covers unparsable or missing timestamps and non-numeric values in the
    aggregate field.

    Attributes
    ----------
    record : Any
        Offending record
    field : str
        Name of the field that failed to parse
    value : Any
        Raw field value
    """

    def __init__(self, record: Any, field: str, value: Any, reason: str | None = None) -> None:
        self.record = record
        self.field = field
        self.value = value
        self.reason = reason

        message = f"Cannot parse field '{field}' (value {value!r}) of record {record!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConfigurationError(ChartkitError):
    """Raised when aggregation configuration is missing or invalid."""

    pass


class FieldNotFoundError(ChartkitError):
    """Raised when a field or relation path is absent on a record.

    Attributes
    ----------
    path : tuple[str, ...]
        Full path that was being followed
    segment : str
        Segment that could not be resolved
    """

    def __init__(self, path: tuple[str, ...], segment: str, record: Any = None) -> None:
        self.path = path
        self.segment = segment
        self.record = record

        dotted = ".".join(path)
        super().__init__(f"Field '{segment}' not found while resolving '{dotted}' on record {record!r}")
