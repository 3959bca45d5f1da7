"""Typed field access on records.

A record is either a mapping (field name -> value) or any object exposing
its fields as attributes (dataclasses, ORM rows, namedtuples).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..core.errors import ConfigurationError, FieldNotFoundError

__all__ = [
    "MISSING",
    "get_field",
    "lookup_field",
    "normalize_path",
    "resolve_path",
]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def lookup_field(record: Any, name: str) -> Any:
    """Get field value, or ``MISSING`` if the record has no such field."""
    if isinstance(record, Mapping):
        return record.get(name, MISSING)

    return getattr(record, name, MISSING)


def get_field(record: Any, name: str) -> Any:
    """Get field value.

    Raises
    ------
    FieldNotFoundError
        If the record has no such field
    """
    value = lookup_field(record, name)
    if value is MISSING:
        raise FieldNotFoundError((name,), name, record)
    return value


def normalize_path(path: str | Sequence[str]) -> tuple[str, ...]:
    """Split a dot-separated path into segments.

    Example
    -------
    >>> normalize_path("author.profile.name")
    ('author', 'profile', 'name')
    >>> normalize_path(["author", "name"])
    ('author', 'name')

    Raises
    ------
    ConfigurationError
        If the path is empty or has an empty segment
    """
    if isinstance(path, str):
        segments = tuple(path.split("."))
    else:
        segments = tuple(path)

    if not segments or any(not segment for segment in segments):
        raise ConfigurationError(f"Invalid field path: {path!r}")

    return segments


def resolve_path(record: Any, path: str | Sequence[str]) -> Any:
    """Follow a nested field path from a record.

    Parameters
    ----------
    record
        Starting record
    path
        Dot-separated path or precomputed segments

    Returns
    -------
    Any
        Value at the end of the path

    Raises
    ------
    FieldNotFoundError
        If any segment is absent
    """
    segments = normalize_path(path)
    value = record

    for segment in segments:
        next_value = lookup_field(value, segment)
        if next_value is MISSING:
            raise FieldNotFoundError(segments, segment, record)
        value = next_value

    return value
