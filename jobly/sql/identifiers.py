from __future__ import annotations

from typing import Mapping


def quote_identifier(name: str) -> str:
    """
    Wrap a column name in double quotes for SQL interpolation.

    No escaping is performed. A name that cannot be quoted verbatim (empty, or
    containing a double quote or NUL) is rejected instead.

    ⚠️ SECURITY CONTRACT ⚠️
    Identifiers MUST be trusted: either a value of a developer-authored field
    map or a field name the calling model has already checked against its own
    closed set of fields. Values never pass through here; they travel as bound
    parameters.

    Raises:
        TypeError: If name is not a string
        ValueError: If name is empty or contains '"' or NUL

    Example:
        >>> quote_identifier("first_name")
        '"first_name"'
    """
    if not isinstance(name, str):
        raise TypeError(f"identifier must be a string, got {type(name).__name__}")

    if not name:
        raise ValueError("identifier cannot be empty")

    if '"' in name or "\x00" in name:
        raise ValueError(f"Invalid identifier {name!r}: cannot be double-quoted verbatim")

    return f'"{name}"'


def resolve_column(field: str, field_map: Mapping[str, str]) -> str:
    """
    Translate an API-facing field name to its storage column.

    Fields absent from field_map pass through unchanged. A field explicitly
    mapped to "" is not treated as absent; quoting it later fails loudly.
    """
    return field_map.get(field, field)
