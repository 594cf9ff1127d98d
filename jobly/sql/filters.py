from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from ..errors import ValidationError
from .fragment import SqlFragment
from .identifiers import quote_identifier

# bounds bind as 64-bit integers on every supported driver
MIN_BOUND = -(2**63)
MAX_BOUND = 2**63 - 1


class FilterKind(str, Enum):
    CONTAINS = "contains"
    MIN = "min"
    MAX = "max"
    POSITIVE = "positive"


@dataclass(frozen=True)
class FilterField:
    """
    One optional filter criterion a resource accepts.

    key is the API-facing criterion name (e.g. "minEmployees"); column is the
    trusted storage column it constrains.
    """
    key: str
    column: str
    kind: FilterKind


def _parse_number(key: str, value: Any) -> int | float:
    # bool is an int subclass; "minSalary=true" is not a bound
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number, got {value!r}")

    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        # int() and float() accept "1_000"; a query-string bound should not
        if "_" in text:
            raise ValidationError(f"{key} must be a number, got {value!r}")
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                raise ValidationError(f"{key} must be a number, got {value!r}") from None
    else:
        raise ValidationError(f"{key} must be a number, got {value!r}")

    if isinstance(number, float) and not math.isfinite(number):
        raise ValidationError(f"{key} must be a finite number, got {value!r}")
    if isinstance(number, int) and not MIN_BOUND <= number <= MAX_BOUND:
        raise ValidationError(f"{key} is out of range, got {value!r}")
    return number


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally (paired with ESCAPE '\\')."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_flag(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValidationError(f"{key} must be true or false, got {value!r}")


def _normalize(
    criteria: Mapping[str, Any],
    fields: Sequence[FilterField],
) -> dict[str, Any]:
    """Parse every present criterion and check cross-field constraints."""
    declared = {f.key for f in fields}
    unknown = sorted(k for k in criteria if k not in declared)
    if unknown:
        raise ValidationError(f"Unknown filter(s): {', '.join(unknown)}")

    parsed: dict[str, Any] = {}
    for f in fields:
        value = criteria.get(f.key)
        if value is None:
            continue
        if f.kind in (FilterKind.MIN, FilterKind.MAX):
            parsed[f.key] = _parse_number(f.key, value)
        elif f.kind == FilterKind.POSITIVE:
            parsed[f.key] = _parse_flag(f.key, value)
        else:
            parsed[f.key] = str(value)

    lows = {f.column: f.key for f in fields if f.kind == FilterKind.MIN and f.key in parsed}
    highs = {f.column: f.key for f in fields if f.kind == FilterKind.MAX and f.key in parsed}
    for column, low_key in lows.items():
        high_key = highs.get(column)
        if high_key is not None and parsed[low_key] > parsed[high_key]:
            raise ValidationError(
                f"min greater than max: {low_key} ({parsed[low_key]}) "
                f"> {high_key} ({parsed[high_key]})"
            )
    return parsed


def sql_for_filters(
    criteria: Mapping[str, Any],
    fields: Sequence[FilterField],
    start_ordinal: int = 1,
) -> SqlFragment:
    """
    Build the WHERE condition for a filtered list query.

    Predicates are emitted in the order of `fields`, never in the order of
    `criteria`, and joined with AND. Absent criteria (missing or None)
    contribute nothing. All criteria are validated before any SQL is built.

    Predicate shapes:
        CONTAINS  LOWER("col") LIKE LOWER($n) ESCAPE '\\'
                  value wildcard-escaped, then wrapped as %v%
        MIN       "col" >= $n
        MAX       "col" <= $n
        POSITIVE  "col" > $n                     value 0, only when the flag is true

    Returns:
        SqlFragment; SqlFragment("", ()) when no criteria are present

    Raises:
        ValidationError: Unknown criterion, unparseable bound or flag, or a
                         MIN bound greater than the MAX bound on the same column
        ValueError: If start_ordinal < 1
    """
    if start_ordinal < 1:
        raise ValueError(f"start_ordinal must be >= 1, got {start_ordinal}")

    parsed = _normalize(criteria, fields)

    predicates: list[str] = []
    values: list[Any] = []
    for f in fields:
        if f.key not in parsed:
            continue
        value = parsed[f.key]
        column = quote_identifier(f.column)
        ordinal = start_ordinal + len(values)

        if f.kind == FilterKind.CONTAINS:
            predicates.append(f"LOWER({column}) LIKE LOWER(${ordinal}) ESCAPE '\\'")
            values.append(f"%{escape_like(value)}%")
        elif f.kind == FilterKind.MIN:
            predicates.append(f"{column} >= ${ordinal}")
            values.append(value)
        elif f.kind == FilterKind.MAX:
            predicates.append(f"{column} <= ${ordinal}")
            values.append(value)
        elif f.kind == FilterKind.POSITIVE:
            if value:
                predicates.append(f"{column} > ${ordinal}")
                values.append(0)
        else:
            raise ValueError(f"Unknown filter kind: {f.kind}")

    return SqlFragment(
        clause=" AND ".join(predicates),
        values=tuple(values),
        start=start_ordinal,
    )
