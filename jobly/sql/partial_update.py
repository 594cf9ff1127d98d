from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from ..errors import ValidationError
from .fragment import SqlFragment
from .identifiers import quote_identifier, resolve_column

UpdatePayload = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


def _as_pairs(payload: UpdatePayload) -> list[tuple[str, Any]]:
    if isinstance(payload, Mapping):
        return list(payload.items())
    return [(key, value) for key, value in payload]


def sql_for_partial_update(
    payload: UpdatePayload,
    field_map: Mapping[str, str],
    start_ordinal: int = 1,
) -> SqlFragment:
    """
    Build the SET list of an UPDATE touching only the supplied fields.

    Fields are emitted in payload order; each one is translated through
    field_map (falling back to the field name itself), double-quoted, and
    assigned the next positional placeholder starting at start_ordinal.
    Values are never interpolated; they are returned in the same order for
    parameterized execution.

    The caller owns the rest of the statement. A trailing WHERE parameter
    must use `fragment.next_ordinal`:

        frag = sql_for_partial_update({"title": "Dev"}, {})
        sql = f"UPDATE jobs SET {frag.clause} WHERE id = ${frag.next_ordinal}"
        params = [*frag.values, job_id]

    Args:
        payload: Mapping, or explicit sequence of (field, value) pairs
        field_map: API field name -> column name
        start_ordinal: Ordinal of the first placeholder (default 1)

    Returns:
        SqlFragment, e.g. '"first_name"=$1, "age"=$2' with ("Aliya", 32)

    Raises:
        ValidationError: If payload is empty
        ValueError: If start_ordinal < 1 or a resolved column cannot be quoted
    """
    if start_ordinal < 1:
        raise ValueError(f"start_ordinal must be >= 1, got {start_ordinal}")

    pairs = _as_pairs(payload)
    if not pairs:
        raise ValidationError("No data supplied")

    assignments = []
    for ordinal, (field, _) in enumerate(pairs, start=start_ordinal):
        column = quote_identifier(resolve_column(field, field_map))
        assignments.append(f"{column}=${ordinal}")

    return SqlFragment(
        clause=", ".join(assignments),
        values=tuple(value for _, value in pairs),
        start=start_ordinal,
    )
