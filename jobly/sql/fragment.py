from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Sequence

PLACEHOLDER_RE = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class SqlFragment:
    """
    A parameterized piece of SQL plus its ordered bound values.

    The clause uses positional placeholders ($1, $2, ...) numbered
    contiguously from `start`; `values[i]` binds to ordinal `start + i`.
    A fragment is not executable on its own: the caller supplies the
    surrounding statement.
    """
    clause: str
    values: tuple[Any, ...] = ()
    start: int = 1

    @property
    def next_ordinal(self) -> int:
        """Ordinal a caller must use for the first parameter appended after this fragment."""
        return self.start + len(self.values)

    @property
    def placeholders(self) -> list[int]:
        return [int(n) for n in PLACEHOLDER_RE.findall(self.clause)]

    def is_empty(self) -> bool:
        return not self.clause

    def where(self) -> str:
        """Render as a WHERE suffix, or "" when the fragment is empty."""
        return f" WHERE {self.clause}" if self.clause else ""


def bind_positional(sql: str, values: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """
    Rewrite $n placeholders as SQLAlchemy named binds.

    `$n` becomes `:p<n>` and binds to `values[n - 1]`, so a statement
    assembled from fragments can run through `sqlalchemy.text()` on any
    driver regardless of its native paramstyle.

    Raises:
        ValueError: If a placeholder has no matching value, or a value has
                    no placeholder
    """
    ordinals = {int(n) for n in PLACEHOLDER_RE.findall(sql)}
    expected = set(range(1, len(values) + 1))
    if ordinals != expected:
        raise ValueError(
            f"Placeholder ordinals {sorted(ordinals)} do not match "
            f"{len(values)} bound value(s)"
        )

    named = PLACEHOLDER_RE.sub(lambda m: f":p{m.group(1)}", sql)
    params = {f"p{i}": value for i, value in enumerate(values, start=1)}
    return named, params
