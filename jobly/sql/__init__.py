from .filters import FilterField, FilterKind, sql_for_filters
from .fragment import SqlFragment, bind_positional
from .identifiers import quote_identifier, resolve_column
from .partial_update import sql_for_partial_update

__all__ = [
    "SqlFragment",
    "bind_positional",
    "quote_identifier",
    "resolve_column",
    "sql_for_partial_update",
    "sql_for_filters",
    "FilterField",
    "FilterKind",
]
