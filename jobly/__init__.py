from .errors import DbQueryError, DuplicateError, JoblyError, NotFoundError, ValidationError
from .sql import SqlFragment, sql_for_filters, sql_for_partial_update

__all__ = [
    "SqlFragment",
    "sql_for_partial_update",
    "sql_for_filters",
    "JoblyError",
    "ValidationError",
    "DuplicateError",
    "NotFoundError",
    "DbQueryError",
]
