class JoblyError(Exception):
    """Base exception for jobly errors."""


class ValidationError(JoblyError):
    """Caller-supplied data was rejected; correct the input and retry."""


class DuplicateError(ValidationError):
    """A record with the same unique key already exists."""


class NotFoundError(JoblyError):
    """A by-key operation matched no row."""


class DbQueryError(JoblyError):
    """Any failure while executing a statement against the database."""
