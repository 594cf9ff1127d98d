from __future__ import annotations

import logging
import re
import time
from typing import Any, Mapping, Sequence, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import TextClause

from ..errors import DbQueryError, DuplicateError
from ..sql.fragment import bind_positional
from .metrics import observe_db_query

logger = logging.getLogger(__name__)

Params = Union[Mapping[str, Any], Sequence[Any], None]

# SQLite, PostgreSQL and MySQL wordings of a unique-key violation
_UNIQUE_VIOLATION_MARKERS = ("unique constraint", "duplicate key", "duplicate entry")

_OPERATION_PATTERNS = (
    ("select", re.compile(r"^\s*SELECT\b.*?\bFROM\s+\"?(\w+)\"?", re.IGNORECASE | re.DOTALL)),
    ("insert", re.compile(r"^\s*INSERT\s+INTO\s+\"?(\w+)\"?", re.IGNORECASE)),
    ("update", re.compile(r"^\s*UPDATE\s+\"?(\w+)\"?", re.IGNORECASE)),
    ("delete", re.compile(r"^\s*DELETE\s+FROM\s+\"?(\w+)\"?", re.IGNORECASE)),
)


def _is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg2 exposes the SQLSTATE; 23505 is unique_violation
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    message = str(exc.orig).lower()
    return any(marker in message for marker in _UNIQUE_VIOLATION_MARKERS)


def _parse_sql_operation(sql: str | TextClause) -> tuple[str, str]:
    """Best-effort (table, op_type) of a statement, for metric labels."""
    raw = sql if isinstance(sql, str) else sql.text
    for op_type, pattern in _OPERATION_PATTERNS:
        match = pattern.match(raw)
        if match:
            return match.group(1).lower(), op_type
    return "unknown", "unknown"


def _prepare(sql: str | TextClause, params: Params) -> tuple[TextClause, Mapping[str, Any]]:
    """
    Normalize a statement and its parameters for Connection.execute().

    A sequence of params binds positionally to $1..$n placeholders, which is
    how statements assembled from SqlFragments arrive. A mapping binds to
    :name placeholders unchanged.
    """
    if params is None:
        return (text(sql) if isinstance(sql, str) else sql), {}

    if isinstance(params, Mapping):
        return (text(sql) if isinstance(sql, str) else sql), params

    if not isinstance(sql, str):
        raise TypeError("Positional parameters require the statement as a string")
    named, bound = bind_positional(sql, list(params))
    return text(named), bound


class DbSession:
    """
    Transactional wrapper around a SQLAlchemy Engine connection.

    Use as:
        with DbSession(engine) as session:
            session.execute(...)
            row = session.fetch_one(...)

    The transaction commits on clean exit and rolls back if the block raises.
    Driver failures surface as DbQueryError with the original chained; a
    unique-key violation surfaces as DuplicateError.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._conn: Connection | None = None
        self._tx = None

    def __enter__(self) -> "DbSession":
        if self._conn is not None:
            raise RuntimeError("DbSession is already active; nested sessions are not allowed")
        self._conn = self.engine.connect()
        self._tx = self._conn.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._tx is not None:
                if exc_type:
                    self._tx.rollback()
                else:
                    self._tx.commit()
        finally:
            if self._conn is not None:
                self._conn.close()

            self._conn = None
            self._tx = None

        # propagate exceptions (if any)
        return False

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def _run(self, sql: str | TextClause, params: Params) -> CursorResult:
        conn = self._connection()
        stmt, bound = _prepare(sql, params)
        table, op_type = _parse_sql_operation(stmt)

        start_time = time.monotonic()
        status = "success"
        try:
            return conn.execute(stmt, bound)
        except IntegrityError as exc:
            status = "error"
            if _is_unique_violation(exc):
                logger.info("Duplicate key rejected by %s on %s: %s", op_type, table, exc.orig)
                raise DuplicateError(f"Duplicate record in {table}: {exc.orig}") from exc
            logger.warning("%s on %s failed: %s", op_type, table, exc)
            raise DbQueryError(str(exc)) from exc
        except (SQLAlchemyError, OverflowError) as exc:
            # OverflowError: the driver could not bind an out-of-range integer
            status = "error"
            logger.warning("%s on %s failed: %s", op_type, table, exc)
            raise DbQueryError(str(exc)) from exc
        finally:
            observe_db_query(table, op_type, status, time.monotonic() - start_time)

    def execute(self, sql: str | TextClause, params: Params = None) -> int:
        """
        Execute a non-SELECT statement and return affected row count.
        """
        result = self._run(sql, params)
        try:
            if result.rowcount is None:
                raise RuntimeError(
                    "execute() received None rowcount for statement. "
                    "This may indicate a DDL statement or unsupported operation type."
                )
            return int(result.rowcount)
        finally:
            result.close()

    def execute_scalar(self, sql: str | TextClause, params: Params = None) -> Any:
        """
        Execute a statement expected to return a single scalar value.
        """
        result = self._run(sql, params)
        try:
            return result.scalar_one_or_none()
        finally:
            result.close()

    def fetch_one(self, sql: str | TextClause, params: Params = None) -> dict[str, Any] | None:
        """
        Execute a statement expected to return 0 or 1 row. Raises if more than one row.

        Also used for INSERT/UPDATE/DELETE ... RETURNING.
        """
        result = self._run(sql, params)
        try:
            row = result.mappings().one_or_none()
            if row is None:
                return None
            return dict(row)
        finally:
            result.close()

    def fetch_all(self, sql: str | TextClause, params: Params = None) -> list[dict[str, Any]]:
        """
        Execute a SELECT expected to return multiple rows.
        """
        result = self._run(sql, params)
        try:
            return [dict(row) for row in result.mappings()]
        finally:
            result.close()
