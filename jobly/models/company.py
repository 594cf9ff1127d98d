from __future__ import annotations

import logging
from typing import Any, Mapping

from ..db.session import DbSession
from ..errors import DuplicateError, NotFoundError
from ..sql import FilterField, FilterKind, sql_for_filters, sql_for_partial_update
from .schemas import CompanyNew, CompanyUpdate, validate_payload

logger = logging.getLogger(__name__)

FIELD_MAP: Mapping[str, str] = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}

FILTERS = (
    FilterField("name", "name", FilterKind.CONTAINS),
    FilterField("minEmployees", "num_employees", FilterKind.MIN),
    FilterField("maxEmployees", "num_employees", FilterKind.MAX),
)

_COLUMNS = (
    "handle, name, description, "
    'num_employees AS "numEmployees", logo_url AS "logoUrl"'
)


class Company:
    """
    Queries for the companies table.

    Every method takes an active DbSession; transaction boundaries belong to
    the caller. Rows come back keyed by API-facing names
    ({handle, name, description, numEmployees, logoUrl}).
    """

    @staticmethod
    def create(session: DbSession, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Insert a company and return it.

        Raises:
            ValidationError: Missing, unknown or malformed fields
            DuplicateError: A company with this handle already exists
        """
        data = validate_payload(CompanyNew, data)

        handle = data["handle"]
        existing = session.fetch_one(
            "SELECT handle FROM companies WHERE handle = $1",
            [handle],
        )
        if existing is not None:
            raise DuplicateError(f"Duplicate company: {handle}")

        row = session.fetch_one(
            f"""INSERT INTO companies (handle, name, description, num_employees, logo_url)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {_COLUMNS}""",
            [
                handle,
                data["name"],
                data["description"],
                data.get("numEmployees"),
                data.get("logoUrl"),
            ],
        )
        logger.info("Created company %s", handle)
        return row

    @staticmethod
    def find_all(
        session: DbSession,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        List companies ordered by name.

        filters may contain name (case-insensitive substring), minEmployees
        and maxEmployees.
        """
        where = sql_for_filters(filters or {}, FILTERS)
        return session.fetch_all(
            f"SELECT {_COLUMNS} FROM companies{where.where()} ORDER BY name",
            list(where.values),
        )

    @staticmethod
    def get(session: DbSession, handle: str) -> dict[str, Any]:
        """
        Return one company with its jobs as `jobs` [{id, title, salary, equity}].

        Raises:
            NotFoundError: No company with this handle
        """
        company = session.fetch_one(
            f"SELECT {_COLUMNS} FROM companies WHERE handle = $1",
            [handle],
        )
        if company is None:
            logger.debug("Company lookup missed: %s", handle)
            raise NotFoundError(f"No company: {handle}")

        company["jobs"] = session.fetch_all(
            """SELECT id, title, salary, equity
               FROM jobs
               WHERE company_handle = $1
               ORDER BY id""",
            [handle],
        )
        return company

    @staticmethod
    def update(session: DbSession, handle: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Partially update a company; only supplied fields change.

        Raises:
            ValidationError: Empty data, a field that cannot be updated, or a malformed value
            NotFoundError: No company with this handle
        """
        data = validate_payload(CompanyUpdate, data)

        fragment = sql_for_partial_update(data, FIELD_MAP)
        row = session.fetch_one(
            f"""UPDATE companies
                SET {fragment.clause}
                WHERE handle = ${fragment.next_ordinal}
                RETURNING {_COLUMNS}""",
            [*fragment.values, handle],
        )
        if row is None:
            raise NotFoundError(f"No company: {handle}")

        logger.info("Updated company %s (%s)", handle, ", ".join(data))
        return row

    @staticmethod
    def remove(session: DbSession, handle: str) -> None:
        """
        Raises:
            NotFoundError: No company with this handle
        """
        row = session.fetch_one(
            "DELETE FROM companies WHERE handle = $1 RETURNING handle",
            [handle],
        )
        if row is None:
            raise NotFoundError(f"No company: {handle}")
        logger.info("Removed company %s", handle)
