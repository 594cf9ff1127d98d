from __future__ import annotations

import logging
from typing import Any, Mapping

from ..db.session import DbSession
from ..errors import NotFoundError
from ..sql import FilterField, FilterKind, sql_for_filters, sql_for_partial_update
from .schemas import JobNew, JobUpdate, validate_payload

logger = logging.getLogger(__name__)

FIELD_MAP: Mapping[str, str] = {"companyHandle": "company_handle"}

FILTERS = (
    FilterField("title", "title", FilterKind.CONTAINS),
    FilterField("minSalary", "salary", FilterKind.MIN),
    FilterField("hasEquity", "equity", FilterKind.POSITIVE),
)

_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'


class Job:
    """
    Queries for the jobs table.

    Rows come back as {id, title, salary, equity, companyHandle}. An empty
    string for equity is stored as NULL.
    """

    @staticmethod
    def create(session: DbSession, data: Mapping[str, Any]) -> dict[str, Any]:
        data = validate_payload(JobNew, data)
        row = session.fetch_one(
            f"""INSERT INTO jobs (title, salary, equity, company_handle)
                VALUES ($1, $2, $3, $4)
                RETURNING {_COLUMNS}""",
            [data["title"], data.get("salary"), data.get("equity"), data["companyHandle"]],
        )
        logger.info("Created job %s for %s", row["id"], row["companyHandle"])
        return row

    @staticmethod
    def find_all(
        session: DbSession,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        List jobs ordered by title.

        filters may contain title (case-insensitive substring), minSalary,
        and hasEquity (true keeps only jobs with equity > 0).
        """
        where = sql_for_filters(filters or {}, FILTERS)
        return session.fetch_all(
            f"SELECT {_COLUMNS} FROM jobs{where.where()} ORDER BY title, id",
            list(where.values),
        )

    @staticmethod
    def get(session: DbSession, job_id: int) -> dict[str, Any]:
        row = session.fetch_one(f"SELECT {_COLUMNS} FROM jobs WHERE id = $1", [job_id])
        if row is None:
            logger.debug("Job lookup missed: %s", job_id)
            raise NotFoundError(f"No job: {job_id}")
        return row

    @staticmethod
    def update(session: DbSession, job_id: int, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Partially update a job. Only title, salary and equity may change;
        a job cannot move to another company.

        Raises:
            ValidationError: Empty data, a field that cannot be updated, or a malformed value
            NotFoundError: No job with this id
        """
        data = validate_payload(JobUpdate, data)

        fragment = sql_for_partial_update(data, FIELD_MAP)
        row = session.fetch_one(
            f"""UPDATE jobs
                SET {fragment.clause}
                WHERE id = ${fragment.next_ordinal}
                RETURNING {_COLUMNS}""",
            [*fragment.values, job_id],
        )
        if row is None:
            raise NotFoundError(f"No job: {job_id}")

        logger.info("Updated job %s (%s)", job_id, ", ".join(data))
        return row

    @staticmethod
    def remove(session: DbSession, job_id: int) -> None:
        row = session.fetch_one("DELETE FROM jobs WHERE id = $1 RETURNING id", [job_id])
        if row is None:
            raise NotFoundError(f"No job: {job_id}")
        logger.info("Removed job %s", job_id)
