from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from jobly.db.schema import create_schema, drop_schema
from jobly.db.session import DbSession


@pytest.fixture
def db_url(tmp_path) -> str:
    """
    Database URL for model tests.

    Prefer setting JOBLY_TEST_DB_URL to run against PostgreSQL. If not set we
    use a throwaway SQLite file, which supports RETURNING and double-quoted
    identifiers the same way.
    """
    return os.environ.get("JOBLY_TEST_DB_URL", f"sqlite:///{tmp_path / 'jobly_test.db'}")


@pytest.fixture
def engine(db_url: str) -> Iterator[Engine]:
    eng = create_engine(db_url)
    if eng.dialect.name == "sqlite":
        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_conn, _record) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    drop_schema(eng)
    create_schema(eng)
    yield eng
    drop_schema(eng)
    eng.dispose()


@pytest.fixture
def seeded_engine(engine: Engine) -> Engine:
    """
    Engine with three companies (c1..c3) and three jobs:

    - j1: "Job1", salary 100, equity 0.1, c1
    - j2: "Job2", salary 200, equity 0,   c1
    - j3: "Job3", salary 300, no equity,  c2
    """
    with DbSession(engine) as session:
        for n in (1, 2, 3):
            session.execute(
                "INSERT INTO companies (handle, name, num_employees, description, logo_url) "
                "VALUES (:handle, :name, :num, :description, :logo)",
                {
                    "handle": f"c{n}",
                    "name": f"C{n}",
                    "num": n,
                    "description": f"Desc{n}",
                    "logo": f"http://c{n}.img",
                },
            )
        for title, salary, equity, handle in (
            ("Job1", 100, "0.1", "c1"),
            ("Job2", 200, "0", "c1"),
            ("Job3", 300, None, "c2"),
        ):
            session.execute(
                "INSERT INTO jobs (title, salary, equity, company_handle) "
                "VALUES (:title, :salary, :equity, :handle)",
                {"title": title, "salary": salary, "equity": equity, "handle": handle},
            )
    return engine


@pytest.fixture
def session(seeded_engine: Engine) -> Iterator[DbSession]:
    with DbSession(seeded_engine) as s:
        yield s


@pytest.fixture
def job_ids(seeded_engine: Engine) -> dict[str, int]:
    with DbSession(seeded_engine) as s:
        rows = s.fetch_all("SELECT id, title FROM jobs")
    return {row["title"]: row["id"] for row in rows}
