from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

companies = Table(
    "companies",
    metadata,
    Column("handle", String(25), primary_key=True),
    Column("name", Text, nullable=False, unique=True),
    Column("num_employees", Integer, CheckConstraint("num_employees >= 0")),
    Column("description", Text, nullable=False),
    Column("logo_url", Text),
    CheckConstraint("handle = lower(handle)", name="handle_lowercase"),
)

jobs = Table(
    "jobs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("salary", Integer, CheckConstraint("salary >= 0")),
    Column("equity", Numeric, CheckConstraint("equity <= 1.0")),
    Column(
        "company_handle",
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    ),
)


def create_schema(engine: Engine) -> None:
    """Create the companies and jobs tables if they do not exist."""
    metadata.create_all(engine)


def drop_schema(engine: Engine) -> None:
    metadata.drop_all(engine)
