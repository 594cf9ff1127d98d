from __future__ import annotations

import pytest

from jobly.db.metrics import observe_db_query
from jobly.db.session import DbSession
from jobly.errors import DbQueryError
from jobly.metrics.registry import DB_QUERY_LATENCY_SECONDS, DB_QUERY_TOTAL


def _count(table: str, op_type: str, status: str) -> float:
    return DB_QUERY_TOTAL.labels(table=table, op_type=op_type, status=status)._value.get()


class TestObserveDbQuery:
    def test_increments_counter_with_correct_labels(self) -> None:
        initial = _count("metrics_table", "select", "success")

        observe_db_query(table="metrics_table", op_type="select", status="success", latency_s=0.1)

        assert _count("metrics_table", "select", "success") == initial + 1

    def test_records_latency_in_histogram(self) -> None:
        observe_db_query(table="metrics_table", op_type="update", status="success", latency_s=0.25)

        samples = list(DB_QUERY_LATENCY_SECONDS.labels(table="metrics_table", op_type="update").collect())
        assert len(samples) > 0

    def test_error_status_tracked_separately(self) -> None:
        success = _count("metrics_table", "delete", "success")
        error = _count("metrics_table", "delete", "error")

        observe_db_query(table="metrics_table", op_type="delete", status="error", latency_s=0.1)

        assert _count("metrics_table", "delete", "success") == success
        assert _count("metrics_table", "delete", "error") == error + 1


class TestSessionRecordsMetrics:
    def test_successful_select_is_counted(self, session: DbSession) -> None:
        initial = _count("companies", "select", "success")

        session.fetch_all("SELECT handle FROM companies")

        assert _count("companies", "select", "success") == initial + 1

    def test_failed_statement_is_counted_as_error(self, session: DbSession) -> None:
        initial = _count("missing_table", "select", "error")

        with pytest.raises(DbQueryError):
            session.fetch_all("SELECT handle FROM missing_table")

        assert _count("missing_table", "select", "error") == initial + 1
