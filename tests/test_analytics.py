from datetime import date

import pytest

from ecofin_reports import analytics
from ecofin_reports.models import Client, Invoice, RecordSnapshot, Transaction
from ecofin_reports.periods import PeriodBounds


@pytest.fixture(autouse=True)
def _clear_caches():
    analytics.clear_caches()
    yield
    analytics.clear_caches()


def _snapshot(version: str = "v1") -> RecordSnapshot:
    return RecordSnapshot(
        revenues=(
            Transaction(id="r1", date="2025-01-10", amount=300.0, client_id="c1"),
            Transaction(id="r2", date="2025-02-10", amount=100.0, client_id="c2"),
        ),
        expenses=(Transaction(id="e1", date="2025-01-11", amount=50.0, kind="expense"),),
        invoices=(),
        clients=(Client("c1", "Serra Azul"), Client("c2", "Vale Verde")),
        version=version,
    )


def test_dashboard_is_memoized_per_snapshot() -> None:
    today = date(2025, 2, 15)
    snapshot = _snapshot()

    first = analytics.dashboard_for(snapshot, today)
    second = analytics.dashboard_for(_snapshot(), today)

    assert first is second
    assert first.totals.profit == 350.0
    assert analytics.dashboard_for.cache_info().hits == 1


def test_new_snapshot_version_triggers_recompute() -> None:
    first = analytics.abc_for(_snapshot("v1"))
    second = analytics.abc_for(_snapshot("v2"))

    assert first is not second
    assert first == second
    assert [r.client_name for r in first] == ["Serra Azul", "Vale Verde"]


def test_cash_flow_for_filters_by_bounds() -> None:
    revenues, expenses = analytics.cash_flow_for(
        _snapshot(), PeriodBounds("2025-01-01", "2025-01-31")
    )

    assert [t.id for t in revenues] == ["r1"]
    assert [t.id for t in expenses] == ["e1"]


def test_income_statement_for_is_memoized_per_year() -> None:
    snapshot = RecordSnapshot(
        revenues=_snapshot().revenues,
        expenses=_snapshot().expenses,
        invoices=(Invoice("i1", "c1", 200.0, status="Paid", date="2025-03-01"),),
    )

    first = analytics.income_statement_for(snapshot, 2025)
    again = analytics.income_statement_for(snapshot, 2025)
    other = analytics.income_statement_for(snapshot, 2024)

    assert first is again
    assert first.gross_revenue == 600.0
    assert first.net_result == 550.0
    assert other.net_result == 0.0

    analytics.clear_caches()
    assert analytics.income_statement_for.cache_info().currsize == 0
