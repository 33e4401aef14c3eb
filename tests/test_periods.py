from datetime import date
from types import SimpleNamespace

import pytest

import ecofin_reports.periods as periods
from ecofin_reports.models import Transaction
from ecofin_reports.periods import PeriodBounds, PeriodSelector


def test_resolve_day_bounds_are_a_single_day() -> None:
    bounds = periods.resolve_period_bounds(PeriodSelector("day", "2025-03-10"))
    assert bounds == PeriodBounds(start="2025-03-10", end="2025-03-10")


@pytest.mark.parametrize(
    "value, end",
    [
        ("2024-02", "2024-02-29"),
        ("2023-02", "2023-02-28"),
        ("2025-04", "2025-04-30"),
        ("2025-12", "2025-12-31"),
    ],
)
def test_resolve_month_bounds_use_last_calendar_day(value, end) -> None:
    """Month bounds end on the real last day of the month, leap years included."""
    bounds = periods.resolve_period_bounds(PeriodSelector("month", value))
    assert bounds.start == f"{value}-01"
    assert bounds.end == end


def test_resolve_year_bounds() -> None:
    bounds = periods.resolve_period_bounds(PeriodSelector("year", "2025"))
    assert bounds == PeriodBounds(start="2025-01-01", end="2025-12-31")


@pytest.mark.parametrize(
    "selector",
    [
        PeriodSelector("day", "2025-02-30"),
        PeriodSelector("day", "10/03/2025"),
        PeriodSelector("month", "2025-13"),
        PeriodSelector("month", "2025-3"),
        PeriodSelector("year", "25"),
        PeriodSelector("year", ""),
        PeriodSelector("week", "2025-W10"),  # type: ignore[arg-type]
    ],
)
def test_resolve_rejects_malformed_values(selector) -> None:
    with pytest.raises(ValueError):
        periods.resolve_period_bounds(selector)


def test_selector_labels() -> None:
    assert PeriodSelector("day", "2025-03-10").label == "Dia 2025-03-10"
    assert PeriodSelector("month", "2024-03").label == "Mês 2024-03"
    assert PeriodSelector("year", "2025").label == "Ano 2025"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-03-10", "2025-03-10"),
        ("2025-03-10T23:59:00", "2025-03-10"),
        (date(2025, 3, 10), "2025-03-10"),
        ("not a date", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_date(raw, expected) -> None:
    assert periods.normalize_date(raw) == expected


def test_bounds_contains_is_inclusive_and_skips_invalid_dates() -> None:
    bounds = PeriodBounds(start="2025-03-01", end="2025-03-31")

    assert bounds.contains("2025-03-01")
    assert bounds.contains("2025-03-31T18:00:00")
    assert not bounds.contains("2025-04-01")
    assert not bounds.contains("2025-02-28")
    assert not bounds.contains("garbage")


def test_filter_transactions_by_period_year_scenario() -> None:
    """Only the transactions dated in 2025 are kept for 'Ano 2025'."""
    txs = [
        Transaction(id="1", date="2024-12-31", amount=10.0),
        Transaction(id="2", date="2025-01-01", amount=20.0),
        Transaction(id="3", date="2025-06-15", amount=30.0),
        Transaction(id="4", date="2025-12-31", amount=40.0),
        Transaction(id="5", date="2026-01-01", amount=50.0),
        Transaction(id="6", date="invalid", amount=60.0),
    ]
    bounds = periods.resolve_period_bounds(PeriodSelector("year", "2025"))

    kept = periods.filter_transactions_by_period(txs, bounds)

    assert [t.id for t in kept] == ["2", "3", "4"]


def test_default_selector_uses_today() -> None:
    today = date(2025, 3, 10)
    assert periods.default_selector("day", today).value == "2025-03-10"
    assert periods.default_selector("month", today).value == "2025-03"
    assert periods.default_selector("year", today).value == "2025"


def test_determine_period_from_args_defaults_to_current_month(monkeypatch) -> None:
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 7, 4))
    args = SimpleNamespace(period=None, day=None, month=None, year=None)

    selector = periods.determine_period_from_args(args)

    assert selector == PeriodSelector("month", "2025-07")


def test_determine_period_from_args_uses_matching_option() -> None:
    args = SimpleNamespace(period="year", day="2025-01-01", month=None, year="2024")

    selector = periods.determine_period_from_args(args)

    assert selector == PeriodSelector("year", "2024")


def test_determine_period_from_args_validates_value() -> None:
    args = SimpleNamespace(period="month", day=None, month="2025/03", year=None)

    with pytest.raises(ValueError):
        periods.determine_period_from_args(args)
