# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for EcoFin Reports.

This module turns a period selector chosen by the user (a day, a month or
a year) into inclusive ``[start, end]`` bounds, and provides the helpers
used by callers to keep only the transactions that fall inside them.

Bounds are ISO ``YYYY-MM-DD`` strings. Comparing them lexicographically is
equivalent to comparing the dates, which keeps the filtering contract
identical for raw records and for already-normalized values.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Literal, Optional

import pandas as pd

from .models import Transaction

PeriodType = Literal["day", "month", "year"]

PERIOD_TYPES: tuple[str, ...] = ("day", "month", "year")

_PERIOD_PREFIX = {"day": "Dia", "month": "Mês", "year": "Ano"}

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR_RE = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class PeriodSelector:
    """A reporting period as chosen by the user."""

    type: PeriodType
    value: str

    @property
    def label(self) -> str:
        """Human-readable label, e.g. 'Mês 2024-03'."""
        return f"{_PERIOD_PREFIX[self.type]} {self.value}"


@dataclass(frozen=True)
class PeriodBounds:
    """Inclusive date bounds, as ISO strings (start <= end)."""

    start: str
    end: str

    def contains(self, raw_date: Any) -> bool:
        """
        Return True if ``raw_date`` falls within the bounds (inclusive).

        Dates that cannot be parsed are never part of a period.
        """
        day = normalize_date(raw_date)
        if not day:
            return False
        return self.start <= day <= self.end


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def normalize_date(raw: Any) -> str:
    """
    Normalize a raw date value to ``YYYY-MM-DD``.

    Accepts ISO strings (with or without a time part), ``date`` and
    ``datetime`` objects. Returns an empty string when the value is missing
    or cannot be parsed.
    """
    if raw is None:
        return ""
    if isinstance(raw, str) and not raw.strip():
        return ""

    ts = pd.to_datetime(raw, errors="coerce")
    if ts is None or pd.isna(ts):
        return ""
    return ts.strftime("%Y-%m-%d")


def _month_end(year: int, month: int) -> date:
    # Day zero of the next month is the last day of this one.
    if month == 12:
        first_of_next = date(year + 1, 1, 1)
    else:
        first_of_next = date(year, month + 1, 1)
    return first_of_next - timedelta(days=1)


def resolve_period_bounds(selector: PeriodSelector) -> PeriodBounds:
    """
    Resolve a period selector into inclusive bounds.

    - day:   start = end = value (YYYY-MM-DD)
    - month: first day of the month → last calendar day of the month
    - year:  January 1st → December 31st

    Raises
    ------
    ValueError
        If the period type is unknown or the value does not match the
        format expected for this type.
    """
    value = (selector.value or "").strip()

    if selector.type == "day":
        try:
            day = date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(
                f"Invalid day value: {value!r}. Expected YYYY-MM-DD."
            ) from exc
        iso = day.isoformat()
        return PeriodBounds(start=iso, end=iso)

    if selector.type == "month":
        match = _MONTH_RE.match(value)
        if not match or not 1 <= int(match.group(2)) <= 12:
            raise ValueError(f"Invalid month value: {value!r}. Expected YYYY-MM.")
        year, month = int(match.group(1)), int(match.group(2))
        return PeriodBounds(
            start=date(year, month, 1).isoformat(),
            end=_month_end(year, month).isoformat(),
        )

    if selector.type == "year":
        if not _YEAR_RE.match(value) or int(value) < 1:
            raise ValueError(f"Invalid year value: {value!r}. Expected YYYY.")
        return PeriodBounds(start=f"{value}-01-01", end=f"{value}-12-31")

    raise ValueError(f"Unknown period type: {selector.type!r}")


def default_selector(period_type: str, today: Optional[date] = None) -> PeriodSelector:
    """Selector for the current day, month or year."""
    if today is None:
        today = _today()

    if period_type == "day":
        return PeriodSelector(type="day", value=today.isoformat())
    if period_type == "month":
        return PeriodSelector(type="month", value=today.isoformat()[:7])
    if period_type == "year":
        return PeriodSelector(type="year", value=str(today.year))
    raise ValueError(f"Unknown period type: {period_type!r}")


def determine_period_from_args(args, today: Optional[date] = None) -> PeriodSelector:
    """
    Determine the reporting period from CLI arguments.

    ``args.period`` selects the period type (month by default). The value
    is taken from the matching ``--day`` / ``--month`` / ``--year`` option,
    or from today's date when that option is omitted.
    """
    period_type = getattr(args, "period", None) or "month"
    raw_value: Optional[str] = getattr(args, period_type, None)

    if raw_value:
        selector = PeriodSelector(type=period_type, value=raw_value)
    else:
        selector = default_selector(period_type, today)

    # Validate early so that callers get a clear error message.
    resolve_period_bounds(selector)
    return selector


def filter_transactions_by_period(
    transactions: Iterable[Transaction], bounds: PeriodBounds
) -> list[Transaction]:
    """
    Keep only the transactions dated within ``bounds`` (inclusive).

    Transactions with an unparseable date are excluded.
    """
    return [t for t in transactions if bounds.contains(t.date)]
