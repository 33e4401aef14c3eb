# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Transaction aggregation for the financial dashboard.

The ``aggregate_transactions()`` function is the single entry point used by
the dashboard and the cash-flow chart. Given revenue and expense records it
computes:

1. Totals
   ------
   Revenue, expenses and profit over the *full* input set. Period filtering,
   when needed, is the caller's responsibility (see periods.py).

2. Monthly series
   --------------
   Transactions of the current year are grouped by calendar month (Jan..Dez)
   and the series is truncated to the current month, so that future months
   are never shown. Transactions of other years, or dated after the current
   month, count in the totals only.

   A transaction whose date cannot be parsed still counts in the totals. It
   is accumulated in a separate ``undated`` bucket instead of being dropped
   from the chart data, so the dashboard can show it next to the series.

3. Invoice KPIs
   ------------
   The average ticket is the mean amount of paid invoices.

4. Recent activity
   ---------------
   The most recent dated transactions, newest first.

The function is pure: identical inputs give identical outputs, and empty
inputs yield zero totals and a zero series.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from .models import (
    DashboardSummary,
    DashboardTotals,
    Invoice,
    MonthlyBucket,
    Transaction,
)
from .periods import normalize_date

logger = logging.getLogger(__name__)

MONTH_LABELS: tuple[str, ...] = (
    "Jan",
    "Fev",
    "Mar",
    "Abr",
    "Mai",
    "Jun",
    "Jul",
    "Ago",
    "Set",
    "Out",
    "Nov",
    "Dez",
)

UNDATED_LABEL = "Sem data"

RECENT_TRANSACTIONS_LIMIT = 5


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def _tag(transactions: Iterable[Transaction], kind: str) -> list[Transaction]:
    """Return the transactions with ``kind`` forced to the given value."""
    return [t if t.kind == kind else replace(t, kind=kind) for t in transactions]


def average_ticket(invoices: Iterable[Invoice]) -> float:
    """Mean amount of paid invoices, 0.0 when there is none."""
    paid = [inv.amount for inv in invoices if inv.is_paid]
    if not paid:
        return 0.0
    return sum(paid) / len(paid)


def recent_transactions(
    transactions: Sequence[Transaction],
    limit: int = RECENT_TRANSACTIONS_LIMIT,
) -> list[Transaction]:
    """Return the ``limit`` most recent dated transactions, newest first."""
    dated = [(normalize_date(t.date), t) for t in transactions]
    dated = [(day, t) for day, t in dated if day]
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [t for _, t in dated[:limit]]


def build_monthly_series(
    transactions: Sequence[Transaction],
    today: Optional[date] = None,
) -> tuple[list[MonthlyBucket], Optional[MonthlyBucket]]:
    """
    Bucket transactions by calendar month.

    Returns
    -------
    (series, undated)
        ``series`` holds one bucket per month of the year of ``today``,
        from January to the month of ``today`` (inclusive). ``undated``
        accumulates the transactions whose date cannot be parsed, or is
        None if there is none.
    """
    if today is None:
        today = _today()

    revenue_by_month = [0.0] * 12
    expense_by_month = [0.0] * 12
    undated_revenue = 0.0
    undated_expense = 0.0
    undated_count = 0

    for t in transactions:
        day = normalize_date(t.date)
        if not day:
            undated_count += 1
            if t.kind == "revenue":
                undated_revenue += t.amount
            else:
                undated_expense += t.amount
            continue

        year, month_index = int(day[:4]), int(day[5:7]) - 1
        if year != today.year or month_index >= today.month:
            continue
        if t.kind == "revenue":
            revenue_by_month[month_index] += t.amount
        else:
            expense_by_month[month_index] += t.amount

    series = [
        MonthlyBucket(
            month_label=MONTH_LABELS[i],
            revenue_sum=round(revenue_by_month[i], 2),
            expense_sum=round(expense_by_month[i], 2),
        )
        for i in range(today.month)
    ]

    undated: Optional[MonthlyBucket] = None
    if undated_count:
        logger.debug(
            "%d transaction(s) with an unparseable date placed in the '%s' bucket",
            undated_count,
            UNDATED_LABEL,
        )
        undated = MonthlyBucket(
            month_label=UNDATED_LABEL,
            revenue_sum=round(undated_revenue, 2),
            expense_sum=round(undated_expense, 2),
        )

    return series, undated


def aggregate_transactions(
    revenues: Iterable[Transaction],
    expenses: Iterable[Transaction],
    invoices: Iterable[Invoice] = (),
    today: Optional[date] = None,
) -> DashboardSummary:
    """Aggregate revenues and expenses into dashboard totals and series.

    Steps:
        1. Merge revenues and expenses into one list tagged by kind.
        2. Sum amounts per kind over the full input set; profit is
           revenue minus expenses.
        3. Bucket the transactions of the current year by calendar month
           and truncate the series to the current month.
        4. Compute the average ticket of paid invoices and the list of
           recent transactions.

    Args:
        revenues: Revenue records.
        expenses: Expense records.
        invoices: Invoices, used for the average ticket only.
        today: Reference date for the series truncation (defaults to the
               current date).

    Returns:
        A DashboardSummary. Amounts are rounded to 2 decimal places.
    """
    merged = _tag(revenues, "revenue") + _tag(expenses, "expense")

    total_revenue = sum(t.amount for t in merged if t.kind == "revenue")
    total_expenses = sum(t.amount for t in merged if t.kind == "expense")

    totals = DashboardTotals(
        revenue=round(total_revenue, 2),
        expenses=round(total_expenses, 2),
        profit=round(total_revenue - total_expenses, 2),
    )

    series, undated = build_monthly_series(merged, today=today)

    return DashboardSummary(
        totals=totals,
        monthly_series=tuple(series),
        undated=undated,
        average_ticket=round(average_ticket(invoices), 2),
        recent_transactions=tuple(recent_transactions(merged)),
    )
