# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Memoized derived views over a RecordSnapshot.

Every function here is a pure function of a hashable snapshot (and of a
few hashable parameters), so results are cached with ``functools.lru_cache``
and recomputed only when a new snapshot is loaded.
"""

from datetime import date
from functools import lru_cache
from typing import Optional

from .abc_curve import build_client_lookup, classify_clients
from .aggregation import aggregate_transactions
from .income_statement import income_statement
from .models import (
    ClassificationRow,
    DashboardSummary,
    IncomeStatement,
    RecordSnapshot,
    Transaction,
)
from .periods import PeriodBounds, filter_transactions_by_period

CACHE_SIZE = 16


@lru_cache(maxsize=CACHE_SIZE)
def dashboard_for(
    snapshot: RecordSnapshot, today: Optional[date] = None
) -> DashboardSummary:
    """Dashboard totals and monthly series for ``snapshot``."""
    return aggregate_transactions(
        snapshot.revenues, snapshot.expenses, snapshot.invoices, today=today
    )


@lru_cache(maxsize=CACHE_SIZE)
def abc_for(snapshot: RecordSnapshot) -> tuple[ClassificationRow, ...]:
    """ABC classification of the clients of ``snapshot``."""
    return tuple(
        classify_clients(
            snapshot.revenues,
            snapshot.invoices,
            client_names=build_client_lookup(snapshot.clients),
        )
    )


@lru_cache(maxsize=CACHE_SIZE)
def cash_flow_for(
    snapshot: RecordSnapshot, bounds: PeriodBounds
) -> tuple[tuple[Transaction, ...], tuple[Transaction, ...]]:
    """Revenues and expenses of ``snapshot`` dated within ``bounds``."""
    return (
        tuple(filter_transactions_by_period(snapshot.revenues, bounds)),
        tuple(filter_transactions_by_period(snapshot.expenses, bounds)),
    )


@lru_cache(maxsize=CACHE_SIZE)
def income_statement_for(snapshot: RecordSnapshot, year: int) -> IncomeStatement:
    """Income statement of ``year`` for ``snapshot``."""
    return income_statement(
        snapshot.revenues, snapshot.invoices, snapshot.expenses, year
    )


def clear_caches() -> None:
    """Drop every memoized result (e.g. after reloading the records)."""
    dashboard_for.cache_clear()
    abc_for.cache_clear()
    cash_flow_for.cache_clear()
    income_statement_for.cache_clear()
