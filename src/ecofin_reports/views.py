# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for EcoFin Reports.

This module converts the results of the computation modules (dashboard
summary, ABC classification, cash-flow listing, income statement) into
pandas DataFrames ready to be printed as console tables or exported as CSV
files by the CLI.

The views do not compute anything new: they only select, order, round and
rename fields.
"""

from collections.abc import Iterable, Mapping
from typing import Optional

import pandas as pd

from .income_statement import statement_lines
from .models import (
    ClassificationRow,
    DashboardSummary,
    IncomeStatement,
    MonthlyBucket,
    Transaction,
    UNKNOWN_CLIENT_NAME,
)
from .periods import normalize_date

MONTHLY_COLUMNS = ["month", "revenue", "expenses", "net"]
TOTALS_COLUMNS = ["metric", "amount"]
CLASSIFICATION_COLUMNS = [
    "rank",
    "client_id",
    "client_name",
    "total_revenue",
    "revenue_pct",
    "cumulative_pct",
    "class",
]
TRANSACTION_COLUMNS = ["date", "kind", "client", "description", "amount"]
INCOME_STATEMENT_COLUMNS = ["line", "amount"]


def monthly_series_to_dataframe(
    series: Iterable[MonthlyBucket],
    undated: Optional[MonthlyBucket] = None,
) -> pd.DataFrame:
    """
    Convert the monthly series into a DataFrame.

    Columns: month, revenue, expenses, net. When ``undated`` is given it is
    appended as the last row.
    """
    buckets = list(series)
    if undated is not None:
        buckets.append(undated)

    rows = [
        {
            "month": b.month_label,
            "revenue": b.revenue_sum,
            "expenses": b.expense_sum,
            "net": round(b.revenue_sum - b.expense_sum, 2),
        }
        for b in buckets
    ]
    return pd.DataFrame(rows, columns=MONTHLY_COLUMNS)


def totals_to_dataframe(summary: DashboardSummary) -> pd.DataFrame:
    """Dashboard headline figures as a two-column (metric, amount) table."""
    rows = [
        {"metric": "revenue", "amount": summary.totals.revenue},
        {"metric": "expenses", "amount": summary.totals.expenses},
        {"metric": "profit", "amount": summary.totals.profit},
        {"metric": "average_ticket", "amount": summary.average_ticket},
    ]
    return pd.DataFrame(rows, columns=TOTALS_COLUMNS)


def classification_to_dataframe(
    rows: Iterable[ClassificationRow], decimals: int = 2
) -> pd.DataFrame:
    """
    Convert ABC classification rows into a DataFrame.

    Args:
        rows:
            Classification rows, already in ranking order.
        decimals:
            Number of decimal places used for the percentage columns.

    Returns:
        One row per client with a 1-based ``rank`` column. Row order is
        preserved.
    """
    records = [
        {
            "rank": index,
            "client_id": row.client_id,
            "client_name": row.client_name,
            "total_revenue": round(row.total_revenue, 2),
            "revenue_pct": round(row.revenue_percentage, decimals),
            "cumulative_pct": round(row.cumulative_revenue_percentage, decimals),
            "class": row.classification,
        }
        for index, row in enumerate(rows, start=1)
    ]
    return pd.DataFrame(records, columns=CLASSIFICATION_COLUMNS)


def transactions_to_dataframe(
    transactions: Iterable[Transaction],
    client_names: Optional[Mapping[str, str]] = None,
) -> pd.DataFrame:
    """
    Cash-flow listing as a DataFrame, most recent first.

    Rows with an unparseable date keep their raw value and are sorted last.
    """
    names = client_names or {}
    rows = []
    for t in transactions:
        client = ""
        if t.kind == "revenue" and t.client_id:
            client = names.get(t.client_id) or UNKNOWN_CLIENT_NAME
        rows.append(
            {
                "date": t.date,
                "kind": t.kind,
                "client": client,
                "description": t.description,
                "amount": t.amount,
            }
        )

    df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
    if df.empty:
        return df

    sort_key = df["date"].map(normalize_date)
    df = (
        df.assign(_sort=sort_key)
        .sort_values("_sort", ascending=False, kind="stable")
        .drop(columns="_sort")
        .reset_index(drop=True)
    )
    return df


def income_statement_to_dataframe(statement: IncomeStatement) -> pd.DataFrame:
    """Income statement lines as a (line, amount) table, in statement order."""
    rows = [
        {"line": label.strip(), "amount": round(amount, 2)}
        for label, amount in statement_lines(statement)
    ]
    return pd.DataFrame(rows, columns=INCOME_STATEMENT_COLUMNS)
