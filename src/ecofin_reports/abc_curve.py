# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
ABC (Pareto) classification of clients by revenue contribution.

Revenue per client combines two sources:
- direct revenues carrying a ``client_id``,
- paid invoices (unpaid and overdue invoices are ignored).

Clients are ranked by total revenue (descending, ties broken by client id)
and classified on their *cumulative* share of the combined revenue:

    cumulative % <= 80  → A
    cumulative % <= 95  → B
    otherwise           → C

Both thresholds are inclusive: a client landing exactly on 80.0 is "A".
When the combined revenue is zero the classification is empty.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Optional

from .models import (
    UNKNOWN_CLIENT_NAME,
    Classification,
    ClassificationRow,
    Client,
    Invoice,
    Transaction,
)

A_THRESHOLD = 80.0
B_THRESHOLD = 95.0


@lru_cache(maxsize=16)
def _lookup_for(clients: tuple[Client, ...]) -> Mapping[str, str]:
    return MappingProxyType({c.id: c.name for c in clients})


def build_client_lookup(clients: Iterable[Client]) -> Mapping[str, str]:
    """
    Return a ``client_id -> name`` mapping.

    The mapping is memoized on the client collection: it is only rebuilt
    when the collection content changes.
    """
    return _lookup_for(tuple(clients))


def classify(cumulative_percentage: float) -> Classification:
    """Return the ABC class for a cumulative revenue percentage."""
    if cumulative_percentage <= A_THRESHOLD:
        return "A"
    if cumulative_percentage <= B_THRESHOLD:
        return "B"
    return "C"


def revenue_by_client(
    revenues: Iterable[Transaction],
    invoices: Iterable[Invoice],
) -> dict[str, float]:
    """Sum direct revenues and paid invoices per client id."""
    totals: dict[str, float] = defaultdict(float)

    for revenue in revenues:
        if revenue.client_id:
            totals[revenue.client_id] += revenue.amount

    for invoice in invoices:
        if invoice.is_paid:
            totals[invoice.client_id] += invoice.amount

    return dict(totals)


def classify_clients(
    revenues: Iterable[Transaction],
    invoices: Iterable[Invoice],
    clients: Iterable[Client] = (),
    client_names: Optional[Mapping[str, str]] = None,
) -> list[ClassificationRow]:
    """Compute the ABC classification of clients.

    Steps:
        1. Sum revenues with a client id, then add paid invoices.
        2. Build one row per client, resolving names from the lookup.
        3. Sort rows by total revenue descending, then client id ascending.
        4. In a single pass, accumulate revenue and derive the revenue
           percentage, cumulative percentage and class of each row.

    Args:
        revenues: Revenue records (rows without a client id are ignored).
        invoices: Invoices (only 'Paid' ones contribute).
        clients: Client records used to resolve names.
        client_names: Pre-built ``client_id -> name`` lookup. When given,
            ``clients`` is ignored.

    Returns:
        Classification rows in ranking order. Empty if there is no revenue.
    """
    names = client_names if client_names is not None else build_client_lookup(clients)
    totals = revenue_by_client(revenues, invoices)

    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    total_combined = sum(amount for _, amount in ranked)

    if total_combined <= 0:
        return []

    rows: list[ClassificationRow] = []
    cumulative = 0.0
    for client_id, amount in ranked:
        cumulative += amount
        cumulative_pct = cumulative / total_combined * 100
        rows.append(
            ClassificationRow(
                client_id=client_id,
                client_name=names.get(client_id) or UNKNOWN_CLIENT_NAME,
                total_revenue=amount,
                revenue_percentage=amount / total_combined * 100,
                cumulative_revenue_percentage=cumulative_pct,
                classification=classify(cumulative_pct),
            )
        )

    return rows


def abc_chart_series(rows: Iterable[ClassificationRow]) -> list[tuple[str, float]]:
    """Cumulative percentage per client, in ranking order (2 decimals)."""
    return [
        (row.client_name, round(row.cumulative_revenue_percentage, 2)) for row in rows
    ]


def classification_summary(
    rows: Iterable[ClassificationRow],
) -> dict[str, dict[str, float]]:
    """
    Count clients and sum revenue per class.

    Returns a dictionary ``{"A": {"clients": n, "revenue": x}, ...}`` that
    always contains the three classes.
    """
    summary: dict[str, dict[str, float]] = {
        cls: {"clients": 0, "revenue": 0.0} for cls in ("A", "B", "C")
    }
    for row in rows:
        summary[row.classification]["clients"] += 1
        summary[row.classification]["revenue"] += row.total_revenue

    for values in summary.values():
        values["revenue"] = round(values["revenue"], 2)
    return summary
