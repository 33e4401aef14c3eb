# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Cash-flow listing filters.

The cash-flow screen lists revenues and expenses with free-form filters
(client name, description, date range, amount range) that are independent
from the reporting period used by the exports.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .models import Transaction
from .periods import normalize_date


@dataclass(frozen=True)
class TransactionFilter:
    """
    Filters applied to the cash-flow listing.

    The filters can be combined. Date bounds are inclusive.

    Attributes
    ----------
    client_name_contains:
        Case-insensitive substring search on the client name. Only revenues
        carry a client, so this filter is ignored for expenses.
    description_contains:
        Case-insensitive substring search on the description.
    start, end:
        Inclusive bounds as ISO strings (YYYY-MM-DD). When a bound is set,
        transactions with an unparseable date are excluded.
    min_amount, max_amount:
        Inclusive bounds on the amount.
    """

    client_name_contains: str | None = None
    description_contains: str | None = None

    start: str | None = None
    end: str | None = None

    min_amount: float | None = None
    max_amount: float | None = None


def _matches(
    t: Transaction,
    flt: TransactionFilter,
    client_names: Mapping[str, str],
) -> bool:
    needle = (flt.client_name_contains or "").strip().lower()
    if needle and t.kind == "revenue":
        name = client_names.get(t.client_id or "", "")
        if needle not in name.lower():
            return False

    needle = (flt.description_contains or "").strip().lower()
    if needle and needle not in (t.description or "").lower():
        return False

    if flt.start or flt.end:
        day = normalize_date(t.date)
        if not day:
            return False
        if flt.start and day < flt.start:
            return False
        if flt.end and day > flt.end:
            return False

    if flt.min_amount is not None and t.amount < flt.min_amount:
        return False
    if flt.max_amount is not None and t.amount > flt.max_amount:
        return False

    return True


def filter_transactions(
    transactions: Iterable[Transaction],
    flt: TransactionFilter,
    client_names: Mapping[str, str] | None = None,
) -> list[Transaction]:
    """Return the transactions matching every filter set in ``flt``."""
    names = client_names or {}
    return [t for t in transactions if _matches(t, flt, names)]
