# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for EcoFin Reports.

This module defines the immutable value objects shared by the computation
layer (periods, aggregation, abc_curve) and the rendering layer
(report, pdf_renderer, html_renderer).

Records
-------
Revenues, expenses, invoices and clients are read-only snapshots coming
from the persistence layer. Dates are kept as the raw text stored in the
document store: they are only parsed when a date-keyed view needs them
(see ``periods.normalize_date``), so that an unparseable date never
prevents the rest of a snapshot from loading.

Derived views
-------------
MonthlyBucket, DashboardSummary, ClassificationRow and IncomeStatement are
recomputed from the records whenever the snapshot changes.

Report model
------------
ReportDocument is the single data contract consumed by both renderer
backends (paginated PDF and flat HTML print).
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

TransactionKind = Literal["revenue", "expense"]
InvoiceStatus = Literal["Paid", "Unpaid", "Overdue"]
Classification = Literal["A", "B", "C"]

UNKNOWN_CLIENT_NAME = "Cliente Desconhecido"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transaction:
    """A revenue or expense record.

    Attributes
    ----------
    id :
        Record identifier in the document store.
    date :
        Raw date text as stored (usually ISO 8601, possibly with a time part).
    amount :
        Non-negative amount in the presentation currency.
    description :
        Free text label.
    kind :
        Either 'revenue' or 'expense'.
    client_id :
        Optional client reference (revenues only in practice).
    """

    id: str
    date: str
    amount: float
    description: str = ""
    kind: TransactionKind = "revenue"
    client_id: Optional[str] = None


@dataclass(frozen=True)
class Invoice:
    """An invoice issued to a client.

    ``date`` is the raw issue date text, empty when the record has none.
    """

    id: str
    client_id: str
    amount: float
    status: InvoiceStatus = "Unpaid"
    date: str = ""

    @property
    def is_paid(self) -> bool:
        return self.status == "Paid"


@dataclass(frozen=True)
class Client:
    id: str
    name: str


@dataclass(frozen=True)
class RecordSnapshot:
    """
    Immutable, hashable bundle of the records loaded for one session.

    The snapshot is used as the cache key of the analytics layer: two
    snapshots holding the same records compare equal, so recomputation
    only happens when a collection actually changed.
    """

    revenues: tuple[Transaction, ...] = ()
    expenses: tuple[Transaction, ...] = ()
    invoices: tuple[Invoice, ...] = ()
    clients: tuple[Client, ...] = ()
    version: str = ""


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthlyBucket:
    """Revenue and expense sums for one calendar month."""

    month_label: str
    revenue_sum: float = 0.0
    expense_sum: float = 0.0


@dataclass(frozen=True)
class DashboardTotals:
    revenue: float
    expenses: float
    profit: float


@dataclass(frozen=True)
class DashboardSummary:
    """
    Output of the transaction aggregator.

    Attributes
    ----------
    totals :
        Revenue, expenses and profit over the full input set.
    monthly_series :
        One bucket per month, from January to the current month.
    undated :
        Fallback bucket for transactions whose date cannot be parsed. They
        are part of ``totals`` but cannot be placed on the monthly axis.
        None when every transaction has a valid date.
    average_ticket :
        Mean amount of paid invoices (0.0 without paid invoices).
    recent_transactions :
        The most recent dated transactions, newest first.
    """

    totals: DashboardTotals
    monthly_series: tuple[MonthlyBucket, ...]
    undated: Optional[MonthlyBucket] = None
    average_ticket: float = 0.0
    recent_transactions: tuple[Transaction, ...] = ()


@dataclass(frozen=True)
class ClassificationRow:
    """One client of the ABC analysis."""

    client_id: str
    client_name: str
    total_revenue: float
    revenue_percentage: float
    cumulative_revenue_percentage: float
    classification: Classification


@dataclass(frozen=True)
class IncomeStatement:
    """
    Annual income statement (DRE) of one fiscal year.

    Attributes
    ----------
    invoice_revenue :
        Paid invoices issued during the year.
    cash_revenue :
        Revenues dated within the year.
    gross_revenue :
        invoice_revenue + cash_revenue.
    deductions :
        Taxes and other deductions from the gross revenue (not tracked, 0).
    net_revenue :
        gross_revenue - deductions.
    operating_expenses :
        Expenses dated within the year.
    operating_result :
        net_revenue - operating_expenses.
    other_results :
        Non-operating income net of non-operating expenses (not tracked, 0).
    net_result :
        operating_result + other_results.
    """

    year: int
    invoice_revenue: float
    cash_revenue: float
    gross_revenue: float
    deductions: float
    net_revenue: float
    operating_expenses: float
    operating_result: float
    other_results: float
    net_result: float


# ---------------------------------------------------------------------------
# Report model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineItem:
    date: str
    description: str
    amount: float


@dataclass(frozen=True)
class ReportSection:
    """A titled list of line items with its total.

    ``show_total`` is False for statement sections, whose lines already
    hold their own subtotals.
    """

    title: str
    line_items: tuple[LineItem, ...] = ()
    show_total: bool = True

    @property
    def total(self) -> float:
        return round(sum(item.amount for item in self.line_items), 2)


@dataclass(frozen=True)
class BrandingAssets:
    """Optional branding images (raw PNG/JPEG bytes).

    Each image is independent: a missing header never prevents the footer
    or the watermark from being rendered.
    """

    header: Optional[bytes] = None
    footer: Optional[bytes] = None
    watermark: Optional[bytes] = None


@dataclass(frozen=True)
class ReportDocument:
    """Renderer-agnostic description of an export.

    ``filename_prefix`` overrides the default export file name prefix.
    """

    title: str
    period_label: str
    period_value: str
    sections: tuple[ReportSection, ...] = ()
    branding: BrandingAssets = field(default_factory=BrandingAssets)
    filename_prefix: Optional[str] = None


@dataclass(frozen=True)
class RenderedReport:
    """Output of a renderer backend."""

    filename: str
    content: bytes
    media_type: str
    page_count: Optional[int] = None
