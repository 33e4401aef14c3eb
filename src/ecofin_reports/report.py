# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report document construction and shared rendering helpers.

A ``ReportDocument`` is built once per export from the period-filtered
revenues and expenses, then handed to one of the renderer backends:

- ``pdf_renderer.PdfReportRenderer``   : paginated A4 document,
- ``html_renderer.HtmlReportRenderer`` : flat print-ready HTML page.

Both backends implement ``ReportRenderer`` and share the formatting helpers
defined here (currency, dates, truncation, output file names), so that the
two exports always show the same figures.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Optional

from .models import (
    BrandingAssets,
    LineItem,
    RenderedReport,
    ReportDocument,
    ReportSection,
    Transaction,
)
from .periods import (
    PeriodSelector,
    filter_transactions_by_period,
    normalize_date,
    resolve_period_bounds,
)

DEFAULT_TITLE = "Lançamentos de Caixa por Período"
REVENUES_SECTION = "Receitas"
EXPENSES_SECTION = "Despesas"

FILENAME_PREFIX = "lancamentos_caixa_"

CURRENCY_SYMBOL = "R$"


class ReportRenderer(ABC):
    """Common interface of the export backends."""

    #: File extension of the produced artifact (without the dot).
    extension: str = ""

    @abstractmethod
    def render(self, document: ReportDocument) -> RenderedReport:
        """Render ``document`` into an exportable artifact."""

    def filename_for(self, document: ReportDocument) -> str:
        return output_filename(
            document.period_value,
            self.extension,
            prefix=document.filename_prefix or FILENAME_PREFIX,
        )


def format_currency(value: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """
    Format an amount with grouped thousands and 2 decimals (pt-BR).

    Examples: 1234.5 → 'R$ 1.234,50', -10 → '-R$ 10,00'.
    """
    formatted = f"{abs(value):,.2f}"
    # 1,234.50 → 1.234,50
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if round(value, 2) < 0 else ""
    return f"{sign}{symbol} {formatted}"


def format_date(raw: str) -> str:
    """Format a raw date as dd/mm/yyyy, or return it unchanged if unparseable."""
    day = normalize_date(raw)
    if not day:
        return raw or ""
    year, month, dom = day.split("-")
    return f"{dom}/{month}/{year}"


def truncate(text: Optional[str], budget: int) -> str:
    """Cut ``text`` to at most ``budget`` characters."""
    return (text or "")[:budget]


def output_filename(
    period_value: str, extension: str, prefix: str = FILENAME_PREFIX
) -> str:
    """
    Deterministic export file name derived from the period value.

    Separator characters are stripped: '2024-03' → 'lancamentos_caixa_202403'.
    """
    stem = re.sub(r"[-/\s]", "", period_value)
    return f"{prefix}{stem}.{extension}"


def _line_items(transactions: Iterable[Transaction]) -> tuple[LineItem, ...]:
    return tuple(
        LineItem(date=t.date, description=t.description or "", amount=t.amount)
        for t in transactions
    )


def build_report_document(
    revenues: Iterable[Transaction],
    expenses: Iterable[Transaction],
    selector: PeriodSelector,
    branding: Optional[BrandingAssets] = None,
    title: str = DEFAULT_TITLE,
) -> ReportDocument:
    """
    Build the cash-flow report for a period.

    Revenues and expenses are filtered to the period bounds (transactions
    with an unparseable date are left out) and turned into two sections,
    'Receitas' and 'Despesas', in input order.
    """
    bounds = resolve_period_bounds(selector)

    sections = (
        ReportSection(
            title=REVENUES_SECTION,
            line_items=_line_items(filter_transactions_by_period(revenues, bounds)),
        ),
        ReportSection(
            title=EXPENSES_SECTION,
            line_items=_line_items(filter_transactions_by_period(expenses, bounds)),
        ),
    )

    return ReportDocument(
        title=title,
        period_label=selector.label,
        period_value=selector.value,
        sections=sections,
        branding=branding or BrandingAssets(),
    )
