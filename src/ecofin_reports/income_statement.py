# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Annual income statement (DRE, Demonstração do Resultado do Exercício).

The statement covers one fiscal year (January 1st to December 31st) and is
built in the following steps:

1. Invoice revenue
   - Sum the amounts of the *paid* invoices whose issue date falls within
     the year. Invoices without a parseable date are left out.

2. Cash revenue
   - Sum the revenues dated within the year.

3. Gross and net revenue
   - gross = invoice revenue + cash revenue.
   - Deductions are not tracked yet and are reported as 0, so the net
     revenue equals the gross revenue.

4. Operating result
   - Operating expenses are the expenses dated within the year.
   - operating result = net revenue - operating expenses.

5. Net result
   - Other (non-operating) results are not tracked and are reported as 0.
   - net result = operating result + other results.

All amounts are rounded to 2 decimals.
"""

from collections.abc import Iterable
from typing import Optional

from .models import (
    BrandingAssets,
    IncomeStatement,
    Invoice,
    LineItem,
    ReportDocument,
    ReportSection,
    Transaction,
)
from .periods import PeriodSelector, resolve_period_bounds

STATEMENT_TITLE = "Demonstração do Resultado do Exercício (DRE)"
STATEMENT_SECTION = "Resultado do Exercício"
STATEMENT_FILENAME_PREFIX = "DRE_Contabil_"


def _year_selector(year: int) -> PeriodSelector:
    return PeriodSelector(type="year", value=f"{year:04d}")


def income_statement(
    revenues: Iterable[Transaction],
    invoices: Iterable[Invoice],
    expenses: Iterable[Transaction],
    year: int,
) -> IncomeStatement:
    """
    Compute the income statement of ``year``.

    Raises
    ------
    ValueError
        If ``year`` is not a valid four-digit year.
    """
    bounds = resolve_period_bounds(_year_selector(year))

    invoice_revenue = round(
        sum(inv.amount for inv in invoices if inv.is_paid and bounds.contains(inv.date)),
        2,
    )
    cash_revenue = round(sum(t.amount for t in revenues if bounds.contains(t.date)), 2)
    operating_expenses = round(
        sum(t.amount for t in expenses if bounds.contains(t.date)), 2
    )

    gross_revenue = round(invoice_revenue + cash_revenue, 2)
    deductions = 0.0
    net_revenue = round(gross_revenue - deductions, 2)
    operating_result = round(net_revenue - operating_expenses, 2)
    other_results = 0.0
    net_result = round(operating_result + other_results, 2)

    return IncomeStatement(
        year=year,
        invoice_revenue=invoice_revenue,
        cash_revenue=cash_revenue,
        gross_revenue=gross_revenue,
        deductions=deductions,
        net_revenue=net_revenue,
        operating_expenses=operating_expenses,
        operating_result=operating_result,
        other_results=other_results,
        net_result=net_result,
    )


def statement_lines(statement: IncomeStatement) -> list[tuple[str, float]]:
    """
    Labelled lines of the statement, in presentation order.

    Deductions and operating expenses are given as negative amounts, since
    they are subtracted from the line above them.
    """
    return [
        ("1. Receita Bruta de Serviços", statement.gross_revenue),
        ("   Faturas recebidas (pagas)", statement.invoice_revenue),
        ("   Receitas de caixa", statement.cash_revenue),
        ("2. Deduções da Receita", -statement.deductions),
        ("3. Receita Líquida", statement.net_revenue),
        ("4. Despesas Operacionais", -statement.operating_expenses),
        ("5. Resultado Operacional", statement.operating_result),
        ("6. Outras receitas / (despesas)", statement.other_results),
        ("7. Resultado Líquido do Exercício", statement.net_result),
    ]


def build_income_statement_document(
    statement: IncomeStatement,
    branding: Optional[BrandingAssets] = None,
) -> ReportDocument:
    """Build the exportable document of an income statement."""
    selector = _year_selector(statement.year)
    items = tuple(
        LineItem(date="", description=label, amount=amount)
        for label, amount in statement_lines(statement)
    )
    return ReportDocument(
        title=STATEMENT_TITLE,
        period_label=selector.label,
        period_value=selector.value,
        sections=(ReportSection(STATEMENT_SECTION, items, show_total=False),),
        branding=branding or BrandingAssets(),
        filename_prefix=STATEMENT_FILENAME_PREFIX,
    )
