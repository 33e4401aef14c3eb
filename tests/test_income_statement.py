import pytest

from ecofin_reports.html_renderer import HtmlReportRenderer
from ecofin_reports.income_statement import (
    STATEMENT_TITLE,
    build_income_statement_document,
    income_statement,
    statement_lines,
)
from ecofin_reports.models import BrandingAssets, Invoice, Transaction
from ecofin_reports.pdf_renderer import PdfReportRenderer

REVENUES = [
    Transaction(id="r1", date="2025-01-15", amount=4500.0, client_id="c1"),
    Transaction(id="r2", date="2025-12-31T23:00:00", amount=500.0, client_id="c2"),
    Transaction(id="r3", date="2024-12-31", amount=999.0, client_id="c1"),
    Transaction(id="r4", date="sem data", amount=77.0),
]
INVOICES = [
    Invoice(id="i1", client_id="c2", amount=2500.0, status="Paid", date="2025-02-12"),
    Invoice(id="i2", client_id="c3", amount=800.0, status="Unpaid", date="2025-03-01"),
    Invoice(id="i3", client_id="c4", amount=1500.0, status="Overdue", date="2025-04-08"),
    Invoice(id="i4", client_id="c1", amount=3000.0, status="Paid", date="2026-01-02"),
    Invoice(id="i5", client_id="c1", amount=400.0, status="Paid"),
]
EXPENSES = [
    Transaction(id="e1", date="2025-01-05", amount=1200.0, kind="expense"),
    Transaction(id="e2", date="2025-06-30", amount=300.5, kind="expense"),
    Transaction(id="e3", date="2026-01-05", amount=50.0, kind="expense"),
]


def test_income_statement_of_year() -> None:
    statement = income_statement(REVENUES, INVOICES, EXPENSES, 2025)

    assert statement.year == 2025
    # Only paid invoices issued in 2025; undated invoices are left out.
    assert statement.invoice_revenue == 2500.0
    assert statement.cash_revenue == 5000.0
    assert statement.gross_revenue == 7500.0
    assert statement.deductions == 0.0
    assert statement.net_revenue == 7500.0
    assert statement.operating_expenses == 1500.5
    assert statement.operating_result == 5999.5
    assert statement.other_results == 0.0
    assert statement.net_result == 5999.5


def test_income_statement_negative_result() -> None:
    statement = income_statement([], [], EXPENSES, 2026)

    assert statement.gross_revenue == 0.0
    assert statement.operating_result == -50.0
    assert statement.net_result == -50.0


def test_year_without_records_is_all_zero() -> None:
    statement = income_statement(REVENUES, INVOICES, EXPENSES, 2019)

    assert [amount for _, amount in statement_lines(statement)] == [0.0] * 9


@pytest.mark.parametrize("year", [0, -1, 10000])
def test_income_statement_rejects_invalid_year(year) -> None:
    with pytest.raises(ValueError, match="year"):
        income_statement(REVENUES, INVOICES, EXPENSES, year)


def test_statement_lines_order_and_signs() -> None:
    lines = statement_lines(income_statement(REVENUES, INVOICES, EXPENSES, 2025))

    labels = [label for label, _ in lines]
    assert labels[0] == "1. Receita Bruta de Serviços"
    assert labels[-1] == "7. Resultado Líquido do Exercício"
    assert dict(lines)["4. Despesas Operacionais"] == -1500.5


def test_build_income_statement_document() -> None:
    statement = income_statement(REVENUES, INVOICES, EXPENSES, 2025)
    branding = BrandingAssets(header=b"header")

    doc = build_income_statement_document(statement, branding=branding)

    assert doc.title == STATEMENT_TITLE
    assert doc.period_label == "Ano 2025"
    assert doc.branding is branding
    (section,) = doc.sections
    assert section.show_total is False
    assert len(section.line_items) == 9
    assert all(item.date == "" for item in section.line_items)


def test_income_statement_renders_in_both_backends() -> None:
    doc = build_income_statement_document(
        income_statement(REVENUES, INVOICES, EXPENSES, 2025)
    )

    pdf = PdfReportRenderer().render(doc)
    page = HtmlReportRenderer(auto_print=False).build_html(doc)

    assert pdf.filename == "DRE_Contabil_2025.pdf"
    assert pdf.page_count == 1
    assert "7. Resultado Líquido do Exercício" in page
    assert "R$ 5.999,50" in page
    assert "-R$ 1.500,50" in page
