import asyncio
import time
from pathlib import Path

import pytest

from ecofin_reports.branding import BrandingFetcher
from ecofin_reports.config import BrandingConfig
from ecofin_reports.exporter import Notification, ReportExporter
from ecofin_reports.models import Invoice, Transaction
from ecofin_reports.pdf_renderer import PdfReportRenderer
from ecofin_reports.periods import PeriodSelector

REVENUES = [
    Transaction(id="r1", date="2025-03-02", amount=1500.0, description="LO", client_id="c1"),
    Transaction(id="r2", date="2025-04-02", amount=999.0, description="Fora", client_id="c1"),
]
EXPENSES = [
    Transaction(id="e1", date="2025-03-05", amount=200.0, description="Aluguel", kind="expense"),
]
MARCH = PeriodSelector("month", "2025-03")


class FakeContext:
    def __init__(self, accept: bool = True):
        self.accept = accept
        self.opened: list[str] = []

    def open(self, document: str) -> bool:
        self.opened.append(document)
        return self.accept


class SlowRenderer(PdfReportRenderer):
    """PDF renderer that records when each render starts and ends."""

    def __init__(self, events: list[str]):
        super().__init__()
        self.events = events

    def render(self, document):
        self.events.append(f"start:{document.period_value}")
        time.sleep(0.05)
        rendered = super().render(document)
        self.events.append(f"end:{document.period_value}")
        return rendered


def _branding(assets_dir: Path, **images) -> BrandingConfig:
    return BrandingConfig(
        base_url="",
        assets_dir=assets_dir,
        header=images.get("header"),
        footer=images.get("footer"),
        watermark=images.get("watermark"),
        watermark_opacity=0.15,
        timeout_seconds=1.0,
    )


@pytest.fixture
def notifications() -> list[Notification]:
    return []


def test_export_pdf_writes_file_and_notifies(tmp_path, png_bytes, notifications) -> None:
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "header.png").write_bytes(png_bytes)
    (assets / "footer.png").write_bytes(png_bytes)

    exporter = ReportExporter(
        BrandingFetcher(assets_dir=assets),
        branding=_branding(assets, header="header.png", footer="footer.png", watermark="gone.png"),
        output_dir=tmp_path / "out",
        notifier=notifications.append,
    )

    result = asyncio.run(exporter.export_pdf(REVENUES, EXPENSES, MARCH))

    assert result is not None
    assert result.path == tmp_path / "out" / "lancamentos_caixa_202503.pdf"
    assert result.path.read_bytes().startswith(b"%PDF")
    assert result.rendered.page_count == 1
    assert [n.variant for n in notifications] == ["default"]
    assert "lancamentos_caixa_202503.pdf" in notifications[0].description


def test_export_pdf_failure_is_notified_not_raised(tmp_path, notifications) -> None:
    blocker = tmp_path / "out"
    blocker.write_text("not a directory")

    exporter = ReportExporter(
        BrandingFetcher(), output_dir=blocker, notifier=notifications.append
    )

    result = asyncio.run(exporter.export_pdf(REVENUES, EXPENSES, MARCH))

    assert result is None
    assert len(notifications) == 1
    assert notifications[0].variant == "destructive"


def test_exports_are_serialized(tmp_path) -> None:
    events: list[str] = []
    exporter = ReportExporter(
        BrandingFetcher(),
        output_dir=tmp_path,
        notifier=lambda n: None,
        pdf_renderer=SlowRenderer(events),
    )

    async def run_two():
        return await asyncio.gather(
            exporter.export_pdf(REVENUES, EXPENSES, PeriodSelector("month", "2025-03")),
            exporter.export_pdf(REVENUES, EXPENSES, PeriodSelector("year", "2025")),
        )

    first, second = asyncio.run(run_two())

    assert first is not None and second is not None
    assert events == ["start:2025-03", "end:2025-03", "start:2025", "end:2025"]


def test_print_report_opens_context(tmp_path, notifications) -> None:
    context = FakeContext()
    exporter = ReportExporter(
        BrandingFetcher(), output_dir=tmp_path, notifier=notifications.append
    )

    result = asyncio.run(exporter.print_report(REVENUES, EXPENSES, MARCH, context))

    assert result is not None
    assert result.path is None
    assert "Mês 2025-03" in context.opened[0]
    assert [n.variant for n in notifications] == ["default"]
    assert not list(tmp_path.iterdir())


def test_print_report_popup_blocked(tmp_path, notifications) -> None:
    exporter = ReportExporter(
        BrandingFetcher(), output_dir=tmp_path, notifier=notifications.append
    )

    result = asyncio.run(
        exporter.print_report(REVENUES, EXPENSES, MARCH, FakeContext(accept=False))
    )

    assert result is None
    assert notifications == [
        Notification(
            title="Erro", description="Permita pop-ups para imprimir.", variant="destructive"
        )
    ]


def test_export_pdf_with_malformed_branding_url(tmp_path, notifications) -> None:
    exporter = ReportExporter(
        BrandingFetcher(),
        branding=_branding(tmp_path, header="http://exa\x00mple.com/h.png"),
        output_dir=tmp_path / "out",
        notifier=notifications.append,
    )

    result = asyncio.run(exporter.export_pdf([], [], MARCH))

    assert result is not None
    assert result.path.read_bytes().startswith(b"%PDF")
    assert [n.variant for n in notifications] == ["default"]


def test_export_income_statement(tmp_path, notifications) -> None:
    invoices = [Invoice(id="i1", client_id="c1", amount=300.0, status="Paid", date="2025-06-01")]
    exporter = ReportExporter(
        BrandingFetcher(), output_dir=tmp_path, notifier=notifications.append
    )

    result = asyncio.run(
        exporter.export_income_statement(REVENUES, invoices, EXPENSES, 2025)
    )

    assert result is not None
    assert result.path == tmp_path / "DRE_Contabil_2025.pdf"
    assert result.path.read_bytes().startswith(b"%PDF")
    assert notifications == [
        Notification(title="PDF exportado", description="DRE gerada: DRE_Contabil_2025.pdf")
    ]


def test_export_income_statement_invalid_year_is_notified(tmp_path, notifications) -> None:
    exporter = ReportExporter(
        BrandingFetcher(), output_dir=tmp_path, notifier=notifications.append
    )

    result = asyncio.run(exporter.export_income_statement(REVENUES, [], EXPENSES, 0))

    assert result is None
    assert [n.variant for n in notifications] == ["destructive"]
    assert not list(tmp_path.iterdir())


def test_print_income_statement(tmp_path, notifications) -> None:
    context = FakeContext()
    exporter = ReportExporter(
        BrandingFetcher(), output_dir=tmp_path, notifier=notifications.append
    )

    result = asyncio.run(
        exporter.print_income_statement(REVENUES, [], EXPENSES, 2025, context)
    )

    assert result is not None
    assert result.rendered.filename == "DRE_Contabil_2025.html"
    assert "Demonstração do Resultado do Exercício (DRE)" in context.opened[0]
    assert "R$ 2.299,00" in context.opened[0]
