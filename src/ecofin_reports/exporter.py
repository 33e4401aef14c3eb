# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Export orchestration.

``ReportExporter`` drives one export from start to finish:

1. fetch the branding images (sequentially) and prepare the watermark,
2. build the ReportDocument (period cash-flow report or annual income
   statement),
3. render it with the PDF or HTML backend,
4. write the PDF to the output directory, or open the print view,
5. acknowledge the outcome with a Notification.

Exports of one exporter are serialized: a second request waits until the
previous one has completed, so two exports never race to save or print.

Failures of the I/O steps are turned into an error notification and the
export method returns None; they are not raised to the caller.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from .branding import BrandingFetcher, load_branding_assets
from .config import BrandingConfig
from .exceptions import PopupBlockedError
from .html_renderer import HtmlReportRenderer, PrintContext, print_document
from .income_statement import build_income_statement_document, income_statement
from .models import (
    BrandingAssets,
    Invoice,
    RenderedReport,
    ReportDocument,
    Transaction,
)
from .pdf_renderer import PdfReportRenderer
from .periods import PeriodSelector
from .report import DEFAULT_TITLE, build_report_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """Transient user-visible message."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    """Default notifier: write notifications to the log."""
    level = logging.ERROR if notification.variant == "destructive" else logging.INFO
    logger.log(level, "%s: %s", notification.title, notification.description)


@dataclass(frozen=True)
class ExportResult:
    """Outcome of a successful export."""

    rendered: RenderedReport
    path: Optional[Path] = None


class ReportExporter:
    """Serialize and run report exports for one user session."""

    def __init__(
        self,
        fetcher: BrandingFetcher,
        branding: Optional[BrandingConfig] = None,
        output_dir: Path = Path("data/output"),
        title: str = DEFAULT_TITLE,
        notifier: Notifier = log_notifier,
        pdf_renderer: Optional[PdfReportRenderer] = None,
        html_renderer: Optional[HtmlReportRenderer] = None,
    ):
        self.fetcher = fetcher
        self.branding = branding
        self.output_dir = Path(output_dir)
        self.title = title
        self.notifier = notifier
        self.pdf_renderer = pdf_renderer or PdfReportRenderer()
        self.html_renderer = html_renderer or HtmlReportRenderer()
        self._lock = asyncio.Lock()

    async def _branding_assets(self) -> BrandingAssets:
        if self.branding is None:
            return BrandingAssets()
        return await load_branding_assets(
            self.fetcher,
            header=self.branding.header,
            footer=self.branding.footer,
            watermark=self.branding.watermark,
            watermark_opacity=self.branding.watermark_opacity,
        )

    async def _export_pdf(
        self,
        label: str,
        build: Callable[[BrandingAssets], ReportDocument],
        success_message: str,
    ) -> Optional[ExportResult]:
        async with self._lock:
            logger.info("Starting PDF export for %s", label)
            try:
                branding = await self._branding_assets()
                document = build(branding)
                rendered = await asyncio.to_thread(self.pdf_renderer.render, document)
                path = await asyncio.to_thread(self._write, rendered)
            except (OSError, ValueError) as exc:
                logger.exception("PDF export failed for %s", label)
                self.notifier(
                    Notification(
                        title="Erro ao exportar PDF",
                        description=str(exc),
                        variant="destructive",
                    )
                )
                return None

            self.notifier(
                Notification(
                    title="PDF exportado",
                    description=f"{success_message}: {path.name}",
                )
            )
            return ExportResult(rendered=rendered, path=path)

    async def _print(
        self,
        label: str,
        build: Callable[[], ReportDocument],
        context: PrintContext,
    ) -> Optional[ExportResult]:
        async with self._lock:
            logger.info("Starting print export for %s", label)
            try:
                document = build()
                rendered = print_document(document, context, self.html_renderer)
            except PopupBlockedError as exc:
                self.notifier(
                    Notification(title="Erro", description=str(exc), variant="destructive")
                )
                return None
            except (OSError, ValueError) as exc:
                logger.exception("Print export failed for %s", label)
                self.notifier(
                    Notification(
                        title="Erro ao imprimir",
                        description=str(exc),
                        variant="destructive",
                    )
                )
                return None

            self.notifier(
                Notification(
                    title="Impressão",
                    description="Use a janela de impressão do navegador.",
                )
            )
            return ExportResult(rendered=rendered)

    async def export_pdf(
        self,
        revenues: Iterable[Transaction],
        expenses: Iterable[Transaction],
        selector: PeriodSelector,
    ) -> Optional[ExportResult]:
        """Render the period report as PDF and write it to ``output_dir``."""

        def build(branding: BrandingAssets) -> ReportDocument:
            return build_report_document(
                revenues, expenses, selector, branding=branding, title=self.title
            )

        return await self._export_pdf(
            selector.label, build, "Relatório por período gerado"
        )

    async def print_report(
        self,
        revenues: Iterable[Transaction],
        expenses: Iterable[Transaction],
        selector: PeriodSelector,
        context: PrintContext,
    ) -> Optional[ExportResult]:
        """Render the period report as HTML and open it in ``context``."""
        return await self._print(
            selector.label,
            lambda: build_report_document(revenues, expenses, selector, title=self.title),
            context,
        )

    async def export_income_statement(
        self,
        revenues: Iterable[Transaction],
        invoices: Iterable[Invoice],
        expenses: Iterable[Transaction],
        year: int,
    ) -> Optional[ExportResult]:
        """Render the income statement of ``year`` as PDF and write it."""

        def build(branding: BrandingAssets) -> ReportDocument:
            statement = income_statement(revenues, invoices, expenses, year)
            return build_income_statement_document(statement, branding=branding)

        return await self._export_pdf(f"DRE {year}", build, "DRE gerada")

    async def print_income_statement(
        self,
        revenues: Iterable[Transaction],
        invoices: Iterable[Invoice],
        expenses: Iterable[Transaction],
        year: int,
        context: PrintContext,
    ) -> Optional[ExportResult]:
        """Render the income statement of ``year`` as HTML and open it."""

        def build() -> ReportDocument:
            statement = income_statement(revenues, invoices, expenses, year)
            return build_income_statement_document(statement)

        return await self._print(f"DRE {year}", build, context)

    def _write(self, rendered: RenderedReport) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / rendered.filename
        path.write_bytes(rendered.content)
        return path
