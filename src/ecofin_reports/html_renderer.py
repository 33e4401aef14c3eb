# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Flat HTML print backend.

Some environments cannot save a downloaded file. For them the report is
rendered as a single standalone HTML page (UTF-8, inline stylesheet, one
table per section) that is opened in a separate browser context. The page
triggers the browser's print dialog as soon as it has loaded and closes
itself shortly after; pagination is left to the browser.

The browser context is abstracted by ``PrintContext`` so that the flow can
be exercised without a browser.
"""

import atexit
import html
import logging
import tempfile
import webbrowser
from pathlib import Path
from typing import Optional, Protocol

from .exceptions import PopupBlockedError
from .models import RenderedReport, ReportDocument, ReportSection
from .report import ReportRenderer, format_currency, format_date, truncate

logger = logging.getLogger(__name__)

DESCRIPTION_BUDGET = 60
CLOSE_DELAY_MS = 250

_STYLESHEET = (
    "body{font-family:system-ui,sans-serif;padding:20px;} "
    "table{width:100%;border-collapse:collapse;} "
    "th,td{border:1px solid #ddd;padding:8px;} "
    ".text-right{text-align:right;}"
)

_PRINT_SCRIPT = (
    "window.addEventListener('load', function () {"
    " window.print();"
    f" setTimeout(function () {{ window.close(); }}, {CLOSE_DELAY_MS});"
    " });"
)


class PrintContext(Protocol):
    """An isolated rendering context able to display and print a page."""

    def open(self, document: str) -> bool:
        """Display ``document``; return False if the context was refused."""
        ...


class BrowserPrintContext:
    """
    Open the page in a new tab of the default web browser.

    The page is written to a temporary file that the browser loads
    asynchronously, so it cannot be removed as soon as the tab is opened.
    Files of opened pages are removed by ``cleanup()``, which also runs at
    interpreter exit.
    """

    def __init__(self, directory: Optional[Path] = None):
        self.directory = directory
        self._pages: list[Path] = []
        atexit.register(self.cleanup)

    def open(self, document: str) -> bool:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            suffix=".html",
            prefix="ecofin_print_",
            dir=self.directory,
            delete=False,
        ) as fh:
            fh.write(document)
            path = Path(fh.name)

        try:
            opened = webbrowser.open_new_tab(path.resolve().as_uri())
        except webbrowser.Error as exc:
            logger.warning("No web browser available for printing: %s", exc)
            opened = False

        if opened:
            self._pages.append(path)
        else:
            path.unlink(missing_ok=True)
        return opened

    def cleanup(self) -> None:
        """Remove the temporary files of the pages opened so far."""
        while self._pages:
            path = self._pages.pop()
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove print page %s: %s", path, exc)


def _section_html(section: ReportSection) -> str:
    rows = "".join(
        "<tr>"
        f"<td>{html.escape(format_date(item.date))}</td>"
        f"<td>{html.escape(truncate(item.description, DESCRIPTION_BUDGET))}</td>"
        f'<td class="text-right">{html.escape(format_currency(item.amount))}</td>'
        "</tr>"
        for item in section.line_items
    )
    title = html.escape(section.title)
    total = ""
    if section.show_total:
        total = (
            f"<p><strong>Total {title}:</strong> "
            f"{html.escape(format_currency(section.total))}</p>"
        )
    return (
        f"<h2>{title}</h2>"
        "<table><thead><tr><th>Data</th><th>Descrição</th><th>Valor</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>{total}"
    )


class HtmlReportRenderer(ReportRenderer):
    """Render a ReportDocument as a print-ready HTML page."""

    extension = "html"

    def __init__(self, auto_print: bool = True):
        self.auto_print = auto_print

    def build_html(self, document: ReportDocument) -> str:
        title = html.escape(document.title)
        script = f"<script>{_PRINT_SCRIPT}</script>" if self.auto_print else ""
        body = "".join(_section_html(section) for section in document.sections)
        return (
            '<!DOCTYPE html><html><head><meta charset="utf-8">'
            f"<title>{title}</title><style>{_STYLESHEET}</style>{script}</head><body>"
            f"<h1>{title}</h1>"
            f"<p><strong>Período:</strong> {html.escape(document.period_label)}</p>"
            f"{body}</body></html>"
        )

    def render(self, document: ReportDocument) -> RenderedReport:
        return RenderedReport(
            filename=self.filename_for(document),
            content=self.build_html(document).encode("utf-8"),
            media_type="text/html; charset=utf-8",
        )


def print_document(
    document: ReportDocument,
    context: PrintContext,
    renderer: Optional[HtmlReportRenderer] = None,
) -> RenderedReport:
    """
    Render ``document`` and hand it to the print ``context``.

    Raises
    ------
    PopupBlockedError
        If the context refuses to open. Nothing is displayed in that case.
    """
    renderer = renderer or HtmlReportRenderer()
    rendered = renderer.render(document)

    if not context.open(rendered.content.decode("utf-8")):
        raise PopupBlockedError()

    logger.info("Opened print view for '%s'", document.period_label)
    return rendered
