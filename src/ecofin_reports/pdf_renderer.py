# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Paginated PDF backend (ReportLab).

Rendering happens in two steps:

1. Layout
   ------
   ``layout_document()`` walks the sections of a ReportDocument with a
   vertical cursor (in millimetres from the top of the page) and produces
   one list of text operations per page. Before each section title, line
   and section total, if the cursor went past ``CONTENT_LIMIT_MM`` a new
   page is started and the cursor goes back to ``TOP_MARGIN_MM``.

2. Painting
   --------
   ``PdfReportRenderer`` paints each page on a ReportLab canvas: the
   watermark first (centered, on every page), then the header image (first
   page only) and the text. The footer image is stamped by
   ``BrandedCanvas.save()`` in a second pass over the finished pages, since
   the page count is only known once the body has been laid out.

Page geometry follows A4 with 15 mm side margins.
"""

import io
import logging
from dataclasses import dataclass
from typing import Literal, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .branding import fit_image_size
from .models import RenderedReport, ReportDocument
from .report import ReportRenderer, format_currency, format_date, truncate

logger = logging.getLogger(__name__)

PAGE_WIDTH_MM = A4[0] / mm
PAGE_HEIGHT_MM = A4[1] / mm

MARGIN_MM = 15.0
TOP_MARGIN_MM = 20.0
CONTENT_LIMIT_MM = 270.0
LINE_HEIGHT_MM = 6.0

HEADER_TOP_MM = 10.0
HEADER_MAX_HEIGHT_MM = 30.0
HEADER_GAP_MM = 5.0

WATERMARK_WIDTH_MM = 100.0

FOOTER_SIDE_MM = 10.0
FOOTER_BOTTOM_MM = 5.0
FOOTER_MAX_HEIGHT_MM = 20.0

DESCRIPTION_OFFSET_MM = 25.0
DESCRIPTION_BUDGET = 50

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"


@dataclass(frozen=True)
class TextOp:
    """A piece of text positioned on a page (millimetres from top-left)."""

    x: float
    y: float
    text: str
    font: str = FONT_REGULAR
    size: float = 10.0
    align: Literal["left", "center", "right"] = "left"


@dataclass(frozen=True)
class ImagePlacement:
    """An image box in millimetres, ``y`` being its top edge."""

    image: ImageReader
    x: float
    y: float
    width: float
    height: float


def layout_document(
    document: ReportDocument, header_height: float = 0.0
) -> list[list[TextOp]]:
    """
    Lay out the text of ``document`` into pages.

    Args:
        document: The report to lay out.
        header_height: Height (mm) of the header image drawn on the first
            page, 0 when there is no header.

    Returns:
        One list of TextOp per page. There is always at least one page.
    """
    pages: list[list[TextOp]] = [[]]
    y = TOP_MARGIN_MM
    if header_height > 0:
        y = HEADER_TOP_MM + header_height + HEADER_GAP_MM

    def ensure_room() -> None:
        nonlocal y
        if y > CONTENT_LIMIT_MM:
            pages.append([])
            y = TOP_MARGIN_MM

    def write(op: TextOp) -> None:
        pages[-1].append(op)

    center = PAGE_WIDTH_MM / 2
    right = PAGE_WIDTH_MM - MARGIN_MM

    write(TextOp(center, y, document.title, FONT_BOLD, 14, "center"))
    y += 8
    write(TextOp(center, y, f"Período: {document.period_label}", FONT_REGULAR, 10, "center"))
    y += 12

    for section in document.sections:
        ensure_room()
        write(TextOp(MARGIN_MM, y, section.title, FONT_BOLD, 10))
        y += LINE_HEIGHT_MM

        for item in section.line_items:
            ensure_room()
            write(TextOp(MARGIN_MM, y, format_date(item.date), FONT_REGULAR, 9))
            write(
                TextOp(
                    MARGIN_MM + DESCRIPTION_OFFSET_MM,
                    y,
                    truncate(item.description, DESCRIPTION_BUDGET),
                    FONT_REGULAR,
                    9,
                )
            )
            write(TextOp(right, y, format_currency(item.amount), FONT_REGULAR, 9, "right"))
            y += LINE_HEIGHT_MM

        y += LINE_HEIGHT_MM
        if not section.show_total:
            continue
        ensure_room()
        total_text = f"Total {section.title}: {format_currency(section.total)}"
        write(TextOp(MARGIN_MM, y, total_text, FONT_BOLD, 9))
        y += 10

    return pages


def _image_reader(data: Optional[bytes], role: str) -> Optional[ImageReader]:
    if not data:
        return None
    try:
        reader = ImageReader(io.BytesIO(data))
        reader.getSize()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Branding %s image could not be decoded: %s", role, exc)
        return None
    return reader


def _header_placement(data: Optional[bytes]) -> Optional[ImagePlacement]:
    reader = _image_reader(data, "header")
    if reader is None:
        return None
    content_width = PAGE_WIDTH_MM - 2 * MARGIN_MM
    w, h = fit_image_size(reader.getSize(), content_width, HEADER_MAX_HEIGHT_MM)
    return ImagePlacement(reader, MARGIN_MM, HEADER_TOP_MM, w, h)


def _watermark_placement(data: Optional[bytes]) -> Optional[ImagePlacement]:
    reader = _image_reader(data, "watermark")
    if reader is None:
        return None
    px_w, px_h = reader.getSize()
    if px_w <= 0 or px_h <= 0:
        return None
    w = WATERMARK_WIDTH_MM
    h = w * px_h / px_w
    return ImagePlacement(
        reader, (PAGE_WIDTH_MM - w) / 2, (PAGE_HEIGHT_MM - h) / 2, w, h
    )


def _footer_placement(data: Optional[bytes]) -> Optional[ImagePlacement]:
    reader = _image_reader(data, "footer")
    if reader is None:
        return None
    w, h = fit_image_size(
        reader.getSize(), PAGE_WIDTH_MM - 2 * FOOTER_SIDE_MM, FOOTER_MAX_HEIGHT_MM
    )
    return ImagePlacement(
        reader, FOOTER_SIDE_MM, PAGE_HEIGHT_MM - h - FOOTER_BOTTOM_MM, w, h
    )


def _draw_image(c: canvas.Canvas, placement: ImagePlacement) -> None:
    c.drawImage(
        placement.image,
        placement.x * mm,
        (PAGE_HEIGHT_MM - placement.y - placement.height) * mm,
        width=placement.width * mm,
        height=placement.height * mm,
        mask="auto",
    )


class BrandedCanvas(canvas.Canvas):
    """
    Canvas that defers page emission so a footer can be stamped on every
    page once the total page count is known.
    """

    def __init__(self, *args, footer: Optional[ImagePlacement] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._footer = footer
        self._saved_page_states: list[dict] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        for state in self._saved_page_states:
            self.__dict__.update(state)
            if self._footer is not None:
                self.stamp_footer(self._footer)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def stamp_footer(self, footer: ImagePlacement) -> None:
        _draw_image(self, footer)


class PdfReportRenderer(ReportRenderer):
    """Render a ReportDocument as a paginated A4 PDF."""

    extension = "pdf"

    def __init__(self, canvas_class: type[BrandedCanvas] = BrandedCanvas):
        self.canvas_class = canvas_class

    def render(self, document: ReportDocument) -> RenderedReport:
        header = _header_placement(document.branding.header)
        watermark = _watermark_placement(document.branding.watermark)
        footer = _footer_placement(document.branding.footer)

        pages = layout_document(
            document, header_height=header.height if header is not None else 0.0
        )

        buffer = io.BytesIO()
        c = self.canvas_class(buffer, pagesize=A4, footer=footer)
        c.setTitle(f"{document.title} - {document.period_label}")

        for index, ops in enumerate(pages):
            if watermark is not None:
                _draw_image(c, watermark)
            if index == 0 and header is not None:
                _draw_image(c, header)
            for op in ops:
                self._draw_text(c, op)
            c.showPage()

        c.save()

        logger.info(
            "Rendered PDF report '%s' (%d page(s))", document.period_label, len(pages)
        )
        return RenderedReport(
            filename=self.filename_for(document),
            content=buffer.getvalue(),
            media_type="application/pdf",
            page_count=len(pages),
        )

    @staticmethod
    def _draw_text(c: canvas.Canvas, op: TextOp) -> None:
        c.setFont(op.font, op.size)
        x = op.x * mm
        y = (PAGE_HEIGHT_MM - op.y) * mm
        if op.align == "center":
            c.drawCentredString(x, y, op.text)
        elif op.align == "right":
            c.drawRightString(x, y, op.text)
        else:
            c.drawString(x, y, op.text)
