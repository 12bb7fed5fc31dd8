from __future__ import annotations

import io
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas


logger = logging.getLogger(__name__)

CHUNK_SIZE = 16 * 1024
# AFM FontBBox heights of the standard fonts, in 1/1000 em. Leading is the
# full bbox height, ascender to descender plus the font's own line gap.
FONT_BBOX_HEIGHTS = {
    "Helvetica": 1156,
    "Helvetica-Bold": 1190,
    "Helvetica-Oblique": 1156,
    "Helvetica-BoldOblique": 1190,
    "Times-Roman": 1116,
    "Times-Bold": 1153,
    "Times-Italic": 1100,
    "Times-BoldItalic": 1139,
    "Courier": 1055,
    "Courier-Bold": 1051,
    "Courier-Oblique": 1055,
    "Courier-BoldOblique": 1051,
    "Symbol": 1303,
    "ZapfDingbats": 963,
}
ALIGNMENTS = {"left", "center", "right", "justify"}


class CanvasError(RuntimeError):
    """Raised (through the "error" event) when the backend cannot render the document."""


@dataclass(frozen=True)
class Margins:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class PageGeometry:
    width: float
    height: float
    margins: Margins

    @property
    def content_width(self) -> float:
        return self.width - self.margins.left - self.margins.right


@dataclass
class Cursor:
    x: float
    y: float


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except ValueError:
        return default


class PdfCanvas:
    """
    Stateful drawing surface over a ReportLab canvas.

    Coordinates are top-down: ``cursor.y`` is the distance from the top edge of
    the page, and every ``text`` call advances it by the rendered height.
    Completion is reported through ``on("data" | "end" | "error", handler)``.
    """

    def __init__(
        self,
        margin: float = 72.0,
        page_size: Tuple[float, float] = A4,
        compress: bool = False,
    ) -> None:
        width, height = page_size
        self.page = PageGeometry(
            width=float(width),
            height=float(height),
            margins=Margins(margin, margin, margin, margin),
        )
        self.cursor = Cursor(x=self.page.margins.left, y=self.page.margins.top)
        self.font_name = "Helvetica"
        self.font_size = 12.0
        self.fill_color: colors.Color = colors.black
        self._buffer = io.BytesIO()
        self._canv = canvas.Canvas(
            self._buffer,
            pagesize=(width, height),
            pageCompression=1 if compress else 0,
            invariant=1,
        )
        self._listeners: DefaultDict[str, List[Callable]] = defaultdict(list)
        self._path = None
        self._page_number = 1
        self._ended = False

    # -- events -----------------------------------------------------------

    def on(self, event: str, handler: Callable) -> None:
        self._listeners[event].append(handler)

    def _emit(self, event: str, *args) -> None:
        for handler in list(self._listeners[event]):
            handler(*args)

    # -- state ------------------------------------------------------------

    @property
    def page_number(self) -> int:
        return self._page_number

    def set_font(self, name: str, size: Optional[float] = None) -> None:
        self.font_name = name
        if size is not None:
            self.set_font_size(size)

    def set_font_size(self, size: float) -> None:
        self.font_size = float(size)

    def set_fill_color(self, value: str) -> None:
        self.fill_color = _hex(value)

    def line_height(self) -> float:
        height = FONT_BBOX_HEIGHTS.get(self.font_name)
        if height is None:
            face = pdfmetrics.getFont(self.font_name).face
            bbox = getattr(face, "bbox", None)
            height = bbox[3] - bbox[1] if bbox else face.ascent - face.descent
        return height * self.font_size / 1000.0

    def move_down(self, lines: float = 1) -> None:
        self.cursor.y += self.line_height() * lines

    def string_width(self, text: str) -> float:
        return self._canv.stringWidth(text, self.font_name, self.font_size)

    def add_page(self) -> None:
        self._canv.showPage()
        self._page_number += 1
        self.cursor.x = self.page.margins.left
        self.cursor.y = self.page.margins.top

    # -- text -------------------------------------------------------------

    def _chop(self, word: str, room: float, width: float) -> List[str]:
        """Split a word wider than the line; the first piece fills ``room``."""
        pieces = [""]
        for char in word:
            if pieces[-1] and self.string_width(pieces[-1] + char) > room:
                pieces.append("")
                room = width
            pieces[-1] += char
        return pieces

    def _wrap(self, paragraph: str, width: float, indent: float) -> List[str]:
        """
        Greedy word wrap. Runs of spaces are kept so that labels such as
        "1.1  Text" keep their double space. A word that does not fit on a
        line of its own is broken between characters.
        """
        lines: List[str] = []
        current: List[str] = []
        limit = width - indent
        for word in paragraph.split(" "):
            candidate = " ".join(current + [word])
            if current and self.string_width(candidate) > limit:
                lines.append(" ".join(current).rstrip())
                current = []
                limit = width
                if not word:
                    continue
            if self.string_width(word) > limit:
                pieces = self._chop(word, limit, width)
                lines.extend(pieces[:-1])
                limit = width
                word = pieces[-1]
            current.append(word)
        if current or not lines:
            lines.append(" ".join(current).rstrip())
        return lines

    def _baseline(self, top: float) -> float:
        ascent, _ = pdfmetrics.getAscentDescent(self.font_name, self.font_size)
        return self.page.height - top - ascent

    def _draw_line(self, line: str, x: float, width: float, align: str, last: bool) -> None:
        baseline = self._baseline(self.cursor.y)
        line_width = self.string_width(line)

        if align == "justify" and not last and line.count(" ") > 0:
            word_space = (width - line_width) / line.count(" ")
            text_object = self._canv.beginText(x, baseline)
            text_object.setFont(self.font_name, self.font_size)
            text_object.setFillColor(self.fill_color)
            text_object.setWordSpace(word_space)
            text_object.textOut(line)
            self._canv.drawText(text_object)
            return

        if align == "center":
            x += (width - line_width) / 2
        elif align == "right":
            x += width - line_width

        self._canv.setFont(self.font_name, self.font_size)
        self._canv.setFillColor(self.fill_color)
        self._canv.drawString(x, baseline, line)

    def text(
        self,
        content: str,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        indent: float = 0.0,
        align: str = "left",
        line_gap: float = 0.0,
    ) -> None:
        if align not in ALIGNMENTS:
            raise ValueError(f"Unsupported alignment: {align}")
        if x is not None:
            self.cursor.x = float(x)
        if y is not None:
            self.cursor.y = float(y)
        content = str(content)
        if not content:
            return
        left = self.cursor.x
        if width is None:
            width = self.page.width - left - self.page.margins.right

        bottom = self.page.height - self.page.margins.bottom
        for paragraph in content.split("\n"):
            lines = self._wrap(paragraph, width, indent)
            for index, line in enumerate(lines):
                height = self.line_height()
                if self.cursor.y + height > bottom and self.cursor.y > self.page.margins.top:
                    self.add_page()
                offset = indent if index == 0 else 0.0
                self._draw_line(line, left + offset, width - offset, align, index == len(lines) - 1)
                self.cursor.y += height + line_gap
        self.cursor.x = left

    # -- paths ------------------------------------------------------------

    def move_to(self, x: float, y: float) -> "PdfCanvas":
        self._path = self._canv.beginPath()
        self._path.moveTo(x, self.page.height - y)
        return self

    def line_to(self, x: float, y: float) -> "PdfCanvas":
        if self._path is None:
            raise CanvasError("line_to called before move_to")
        self._path.lineTo(x, self.page.height - y)
        return self

    def stroke(self) -> None:
        if self._path is None:
            return
        self._canv.setStrokeColor(colors.black)
        self._canv.setLineWidth(1)
        self._canv.drawPath(self._path, stroke=1, fill=0)
        self._path = None

    # -- finalization -----------------------------------------------------

    def end(self) -> None:
        """Finalize the document and report the bytes through the event channel."""
        if self._ended:
            self._emit("error", CanvasError("Canvas already finalized"))
            return
        self._ended = True
        try:
            self._canv.save()
        except Exception as exc:
            logger.exception("PDF finalization failed")
            error = CanvasError(f"PDF finalization failed: {exc}")
            error.__cause__ = exc
            self._emit("error", error)
            return
        data = self._buffer.getvalue()
        for start in range(0, len(data), CHUNK_SIZE):
            self._emit("data", data[start : start + CHUNK_SIZE])
        self._emit("end")
