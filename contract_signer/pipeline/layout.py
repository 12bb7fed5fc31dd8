from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .canvas import PdfCanvas
from .contract import (
    CLIENT_SIGNATURE_MARKER,
    PROVIDER_SIGNATURE_MARKER,
    ContractData,
    ContractSection,
    LayoutOptions,
)
from .sections import section_label


BLACK = "#000000"
WHITE = "#ffffff"
MUTED = "#666666"

RESERVED_SECTION_SPACE = 100
RESERVED_SIGNATURE_SPACE = 400

ITEM_INDENT = 25
ITEM_LINE_GAP = 2

# Signature block geometry, relative to the start of each row. These values
# are matched by the field placement configured on the signing service.
SIGNATURE_WIDTH_RATIO = 0.75
MARKER_OFFSET = 25
SIGNATURE_LINE_OFFSET = 85
LINE_TRIM = 20
DETAIL_LINE_OFFSETS = (8, 23, 38)
CLIENT_BLOCK_HEIGHT = 170
PROVIDER_BLOCK_HEIGHT = 140
MARKER_FONT_SIZE = 1

WITNESS_TEXT = (
    "IN WITNESS WHEREOF, the parties hereto have executed this Agreement as of the date first "
    "written above."
)
CONSIDERATION_TEXT = (
    "NOW, THEREFORE, in consideration of the mutual covenants and agreements set forth herein, "
    "and for other good and valuable consideration, the receipt and sufficiency of which are hereby "
    "acknowledged, the parties agree as follows:"
)


@dataclass(frozen=True)
class SignaturePlacement:
    role: str
    marker: str
    page_number: int
    x: float
    y: float
    width: float
    marker_written: bool

    @property
    def line_y(self) -> float:
        return self.y + SIGNATURE_LINE_OFFSET


def render_header(canv: PdfCanvas, data: ContractData) -> None:
    canv.set_font("Helvetica-Bold", 20)
    canv.text("SERVICE AGREEMENT", align="center")
    canv.move_down(0.5)

    canv.set_font("Helvetica", 10)
    canv.set_fill_color(MUTED)
    canv.text(f"Contract No: {data.contract_number}", align="center")

    canv.set_fill_color(BLACK)
    canv.move_down(2)


def _render_party(canv: PdfCanvas, name: str, lines: Sequence[str], role: str) -> None:
    canv.set_font("Helvetica-Bold")
    canv.text(name)
    canv.set_font("Helvetica")
    for line in lines:
        canv.text(line)
    canv.set_font("Helvetica-Oblique")
    canv.text(f'(hereinafter referred to as the "{role}")')


def render_preamble(canv: PdfCanvas, data: ContractData) -> None:
    canv.set_font("Helvetica", 11)
    canv.text(
        f'This Service Agreement ("Agreement") is entered into as of {data.effective_date} '
        "by and between:"
    )
    canv.move_down()

    _render_party(
        canv,
        data.client_name,
        [data.client_address, data.client_city, f"Email: {data.client_email}"],
        "Client",
    )

    canv.move_down()
    canv.set_font("Helvetica")
    canv.text("and", align="center")
    canv.move_down()

    _render_party(canv, data.provider_name, [data.provider_address, data.provider_city], "Provider")

    canv.move_down(2)
    canv.set_font("Helvetica")
    canv.text(CONSIDERATION_TEXT)
    canv.move_down(2)


def needs_page_break(canv: PdfCanvas, margin: float, reserved: float) -> bool:
    """Greedy check: the upcoming block's real height is never measured."""
    return canv.cursor.y > canv.page.height - margin - reserved


def render_section(canv: PdfCanvas, section_number: int, section: ContractSection, margin: float) -> None:
    if needs_page_break(canv, margin, RESERVED_SECTION_SPACE):
        canv.add_page()

    canv.set_font("Helvetica-Bold", 12)
    canv.text(f"{section_number}. {section.title}")
    canv.move_down(0.5)

    canv.set_font("Helvetica", 11)
    for item_number, item in enumerate(section.items, start=1):
        label = section_label(section_number, item_number)
        canv.text(f"{label}  {item}", indent=ITEM_INDENT, align="justify", line_gap=ITEM_LINE_GAP)
        canv.move_down(0.5)

    canv.move_down(0.5)


def render_sections(canv: PdfCanvas, sections: Sequence[ContractSection], margin: float) -> None:
    for section_number, section in enumerate(sections, start=1):
        render_section(canv, section_number, section, margin)


def _render_signature_row(
    canv: PdfCanvas,
    x: float,
    y: float,
    width: float,
    label: str,
    name: str,
    marker: str,
    include_marker: bool,
) -> SignaturePlacement:
    page_number = canv.page_number

    canv.set_font("Helvetica", 10)
    canv.text(label, x, y, width=width)

    # Search anchor for the signing service: 1pt white text, no width limit.
    if include_marker:
        canv.set_font_size(MARKER_FONT_SIZE)
        canv.set_fill_color(WHITE)
        canv.text(marker, x, y + MARKER_OFFSET)
        canv.set_fill_color(BLACK)

    line_y = y + SIGNATURE_LINE_OFFSET
    canv.move_to(x, line_y).line_to(x + width - LINE_TRIM, line_y).stroke()

    name_gap, title_gap, date_gap = DETAIL_LINE_OFFSETS
    canv.set_font("Helvetica", 10)
    canv.text(f"Name: {name}", x, line_y + name_gap, width=width)
    canv.text("Title: _______________________", x, line_y + title_gap, width=width)
    canv.text("Date: _______________________", x, line_y + date_gap, width=width)

    return SignaturePlacement(
        role=label,
        marker=marker,
        page_number=page_number,
        x=x,
        y=y,
        width=width,
        marker_written=include_marker,
    )


def render_signature_block(
    canv: PdfCanvas,
    data: ContractData,
    options: LayoutOptions,
) -> List[SignaturePlacement]:
    if needs_page_break(canv, options.margin, RESERVED_SIGNATURE_SPACE):
        canv.add_page()

    canv.move_down(2)
    canv.set_font("Helvetica", 11)
    canv.text(WITNESS_TEXT, align="justify")
    canv.move_down(3)

    signature_width = canv.page.content_width * SIGNATURE_WIDTH_RATIO
    left_x = canv.page.margins.left
    include_markers = options.include_signature_markers

    client_y = canv.cursor.y
    client = _render_signature_row(
        canv,
        left_x,
        client_y,
        signature_width,
        "CLIENT",
        data.client_name,
        CLIENT_SIGNATURE_MARKER,
        include_markers,
    )
    # Fixed block height, independent of the drawn content.
    canv.cursor.y = client_y + CLIENT_BLOCK_HEIGHT

    provider_y = canv.cursor.y
    provider = _render_signature_row(
        canv,
        left_x,
        provider_y,
        signature_width,
        "PROVIDER",
        data.provider_name,
        PROVIDER_SIGNATURE_MARKER,
        include_markers,
    )
    canv.cursor.y = provider_y + PROVIDER_BLOCK_HEIGHT

    return [client, provider]
