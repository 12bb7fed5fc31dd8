from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from .contract import (
    CLIENT_SIGNATURE_MARKER,
    PROVIDER_SIGNATURE_MARKER,
    LayoutOptions,
)
from .sections import SECTION_TEMPLATES


logger = logging.getLogger(__name__)

MARKERS = (CLIENT_SIGNATURE_MARKER, PROVIDER_SIGNATURE_MARKER)


class ContractValidationError(ValueError):
    def __init__(self, errors: List[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class AnchorHit:
    page_number: int
    rect: Tuple[float, float, float, float]


def extract_text(pdf_bytes: bytes) -> List[str]:
    """Text layer of every page, in page order."""
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [page.get_text("text") for page in doc]


def count_text(pdf_bytes: bytes, needle: str) -> int:
    return sum(page_text.count(needle) for page_text in extract_text(pdf_bytes))


def find_anchors(pdf_bytes: bytes, marker: str) -> List[AnchorHit]:
    """Locate a marker the way the signing service does: a plain text search."""
    hits: List[AnchorHit] = []
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        for index, page in enumerate(doc):
            for rect in page.search_for(marker):
                hits.append(AnchorHit(page_number=index + 1, rect=(rect.x0, rect.y0, rect.x1, rect.y1)))
    return hits


def validate_contract_pdf(pdf_bytes: bytes, options: Optional[LayoutOptions] = None) -> List[str]:
    options = options or LayoutOptions()
    errors: List[str] = []
    if not pdf_bytes:
        return ["Document is empty"]

    text = "\n".join(extract_text(pdf_bytes))

    for marker in MARKERS:
        found = text.count(marker)
        expected = 1 if options.include_signature_markers else 0
        if found != expected:
            errors.append(f"Marker {marker} found {found} times, expected {expected}")

    for number, (title, _) in enumerate(SECTION_TEMPLATES, start=1):
        heading = f"{number}. {title}"
        if text.count(heading) != 1:
            errors.append(f"Section heading missing or repeated: {heading}")

    if errors:
        logger.info("Contract PDF failed QA: %s", "; ".join(errors))
    return errors
