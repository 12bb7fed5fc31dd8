from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable, List, Optional

from .canvas import PdfCanvas
from .contract import ContractData, LayoutOptions
from .layout import (
    SignaturePlacement,
    render_header,
    render_preamble,
    render_sections,
    render_signature_block,
)
from .sections import build_sections


logger = logging.getLogger(__name__)

CanvasFactory = Callable[..., PdfCanvas]


def _resolve(result: Future, value: bytes) -> None:
    if not result.done():
        result.set_result(value)


def _reject(result: Future, error: BaseException) -> None:
    if not result.done():
        result.set_exception(error)


class ContractPdfBuilder:
    """
    Renders one contract: header, preamble, numbered sections, signature block.

    Every build gets its own canvas, so builders can be reused and separate
    builds can run on separate threads.
    """

    def __init__(
        self,
        data: ContractData,
        options: Optional[LayoutOptions] = None,
        canvas_factory: CanvasFactory = PdfCanvas,
    ) -> None:
        self.data = data
        self.options = options or LayoutOptions()
        self._canvas_factory = canvas_factory
        self.placements: List[SignaturePlacement] = []

    def _new_canvas(self) -> PdfCanvas:
        return self._canvas_factory(
            margin=self.options.margin,
            page_size=self.options.page_size.dimensions,
        )

    def build_future(self) -> "Future[bytes]":
        result: Future = Future()
        chunks: List[bytes] = []
        try:
            canv = self._new_canvas()
            # Listeners must be registered before the first draw call.
            canv.on("data", chunks.append)
            canv.on("end", lambda: _resolve(result, b"".join(chunks)))
            canv.on("error", lambda error: _reject(result, error))

            render_header(canv, self.data)
            render_preamble(canv, self.data)
            render_sections(canv, build_sections(self.data), self.options.margin)
            self.placements = render_signature_block(canv, self.data, self.options)
            canv.end()
        except Exception as exc:
            logger.debug("Contract %s failed while drawing", self.data.contract_number, exc_info=True)
            _reject(result, exc)
        return result

    def build(self) -> bytes:
        return self.build_future().result()


def generate_contract_pdf(data: ContractData, options: Optional[LayoutOptions] = None) -> bytes:
    return ContractPdfBuilder(data, options).build()
