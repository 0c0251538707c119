"""PDF page rendering for the infrastructure layer."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import fitz  # type: ignore

from docredact.domain.entities.documents import PageDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedPage:
    """A page rasterized to an image."""

    page_index: int
    content: bytes
    width: int
    height: int
    image_mime: str = "image/png"

    def __post_init__(self) -> None:
        if self.page_index < 0:
            raise ValueError("page_index must be >= 0")


class PdfRenderer:
    """Renders single-page PDF documents to PNG bytes."""

    def __init__(self, *, zoom: float = 2.0) -> None:
        self._zoom = zoom

    def render(self, page: PageDocument) -> RenderedPage:
        """Rasterize the first page of ``page.content``."""

        with fitz.open(stream=page.content, filetype="pdf") as document:
            if document.needs_pass:
                raise ValueError("document is encrypted")
            if document.page_count < 1:
                raise ValueError("document has no pages")
            pdf_page = document.load_page(0)
            matrix = fitz.Matrix(self._zoom, self._zoom)
            pixmap = pdf_page.get_pixmap(matrix=matrix, alpha=False)
            rendered = RenderedPage(
                page_index=page.index,
                content=pixmap.tobytes("png"),
                width=pixmap.width,
                height=pixmap.height,
            )

        logger.debug("Rendered page %s at %sx%s", page.page_number, rendered.width, rendered.height)
        return rendered
