"""Split source documents into independently processable single pages."""
from __future__ import annotations

import logging
from typing import List

import fitz  # type: ignore

from docredact.domain.entities.documents import PageDocument, SourceDocument
from docredact.domain.exceptions import SplitFailedError

logger = logging.getLogger(__name__)


class PageSplitter:
    """
    Splits a PDF into one single-page PDF per page, in order.

    Images are always a single page. When the page count of a PDF cannot be
    determined the document is treated as one page holding the whole input.
    """

    def count_pages(self, source: SourceDocument) -> int:
        """Resolve and cache ``source.page_count``."""

        if source.page_count is not None:
            return source.page_count

        if not source.is_pdf:
            source.page_count = 1
            return 1

        try:
            source.page_count = self._read_page_count(source.content)
        except SplitFailedError as exc:
            logger.warning("Page split failed for %s: %s; assuming one page", source.filename, exc)
            source.page_count = 1
        return source.page_count

    def split(self, source: SourceDocument) -> List[PageDocument]:
        """Return the ordered single-page documents of ``source``."""

        if not source.is_pdf:
            source.page_count = 1
            return [PageDocument(index=0, content=source.content, mime_type=source.mime_type)]

        try:
            pages = self._split_pdf(source.content)
        except SplitFailedError as exc:
            logger.warning("Page split failed for %s: %s; assuming one page", source.filename, exc)
            source.page_count = 1
            return [PageDocument(index=0, content=source.content, mime_type=source.mime_type)]

        source.page_count = len(pages)
        logger.info("Split %s into %d pages", source.filename, len(pages))
        return pages

    def _read_page_count(self, content: bytes) -> int:
        try:
            with fitz.open(stream=content, filetype="pdf") as document:
                if document.needs_pass:
                    raise SplitFailedError("document is encrypted")
                count = document.page_count
        except SplitFailedError:
            raise
        except Exception as exc:
            raise SplitFailedError(f"unreadable PDF ({type(exc).__name__})") from exc
        if count < 1:
            raise SplitFailedError("document reports no pages")
        return count

    def _split_pdf(self, content: bytes) -> List[PageDocument]:
        try:
            with fitz.open(stream=content, filetype="pdf") as document:
                if document.needs_pass:
                    raise SplitFailedError("document is encrypted")
                if document.page_count < 1:
                    raise SplitFailedError("document reports no pages")

                pages: List[PageDocument] = []
                for index in range(document.page_count):
                    with fitz.open() as single:
                        single.insert_pdf(document, from_page=index, to_page=index)
                        pages.append(PageDocument(
                            index=index,
                            content=single.tobytes(garbage=3, deflate=True),
                            mime_type="application/pdf",
                        ))
                return pages
        except SplitFailedError:
            raise
        except Exception as exc:
            raise SplitFailedError(f"unreadable PDF ({type(exc).__name__})") from exc
