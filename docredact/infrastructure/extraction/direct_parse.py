"""Text-layer extraction straight from the PDF structure."""
from __future__ import annotations

import logging

import fitz  # type: ignore

from docredact.constants import METHOD_DIRECT_PARSE
from docredact.domain.entities.documents import PageDocument, is_pdf
from docredact.domain.exceptions import ExtractionTierError, TierNotApplicableError

from .base import ExtractionMode, ExtractionOutcome, TierPolicy

logger = logging.getLogger(__name__)


def open_pdf(page: PageDocument, method: str) -> fitz.Document:
    """Open a page's bytes as a PDF, mapping PyMuPDF errors to tier errors."""

    if not is_pdf(page.mime_type):
        raise TierNotApplicableError(method, f"not a pdf: {page.mime_type or 'unknown'} input")
    try:
        document = fitz.open(stream=page.content, filetype="pdf")
    except Exception as exc:
        raise ExtractionTierError(method, f"cannot open document: malformed pdf ({exc})") from exc
    if document.needs_pass or document.is_encrypted:
        document.close()
        raise ExtractionTierError(method, "document is encrypted and requires a password")
    return document


class DirectParseStrategy:
    """
    Reads the embedded text layer. Fast, text only, no geometry.

    An empty text layer (a scanned page) counts as a failure so the chain
    moves on to OCR.
    """

    name = METHOD_DIRECT_PARSE

    def __init__(self, policy: TierPolicy | None = None) -> None:
        self.policy = policy or TierPolicy()

    def extract(self, page: PageDocument, mode: ExtractionMode) -> ExtractionOutcome:
        with open_pdf(page, self.name) as document:
            page_count = document.page_count
            text = "\n".join(p.get_text("text") for p in document).strip()

        if not text:
            raise ExtractionTierError(self.name, "no embedded text layer")

        logger.debug("Direct parse read %d characters from page %s", len(text), page.page_number)
        return ExtractionOutcome(text=text, fields=[], method=self.name, page_count=page_count)
