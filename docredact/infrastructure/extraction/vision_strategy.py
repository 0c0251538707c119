"""OCR tier backed by the vision model."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from docredact.constants import METHOD_VISION_OCR
from docredact.domain.entities.documents import PageDocument, is_image, is_pdf
from docredact.domain.exceptions import ExtractionTierError
from docredact.infrastructure.pdf.image_processor import ensure_vision_compatible
from docredact.infrastructure.pdf.pdf_renderer import PdfRenderer
from docredact.infrastructure.vision.azure_vision_client import AzureVisionClient

from .base import ExtractionMode, ExtractionOutcome, TierPolicy

logger = logging.getLogger(__name__)


class VisionOcrStrategy:
    """
    Renders the page to an image and asks the vision model for text and
    geometry-anchored fields.

    The client is created on first use so an unconfigured deployment only
    fails this tier, not the whole chain.
    """

    name = METHOD_VISION_OCR

    def __init__(
        self,
        client_factory: Callable[[], AzureVisionClient],
        *,
        renderer: Optional[PdfRenderer] = None,
        policy: TierPolicy | None = None,
    ) -> None:
        self._client_factory = client_factory
        self._client: Optional[AzureVisionClient] = None
        self._renderer = renderer or PdfRenderer()
        self.policy = policy or TierPolicy()

    def extract(self, page: PageDocument, mode: ExtractionMode) -> ExtractionOutcome:
        image, mime_type = self._page_image(page)
        outcome = self._get_client().extract_page(
            page.index,
            image,
            mime_type,
            mode,
            timeout=self.policy.timeout_seconds,
        )
        for extracted in outcome.fields:
            extracted.page_index = page.index
        logger.debug("Vision OCR returned %d fields for page %s", len(outcome.fields), page.page_number)
        return outcome

    def _get_client(self) -> AzureVisionClient:
        if self._client is None:
            try:
                self._client = self._client_factory()
            except RuntimeError as exc:
                raise ExtractionTierError(self.name, f"vision client unavailable: {exc}") from exc
        return self._client

    def _page_image(self, page: PageDocument) -> tuple[bytes, str]:
        if is_pdf(page.mime_type):
            try:
                rendered = self._renderer.render(page)
            except ValueError as exc:
                raise ExtractionTierError(self.name, str(exc)) from exc
            except Exception as exc:
                raise ExtractionTierError(self.name, f"cannot render page: malformed pdf ({type(exc).__name__})") from exc
            return rendered.content, rendered.image_mime

        if is_image(page.mime_type):
            try:
                return ensure_vision_compatible(page.content, page.mime_type)
            except ValueError as exc:
                raise ExtractionTierError(self.name, f"invalid image data: {exc}") from exc

        raise ExtractionTierError(self.name, f"unsupported input type {page.mime_type or 'unknown'}")
