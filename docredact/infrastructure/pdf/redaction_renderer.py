"""
Burn opaque redaction boxes into PDFs and images.

PDF pages get PyMuPDF redaction annotations which are then applied, so the
text and image pixels under each box are removed rather than merely covered.
Images get filled rectangles drawn with OpenCV and are re-encoded in their
source format. The input bytes are never modified.
"""
from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

import fitz  # type: ignore
import numpy as np
import cv2  # type: ignore

from docredact.domain.entities.documents import is_image, is_pdf
from docredact.domain.entities.extracted_field import ExtractedField
from docredact.domain.entities.redaction import RedactionResult, RedactionSelection
from docredact.domain.exceptions import RedactionUnsupportedArtifactError
from docredact.domain.value_objects.bounding_box import BoundingBox
from .image_processor import decode_image, encode_image

logger = logging.getLogger(__name__)

BLACK_RGB = (0, 0, 0)
BLACK_BGR = (0, 0, 0)

# (owner id, box) pairs grouped by page index
_PageBoxes = Dict[int, List[Tuple[str, BoundingBox]]]


class RedactionRenderer:
    """Render a redacted copy of a document from a selection of fields."""

    def render(
        self,
        content: bytes,
        mime_type: str,
        selection: RedactionSelection,
        fields: Sequence[ExtractedField],
    ) -> RedactionResult:
        """
        Redact ``selection`` on ``content``.

        Every selected id of a known field is reported as redacted. Only
        fields with real geometry on an existing page are drawn; the rest are
        reported as skipped.

        Raises:
            RedactionUnsupportedArtifactError: if ``mime_type`` is not a PDF or
                image type, or the bytes cannot be decoded as that type.
        """
        mime_type = (mime_type or "").lower()
        if not (is_pdf(mime_type) or is_image(mime_type)):
            raise RedactionUnsupportedArtifactError(mime_type)

        by_id = {f.id: f for f in fields}
        result = RedactionResult(artifact=b"", mime_type=mime_type)
        boxes: _PageBoxes = defaultdict(list)

        for field_id in selection.field_ids:
            extracted = by_id.get(field_id)
            if extracted is None:
                logger.warning("Redaction requested for unknown field %s", field_id)
                result.unknown_ids.append(field_id)
                continue
            result.redacted_ids.append(field_id)
            if not extracted.has_real_geometry():
                result.skipped_ids.append(field_id)
                continue
            boxes[extracted.page_index].append((field_id, extracted.bounding_box))

        for region in selection.manual_regions:
            result.manual_region_ids.append(region.id)
            if region.bounding_box.is_valid():
                boxes[region.page_index].append((region.id, region.bounding_box))

        if is_pdf(mime_type):
            artifact, drawn = self._render_pdf(content, boxes)
        else:
            artifact, drawn = self._render_image(content, mime_type, boxes)

        result.artifact = artifact
        result.rendered_ids = [i for i in result.redacted_ids if i in drawn]
        result.skipped_ids.extend(
            i for i in result.redacted_ids
            if i not in drawn and i not in result.skipped_ids
        )
        undrawn_regions = [i for i in result.manual_region_ids if i not in drawn]
        if undrawn_regions:
            logger.warning("Manual regions not drawn (page out of range): %s", undrawn_regions)

        logger.info(
            "Redaction rendered: %d selected, %d drawn, %d skipped, %d manual regions",
            len(result.redacted_ids), len(result.rendered_ids),
            len(result.skipped_ids), len(result.manual_region_ids),
        )
        return result

    def _render_pdf(self, content: bytes, boxes: _PageBoxes) -> Tuple[bytes, set]:
        try:
            document = fitz.open(stream=content, filetype="pdf")
        except Exception as exc:
            raise RedactionUnsupportedArtifactError(
                "application/pdf", f"Cannot open PDF for redaction ({type(exc).__name__})"
            ) from exc

        drawn = set()
        with document:
            if document.needs_pass:
                raise RedactionUnsupportedArtifactError("application/pdf", "Cannot redact an encrypted PDF")

            for page_index in sorted(boxes):
                if page_index >= document.page_count:
                    logger.warning("Redaction page %d out of range (%d pages)", page_index + 1, document.page_count)
                    continue
                page = document[page_index]
                page_rect = page.rect
                for owner_id, box in boxes[page_index]:
                    x0, y0, x1, y1 = box.to_rect(page_rect.width, page_rect.height)
                    rect = fitz.Rect(page_rect.x0 + x0, page_rect.y0 + y0, page_rect.x0 + x1, page_rect.y0 + y1)
                    page.add_redact_annot(rect, fill=BLACK_RGB)
                    drawn.add(owner_id)
                page.apply_redactions(images=fitz.PDF_REDACT_IMAGE_PIXELS)

            artifact = document.tobytes(garbage=3, deflate=True)
        return artifact, drawn

    def _render_image(self, content: bytes, mime_type: str, boxes: _PageBoxes) -> Tuple[bytes, set]:
        image = decode_image(content)
        if image is None:
            raise RedactionUnsupportedArtifactError(mime_type, f"Cannot decode {mime_type} artifact")

        canvas = np.array(image, copy=True)
        height, width = canvas.shape[:2]
        drawn = set()

        for page_index, page_boxes in boxes.items():
            if page_index != 0:
                logger.warning("Image artifacts have one page; ignoring boxes on page %d", page_index + 1)
                continue
            for owner_id, box in page_boxes:
                (x0, y0), (x1, y1) = _pixel_corners(box, width, height)
                cv2.rectangle(canvas, (x0, y0), (x1, y1), BLACK_BGR, thickness=cv2.FILLED)
                drawn.add(owner_id)

        try:
            artifact = encode_image(canvas, mime_type)
        except ValueError as exc:
            raise RedactionUnsupportedArtifactError(mime_type, str(exc)) from exc
        return artifact, drawn


def _pixel_corners(box: BoundingBox, width: int, height: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """Inclusive pixel corners covering ``box`` completely."""
    x0, y0, x1, y1 = box.to_rect(width, height)
    left = max(0, min(width - 1, int(math.floor(x0))))
    top = max(0, min(height - 1, int(math.floor(y0))))
    right = max(left, min(width - 1, int(math.ceil(x1)) - 1))
    bottom = max(top, min(height - 1, int(math.ceil(y1)) - 1))
    return (left, top), (right, bottom)

