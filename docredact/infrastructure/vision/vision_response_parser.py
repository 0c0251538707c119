"""Parse vision model payloads into extracted fields."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from docredact.constants import CONFIDENCE_STEPS
from docredact.domain.entities.extracted_field import ExtractedField, FieldSource
from docredact.domain.value_objects.bounding_box import BoundingBox
from docredact.domain.value_objects.confidence import normalize_confidence
from docredact.infrastructure.extraction.base import ExtractionOutcome


class VisionResponseParser:
    """Converts raw vision payloads into an :class:`ExtractionOutcome`.

    Boxes may come back as ``boundingBox``/``bbox`` in either raw shape and
    are normalized here, once.
    """

    def parse_page(
        self,
        page_index: int,
        payload: Dict[str, Any],
        *,
        method: str,
        id_prefix: str = "ocr",
    ) -> ExtractionOutcome:
        fields = list(self._parse_fields(page_index, payload.get("fields") or [], id_prefix))
        text = _safe_str(payload.get("text")).strip()
        if not text and fields:
            text = "\n".join(f"{f.label}: {f.value}" for f in fields if f.value)
        page_count = payload.get("pageCount")
        return ExtractionOutcome(
            text=text,
            fields=fields,
            method=method,
            page_count=page_count if isinstance(page_count, int) and page_count > 0 else 1,
        )

    def _parse_fields(
        self,
        page_index: int,
        field_payload: Iterable[Any],
        id_prefix: str,
    ) -> Iterable[ExtractedField]:
        for index, item in enumerate(field_payload):
            if not isinstance(item, dict):
                continue

            label = _safe_str(item.get("label") or item.get("name")) or f"Field {index + 1}"
            value = _safe_str(item.get("value", item.get("text")))
            raw_confidence = _safe_float(item.get("confidence"))
            confidence = normalize_confidence(raw_confidence, CONFIDENCE_STEPS) if raw_confidence is not None else 0.0

            yield ExtractedField(
                id=f"{id_prefix}-{page_index}-{index}",
                label=label,
                value=value,
                confidence=confidence,
                page_index=page_index,
                bounding_box=_parse_bbox(item),
                source=FieldSource.OCR,
                field_type=_safe_str(item.get("type")) or "Text",
            )


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _parse_bbox(item: Dict[str, Any]) -> Optional[BoundingBox]:
    for key in ("boundingBox", "bbox", "BoundingBox"):
        box = BoundingBox.from_raw(item.get(key))
        if box is not None:
            return box
    return None

