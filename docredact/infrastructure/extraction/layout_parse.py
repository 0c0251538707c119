"""Direct parse with line reconstruction from positioned words."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from docredact.constants import METHOD_LAYOUT_PARSE
from docredact.domain.entities.documents import PageDocument
from docredact.domain.entities.extracted_field import ExtractedField, FieldSource
from docredact.domain.exceptions import ExtractionTierError
from docredact.domain.value_objects.bounding_box import BoundingBox

from .base import ExtractionMode, ExtractionOutcome, TierPolicy
from .direct_parse import open_pdf

logger = logging.getLogger(__name__)

# Confidence of label/value pairs read off a "Label: value" line.
LAYOUT_FIELD_CONFIDENCE = 0.6


@dataclass(frozen=True)
class TextItem:
    """A positioned word as reported by PyMuPDF."""
    x0: float
    y0: float
    x1: float
    y1: float
    text: str

    @property
    def baseline(self) -> float:
        return round(self.y1, 1)


def group_lines(items: Sequence[TextItem]) -> List[List[TextItem]]:
    """
    Split items into lines, starting a new line whenever an item's baseline
    differs from the previous item's.
    """
    lines: List[List[TextItem]] = []
    previous: Optional[float] = None
    for item in items:
        if previous is None or item.baseline != previous:
            lines.append([])
        lines[-1].append(item)
        previous = item.baseline
    return lines


def lines_to_text(lines: Sequence[Sequence[TextItem]]) -> str:
    return "\n".join(" ".join(item.text for item in line) for line in lines)


class LayoutParseStrategy:
    """Reconstructs text line by line from word positions.

    Lines shaped like ``Label: value`` also become fields anchored on the
    value's words.
    """

    name = METHOD_LAYOUT_PARSE

    def __init__(self, policy: TierPolicy | None = None) -> None:
        self.policy = policy or TierPolicy()

    def extract(self, page: PageDocument, mode: ExtractionMode) -> ExtractionOutcome:
        with open_pdf(page, self.name) as document:
            page_count = document.page_count
            all_lines: List[List[TextItem]] = []
            fields: List[ExtractedField] = []
            for pdf_page in document:
                rect = pdf_page.rect
                items = [
                    TextItem(w[0], w[1], w[2], w[3], w[4])
                    for w in pdf_page.get_text("words")
                    if str(w[4]).strip()
                ]
                lines = group_lines(items)
                all_lines.extend(lines)
                fields.extend(self._line_fields(page, lines, rect.width, rect.height, len(fields)))

        text = lines_to_text(all_lines).strip()
        if not text:
            raise ExtractionTierError(self.name, "no positioned text items")

        logger.debug(
            "Layout parse rebuilt %d lines and %d fields on page %s",
            len(all_lines), len(fields), page.page_number,
        )
        return ExtractionOutcome(text=text, fields=fields, method=self.name, page_count=page_count)

    def _line_fields(
        self,
        page: PageDocument,
        lines: Sequence[Sequence[TextItem]],
        page_width: float,
        page_height: float,
        offset: int,
    ) -> List[ExtractedField]:
        fields: List[ExtractedField] = []
        for line in lines:
            split = _split_label(line)
            if split is None:
                continue
            label, value_items = split
            x0, y0, x1, y1 = _union(value_items)
            fields.append(ExtractedField(
                id=f"layout-{page.index}-{offset + len(fields)}",
                label=label,
                value=" ".join(item.text for item in value_items),
                confidence=LAYOUT_FIELD_CONFIDENCE,
                page_index=page.index,
                bounding_box=BoundingBox.from_absolute(x0, y0, x1 - x0, y1 - y0, page_width, page_height),
                source=FieldSource.DIRECT_PARSE,
            ))
        return fields


def _split_label(line: Sequence[TextItem]) -> Optional[Tuple[str, List[TextItem]]]:
    for index, item in enumerate(line):
        if not item.text.endswith(":"):
            continue
        label = " ".join([i.text for i in line[:index]] + [item.text[:-1]]).strip()
        value_items = list(line[index + 1:])
        if label and value_items:
            return label, value_items
        return None
    return None


def _union(items: Sequence[TextItem]) -> Tuple[float, float, float, float]:
    return (
        min(i.x0 for i in items),
        min(i.y0 for i in items),
        max(i.x1 for i in items),
        max(i.y1 for i in items),
    )
