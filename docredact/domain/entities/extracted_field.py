"""
ExtractedField Entity

Represents a single field produced by extraction or pattern detection:
a label, a value, a confidence and (optionally) its location on a page.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from ..value_objects.bounding_box import BoundingBox, BoxShape
from ..value_objects.confidence import normalize_confidence


class FieldSource(str, Enum):
    """Where a field came from."""
    DIRECT_PARSE = "direct-parse"
    OCR = "ocr"
    PATTERN = "pattern"
    MANUAL = "manual"


@dataclass
class ExtractedField:
    """
    Domain entity representing an extracted field.

    ``bounding_box`` is always canonical; raw boxes of either shape are
    normalized on construction. Fields are only mutated through
    :meth:`relabel` once extraction has finished.
    """

    id: str = field(default_factory=lambda: uuid4().hex)
    label: str = ""
    value: str = ""
    confidence: float = 0.0
    page_index: int = 0
    bounding_box: Optional[BoundingBox] = None
    source: FieldSource = FieldSource.OCR
    field_type: str = "Text"
    category: Optional[str] = None
    original_label: Optional[str] = None

    def __post_init__(self):
        self.id = str(self.id)
        self.label = str(self.label or "").strip()
        self.value = str(self.value or "").strip()
        self.confidence = normalize_confidence(self.confidence)

        if self.page_index is None or self.page_index < 0:
            self.page_index = 0

        if not isinstance(self.source, FieldSource):
            self.source = FieldSource(self.source)

        if self.bounding_box is not None and not isinstance(self.bounding_box, BoundingBox):
            self.bounding_box = BoundingBox.from_raw(self.bounding_box)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ExtractedField:
        """
        Create an ExtractedField from a loose dictionary.

        Accepts ``text`` as an alias of ``value`` and ``boundingBox`` /
        ``bbox`` in either raw box shape.
        """
        raw_box = data.get('boundingBox', data.get('bounding_box', data.get('bbox')))
        return cls(
            id=data.get('id') or uuid4().hex,
            label=data.get('label') or data.get('name') or '',
            value=data.get('value', data.get('text', '')),
            confidence=data.get('confidence', 0.0),
            page_index=int(data.get('pageIndex', data.get('page_index', 0)) or 0),
            bounding_box=BoundingBox.from_raw(raw_box),
            source=data.get('source', FieldSource.OCR),
            field_type=data.get('type') or data.get('field_type') or 'Text',
            category=data.get('category'),
            original_label=data.get('originalLabel'),
        )

    def to_dict(self, box_shape: BoxShape = BoxShape.LEFT_TOP) -> Dict[str, Any]:
        return {
            'id': self.id,
            'label': self.label,
            'value': self.value,
            'confidence': self.confidence,
            'pageIndex': self.page_index,
            'boundingBox': self.bounding_box.to_dict(box_shape) if self.bounding_box else None,
            'source': self.source.value,
            'type': self.field_type,
            'category': self.category,
            'originalLabel': self.original_label,
        }

    @property
    def text(self) -> str:
        return self.value

    def has_real_geometry(self) -> bool:
        """
        True when the field carries a usable box measured on the page.

        Pattern-detected fields only have a synthesized box and do not count.
        """
        if self.source is FieldSource.PATTERN:
            return False
        return self.bounding_box is not None and self.bounding_box.is_valid()

    def relabel(self, new_label: str) -> None:
        """Apply a user correction to the label, remembering the original."""
        new_label = str(new_label or "").strip()
        if not new_label:
            raise ValueError("label must not be empty")
        if self.original_label is None:
            self.original_label = self.label
        self.label = new_label

    def __str__(self) -> str:
        return f"Field({self.label}='{self.value}', conf={int(self.confidence * 100)}%)"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExtractedField):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
