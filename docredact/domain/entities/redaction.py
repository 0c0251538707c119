"""Redaction requests and their outcome."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..value_objects.bounding_box import BoundingBox


@dataclass(frozen=True)
class ManualRegion:
    """An ad hoc region drawn by the user, not tied to any extracted field."""

    id: str
    label: str
    bounding_box: BoundingBox
    page_index: int = 0

    def __post_init__(self):
        if not isinstance(self.bounding_box, BoundingBox):
            box = BoundingBox.from_raw(self.bounding_box)
            if box is None:
                raise ValueError(f"Manual region {self.id!r} has no usable bounding box")
            object.__setattr__(self, 'bounding_box', box)
        if self.page_index is None or self.page_index < 0:
            object.__setattr__(self, 'page_index', 0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ManualRegion:
        return cls(
            id=str(data.get('id') or ''),
            label=str(data.get('label') or ''),
            bounding_box=data.get('boundingBox', data.get('bounding_box')),
            page_index=int(data.get('pageIndex', data.get('page_index', 0)) or 0),
        )


@dataclass(frozen=True)
class RedactionSelection:
    """Field ids to redact plus manual regions."""

    field_ids: Tuple[str, ...] = field(default_factory=tuple)
    manual_regions: Tuple[ManualRegion, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Drop duplicate ids while keeping the caller's order.
        object.__setattr__(self, 'field_ids', tuple(dict.fromkeys(str(i) for i in self.field_ids)))
        object.__setattr__(self, 'manual_regions', tuple(self.manual_regions))

    def is_empty(self) -> bool:
        return not self.field_ids and not self.manual_regions


@dataclass
class RedactionResult:
    """
    Outcome of rendering a redaction.

    ``redacted_ids`` lists every selected id of a known field (the logical redaction);
    ``rendered_ids`` the subset actually drawn on the artifact. Ids selected
    but lacking real geometry are in ``skipped_ids``; ids matching no
    known field are only reported in ``unknown_ids``.
    """

    artifact: bytes
    mime_type: str
    redacted_ids: List[str] = field(default_factory=list)
    rendered_ids: List[str] = field(default_factory=list)
    skipped_ids: List[str] = field(default_factory=list)
    unknown_ids: List[str] = field(default_factory=list)
    manual_region_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mimeType': self.mime_type,
            'redactedIds': list(self.redacted_ids),
            'renderedIds': list(self.rendered_ids),
            'skippedIds': list(self.skipped_ids),
            'unknownIds': list(self.unknown_ids),
            'manualRegionIds': list(self.manual_region_ids),
        }
