"""
PageExtractionResult Entity

Fields and plain text extracted from one page, with the tier that produced them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .extracted_field import ExtractedField


@dataclass
class PageExtractionResult:
    page_index: int
    text: str = ""
    fields: List[ExtractedField] = field(default_factory=list)
    method: str = ""

    def __post_init__(self):
        if self.page_index < 0:
            raise ValueError("page_index must be >= 0")
        for extracted in self.fields:
            extracted.page_index = self.page_index

    @property
    def page_number(self) -> int:
        return self.page_index + 1

    @property
    def field_count(self) -> int:
        return len(self.fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pageIndex': self.page_index,
            'text': self.text,
            'method': self.method,
            'fields': [f.to_dict() for f in self.fields],
        }
