"""Results of pairing extracted fields with configured data elements."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .data_element import ConfiguredDataElement
from .extracted_field import ExtractedField


class MatchTier(str, Enum):
    """Which matching tier paired a field, in the order tiers are tried."""
    EXACT = "exact"
    MAPPING_TABLE = "mapping_table"
    ALIAS = "alias"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class MatchResult:
    """
    A field paired with its configured element, an unmatched field, or a
    missing placeholder for a configured element nothing matched.

    Missing placeholders carry no field: their text is empty and their
    confidence is 0.
    """

    field: Optional[ExtractedField]
    element: Optional[ConfiguredDataElement]
    tier: MatchTier = MatchTier.NONE
    missing: bool = False

    @classmethod
    def for_missing(cls, element: ConfiguredDataElement) -> MatchResult:
        return cls(field=None, element=element, tier=MatchTier.NONE, missing=True)

    @property
    def id(self) -> str:
        if self.field is not None:
            return self.field.id
        return f"missing-{self.element.id}" if self.element else ""

    @property
    def text(self) -> str:
        return self.field.value if self.field is not None else ""

    @property
    def confidence(self) -> float:
        return self.field.confidence if self.field is not None else 0.0

    @property
    def is_matched(self) -> bool:
        return self.field is not None and self.element is not None

    @property
    def is_configured(self) -> bool:
        return self.element is not None

    @property
    def label(self) -> str:
        if self.element is not None:
            return self.element.name
        return self.field.label if self.field is not None else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'label': self.label,
            'text': self.text,
            'confidence': self.confidence,
            'tier': self.tier.value,
            'missing': self.missing,
            'isConfigured': self.is_configured,
            'elementId': self.element.id if self.element else None,
            'required': self.element.required if self.element else False,
            'field': self.field.to_dict() if self.field is not None else None,
        }


@dataclass
class MatchReport:
    """Output of one matching pass."""

    results: List[MatchResult] = field(default_factory=list)
    remaining_elements: List[ConfiguredDataElement] = field(default_factory=list)

    @property
    def matched(self) -> List[MatchResult]:
        return [r for r in self.results if r.is_matched]

    @property
    def unmatched(self) -> List[MatchResult]:
        return [r for r in self.results if r.field is not None and r.element is None]

    @property
    def missing(self) -> List[MatchResult]:
        return [r for r in self.results if r.missing]
