"""Domain entities package"""

from .data_element import ConfiguredDataElement, DataElementAction
from .documents import PageDocument, SourceDocument
from .extracted_field import ExtractedField, FieldSource
from .match_result import MatchReport, MatchResult, MatchTier
from .page_extraction import PageExtractionResult
from .redaction import ManualRegion, RedactionResult, RedactionSelection

__all__ = [
    "ConfiguredDataElement",
    "DataElementAction",
    "ExtractedField",
    "FieldSource",
    "ManualRegion",
    "MatchReport",
    "MatchResult",
    "MatchTier",
    "PageDocument",
    "PageExtractionResult",
    "RedactionResult",
    "RedactionSelection",
    "SourceDocument",
]
