"""
Domain services for logic that operates across entities.

- FieldMatcher: tiered matching of extracted fields to configured elements
- PatternDetector: regex detection of PII shapes over extracted text
"""
from .field_matcher import FIELD_MAPPING_TABLE, FieldMatcher, combine_reports
from .pattern_detector import DEFAULT_PATTERNS, PatternDetector, TextPattern

__all__ = [
    "DEFAULT_PATTERNS",
    "FIELD_MAPPING_TABLE",
    "FieldMatcher",
    "PatternDetector",
    "TextPattern",
    "combine_reports",
]
