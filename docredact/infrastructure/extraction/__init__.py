"""Extraction tiers and the fallback chain that runs them.

Remote tiers live in ``vision_strategy`` and ``fallback_endpoint`` and are
wired up by the API dependencies.
"""

from .base import ExtractionMode, ExtractionOutcome, ExtractionStrategy, TierPolicy
from .chain import ExtractionChain
from .direct_parse import DirectParseStrategy
from .failure_classifier import classify_errors, classify_failure
from .layout_parse import LayoutParseStrategy

__all__ = [
    "DirectParseStrategy",
    "ExtractionChain",
    "ExtractionMode",
    "ExtractionOutcome",
    "ExtractionStrategy",
    "LayoutParseStrategy",
    "TierPolicy",
    "classify_errors",
    "classify_failure",
]
