"""
PatternDetector domain service.

Regex-based supplementary detector run over extracted plain text. Finds PII
shapes the extraction backend missed (passport numbers, MRZ lines, dates,
contact details, document and account numbers).

Pattern matches have no real geometry. Each gets a synthesized box in the
top-right corner of its page, stacked downwards per pattern type so boxes of
the same type never fully overlap.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Sequence, Set, Tuple

from docredact.domain.entities.extracted_field import ExtractedField, FieldSource
from docredact.domain.value_objects.bounding_box import BoundingBox

logger = logging.getLogger(__name__)

_DATE = r"(\d{1,2}\s*(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s*\d{4}|\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4})"


@dataclass(frozen=True)
class TextPattern:
    """A named regex with the fixed confidence of its matches.

    When the regex has a capture group, group 1 is the matched value.
    """
    type: str
    regex: Pattern[str]
    confidence: float
    category: str = "PII"

    @property
    def slug(self) -> str:
        return re.sub(r"[^a-z0-9]+", "-", self.type.lower()).strip("-")


DEFAULT_PATTERNS: Tuple[TextPattern, ...] = (
    TextPattern(
        "Passport Number",
        re.compile(r"\b[A-Z][0-9]{7,8}\b"),
        0.9,
    ),
    TextPattern(
        "MRZ Code",
        re.compile(r"P<[A-Z]{3}[A-Z0-9<]{39,}"),
        0.95,
    ),
    TextPattern(
        "MRZ Code Line 2",
        re.compile(r"^(?!P<)[A-Z0-9<]{44}$", re.MULTILINE),
        0.95,
    ),
    TextPattern(
        "Date of Birth",
        re.compile(r"(?:date\s+of\s+birth|birth\s+date|dob)[.:]\s*" + _DATE, re.IGNORECASE),
        0.85,
    ),
    TextPattern(
        "Expiration Date",
        re.compile(
            r"(?:date\s+of\s+expiry|expiry\s+date|expiration(?:\s+date)?|valid\s+until)[.:]\s*" + _DATE,
            re.IGNORECASE,
        ),
        0.85,
        "General",
    ),
    TextPattern(
        "Email",
        re.compile(r"\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b"),
        0.95,
    ),
    TextPattern(
        "Phone Number",
        re.compile(r"(?i:phone|tel|telephone)[.:]\s*(\+?\d[\d \-()]{6,}\d)"),
        0.85,
    ),
    TextPattern(
        "Address",
        re.compile(r"(?i:address|addr)[.:][ \t]*([A-Z0-9][A-Za-z0-9 \t,.'#-]{5,})"),
        0.75,
    ),
    TextPattern(
        "Document Number",
        re.compile(r"(?i:document\s+(?:no|number)|doc\s+no)[.:]?\s*([A-Z0-9]{5,})"),
        0.85,
    ),
    TextPattern(
        "Account Number",
        re.compile(r"(?i:account\s+(?:no|number)|acct)[.:\s]*([0-9]{6,})"),
        0.85,
    ),
)


class PatternDetector:
    """Detect pattern-shaped values in text and merge them with backend fields."""

    BOX_LEFT = 0.7
    BOX_TOP = 0.1
    BOX_STEP = 0.05
    BOX_WIDTH = 0.25
    BOX_HEIGHT = 0.04

    def __init__(self, patterns: Optional[Sequence[TextPattern]] = None):
        self._patterns: Tuple[TextPattern, ...] = tuple(patterns if patterns is not None else DEFAULT_PATTERNS)

    @property
    def patterns(self) -> Tuple[TextPattern, ...]:
        return self._patterns

    def detect(self, text: str, page_index: int = 0) -> List[ExtractedField]:
        """
        Run every pattern over ``text`` in order.

        Field ids are derived from pattern type, page and match index, so the
        same text always yields the same fields.
        """
        if not text:
            return []

        detected: List[ExtractedField] = []
        for pattern in self._patterns:
            seen: Set[str] = set()
            index = 0
            for match in pattern.regex.finditer(text):
                value = (match.group(1) if pattern.regex.groups else match.group(0)) or ""
                value = value.strip()
                if not value or value in seen:
                    continue
                seen.add(value)
                detected.append(ExtractedField(
                    id=f"pattern-{pattern.slug}-{page_index}-{index}",
                    label=pattern.type,
                    value=value,
                    confidence=pattern.confidence,
                    page_index=page_index,
                    bounding_box=self.synthesize_box(index),
                    source=FieldSource.PATTERN,
                    field_type=pattern.type,
                    category=pattern.category,
                ))
                index += 1

        if detected:
            logger.debug("Pattern detection found %d fields on page %d", len(detected), page_index + 1)
        return detected

    def synthesize_box(self, index: int) -> BoundingBox:
        """
        Stacked box for the ``index``-th match of a pattern type.

        Boxes fill a column downwards from the top-right corner, then wrap
        into the next column to the left. Once every column is full the
        grid repeats shifted down by a growing fraction of one step, so
        no two indices share a box.
        """
        rows = int((1.0 - self.BOX_TOP - self.BOX_HEIGHT) // self.BOX_STEP)
        columns = int(self.BOX_LEFT // self.BOX_WIDTH) + 1
        layer, slot = divmod(index, rows * columns)
        column, row = divmod(slot, rows)
        shift = self.BOX_STEP * layer / (layer + 1)
        top = self.BOX_TOP + row * self.BOX_STEP + shift
        left = self.BOX_LEFT - column * self.BOX_WIDTH
        return BoundingBox(left, top, self.BOX_WIDTH, self.BOX_HEIGHT)

    def merge(
        self,
        backend_fields: Iterable[ExtractedField],
        pattern_fields: Iterable[ExtractedField],
    ) -> List[ExtractedField]:
        """
        Append pattern fields to backend fields.

        Pattern fields are de-duplicated on ``(value, pattern type)`` and
        dropped when a backend field already carries the same value. Backend
        fields are returned untouched and first.
        """
        merged = list(backend_fields)
        backend_values = {_value_key(f.value) for f in merged if f.value}
        seen: Set[Tuple[str, str]] = set()

        for candidate in pattern_fields:
            value_key = _value_key(candidate.value)
            key = (value_key, candidate.field_type)
            if key in seen or value_key in backend_values:
                continue
            seen.add(key)
            merged.append(candidate)
        return merged


def _value_key(value: str) -> str:
    return " ".join(str(value or "").split()).casefold()
