"""
Confidence value object

Represents a confidence score between 0 and 1 (inclusive).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence


@dataclass(frozen=True)
class Confidence:
    """
    Immutable confidence value between 0 and 1.

    Automatically clamps values to valid range [0, 1].
    """
    value: float

    def __post_init__(self):
        if not isinstance(self.value, (int, float)) or self.value != self.value:
            object.__setattr__(self, 'value', 0.0)
        elif self.value < 0.0:
            object.__setattr__(self, 'value', 0.0)
        elif self.value > 1.0:
            object.__setattr__(self, 'value', 1.0)
        else:
            object.__setattr__(self, 'value', float(self.value))

    @classmethod
    def from_raw(cls, raw_value: Any) -> Confidence:
        """
        Create Confidence from any value, coercing to valid range.

        OCR services commonly report percentages; anything in (1, 100] is
        treated as a percentage.

        Examples:
            >>> Confidence.from_raw("0.75")
            Confidence(value=0.75)
            >>> Confidence.from_raw(87.5)
            Confidence(value=0.875)
            >>> Confidence.from_raw("invalid")
            Confidence(value=0.0)
        """
        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            return cls(0.0)
        if 1.0 < value <= 100.0:
            value = value / 100.0
        return cls(value)

    def quantize(self, steps: Sequence[float]) -> Confidence:
        """Snap to the nearest of the given steps."""
        return Confidence(min(steps, key=lambda step: abs(step - self.value)))

    def is_high(self, threshold: float = 0.8) -> bool:
        return self.value >= threshold

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:.2f}"


def normalize_confidence(raw_value: Any, steps: Optional[Sequence[float]] = None) -> float:
    """Return a plain float in [0, 1], optionally snapped to ``steps``."""
    confidence = Confidence.from_raw(raw_value)
    if steps:
        confidence = confidence.quantize(steps)
    return confidence.value
