"""
BoundingBox value object

Represents a normalized rectangle locating a field on a page.
All coordinates are fractions of the page width/height in the [0, 1] range.

Extraction backends report boxes in two shapes: ``{Left, Top, Width, Height}``
and ``{x, y, width, height}``. Both are converted to this single canonical
form by :meth:`BoundingBox.from_raw` when a field is ingested.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class BoxShape(str, Enum):
    """Raw shapes a bounding box may arrive in."""
    LEFT_TOP = "left_top"  # {Left, Top, Width, Height}
    XY = "xy"  # {x, y, width, height}


_LEFT_TOP_KEYS = ("Left", "Top", "Width", "Height")
_XY_KEYS = ("x", "y", "width", "height")


def _clamp(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    return max(0.0, min(1.0, number))


@dataclass(frozen=True)
class BoundingBox:
    """
    Immutable bounding box with normalized coordinates [0, 1].

    - left, top: top-left corner (normalized)
    - width, height: dimensions (normalized)

    All values are clamped to the valid [0, 1] range on construction.
    """
    left: float
    top: float
    width: float
    height: float

    def __post_init__(self):
        for field_name in ("left", "top", "width", "height"):
            object.__setattr__(self, field_name, _clamp(getattr(self, field_name)))

    @staticmethod
    def detect_shape(data: Mapping[str, Any]) -> Optional[BoxShape]:
        """
        Identify which raw shape a mapping uses.

        Examples:
            >>> BoundingBox.detect_shape({'Left': 0.1, 'Top': 0.2, 'Width': 0.3, 'Height': 0.4})
            <BoxShape.LEFT_TOP: 'left_top'>
            >>> BoundingBox.detect_shape({'x': 0.1, 'y': 0.2}) is None
            True
        """
        if all(key in data for key in _LEFT_TOP_KEYS):
            return BoxShape.LEFT_TOP
        if all(key in data for key in _XY_KEYS):
            return BoxShape.XY
        return None

    @classmethod
    def from_raw(cls, data: Any) -> Optional[BoundingBox]:
        """
        Normalize a raw box of either shape into a BoundingBox.

        Accepts an existing BoundingBox, a ``{Left, Top, Width, Height}``
        mapping or an ``{x, y, width, height}`` mapping. Returns ``None`` for
        anything else.

        Examples:
            >>> BoundingBox.from_raw({'Left': 0.1, 'Top': 0.2, 'Width': 0.3, 'Height': 0.4})
            BoundingBox(left=0.1, top=0.2, width=0.3, height=0.4)
            >>> BoundingBox.from_raw({'x': 0.1, 'y': 0.2, 'width': 0.3, 'height': 0.4})
            BoundingBox(left=0.1, top=0.2, width=0.3, height=0.4)
        """
        if isinstance(data, BoundingBox):
            return data
        if not isinstance(data, Mapping):
            return None

        shape = cls.detect_shape(data)
        if shape is BoxShape.LEFT_TOP:
            return cls(data["Left"], data["Top"], data["Width"], data["Height"])
        if shape is BoxShape.XY:
            return cls(data["x"], data["y"], data["width"], data["height"])
        return None

    @classmethod
    def from_absolute(
        cls,
        x: float,
        y: float,
        width: float,
        height: float,
        page_width: float,
        page_height: float
    ) -> BoundingBox:
        """
        Create BoundingBox from absolute coordinates (pixels or points).

        Examples:
            >>> BoundingBox.from_absolute(100, 200, 300, 150, 1000, 800)
            BoundingBox(left=0.1, top=0.25, width=0.3, height=0.1875)
        """
        if page_width <= 0 or page_height <= 0:
            return cls(0.0, 0.0, 0.0, 0.0)

        return cls(
            left=x / page_width,
            top=y / page_height,
            width=width / page_width,
            height=height / page_height
        )

    def area(self) -> float:
        """Normalized area of the box (fraction of the page)."""
        return self.width * self.height

    def bottom_right(self) -> Tuple[float, float]:
        """
        Get bottom-right corner coordinates, kept inside the page.

        Examples:
            >>> BoundingBox(0.1, 0.2, 0.3, 0.4).bottom_right()
            (0.4, 0.6000000000000001)
        """
        return (min(1.0, self.left + self.width), min(1.0, self.top + self.height))

    def overlaps(self, other: BoundingBox) -> bool:
        """
        Check if this bounding box overlaps with another.

        Examples:
            >>> BoundingBox(0.0, 0.0, 0.5, 0.5).overlaps(BoundingBox(0.3, 0.3, 0.5, 0.5))
            True
            >>> BoundingBox(0.0, 0.0, 0.5, 0.5).overlaps(BoundingBox(0.6, 0.6, 0.3, 0.3))
            False
        """
        x2, y2 = self.bottom_right()
        ox2, oy2 = other.bottom_right()
        return not (x2 <= other.left or self.left >= ox2 or y2 <= other.top or self.top >= oy2)

    def is_valid(self) -> bool:
        """True if width and height are > 0."""
        return self.width > 0 and self.height > 0

    def to_dict(self, shape: BoxShape = BoxShape.LEFT_TOP) -> Dict[str, float]:
        """
        Serialize the box in the requested raw shape.

        Examples:
            >>> BoundingBox(0.1, 0.2, 0.3, 0.4).to_dict(BoxShape.XY)
            {'x': 0.1, 'y': 0.2, 'width': 0.3, 'height': 0.4}
        """
        if shape is BoxShape.XY:
            return {'x': self.left, 'y': self.top, 'width': self.width, 'height': self.height}
        return {'Left': self.left, 'Top': self.top, 'Width': self.width, 'Height': self.height}

    def to_rect(self, page_width: float, page_height: float) -> Tuple[float, float, float, float]:
        """
        Scale to page coordinates as ``(x0, y0, x1, y1)``.

        Examples:
            >>> BoundingBox(0.25, 0.5, 0.25, 0.25).to_rect(1000, 400)
            (250.0, 200.0, 500.0, 300.0)
        """
        x1, y1 = self.bottom_right()
        return (
            self.left * page_width,
            self.top * page_height,
            x1 * page_width,
            y1 * page_height,
        )

    def to_absolute(self, page_width: int, page_height: int) -> Tuple[int, int, int, int]:
        """
        Convert to absolute integer pixel coordinates ``(x, y, width, height)``.

        Examples:
            >>> BoundingBox(0.1, 0.2, 0.3, 0.4).to_absolute(1000, 800)
            (100, 160, 300, 320)
        """
        return (
            int(round(self.left * page_width)),
            int(round(self.top * page_height)),
            int(round(self.width * page_width)),
            int(round(self.height * page_height))
        )

    def __str__(self) -> str:
        return f"BBox(l={self.left:.2f}, t={self.top:.2f}, w={self.width:.2f}, h={self.height:.2f})"
