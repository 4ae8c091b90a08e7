"""Basic geometric value types.

This module defines the small immutable values shared by every layer:
- Point2D: A point in font units (Y-up)
- BBox: An axis-aligned bounding box
- Metrics: Vertical font metrics a glyph is measured against
"""

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Point2D:
    """A point in 2D font space.

    Attributes:
        x: X coordinate in font units
        y: Y coordinate in font units (Y grows upward)
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point2D":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point2D instance
        """
        return cls(x=float(data["x"]), y=float(data["y"]))

    def distance_to(self, other: "Point2D") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        """Check that both coordinates are finite numbers."""
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True, slots=True)
class BBox:
    """Axis-aligned bounding box in font units.

    Attributes:
        min_x: Left edge
        min_y: Bottom edge
        max_x: Right edge
        max_y: Top edge
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point2D:
        return Point2D((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def contains(self, point: Point2D, margin: float = 0.0) -> bool:
        """Check whether a point lies within the box (expanded by margin)."""
        return (
            self.min_x - margin <= point.x <= self.max_x + margin
            and self.min_y - margin <= point.y <= self.max_y + margin
        )

    def overlaps(self, other: "BBox") -> bool:
        """Check whether two boxes share any area or edge."""
        return not (
            other.min_x > self.max_x
            or other.max_x < self.min_x
            or other.min_y > self.max_y
            or other.max_y < self.min_y
        )

    def is_finite(self) -> bool:
        """Check that all edges are finite and ordered."""
        values = (self.min_x, self.min_y, self.max_x, self.max_y)
        if not all(math.isfinite(v) for v in values):
            return False
        return self.max_x >= self.min_x and self.max_y >= self.min_y

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
        }

    @classmethod
    def from_points(cls, points: "list[Point2D] | tuple[Point2D, ...]") -> "BBox":
        """Build the tightest box around a non-empty list of points.

        Raises:
            ValueError: If points is empty
        """
        if not points:
            raise ValueError("Cannot build a bounding box from no points")
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True, slots=True)
class Metrics:
    """Vertical font metrics in font units.

    Detectors assume the ordering
    ``descent < baseline < x_height <= cap_height <= ascent``; callers
    supply metrics that satisfy it.

    Attributes:
        baseline: Baseline Y (usually 0)
        x_height: Height of lowercase letters such as 'x'
        cap_height: Height of flat capitals such as 'H'
        ascent: Top of ascenders
        descent: Bottom of descenders (negative for most fonts)
    """

    baseline: float
    x_height: float
    cap_height: float
    ascent: float
    descent: float

    def is_ordered(self) -> bool:
        """Check the metric ordering invariant."""
        return (
            self.descent < self.baseline < self.x_height
            and self.x_height <= self.cap_height <= self.ascent
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "baseline": self.baseline,
            "x_height": self.x_height,
            "cap_height": self.cap_height,
            "ascent": self.ascent,
            "descent": self.descent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Metrics":
        """Deserialize from dictionary.

        Accepts both snake_case keys and the camelCase names used by
        font-parsing libraries (``xHeight``, ``capHeight``).
        """
        return cls(
            baseline=float(data.get("baseline", 0.0)),
            x_height=float(data.get("x_height", data.get("xHeight", 0.0))),
            cap_height=float(data.get("cap_height", data.get("capHeight", 0.0))),
            ascent=float(data["ascent"]),
            descent=float(data["descent"]),
        )
