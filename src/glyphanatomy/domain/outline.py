"""Glyph outline representation.

This module defines the read-only input handed to the detection core:
- CommandType: Enum of path command kinds
- PathCommand: A single move/line/curve/close command
- GlyphOutline: A glyph's bounding box plus its ordered path commands
- FontInfo: Font-level constants (units per em, transform, italic angle)

GlyphOutline deliberately uses identity equality. Derived data is cached per
outline object through weak references, so two structurally identical
outlines get independent cache entries.
"""

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from glyphanatomy.domain.geometry import BBox, Point2D


class CommandType(Enum):
    """Kind of path command.

    Points carried by each kind:
    - MOVE: [target]
    - LINE: [target]
    - QUAD: [control, target]
    - CUBIC: [control1, control2, target]
    - CLOSE: []
    """

    MOVE = auto()
    LINE = auto()
    QUAD = auto()
    CUBIC = auto()
    CLOSE = auto()


_EXPECTED_POINTS = {
    CommandType.MOVE: 1,
    CommandType.LINE: 1,
    CommandType.QUAD: 2,
    CommandType.CUBIC: 3,
    CommandType.CLOSE: 0,
}


@dataclass(frozen=True, slots=True)
class PathCommand:
    """A single drawing command.

    Attributes:
        kind: Command type
        points: Control/target points, target last
    """

    kind: CommandType
    points: tuple[Point2D, ...] = ()

    @property
    def target(self) -> Point2D | None:
        """The on-curve end point of the command (None for CLOSE)."""
        return self.points[-1] if self.points else None

    def is_well_formed(self) -> bool:
        """Check the point count and that every coordinate is finite."""
        if len(self.points) != _EXPECTED_POINTS[self.kind]:
            return False
        return all(p.is_finite() for p in self.points)

    @classmethod
    def move(cls, x: float, y: float) -> "PathCommand":
        return cls(CommandType.MOVE, (Point2D(x, y),))

    @classmethod
    def line(cls, x: float, y: float) -> "PathCommand":
        return cls(CommandType.LINE, (Point2D(x, y),))

    @classmethod
    def quad(cls, cx: float, cy: float, x: float, y: float) -> "PathCommand":
        return cls(CommandType.QUAD, (Point2D(cx, cy), Point2D(x, y)))

    @classmethod
    def cubic(
        cls, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float
    ) -> "PathCommand":
        return cls(
            CommandType.CUBIC, (Point2D(c1x, c1y), Point2D(c2x, c2y), Point2D(x, y))
        )

    @classmethod
    def close(cls) -> "PathCommand":
        return cls(CommandType.CLOSE, ())


@dataclass(eq=False)
class GlyphOutline:
    """A glyph outline as supplied by a font-parsing library.

    Attributes:
        bbox: Bounding box of the outline (None when the glyph is empty)
        commands: Ordered path commands
        name: Optional glyph name, used only for logging
    """

    bbox: BBox | None
    commands: list[PathCommand] = field(default_factory=list)
    name: str | None = None

    def is_usable(self) -> bool:
        """Check whether the outline can be examined at all.

        Returns:
            True when a finite bounding box and at least one drawing
            command are present
        """
        if self.bbox is None or not self.bbox.is_finite():
            return False
        return any(
            cmd.kind in (CommandType.LINE, CommandType.QUAD, CommandType.CUBIC)
            for cmd in self.commands
        )

    def contour_count(self) -> int:
        """Number of MOVE commands (one per contour)."""
        return sum(1 for cmd in self.commands if cmd.kind == CommandType.MOVE)

    def __repr__(self) -> str:
        return (
            f"GlyphOutline(name={self.name!r}, bbox={self.bbox!r}, "
            f"commands={len(self.commands)})"
        )


@dataclass(frozen=True, slots=True)
class FontInfo:
    """Font-level constants used to scale thresholds.

    Attributes:
        units_per_em: Font design units per em
        transform: Optional linear transform (a, b, c, d) applied to the
            outline, e.g. for oblique rendering
        italic_angle: Italic angle in degrees (negative leans right, as in
            the OpenType post table)
    """

    units_per_em: int = 1000
    transform: tuple[float, float, float, float] | None = None
    italic_angle: float = 0.0

    @property
    def transform_scale(self) -> float:
        """Scale factor of the transform's first column (1.0 without one)."""
        if self.transform is None:
            return 1.0
        a, b = self.transform[0], self.transform[1]
        scale = math.hypot(a, b)
        return scale if scale > 0 else 1.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "units_per_em": self.units_per_em,
            "transform": list(self.transform) if self.transform else None,
            "italic_angle": self.italic_angle,
        }
