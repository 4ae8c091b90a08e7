"""Converters from fonttools glyphs to domain outlines.

Glyphs are drawn into a component-decomposing RecordingPen and the
recording is turned into PathCommands. TrueType quadratic runs with several
off-curve points and CFF super-Bezier runs are split into plain segments on
the way.
"""

from typing import Any

from fontTools.pens.basePen import decomposeQuadraticSegment, decomposeSuperBezierSegment
from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.recordingPen import DecomposingRecordingPen

from glyphanatomy.domain import BBox, GlyphOutline, PathCommand
from glyphanatomy.exceptions import OutlineConversionError

Coordinate = tuple[float, float]


def _midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def _quad_commands(args: tuple[Any, ...]) -> list[PathCommand]:
    commands = []
    for (cx, cy), (x, y) in decomposeQuadraticSegment(args):
        commands.append(PathCommand.quad(cx, cy, x, y))
    return commands


def recording_to_commands(recording: list[tuple[str, tuple[Any, ...]]]) -> list[PathCommand]:
    """Convert a RecordingPen recording to path commands.

    The RecordingPen records drawing commands like:
    - ('moveTo', ((x, y),))
    - ('lineTo', ((x, y),))
    - ('qCurveTo', ((x1, y1), ..., (xn, yn)))  # Quadratic, n-1 off-curve points
    - ('qCurveTo', ((x1, y1), ..., None))  # Closed contour of off-curve points only
    - ('curveTo', ((x1, y1), ..., (xn, yn)))  # Cubic, or super-Bezier when n > 3
    - ('closePath', ()) / ('endPath', ())

    Args:
        recording: List of drawing commands from RecordingPen

    Returns:
        Flat list of path commands, one MOVE per contour
    """
    commands: list[PathCommand] = []

    for command, args in recording:
        if command == "moveTo":
            x, y = args[0]
            commands.append(PathCommand.move(x, y))

        elif command == "lineTo":
            x, y = args[0]
            commands.append(PathCommand.line(x, y))

        elif command == "qCurveTo":
            if args[-1] is None:
                # No on-curve point: the contour starts between the last and first
                off_curve = args[:-1]
                start = _midpoint(off_curve[-1], off_curve[0])
                commands.append(PathCommand.move(*start))
                commands.extend(_quad_commands((*off_curve, start)))
            elif len(args) == 1:
                x, y = args[0]
                commands.append(PathCommand.line(x, y))
            else:
                commands.extend(_quad_commands(args))

        elif command == "curveTo":
            if len(args) == 3:
                segments = [args]
            else:
                segments = decomposeSuperBezierSegment(args)
            for (x1, y1), (x2, y2), (x3, y3) in segments:
                commands.append(PathCommand.cubic(x1, y1, x2, y2, x3, y3))

        elif command == "closePath" or command == "endPath":
            commands.append(PathCommand.close())

    return commands


def glyph_bbox(fonttools_glyph: Any, glyph_set: Any) -> BBox | None:
    """Bounding box of a glyph's outline, or None for an empty glyph."""
    pen = BoundsPen(glyph_set)
    fonttools_glyph.draw(pen)
    if pen.bounds is None:
        return None
    x_min, y_min, x_max, y_max = pen.bounds
    return BBox(x_min, y_min, x_max, y_max)


def fonttools_glyph_to_outline(name: str, fonttools_glyph: Any, glyph_set: Any) -> GlyphOutline:
    """Convert a fonttools glyph to a GlyphOutline.

    Handles both TrueType (quadratic curves) and OpenType/CFF (cubic
    curves). Winding direction is left as drawn: the inside test uses the
    even-odd rule, so CFF and TrueType conventions give the same answers.

    Args:
        name: Name of the glyph
        fonttools_glyph: The fonttools glyph object from a GlyphSet
        glyph_set: The GlyphSet (needed to resolve components)

    Returns:
        GlyphOutline with bbox None when the glyph draws nothing

    Raises:
        OutlineConversionError: If the glyph cannot be drawn, e.g. a
            component refers to a missing glyph
    """
    pen = DecomposingRecordingPen(glyph_set)
    try:
        fonttools_glyph.draw(pen)
        bbox = glyph_bbox(fonttools_glyph, glyph_set)
    except (KeyError, ValueError, TypeError, AssertionError) as e:
        raise OutlineConversionError(name, str(e)) from e

    return GlyphOutline(bbox=bbox, commands=recording_to_commands(pen.value), name=name)
