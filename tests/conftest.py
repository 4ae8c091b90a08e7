"""Shared fixtures: synthetic glyph outlines, metrics and a tiny test font."""

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from glyphanatomy.domain import BBox, FontInfo, GlyphOutline, Metrics, PathCommand, Point2D

Contour = Sequence[tuple[float, float]]

# Cubic control distance for a quarter circle of radius 1
KAPPA = 0.5522847498


def polygon_outline(*contours: Contour, name: str | None = None) -> GlyphOutline:
    """Outline made of closed straight-edged contours."""
    commands = []
    points = []
    for contour in contours:
        (x, y), *rest = contour
        commands.append(PathCommand.move(x, y))
        commands.extend(PathCommand.line(px, py) for px, py in rest)
        commands.append(PathCommand.close())
        points.extend(Point2D(px, py) for px, py in contour)
    return GlyphOutline(bbox=BBox.from_points(points), commands=commands, name=name)


def circle_commands(cx: float, cy: float, r: float) -> list[PathCommand]:
    """Four cubic arcs approximating a circle, counter-clockwise."""
    k = KAPPA * r
    return [
        PathCommand.move(cx + r, cy),
        PathCommand.cubic(cx + r, cy + k, cx + k, cy + r, cx, cy + r),
        PathCommand.cubic(cx - k, cy + r, cx - r, cy + k, cx - r, cy),
        PathCommand.cubic(cx - r, cy - k, cx - k, cy - r, cx, cy - r),
        PathCommand.cubic(cx + k, cy - r, cx + r, cy - k, cx + r, cy),
        PathCommand.close(),
    ]


RECTANGLE = [(100, 0), (200, 0), (200, 700), (100, 700)]
RING_OUTER = [(100, 0), (500, 0), (500, 500), (100, 500)]
RING_INNER = [(200, 100), (200, 400), (400, 400), (400, 100)]
LAMBDA = [(0, 0), (100, 0), (250, 550), (400, 0), (500, 0), (270, 700), (230, 700)]
V_SHAPE = [(0, 700), (100, 700), (250, 150), (400, 700), (500, 700), (280, 0), (220, 0)]
H_SHAPE = [
    (0, 0), (100, 0), (100, 300), (400, 300), (400, 0), (500, 0),
    (500, 700), (400, 700), (400, 400), (100, 400), (100, 700), (0, 700),
]
SLAB_STEM = [
    (100, 0), (400, 0), (400, 60), (300, 60), (300, 700), (200, 700), (200, 60), (100, 60),
]
C_SHAPE = [(0, 0), (400, 0), (400, 100), (100, 100), (100, 400), (400, 400), (400, 500), (0, 500)]
TAPERED_C = [
    (0, 0), (400, 0), (400, 100), (100, 100), (100, 300), (400, 470), (400, 500), (0, 500),
]
EAR_BOX = [(100, 0), (400, 0), (400, 620), (100, 620)]
I_STEM = [(100, 0), (200, 0), (200, 500), (100, 500)]


@pytest.fixture
def metrics() -> Metrics:
    """Metrics of a 1000 UPM Latin font."""
    return Metrics(baseline=0, x_height=500, cap_height=700, ascent=750, descent=-250)


@pytest.fixture
def font_info() -> FontInfo:
    return FontInfo(units_per_em=1000)


@pytest.fixture
def outline_factory() -> Callable[..., GlyphOutline]:
    return polygon_outline


@pytest.fixture
def rectangle() -> GlyphOutline:
    """Filled stem from baseline to cap height, 100 units wide."""
    return polygon_outline(RECTANGLE, name="I")


@pytest.fixture
def ring() -> GlyphOutline:
    """Square with an inset square hole, baseline to x-height."""
    return polygon_outline(RING_OUTER, RING_INNER, name="o")


@pytest.fixture
def lambda_glyph() -> GlyphOutline:
    return polygon_outline(LAMBDA, name="Lambda")


@pytest.fixture
def v_glyph() -> GlyphOutline:
    return polygon_outline(V_SHAPE, name="V")


@pytest.fixture
def h_glyph() -> GlyphOutline:
    return polygon_outline(H_SHAPE, name="H")


@pytest.fixture
def slab_glyph() -> GlyphOutline:
    """Stem standing on a wide slab foot."""
    return polygon_outline(SLAB_STEM, name="slab")


@pytest.fixture
def c_glyph() -> GlyphOutline:
    return polygon_outline(C_SHAPE, name="c")


@pytest.fixture
def tapered_c() -> GlyphOutline:
    """C whose upper arm thins towards its end."""
    return polygon_outline(TAPERED_C, name="c.tapered")


@pytest.fixture
def ear_box() -> GlyphOutline:
    return polygon_outline(EAR_BOX, name="box")


@pytest.fixture
def dotted_i() -> GlyphOutline:
    """Stem to the x-height with a round dot (radius 50) above it."""
    commands = [
        PathCommand.move(100, 0),
        PathCommand.line(200, 0),
        PathCommand.line(200, 500),
        PathCommand.line(100, 500),
        PathCommand.close(),
        *circle_commands(150, 650, 50),
    ]
    return GlyphOutline(bbox=BBox(100, 0, 200, 700), commands=commands, name="i")


@pytest.fixture
def small_dotted_i() -> GlyphOutline:
    """Wide body with a dot (radius 40) well under a quarter of the width."""
    commands = [
        PathCommand.move(100, 0),
        PathCommand.line(500, 0),
        PathCommand.line(500, 500),
        PathCommand.line(100, 500),
        PathCommand.close(),
        *circle_commands(300, 620, 40),
    ]
    return GlyphOutline(bbox=BBox(100, 0, 500, 660), commands=commands, name="i.wide")


@pytest.fixture
def ball_c() -> GlyphOutline:
    """C whose upper arm ends in a round ball (radius 60) at the right edge."""
    arm = [(0, 0), (400, 0), (400, 80), (100, 80), (100, 520), (270, 520), (270, 600), (0, 600)]
    (x, y), *rest = arm
    commands = [
        PathCommand.move(x, y),
        *(PathCommand.line(px, py) for px, py in rest),
        PathCommand.close(),
        *circle_commands(340, 530, 60),
    ]
    return GlyphOutline(bbox=BBox(0, 0, 400, 600), commands=commands, name="c.ball")


@pytest.fixture
def round_o() -> GlyphOutline:
    """Circular ring drawn with cubic curves."""
    commands = circle_commands(300, 250, 250) + circle_commands(300, 250, 150)
    return GlyphOutline(bbox=BBox(50, 0, 550, 500), commands=commands, name="O")


def _draw(pen: TTGlyphPen, *contours: Contour) -> None:
    for contour in contours:
        (x, y), *rest = contour
        pen.moveTo((x, y))
        for point in rest:
            pen.lineTo(point)
        pen.closePath()


def build_test_font(path: Path, with_heights: bool = True) -> Path:
    """Write a TrueType font with I, H and o glyphs plus a composite of I."""
    glyph_order = [".notdef", "I", "H", "o", "Icomposite"]
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)

    glyphs = {".notdef": TTGlyphPen(None).glyph()}
    for name, contours in (("I", [RECTANGLE]), ("H", [H_SHAPE]), ("o", [RING_OUTER, RING_INNER])):
        pen = TTGlyphPen(None)
        _draw(pen, *contours)
        glyphs[name] = pen.glyph()

    pen = TTGlyphPen(glyphs)
    pen.addComponent("I", (1, 0, 0, 1, 200, 0))
    glyphs["Icomposite"] = pen.glyph()

    fb.setupGlyf(glyphs)
    fb.setupHorizontalMetrics({name: (600, 0) for name in glyph_order})
    fb.setupCharacterMap({ord("I"): "I", ord("H"): "H", ord("o"): "o"})
    fb.setupHorizontalHeader(ascent=800, descent=-200)

    heights = {"sxHeight": 500, "sCapHeight": 700} if with_heights else {"sxHeight": 0, "sCapHeight": 0}
    fb.setupOS2(
        sTypoAscender=800,
        sTypoDescender=-200,
        usWinAscent=800,
        usWinDescent=200,
        **heights,
    )
    fb.setupNameTable({"familyName": "Anatomy Test", "styleName": "Regular"})
    fb.setupPost()
    fb.save(str(path))
    return path


@pytest.fixture
def test_font(tmp_path: Path) -> Path:
    return build_test_font(tmp_path / "AnatomyTest-Regular.ttf")


@pytest.fixture
def font_builder() -> Callable[..., Path]:
    return build_test_font
