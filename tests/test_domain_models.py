"""Tests for domain models to verify they work correctly."""

import math

import pytest

from glyphanatomy.domain import (
    FEATURE_ALIASES,
    BBox,
    CircleShape,
    CommandType,
    DiagonalClip,
    FeatureHighlight,
    FeatureName,
    FeatureResult,
    FontInfo,
    GlyphOutline,
    HorizontalClip,
    Metrics,
    PathCommand,
    Point2D,
    PolygonClip,
    Segment,
    SegmentKind,
    VerticalClip,
)


class TestPoint2D:
    """Tests for Point2D class."""

    def test_point_to_tuple(self) -> None:
        """Test point to tuple conversion."""
        assert Point2D(100.0, 200.0).to_tuple() == (100.0, 200.0)

    def test_point_serialization(self) -> None:
        """Test point serialization and deserialization."""
        p1 = Point2D(100.0, -20.5)
        p2 = Point2D.from_dict(p1.to_dict())
        assert p2 == p1

    def test_distance(self) -> None:
        """Test Euclidean distance between points."""
        assert Point2D(0, 0).distance_to(Point2D(3, 4)) == pytest.approx(5.0)

    def test_non_finite(self) -> None:
        """Test NaN and infinite coordinates are detected."""
        assert Point2D(1, 2).is_finite()
        assert not Point2D(math.nan, 2).is_finite()
        assert not Point2D(1, math.inf).is_finite()

    def test_point_immutable(self) -> None:
        """Test that point is immutable."""
        p = Point2D(100.0, 200.0)
        with pytest.raises(AttributeError):
            p.x = 300.0  # type: ignore


class TestBBox:
    """Tests for BBox class."""

    def test_dimensions(self) -> None:
        """Test width, height and center."""
        box = BBox(100, 0, 500, 700)
        assert box.width == 400
        assert box.height == 700
        assert box.center == Point2D(300, 350)

    def test_contains_with_margin(self) -> None:
        """Test containment with and without a margin."""
        box = BBox(0, 0, 100, 100)
        assert box.contains(Point2D(100, 50))
        assert not box.contains(Point2D(105, 50))
        assert box.contains(Point2D(105, 50), margin=10)

    def test_overlaps(self) -> None:
        """Test boxes sharing an edge overlap, separate boxes do not."""
        box = BBox(0, 0, 100, 100)
        assert box.overlaps(BBox(100, 0, 200, 100))
        assert not box.overlaps(BBox(101, 0, 200, 100))

    def test_from_points(self) -> None:
        """Test building the tightest box around points."""
        box = BBox.from_points([Point2D(5, 10), Point2D(-5, 3), Point2D(2, 20)])
        assert box == BBox(-5, 3, 5, 20)

    def test_from_no_points_raises(self) -> None:
        """Test building a box from nothing raises ValueError."""
        with pytest.raises(ValueError):
            BBox.from_points([])

    def test_inverted_box_not_finite(self) -> None:
        """Test a box with max below min is rejected as non-finite."""
        assert not BBox(10, 0, 0, 10).is_finite()
        assert not BBox(0, 0, math.inf, 10).is_finite()


class TestMetrics:
    """Tests for Metrics class."""

    def test_ordered(self) -> None:
        """Test the metric ordering check."""
        assert Metrics(0, 500, 700, 750, -250).is_ordered()
        assert not Metrics(0, 800, 700, 750, -250).is_ordered()

    def test_from_camel_case(self) -> None:
        """Test reading camelCase keys used by font libraries."""
        metrics = Metrics.from_dict(
            {"baseline": 0, "xHeight": 480, "capHeight": 690, "ascent": 800, "descent": -200}
        )
        assert metrics.x_height == 480
        assert metrics.cap_height == 690

    def test_serialization(self) -> None:
        """Test metrics serialization and deserialization."""
        metrics = Metrics(0, 500, 700, 750, -250)
        assert Metrics.from_dict(metrics.to_dict()) == metrics


class TestPathCommand:
    """Tests for PathCommand class."""

    def test_factories(self) -> None:
        """Test command factories carry the expected points."""
        assert PathCommand.move(1, 2).kind == CommandType.MOVE
        assert PathCommand.quad(1, 2, 3, 4).target == Point2D(3, 4)
        assert len(PathCommand.cubic(1, 2, 3, 4, 5, 6).points) == 3
        assert PathCommand.close().target is None

    def test_well_formed(self) -> None:
        """Test point count and finiteness checks."""
        assert PathCommand.line(1, 2).is_well_formed()
        assert not PathCommand(CommandType.LINE, ()).is_well_formed()
        assert not PathCommand.line(math.nan, 2).is_well_formed()


class TestGlyphOutline:
    """Tests for GlyphOutline class."""

    def test_usable(self) -> None:
        """Test an outline with a box and drawing commands is usable."""
        outline = GlyphOutline(
            bbox=BBox(0, 0, 10, 10),
            commands=[PathCommand.move(0, 0), PathCommand.line(10, 10), PathCommand.close()],
        )
        assert outline.is_usable()
        assert outline.contour_count() == 1

    def test_empty_not_usable(self) -> None:
        """Test empty and box-less outlines are not usable."""
        assert not GlyphOutline(bbox=None).is_usable()
        assert not GlyphOutline(bbox=BBox(0, 0, 10, 10), commands=[PathCommand.move(0, 0)]).is_usable()

    def test_identity_equality(self) -> None:
        """Test outlines compare by identity."""
        a = GlyphOutline(bbox=BBox(0, 0, 1, 1))
        b = GlyphOutline(bbox=BBox(0, 0, 1, 1))
        assert a != b
        assert a == a


class TestFontInfo:
    """Tests for FontInfo class."""

    def test_defaults(self) -> None:
        """Test default font constants."""
        info = FontInfo()
        assert info.units_per_em == 1000
        assert info.transform_scale == 1.0

    def test_transform_scale(self) -> None:
        """Test the scale of the transform's first column."""
        assert FontInfo(transform=(2.0, 0.0, 0.3, 2.0)).transform_scale == pytest.approx(2.0)
        assert FontInfo(transform=(0.0, 0.0, 0.0, 1.0)).transform_scale == 1.0


class TestSegment:
    """Tests for Segment class."""

    def test_endpoints(self) -> None:
        """Test start, end and chord length."""
        seg = Segment(SegmentKind.QUAD, (Point2D(0, 0), Point2D(50, 100), Point2D(100, 0)))
        assert seg.start == Point2D(0, 0)
        assert seg.end == Point2D(100, 0)
        assert seg.is_curve
        assert seg.chord_length() == pytest.approx(100.0)
        assert seg.control_bbox() == BBox(0, 0, 100, 100)

    def test_to_dict(self) -> None:
        """Test segment serialization."""
        seg = Segment(SegmentKind.LINE, (Point2D(0, 0), Point2D(1, 0)), contour=2)
        assert seg.to_dict() == {
            "kind": "line",
            "points": [{"x": 0, "y": 0}, {"x": 1, "y": 0}],
            "contour": 2,
        }


class TestFeatureName:
    """Tests for FeatureName and aliases."""

    def test_feature_count(self) -> None:
        """Test the closed set of features."""
        assert len(FeatureName) == 29

    def test_display_name(self) -> None:
        """Test human-readable names."""
        assert FeatureName.CROSS_STROKE.display_name == "Cross stroke"
        assert FeatureName.STEM.display_name == "Stem"

    def test_aliases(self) -> None:
        """Test alternative names map onto features."""
        assert FEATURE_ALIASES["crossbar"] is FeatureName.BAR
        assert FEATURE_ALIASES["dot"] is FeatureName.TITTLE


class TestFeatureResult:
    """Tests for FeatureResult and FeatureHighlight."""

    def test_truthiness(self) -> None:
        """Test results are truthy exactly when found."""
        assert FeatureResult(found=True)
        assert not FeatureResult.not_found()

    def test_to_dict(self) -> None:
        """Test result serialization with a circle shape."""
        result = FeatureResult(
            found=True, shape=CircleShape(150, 650, 50), location=Point2D(150, 650), label="dot"
        )
        assert result.to_dict() == {
            "found": True,
            "shape": {"type": "circle", "cx": 150, "cy": 650, "r": 50},
            "location": {"x": 150, "y": 650},
            "label": "dot",
        }

    def test_empty_highlight(self) -> None:
        """Test a highlight with no segments is empty."""
        assert FeatureHighlight().is_empty()
        assert FeatureHighlight().to_dict() == {"segments": [], "closed": False}


class TestClipBoundaries:
    """Tests for clip boundary half-planes and polygons."""

    def test_horizontal(self) -> None:
        """Test horizontal clip keeps the chosen side."""
        assert HorizontalClip(100).keeps(Point2D(0, 150))
        assert not HorizontalClip(100).keeps(Point2D(0, 50))
        assert HorizontalClip(100, keep_above=False).keeps(Point2D(0, 50))

    def test_vertical(self) -> None:
        """Test vertical clip keeps the chosen side."""
        assert VerticalClip(10).keeps(Point2D(20, 0))
        assert VerticalClip(10, keep_right=False).keeps(Point2D(0, 0))

    def test_diagonal(self) -> None:
        """Test diagonal clip against y = x."""
        clip = DiagonalClip(slope=1.0, intercept=0.0)
        assert clip.keeps(Point2D(0, 10))
        assert not clip.keeps(Point2D(10, 0))

    def test_polygon(self) -> None:
        """Test polygon clip keeps interior points only."""
        clip = PolygonClip((Point2D(0, 0), Point2D(10, 0), Point2D(10, 10), Point2D(0, 10)))
        assert clip.keeps(Point2D(5, 5))
        assert not clip.keeps(Point2D(15, 5))

    def test_degenerate_polygon(self) -> None:
        """Test a polygon with fewer than three points keeps nothing."""
        assert not PolygonClip((Point2D(0, 0), Point2D(1, 1))).keeps(Point2D(0.5, 0.5))
