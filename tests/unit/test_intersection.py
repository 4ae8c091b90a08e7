"""Unit tests for the intersection engine."""

import math
from unittest.mock import patch

import pytest

from glyphanatomy.core.intersection import (
    ArcProbe,
    IntersectionStatus,
    LineProbe,
    PolylineProbe,
    arc_hits,
    batch_scanlines,
    horizontal_spans,
    intersect,
    precompute_scanlines,
    ray_hits,
    safe_intersect,
    vertical_runs,
)
from glyphanatomy.core.shape import ShapeHandle, shape_for
from glyphanatomy.domain import BBox, GlyphOutline, Point2D
from glyphanatomy.exceptions import IntersectionError


class TestProbes:
    """Tests for probe construction."""

    def test_line_from_angle(self) -> None:
        """Test a probe built from origin, angle and length."""
        probe = LineProbe.from_angle(Point2D(0, 0), math.pi / 2, 10)
        assert probe.end.x == pytest.approx(0.0, abs=1e-9)
        assert probe.end.y == pytest.approx(10.0)
        assert probe.length == pytest.approx(10.0)

    def test_arc_negative_sweep(self) -> None:
        """Test a negative sweep is normalized to run counter-clockwise."""
        arc = ArcProbe.from_sweep(0, 0, 10, 90, -45)
        assert arc.start == 45
        assert arc.end == 90

    def test_arc_fraction(self) -> None:
        """Test positions along a quarter arc."""
        arc = ArcProbe.from_sweep(0, 0, 10, 0, 90)
        assert arc.fraction_of(45) == pytest.approx(0.5)
        assert arc.fraction_of(180) is None

    def test_degenerate_arc_polyline(self) -> None:
        """Test a zero-radius arc cannot be tessellated."""
        with pytest.raises(IntersectionError):
            ArcProbe(0, 0, 0, 0, 90).to_polyline(0.5)


class TestIntersect:
    """Tests for intersect and safe_intersect."""

    def test_crossing_lines(self) -> None:
        """Test two crossing line probes meet once."""
        hits = intersect(
            LineProbe(Point2D(0, 0), Point2D(10, 10)),
            LineProbe(Point2D(0, 10), Point2D(10, 0)),
        )
        assert len(hits) == 1
        assert hits[0].point.x == pytest.approx(5.0)
        assert hits[0].t == pytest.approx(0.5)

    def test_probe_against_shape(self, rectangle: GlyphOutline) -> None:
        """Test a horizontal probe crosses both sides of a rectangle."""
        shape = shape_for(rectangle)
        result = safe_intersect(LineProbe(Point2D(0, 350), Point2D(300, 350)), shape)
        assert result.status == IntersectionStatus.INTERSECTION
        assert sorted(p.x for p in result.points) == pytest.approx([100.0, 200.0])
        assert not result.used_fallback

    def test_polyline_probe(self, rectangle: GlyphOutline) -> None:
        """Test a polyline probe crossing the rectangle twice."""
        probe = PolylineProbe((Point2D(0, 100), Point2D(150, 100), Point2D(150, 800)))
        result = safe_intersect(probe, shape_for(rectangle))
        assert len(result.hits) == 2

    def test_no_intersection(self, rectangle: GlyphOutline) -> None:
        """Test a probe that misses the shape."""
        result = safe_intersect(LineProbe(Point2D(0, 900), Point2D(300, 900)), shape_for(rectangle))
        assert result.status == IntersectionStatus.NO_INTERSECTION
        assert result.points == []

    def test_curve_hits(self, round_o: GlyphOutline) -> None:
        """Test a probe through a cubic ring hits all four curves."""
        result = safe_intersect(LineProbe(Point2D(0, 260), Point2D(600, 260)), shape_for(round_o))
        xs = sorted(round(p.x) for p in result.points)
        assert xs == [50, 150, 450, 550]

    def test_degenerate_operands_report_error(self) -> None:
        """Test point-like probes end in an ERROR result instead of raising."""
        p = Point2D(1, 1)
        q = Point2D(2, 2)
        result = safe_intersect(LineProbe(p, p), LineProbe(q, q))
        assert result.status == IntersectionStatus.ERROR
        assert result.points == []

    def test_falls_back_to_tessellation(self, rectangle: GlyphOutline) -> None:
        """Test a failing exact routine is replaced by the tessellated one."""
        shape = shape_for(rectangle)
        probe = LineProbe(Point2D(0, 350), Point2D(300, 350))
        with patch(
            "glyphanatomy.core.intersection.intersect",
            side_effect=IntersectionError("boom"),
        ):
            result = safe_intersect(probe, shape)

        assert result.used_fallback
        assert result.status == IntersectionStatus.INTERSECTION
        assert sorted(p.x for p in result.points) == pytest.approx([100.0, 200.0])

    def test_both_routines_fail(self, rectangle: GlyphOutline) -> None:
        """Test an ERROR result when the fallback fails too."""
        probe = LineProbe(Point2D(0, 350), Point2D(300, 350))
        with (
            patch("glyphanatomy.core.intersection.intersect", side_effect=IntersectionError("a")),
            patch(
                "glyphanatomy.core.intersection._intersect_tessellated",
                side_effect=ZeroDivisionError("b"),
            ),
        ):
            result = safe_intersect(probe, shape_for(rectangle))

        assert result.status == IntersectionStatus.ERROR
        assert result.hits == ()


class TestRaysAndArcs:
    """Tests for ray_hits and arc_hits."""

    def test_ray_hits_sorted(self, ring: GlyphOutline) -> None:
        """Test ray hits come back nearest first."""
        points = ray_hits(shape_for(ring), Point2D(0, 250), 0.0, 1000)
        assert [p.x for p in points] == pytest.approx([100.0, 200.0, 400.0, 500.0])

    def test_ray_hits_reverse(self, ring: GlyphOutline) -> None:
        """Test a leftward ray reports hits in its own order."""
        points = ray_hits(shape_for(ring), Point2D(600, 250), math.pi, 1000)
        assert [p.x for p in points] == pytest.approx([500.0, 400.0, 200.0, 100.0])

    def test_vertex_counted_once(self, outline_factory) -> None:
        """Test a ray through two diamond vertices reports each vertex once."""
        diamond = outline_factory([(100, 0), (200, 100), (100, 200), (0, 100)])
        points = ray_hits(shape_for(diamond), Point2D(-50, 100), 0.0, 500)
        assert [p.x for p in points] == pytest.approx([0.0, 200.0])

    def test_repeated_rays_agree(self, ring: GlyphOutline, outline_factory) -> None:
        """Test casting the same ray twice gives identical hit lists."""
        diamond = outline_factory([(100, 0), (200, 100), (100, 200), (0, 100)])
        cases = [(shape_for(ring), Point2D(0, 250)), (shape_for(diamond), Point2D(-50, 100))]
        for shape, origin in cases:
            first = ray_hits(shape, origin, 0.0, 1000)
            assert ray_hits(shape, origin, 0.0, 1000) == first

    def test_empty_shape(self) -> None:
        """Test an empty shape or zero-length ray has no hits."""
        assert ray_hits(ShapeHandle.empty(), Point2D(0, 0), 0.0, 100) == []

    def test_full_circle_arc(self, rectangle: GlyphOutline) -> None:
        """Test a circle around a stem edge crosses both edges twice."""
        points = arc_hits(shape_for(rectangle), 150, 350, 80, 0, 360)
        assert len(points) == 4

    def test_partial_arc(self, rectangle: GlyphOutline) -> None:
        """Test an arc sweeping only the right side crosses the right edge twice."""
        points = arc_hits(shape_for(rectangle), 150, 350, 80, -60, 120)
        assert len(points) == 2
        assert all(p.x == pytest.approx(200.0) for p in points)


class TestScanlines:
    """Tests for spans, runs and the scanline grid."""

    def test_spans_through_ring(self, ring: GlyphOutline) -> None:
        """Test the two ink intervals across a ring."""
        spans = horizontal_spans(shape_for(ring), 250, 1000)
        assert spans == [pytest.approx((100.0, 200.0)), pytest.approx((400.0, 500.0))]

    def test_runs_through_rectangle(self, rectangle: GlyphOutline) -> None:
        """Test the vertical ink interval through a stem."""
        runs = vertical_runs(shape_for(rectangle), 150, 1400)
        assert runs == [pytest.approx((0.0, 700.0))]

    def test_spans_outside(self, rectangle: GlyphOutline) -> None:
        """Test no spans above the glyph."""
        assert horizontal_spans(shape_for(rectangle), 800, 1400) == []

    def test_grid_at_band_centres(self) -> None:
        """Test scanlines never sit on the bbox edges."""
        grid = precompute_scanlines(BBox(0, 0, 400, 800), 1600, bands=4)
        assert grid.rows == (100.0, 300.0, 500.0, 700.0)
        assert grid.columns == (50.0, 150.0, 250.0, 350.0)

    def test_grid_without_bands(self) -> None:
        """Test zero bands give an empty grid."""
        grid = precompute_scanlines(BBox(0, 0, 10, 10), 20, bands=0)
        assert grid.rows == ()

    def test_batches(self) -> None:
        """Test consecutive batches with a short last batch."""
        assert batch_scanlines(range(5), 2) == [[0, 1], [2, 3], [4]]

    def test_batch_size_must_be_positive(self) -> None:
        """Test a zero batch size raises ValueError."""
        with pytest.raises(ValueError):
            batch_scanlines([1, 2], 0)
