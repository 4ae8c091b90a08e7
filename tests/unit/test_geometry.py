"""Unit tests for polygon and line-segment geometry."""

import pytest

from glyphanatomy.core.geometry import point_in_polygon, segment_parameters, signed_area
from glyphanatomy.domain import Point2D

SQUARE = [Point2D(0, 0), Point2D(100, 0), Point2D(100, 100), Point2D(0, 100)]


class TestSignedArea:
    """Tests for signed_area function."""

    def test_counterclockwise_positive(self) -> None:
        """Test CCW polygons have positive area."""
        assert signed_area(SQUARE) == pytest.approx(10000.0)

    def test_clockwise_negative(self) -> None:
        """Test CW polygons have negative area."""
        assert signed_area(list(reversed(SQUARE))) == pytest.approx(-10000.0)

    def test_degenerate(self) -> None:
        """Test fewer than three points have zero area."""
        assert signed_area(SQUARE[:2]) == 0.0


class TestPointInPolygon:
    """Tests for point_in_polygon function."""

    def test_inside(self) -> None:
        """Test a point in the middle of the square."""
        assert point_in_polygon(Point2D(50, 50), SQUARE)

    def test_outside(self) -> None:
        """Test a point beyond the square."""
        assert not point_in_polygon(Point2D(150, 50), SQUARE)

    def test_degenerate_polygon(self) -> None:
        """Test a two-point polygon contains nothing."""
        assert not point_in_polygon(Point2D(0, 0), SQUARE[:2])


class TestSegmentParameters:
    """Tests for segment_parameters function."""

    def test_crossing_diagonals(self) -> None:
        """Test the diagonals of a square cross halfway along both."""
        t, u = segment_parameters(Point2D(0, 0), Point2D(100, 100), Point2D(0, 100), Point2D(100, 0))
        assert t == pytest.approx(0.5)
        assert u == pytest.approx(0.5)

    def test_crossing_outside_segments(self) -> None:
        """Test parameters outside [0, 1] when the lines cross beyond the segments."""
        t, u = segment_parameters(Point2D(0, 0), Point2D(1, 0), Point2D(5, -1), Point2D(5, 1))
        assert t == pytest.approx(5.0)
        assert u == pytest.approx(0.5)

    def test_parallel_lines(self) -> None:
        """Test parallel lines have no crossing."""
        assert segment_parameters(Point2D(0, 0), Point2D(10, 0), Point2D(0, 5), Point2D(10, 5)) is None
