"""Internal Bezier curve algorithms.

This is an internal module containing helper functions for the shape
adapter and the intersection engine. Not intended for public use.

Curves are given as tuples of control points including both endpoints:
2 points for a line, 3 for a quadratic and 4 for a cubic.
"""

import math
from collections.abc import Sequence

from glyphanatomy.domain import Point2D

# Relative size below which a polynomial coefficient is treated as zero
_COEFF_EPS = 1e-12

# Flattening never subdivides deeper than this
_MAX_DEPTH = 16


def _lerp(a: Point2D, b: Point2D, t: float) -> Point2D:
    return Point2D(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def point_at(points: Sequence[Point2D], t: float) -> Point2D:
    """Evaluate a Bezier curve of any degree with De Casteljau's algorithm.

    Args:
        points: Control points including both endpoints
        t: Curve parameter in [0, 1]

    Returns:
        Point on the curve
    """
    work = list(points)
    while len(work) > 1:
        work = [_lerp(work[i], work[i + 1], t) for i in range(len(work) - 1)]
    return work[0]


def derivative_at(points: Sequence[Point2D], t: float) -> tuple[float, float]:
    """First derivative of a Bezier curve at parameter t."""
    n = len(points) - 1
    if n < 1:
        return (0.0, 0.0)
    hodograph = [
        Point2D(n * (points[i + 1].x - points[i].x), n * (points[i + 1].y - points[i].y))
        for i in range(n)
    ]
    d = point_at(hodograph, t)
    return (d.x, d.y)


def start_tangent(points: Sequence[Point2D]) -> tuple[float, float]:
    """Unit tangent at the start of a curve.

    Falls back to later control points (and finally the chord) when the
    first control points coincide. Returns (0, 0) for a point-like curve.
    """
    p0 = points[0]
    for q in points[1:]:
        dx, dy = q.x - p0.x, q.y - p0.y
        length = math.hypot(dx, dy)
        if length > 0:
            return (dx / length, dy / length)
    return (0.0, 0.0)


def split(
    points: Sequence[Point2D], t: float = 0.5
) -> tuple[list[Point2D], list[Point2D]]:
    """Split a Bezier curve at t into two curves of the same degree.

    Args:
        points: Control points including both endpoints
        t: Split parameter

    Returns:
        Tuple of (left, right) control point lists
    """
    left = [points[0]]
    right = [points[-1]]
    work = list(points)
    while len(work) > 1:
        work = [_lerp(work[i], work[i + 1], t) for i in range(len(work) - 1)]
        left.append(work[0])
        right.append(work[-1])
    right.reverse()
    return left, right


def _distance_to_chord(point: Point2D, a: Point2D, b: Point2D) -> float:
    dx = b.x - a.x
    dy = b.y - a.y
    length = math.hypot(dx, dy)
    if length == 0:
        return math.hypot(point.x - a.x, point.y - a.y)
    return abs((point.x - a.x) * dy - (point.y - a.y) * dx) / length


def is_flat(points: Sequence[Point2D], tolerance: float) -> bool:
    """Check whether every control point lies within tolerance of the chord.

    The curve lies inside the convex hull of its control points, so this
    bounds the deviation of the curve from its chord.
    """
    a, b = points[0], points[-1]
    return all(_distance_to_chord(p, a, b) <= tolerance for p in points[1:-1])


def flatten(
    points: Sequence[Point2D], tolerance: float, _depth: int = 0
) -> list[Point2D]:
    """Flatten a Bezier curve into a polyline using recursive subdivision.

    Args:
        points: Control points (2, 3 or 4)
        tolerance: Maximum distance from true curve

    Returns:
        List of points approximating the curve, endpoints included
    """
    if len(points) <= 2 or _depth >= _MAX_DEPTH or is_flat(points, tolerance):
        return [points[0], points[-1]]

    left, right = split(points, 0.5)
    return flatten(left, tolerance, _depth + 1)[:-1] + flatten(right, tolerance, _depth + 1)


def is_degenerate(points: Sequence[Point2D], tolerance: float) -> bool:
    """Check whether the control points of a curve collapse onto its endpoints.

    A degenerate curve is drawn exactly like the straight line between its
    endpoints.
    """
    if len(points) <= 2:
        return False
    a, b = points[0], points[-1]
    for p in points[1:-1]:
        if min(p.distance_to(a), p.distance_to(b)) > tolerance:
            return False
    return True


def power_coefficients(values: Sequence[float]) -> list[float]:
    """Convert 1D Bernstein coefficients to power-basis coefficients.

    Args:
        values: Bernstein coefficients (2, 3 or 4 values)

    Returns:
        Coefficients [c0, c1, ...] so that f(t) = c0 + c1*t + c2*t^2 + ...
    """
    if len(values) == 2:
        v0, v1 = values
        return [v0, v1 - v0]
    if len(values) == 3:
        v0, v1, v2 = values
        return [v0, 2 * (v1 - v0), v0 - 2 * v1 + v2]
    if len(values) == 4:
        v0, v1, v2, v3 = values
        return [
            v0,
            3 * (v1 - v0),
            3 * (v0 - 2 * v1 + v2),
            -v0 + 3 * v1 - 3 * v2 + v3,
        ]
    raise ValueError(f"Expected 2-4 Bernstein coefficients, got {len(values)}")


def solve_linear(c0: float, c1: float) -> list[float]:
    if c1 == 0:
        return []
    return [-c0 / c1]


def solve_quadratic(c0: float, c1: float, c2: float) -> list[float]:
    """Real roots of c2*t^2 + c1*t + c0 = 0."""
    scale = max(abs(c0), abs(c1), abs(c2))
    if scale == 0:
        return []
    if abs(c2) <= _COEFF_EPS * scale:
        return solve_linear(c0, c1)

    disc = c1 * c1 - 4 * c2 * c0
    if disc < 0:
        # Near-tangent: treat a tiny negative discriminant as a double root
        if disc > -_COEFF_EPS * scale * scale:
            disc = 0.0
        else:
            return []

    sqrt_disc = math.sqrt(disc)
    # Numerically stable form avoids cancellation
    q = -0.5 * (c1 + math.copysign(sqrt_disc, c1))
    roots = []
    if q != 0:
        roots.append(c0 / q)
    roots.append(q / c2)
    if len(roots) == 2 and roots[0] == roots[1]:
        roots.pop()
    return roots


def solve_cubic(c0: float, c1: float, c2: float, c3: float) -> list[float]:
    """Real roots of c3*t^3 + c2*t^2 + c1*t + c0 = 0."""
    scale = max(abs(c0), abs(c1), abs(c2), abs(c3))
    if scale == 0:
        return []
    if abs(c3) <= _COEFF_EPS * scale:
        return solve_quadratic(c0, c1, c2)

    a = c2 / c3
    b = c1 / c3
    c = c0 / c3

    # Depressed cubic t = x - a/3: x^3 + p*x + q = 0
    p = b - a * a / 3
    q = 2 * a * a * a / 27 - a * b / 3 + c
    offset = -a / 3

    disc = (q / 2) ** 2 + (p / 3) ** 3
    if disc > 0:
        sqrt_disc = math.sqrt(disc)
        u = math.copysign(abs(-q / 2 + sqrt_disc) ** (1 / 3), -q / 2 + sqrt_disc)
        v = math.copysign(abs(-q / 2 - sqrt_disc) ** (1 / 3), -q / 2 - sqrt_disc)
        roots = [u + v + offset]
    elif p == 0:
        roots = [offset]
    else:
        # Three real roots (trigonometric form)
        r = math.sqrt(-p / 3)
        arg = max(-1.0, min(1.0, (3 * q) / (2 * p) * math.sqrt(-3 / p)))
        phi = math.acos(arg) / 3
        roots = [2 * r * math.cos(phi - 2 * math.pi * k / 3) + offset for k in range(3)]

    return [_polish(root, c0, c1, c2, c3) for root in roots]


def _polish(t: float, c0: float, c1: float, c2: float, c3: float) -> float:
    """Refine a cubic root with two Newton steps."""
    for _ in range(2):
        f = ((c3 * t + c2) * t + c1) * t + c0
        df = (3 * c3 * t + 2 * c2) * t + c1
        if df == 0:
            break
        t -= f / df
    return t


def solve_polynomial(coeffs: Sequence[float]) -> list[float]:
    """Real roots of a polynomial of degree 1 to 3 in power basis."""
    if len(coeffs) == 2:
        return solve_linear(*coeffs)
    if len(coeffs) == 3:
        return solve_quadratic(*coeffs)
    if len(coeffs) == 4:
        return solve_cubic(*coeffs)
    raise ValueError(f"Unsupported polynomial degree {len(coeffs) - 1}")
