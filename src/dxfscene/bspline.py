"""Rational B-spline (NURBS) curve evaluation.

``evaluate`` works on control points of any fixed dimension. Without a knot
vector a clamped uniform one is generated, so the curve starts at the first
control point and ends at the last. Without weights the curve is a plain
(non-rational) B-spline.
"""

from __future__ import annotations

import bisect
from typing import Sequence

Point = tuple[float, ...]


class BSplineError(ValueError):
    pass


class ParameterOutOfBounds(BSplineError):
    pass


class InvalidDegree(BSplineError):
    pass


class InvalidKnotVector(BSplineError):
    pass


class InvalidWeights(BSplineError):
    pass


def clamped_knots(control_point_count: int, degree: int) -> list[float]:
    n = int(control_point_count)
    p = int(degree)
    if n < 2:
        return []
    p = max(1, min(p, n - 1))
    knots: list[float] = []
    for i in range(n + p + 1):
        if i <= p:
            knots.append(0.0)
        elif i >= n:
            knots.append(1.0)
        else:
            knots.append((i - p) / (n - p))
    return knots


def evaluate(
    t: float,
    degree: int,
    points: Sequence[Sequence[float]],
    knots: Sequence[float] | None = None,
    weights: Sequence[float] | None = None,
) -> Point:
    """Evaluate the curve at ``t`` in [0, 1].

    ``t`` is mapped linearly onto the knot domain ``[knots[degree], knots[n]]``.
    Raises ``InvalidDegree``, ``ParameterOutOfBounds``, ``InvalidKnotVector``
    or ``InvalidWeights`` on contract violations.
    """
    n = len(points)
    if degree < 1:
        raise InvalidDegree("degree must be at least 1 (linear)")
    if degree > n - 1:
        raise InvalidDegree("degree must be less than or equal to point count - 1")
    if not 0.0 <= t <= 1.0:
        raise ParameterOutOfBounds(f"t out of bounds: {t!r}")

    if knots is None:
        knot_vector = clamped_knots(n, degree)
    else:
        knot_vector = [float(k) for k in knots]
        if len(knot_vector) != n + degree + 1:
            raise InvalidKnotVector(
                f"bad knot vector length: expected {n + degree + 1}, got {len(knot_vector)}"
            )

    if weights is None:
        weight_values = [1.0] * n
    else:
        weight_values = [float(w) for w in weights]
        if len(weight_values) != n:
            raise InvalidWeights(f"bad weights length: expected {n}, got {len(weight_values)}")

    low = knot_vector[degree]
    high = knot_vector[n]
    u = low + t * (high - low)

    span = _find_span(u, degree, n, knot_vector)
    basis = _basis_functions(span, u, degree, knot_vector)

    dimension = len(points[0])
    acc = [0.0] * dimension
    denominator = 0.0
    for j, value in enumerate(basis):
        index = span - degree + j
        w = value * weight_values[index]
        if w == 0.0:
            continue
        point = points[index]
        for k in range(dimension):
            acc[k] += w * float(point[k])
        denominator += w

    if denominator == 0.0:
        return tuple(float(v) for v in points[span])
    return tuple(v / denominator for v in acc)


def sample(
    degree: int,
    points: Sequence[Sequence[float]],
    knots: Sequence[float] | None = None,
    weights: Sequence[float] | None = None,
    segments: int = 25,
) -> list[Point]:
    """Sample the whole curve with ``segments`` steps per distinct knot span."""
    n = len(points)
    knot_vector = clamped_knots(n, degree) if knots is None else [float(k) for k in knots]
    if len(knot_vector) != n + degree + 1 or degree < 1 or degree > n - 1:
        # Let evaluate() raise the matching error.
        evaluate(0.0, degree, points, knots, weights)

    low = knot_vector[degree]
    high = knot_vector[n]
    breaks = [low]
    for k in range(degree + 1, n + 1):
        if knot_vector[k] != breaks[-1]:
            breaks.append(knot_vector[k])
    if len(breaks) < 2 or high == low:
        return [evaluate(0.0, degree, points, knot_vector, weights)]

    steps = max(1, int(segments))
    out: list[Point] = []
    for i in range(1, len(breaks)):
        u_min = breaks[i - 1]
        u_max = breaks[i]
        first = 0 if i == 1 else 1
        for k in range(first, steps + 1):
            u = u_min + (u_max - u_min) * k / steps
            t = min(max((u - low) / (high - low), 0.0), 1.0)
            out.append(evaluate(t, degree, points, knot_vector, weights))
    return out


def _find_span(u: float, degree: int, n: int, knots: Sequence[float]) -> int:
    if u >= knots[n]:
        span = n - 1
        while span > degree and knots[span] == knots[span + 1]:
            span -= 1
        return span
    span = bisect.bisect_right(knots, u, degree, n) - 1
    return max(degree, min(span, n - 1))


def _basis_functions(span: int, u: float, degree: int, knots: Sequence[float]) -> list[float]:
    basis = [1.0] + [0.0] * degree
    left = [0.0] * (degree + 1)
    right = [0.0] * (degree + 1)
    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            denominator = right[r + 1] + left[j - r]
            temp = basis[r] / denominator if denominator != 0.0 else 0.0
            basis[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        basis[j] = saved
    return basis
