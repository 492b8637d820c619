"""
Cubic spline fitting and evaluation for Lookup tables.

A spline is fitted per value column of a Lookup table that interpolates
with "Cubic Splines". Each segment i stores four coefficients
(constant, linear, quadratic, cubic) of the local polynomial

    S_i(x) = a + b*dx + c*dx^2 + d*dx^3,    dx = x - knots[i]

Fitting solves for the second derivative at every knot (numpy linear
solve); the boundary condition supplies the two end equations.

`cubic_splines` is the evaluator shared with the generated R and Python
runtimes. Keep its arithmetic in step with `backends/r_runtime.py` and
`backends/python_runtime.py`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union

import numpy as np


class BoundaryCondition(Enum):
    """Spline end conditions. Values are the wire strings of table definitions."""
    NATURAL = "Natural"
    CLAMPED = "Clamped"
    NOT_A_KNOT = "Not-a-knot"
    PERIODIC = "Periodic"

    @property
    def code(self) -> int:
        """Numeric code written into generated spline artifacts."""
        return _CODES[self]

    @classmethod
    def coerce(cls, value: Union["BoundaryCondition", str, int]) -> "BoundaryCondition":
        """Accept an enum member, its wire string or its numeric code."""
        if isinstance(value, cls):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            for member, code in _CODES.items():
                if code == int(value):
                    return member
            raise ValueError(f"Unknown boundary condition code: {value}")
        return cls(value)


_CODES = {
    BoundaryCondition.NATURAL: 0,
    BoundaryCondition.CLAMPED: 1,
    BoundaryCondition.NOT_A_KNOT: 2,
    BoundaryCondition.PERIODIC: 3,
}


@dataclass(frozen=True)
class Spline:
    """
    Fitted cubic spline for one table column.

    Properties:
        knots: Strictly increasing knot positions (the table index column)
        knot_heights: Column values at the knots
        coefficients: One (a, b, c, d) row per segment
        boundary_condition: End condition used for fitting and extrapolation
    """

    knots: Tuple[float, ...]
    knot_heights: Tuple[float, ...]
    coefficients: Tuple[Tuple[float, float, float, float], ...]
    boundary_condition: BoundaryCondition

    def evaluate(self, x: float) -> float:
        return cubic_splines(x, self.knots, self.knot_heights, self.coefficients,
                             self.boundary_condition)


def _second_derivatives(x: np.ndarray, y: np.ndarray, bc: BoundaryCondition) -> np.ndarray:
    n = len(x) - 1
    h = np.diff(x)
    A = np.zeros((n + 1, n + 1))
    rhs = np.zeros(n + 1)

    for i in range(1, n):
        A[i, i - 1] = h[i - 1]
        A[i, i] = 2 * (h[i - 1] + h[i])
        A[i, i + 1] = h[i]
        rhs[i] = 6 * ((y[i + 1] - y[i]) / h[i] - (y[i] - y[i - 1]) / h[i - 1])

    if bc == BoundaryCondition.NATURAL:
        A[0, 0] = 1
        A[n, n] = 1
    elif bc == BoundaryCondition.CLAMPED:
        # Zero first derivative at both ends
        A[0, 0] = 2 * h[0]
        A[0, 1] = h[0]
        rhs[0] = 6 * (y[1] - y[0]) / h[0]
        A[n, n - 1] = h[n - 1]
        A[n, n] = 2 * h[n - 1]
        rhs[n] = -6 * (y[n] - y[n - 1]) / h[n - 1]
    elif bc == BoundaryCondition.NOT_A_KNOT:
        if n == 1:
            A[0, 0] = 1
            A[1, 1] = 1
        elif n == 2:
            # Single parabola through three knots
            A[0, 0], A[0, 1] = 1, -1
            A[2, 1], A[2, 2] = 1, -1
        else:
            A[0, 0], A[0, 1], A[0, 2] = h[1], -(h[0] + h[1]), h[0]
            A[n, n - 2], A[n, n - 1], A[n, n] = h[n - 1], -(h[n - 2] + h[n - 1]), h[n - 2]
    elif bc == BoundaryCondition.PERIODIC:
        A[0, 0] = 1
        A[0, n] = -1
        A[n, 0] += 2 * h[0]
        A[n, 1] += h[0]
        A[n, n - 1] += h[n - 1]
        A[n, n] += 2 * h[n - 1]
        rhs[n] = 6 * ((y[1] - y[0]) / h[0] - (y[n] - y[n - 1]) / h[n - 1])

    return np.linalg.solve(A, rhs)


def fit_spline(knots: Sequence[float], heights: Sequence[float],
               boundary: Union[BoundaryCondition, str, int] = BoundaryCondition.NATURAL) -> Spline:
    """
    Fit a cubic spline through (knots[i], heights[i]).

    Raises:
        ValueError: fewer than two knots, mismatched lengths, or knots
            that are not strictly increasing
    """
    bc = BoundaryCondition.coerce(boundary)
    if len(knots) != len(heights):
        raise ValueError(f"{len(knots)} knots but {len(heights)} heights")
    if len(knots) < 2:
        raise ValueError("A spline needs at least two knots")

    x = np.asarray(knots, dtype=float)
    y = np.asarray(heights, dtype=float)
    h = np.diff(x)
    if np.any(h <= 0):
        raise ValueError("Spline knots must be strictly increasing")

    m = _second_derivatives(x, y, bc)

    coefficients = []
    for i in range(len(h)):
        a = y[i]
        b = (y[i + 1] - y[i]) / h[i] - h[i] * (2 * m[i] + m[i + 1]) / 6
        c = m[i] / 2
        d = (m[i + 1] - m[i]) / (6 * h[i])
        coefficients.append((float(a), float(b), float(c), float(d)))

    return Spline(
        knots=tuple(float(v) for v in x),
        knot_heights=tuple(float(v) for v in y),
        coefficients=tuple(coefficients),
        boundary_condition=bc,
    )


def cubic_splines(x: float, knots: Sequence[float], knot_heights: Sequence[float],
                  spline_coeffs: Sequence[Sequence[float]],
                  boundary_condition: Union[BoundaryCondition, str, int]) -> float:
    """
    Evaluate a fitted spline at x.

    Outside the knot range, Natural and Clamped splines extrapolate along
    the tangent at the boundary knot; Not-a-knot and Periodic splines keep
    evaluating the boundary segment's cubic.
    """
    bc = BoundaryCondition.coerce(boundary_condition)
    linear_tail = bc in (BoundaryCondition.NATURAL, BoundaryCondition.CLAMPED)
    num_knots = len(knots)

    if x < knots[0]:
        if linear_tail:
            slope = spline_coeffs[0][1]
            return slope * (x - knots[0]) + knot_heights[0]
        index = 0
    elif x > knots[num_knots - 1]:
        if linear_tail:
            a = spline_coeffs[num_knots - 2]
            h = knots[num_knots - 1] - knots[num_knots - 2]
            slope = a[1] + 2 * a[2] * h + 3 * a[3] * h * h
            return slope * (x - knots[num_knots - 1]) + knot_heights[num_knots - 1]
        index = num_knots - 2
    else:
        index = 0
        while x > knots[index + 1] and index < num_knots - 2:
            index += 1

    dx = x - knots[index]
    a = spline_coeffs[index]
    return a[0] + a[1] * dx + a[2] * dx * dx + a[3] * dx * dx * dx


__all__ = ["BoundaryCondition", "Spline", "fit_spline", "cubic_splines"]
