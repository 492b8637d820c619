"""
Tests for cubic spline fitting and evaluation.
"""

import pytest

from dmel.splines import BoundaryCondition, cubic_splines, fit_spline


KNOTS = [0.0, 1.0, 3.0, 4.0]
HEIGHTS = [1.0, 3.0, 2.0, 5.0]


class TestBoundaryCondition:
    """Codes and coercion."""

    def test_codes(self):
        assert BoundaryCondition.NATURAL.code == 0
        assert BoundaryCondition.CLAMPED.code == 1
        assert BoundaryCondition.NOT_A_KNOT.code == 2
        assert BoundaryCondition.PERIODIC.code == 3

    def test_coerce(self):
        assert BoundaryCondition.coerce(2) == BoundaryCondition.NOT_A_KNOT
        assert BoundaryCondition.coerce("Clamped") == BoundaryCondition.CLAMPED
        assert BoundaryCondition.coerce(BoundaryCondition.PERIODIC) == BoundaryCondition.PERIODIC

    def test_coerce_unknown(self):
        with pytest.raises(ValueError):
            BoundaryCondition.coerce(7)
        with pytest.raises(ValueError):
            BoundaryCondition.coerce("Free")


class TestFitSpline:
    """Fitting."""

    @pytest.mark.parametrize("bc", list(BoundaryCondition))
    def test_passes_through_knots(self, bc):
        spline = fit_spline(KNOTS, HEIGHTS, bc)
        for x, y in zip(KNOTS, HEIGHTS):
            assert spline.evaluate(x) == pytest.approx(y)

    @pytest.mark.parametrize("bc", list(BoundaryCondition))
    def test_one_coefficient_row_per_segment(self, bc):
        spline = fit_spline(KNOTS, HEIGHTS, bc)
        assert len(spline.coefficients) == len(KNOTS) - 1
        assert all(len(row) == 4 for row in spline.coefficients)
        assert spline.boundary_condition == bc

    def test_natural_has_zero_end_curvature(self):
        spline = fit_spline(KNOTS, HEIGHTS, "Natural")
        assert spline.coefficients[0][2] == pytest.approx(0.0)
        a = spline.coefficients[-1]
        h = KNOTS[-1] - KNOTS[-2]
        assert 2 * a[2] + 6 * a[3] * h == pytest.approx(0.0)

    def test_clamped_has_zero_end_slopes(self):
        spline = fit_spline(KNOTS, HEIGHTS, "Clamped")
        assert spline.coefficients[0][1] == pytest.approx(0.0)
        a = spline.coefficients[-1]
        h = KNOTS[-1] - KNOTS[-2]
        assert a[1] + 2 * a[2] * h + 3 * a[3] * h * h == pytest.approx(0.0)

    def test_not_a_knot_reproduces_cubic(self):
        xs = [0.0, 1.0, 2.0, 3.0]
        spline = fit_spline(xs, [x ** 3 for x in xs], "Not-a-knot")
        assert spline.evaluate(1.5) == pytest.approx(3.375)
        assert spline.evaluate(2.5) == pytest.approx(15.625)

    def test_natural_reproduces_line(self):
        spline = fit_spline([0, 1, 2], [0, 1, 2], "Natural")
        assert spline.evaluate(1.5) == pytest.approx(1.5)

    def test_two_knots(self):
        spline = fit_spline([0, 2], [0, 4])
        assert spline.evaluate(1) == pytest.approx(2.0)

    def test_too_few_knots(self):
        with pytest.raises(ValueError):
            fit_spline([0], [1])

    def test_knots_must_increase(self):
        with pytest.raises(ValueError):
            fit_spline([0, 2, 1], [1, 2, 3])

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError):
            fit_spline([0, 1, 2], [1, 2])


class TestExtrapolation:
    """Outside the knot range."""

    def test_natural_extrapolates_linearly(self):
        spline = fit_spline([0, 1, 2], [0, 1, 2], "Natural")
        assert spline.evaluate(-1) == pytest.approx(-1.0)
        assert spline.evaluate(3) == pytest.approx(3.0)

    def test_clamped_extrapolates_flat(self):
        spline = fit_spline(KNOTS, HEIGHTS, "Clamped")
        assert spline.evaluate(-5) == pytest.approx(HEIGHTS[0])
        assert spline.evaluate(10) == pytest.approx(HEIGHTS[-1])

    def test_not_a_knot_extends_boundary_cubics(self):
        xs = [0.0, 1.0, 2.0, 3.0]
        spline = fit_spline(xs, [x ** 3 for x in xs], "Not-a-knot")
        assert spline.evaluate(-1) == pytest.approx(-1.0)
        assert spline.evaluate(4) == pytest.approx(64.0)

    def test_function_form_matches_method(self):
        spline = fit_spline(KNOTS, HEIGHTS, "Periodic")
        for x in (-1.0, 0.5, 2.0, 3.5, 6.0):
            assert cubic_splines(x, spline.knots, spline.knot_heights, spline.coefficients,
                                 BoundaryCondition.PERIODIC.code) == spline.evaluate(x)
