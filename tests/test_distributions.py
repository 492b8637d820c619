"""
Tests for the native Poisson distribution.
"""

import math

import pytest

from dmel.distributions import Poisson
from dmel.errors import InvalidDistributionParameter
from dmel.numeric import Numeric


def n(*values):
    return [Numeric.real(v) for v in values]


class TestPoisson:
    def test_pmf(self):
        assert Poisson.pmf(n(2, 3)).value == pytest.approx(0.22404180765538775)

    def test_cdf(self):
        assert Poisson.cdf(n(0, 2)).value == pytest.approx(0.1353352832366127)
        assert Poisson.cdf(n(50, 2)).value == pytest.approx(1.0)

    def test_below_support(self):
        assert Poisson.pmf([Numeric.integer(-1), Numeric.real(2.0)]) == Numeric.real(0.0)
        assert Poisson.cdf(n(-1, 2)).value == 0.0

    def test_quantile(self):
        assert Poisson.quantile(n(0.5, 1)) == Numeric.integer(1)
        assert Poisson.quantile(n(0, 1)) == Numeric.integer(0)

    def test_quantile_of_one_is_infinite(self):
        result = Poisson.quantile(n(1, 4))
        assert result.is_real()
        assert math.isinf(result.value)

    def test_moments(self):
        assert Poisson.mean(n(2.5)).value == 2.5
        assert Poisson.variance(n(2.5)).value == 2.5

    def test_sample(self):
        assert Poisson.sample(n(1), 0.0) == Numeric.integer(0)
        assert Poisson.sample(n(1), 0.5) == Numeric.integer(1)


class TestPoissonErrors:
    def test_non_positive_rate(self):
        with pytest.raises(InvalidDistributionParameter) as exc:
            Poisson.mean(n(0))
        assert exc.value.symbol == "Pois"

    def test_sample_arity(self):
        with pytest.raises(InvalidDistributionParameter):
            Poisson.sample(n(1, 2), 0.5)

    def test_non_integer_k(self):
        with pytest.raises(TypeError):
            Poisson.pmf(n(1.5, 2))

    def test_quantile_outside_unit_interval(self):
        with pytest.raises(ValueError):
            Poisson.quantile(n(1.5, 2))
