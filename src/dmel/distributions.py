"""
Native distribution routines used by the live evaluator.

Parameters arrive as Numeric values in the order the mini-language call
lists them. Invalid parameters raise InvalidDistributionParameter tagged
with the distribution's name.
"""

import math
from typing import Sequence

from dmel.errors import InvalidDistributionParameter
from dmel.numeric import Numeric


def _log_mass(k: int, lam: float) -> float:
    return k * math.log(lam) - lam - math.lgamma(k + 1)


class Poisson:
    """
    Poisson distribution: number of events in a fixed interval with a
    known average rate λ (> 0).

        Pois(λ,~)     sample (mean in the base case)
        Pois(k,λ,f)   PMF at k
        Pois(k,λ,F)   CDF at k
        Pois(x,λ,Q)   quantile at x
        Pois(λ,E)     mean
        Pois(λ,V)     variance
    """

    name = "Pois"

    @classmethod
    def _rate(cls, param: Numeric) -> float:
        lam = param.get_double()
        if lam <= 0:
            raise InvalidDistributionParameter("λ should be >0", symbol=cls.name)
        return lam

    @classmethod
    def pmf(cls, params: Sequence[Numeric]) -> Numeric:
        k = params[0].get_int()
        lam = cls._rate(params[1])
        if k < 0:
            return Numeric.real(0.0)
        return Numeric.real(math.exp(_log_mass(k, lam)))

    @classmethod
    def cdf(cls, params: Sequence[Numeric]) -> Numeric:
        k = params[0].get_int()
        lam = cls._rate(params[1])
        val = 0.0
        for i in range(k + 1):
            val += math.exp(_log_mass(i, lam))
        return Numeric.real(val)

    @classmethod
    def quantile(cls, params: Sequence[Numeric]) -> Numeric:
        x = params[0].get_prob()
        lam = cls._rate(params[1])
        if x == 1:
            return Numeric.real(math.inf)
        return Numeric.integer(max(0, cls._invert(x, lam)))

    @classmethod
    def mean(cls, params: Sequence[Numeric]) -> Numeric:
        return Numeric.real(cls._rate(params[0]))

    @classmethod
    def variance(cls, params: Sequence[Numeric]) -> Numeric:
        return Numeric.real(cls._rate(params[0]))

    @classmethod
    def sample(cls, params: Sequence[Numeric], rand: float) -> Numeric:
        """Inverse-CDF sample for a uniform draw `rand` in [0, 1)."""
        if len(params) != 1:
            raise InvalidDistributionParameter("Incorrect number of parameters", symbol=cls.name)
        lam = cls._rate(params[0])
        return Numeric.integer(max(0, cls._invert(rand, lam)))

    @staticmethod
    def _invert(x: float, lam: float) -> int:
        k = -1
        cdf = 0.0
        while x > cdf:
            cdf += math.exp(_log_mass(k + 1, lam))
            k += 1
        return k


__all__ = ["Poisson"]
