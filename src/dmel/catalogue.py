"""
Built-in catalogue of the expression mini-language.

Fixed name sets for functions, matrix functions, distributions, constants
and reserved keywords. The translator receives a Catalogue instance
instead of consulting globals, so tests can inject a reduced one.

Names are case-sensitive: `gamma` is the function, `Gamma` the distribution.
"""

from dataclasses import dataclass
from typing import FrozenSet


FUNCTIONS = frozenset({
    "abs", "acos", "asin", "atan", "beta", "bound", "cbrt", "ceil", "choose",
    "cos", "cosh", "erf", "exp", "fact", "floor", "gamma", "hypot", "invErf",
    "log", "log10", "logb", "logBeta", "logGamma", "logistic", "logit", "max",
    "min", "oddsToProb", "probRescale", "probToOdds", "probToRate",
    "rateToProb", "round", "signum", "sin", "sinh", "sqrt", "tan", "tanh",
})

MATRIX_FUNCTIONS = frozenset({
    "chol", "cumProd", "cumSum", "det", "diag", "iden", "inv", "mean", "ncol",
    "nrow", "prod", "rep", "seq", "sum", "tp", "tr",
})

DISTRIBUTIONS = frozenset({
    "Bern", "Beta", "Bin", "Cat", "Cauchy", "DUnif", "Dir", "Exp", "Gamma",
    "Geom", "Gumbel", "HalfCauchy", "HGeom", "Logistic", "LogNorm", "MvNorm",
    "Multi", "NBin", "Norm", "Pareto", "PERT", "Pois", "Tri", "TruncNorm",
    "Unif", "Weib",
})

CONSTANTS = frozenset({"e", "pi", "π", "inf"})

# Trailing selector argument of a distribution call: sample, pdf/pmf, cdf,
# quantile, mean, variance
DISTRIBUTION_SELECTORS = frozenset({"~", "f", "F", "Q", "E", "V"})

BOOLEANS = frozenset({"true", "false"})

TRACE_KEYWORD = "trace"

# Words that are always valid bare: the Markov cycle counter
KEYWORDS = frozenset({"t"})


@dataclass(frozen=True)
class Catalogue:
    """Injectable set of built-in names."""

    functions: FrozenSet[str] = FUNCTIONS
    matrix_functions: FrozenSet[str] = MATRIX_FUNCTIONS
    distributions: FrozenSet[str] = DISTRIBUTIONS
    constants: FrozenSet[str] = CONSTANTS
    keywords: FrozenSet[str] = KEYWORDS

    def is_function(self, name: str) -> bool:
        return name in self.functions

    def is_matrix_function(self, name: str) -> bool:
        return name in self.matrix_functions

    def is_distribution(self, name: str) -> bool:
        return name in self.distributions

    def is_constant(self, name: str) -> bool:
        return name in self.constants

    def is_keyword(self, name: str) -> bool:
        return name in self.keywords


BUILTINS = Catalogue()


__all__ = ["Catalogue", "BUILTINS", "DISTRIBUTION_SELECTORS", "BOOLEANS", "TRACE_KEYWORD"]
