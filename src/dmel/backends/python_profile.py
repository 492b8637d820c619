"""
Python backend profile.

Generated code uses `math` for scalar functions and numpy for matrices.
Indexed references keep the 1-based convention shared by every target:
matrix tables are exposed as `<name>data = oneBased(<name>)`, padded with
a leading NaN row and column, and the trace handed to the generated model
is expected to carry the same leading padding.
"""

import math
from types import MappingProxyType
from typing import List, Sequence

from dmel.backends.profile import (
    BackendProfile,
    TableFormat,
    define_once,
    direct,
    expect_args,
    rewrite,
)
from dmel.backends.python_runtime import RUNTIME_HELPERS
from dmel.model import Table, TableType


def _logb(args, translate):
    expect_args("logb", args, 2)
    return f"math.log({translate(args[1])},{translate(args[0])})"


def _choose(args, translate):
    expect_args("choose", args, 2)
    return f"math.comb(int({translate(args[0])}),int({translate(args[1])}))"


def _fact(args, translate):
    expect_args("fact", args, 1)
    return f"math.factorial(int({translate(args[0])}))"


def _round(args, translate):
    expect_args("round", args, 1, 2)
    if len(args) == 1:
        return f"round({translate(args[0])})"
    return f"round({translate(args[0])},int({translate(args[1])}))"


def _ncol(args, translate):
    expect_args("ncol", args, 1)
    return f"np.shape({translate(args[0])})[1]"


def _nrow(args, translate):
    expect_args("nrow", args, 1)
    return f"np.shape({translate(args[0])})[0]"


def _rep(args, translate):
    expect_args("rep", args, 2)
    return f"np.tile({translate(args[0])},int({translate(args[1])}))"


def _seq(args, translate):
    # seq(from,to[,by]) includes `to`, np.arange excludes its stop
    expect_args("seq", args, 2, 3)
    start, stop = translate(args[0]), translate(args[1])
    by = translate(args[2]) if len(args) == 3 else "1"
    return f"np.arange({start},{stop}+{by},{by})"


PYTHON_FUNCTIONS = MappingProxyType({
    "abs": direct("abs"),
    "acos": direct("math.acos"),
    "asin": direct("math.asin"),
    "atan": direct("math.atan"),
    "ceil": direct("math.ceil"),
    "cos": direct("math.cos"),
    "cosh": direct("math.cosh"),
    "erf": direct("math.erf"),
    "exp": direct("math.exp"),
    "floor": direct("math.floor"),
    "gamma": direct("math.gamma"),
    "hypot": direct("math.hypot"),
    "log": direct("math.log"),
    "log10": direct("math.log10"),
    "logGamma": direct("math.lgamma"),
    "max": direct("max"),
    "min": direct("min"),
    "sin": direct("math.sin"),
    "sinh": direct("math.sinh"),
    "sqrt": direct("math.sqrt"),
    "tan": direct("math.tan"),
    "tanh": direct("math.tanh"),
    "beta": define_once('''
def beta(a, b):
    return math.exp(math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b))
'''),
    "bound": define_once('''
def bound(x, a, b):
    return max(a, min(x, b))
'''),
    "cbrt": define_once('''
def cbrt(x):
    return math.copysign(abs(x) ** (1 / 3), x)
'''),
    "invErf": define_once('''
def invErf(x):
    from statistics import NormalDist
    return NormalDist().inv_cdf((x + 1) / 2) / math.sqrt(2)
'''),
    "logBeta": define_once('''
def logBeta(a, b):
    return math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b)
'''),
    "logistic": define_once('''
def logistic(x):
    return 1 / (1 + math.exp(-x))
'''),
    "logit": define_once('''
def logit(p):
    return math.log(p / (1 - p))
'''),
    "oddsToProb": define_once('''
def oddsToProb(odds):
    return odds / (1 + odds)
'''),
    "probRescale": define_once('''
def probRescale(p, t1, t2):
    return 1 - (1 - p) ** (t2 / t1)
'''),
    "probToOdds": define_once('''
def probToOdds(p):
    return p / (1 - p)
'''),
    "probToRate": define_once('''
def probToRate(p, t=1):
    return -math.log(1 - p) / t
'''),
    "rateToProb": define_once('''
def rateToProb(rate, t=1):
    return 1 - math.exp(-rate * t)
'''),
    "signum": define_once('''
def signum(x):
    return (x > 0) - (x < 0)
'''),
    "choose": rewrite(_choose),
    "fact": rewrite(_fact),
    "logb": rewrite(_logb),
    "round": rewrite(_round),
})

PYTHON_MATRIX_FUNCTIONS = MappingProxyType({
    "chol": direct("np.linalg.cholesky"),
    "cumProd": direct("np.cumprod"),
    "cumSum": direct("np.cumsum"),
    "det": direct("np.linalg.det"),
    "diag": direct("np.diag"),
    "iden": direct("np.identity"),
    "inv": direct("np.linalg.inv"),
    "mean": direct("np.mean"),
    "prod": direct("np.prod"),
    "sum": direct("np.sum"),
    "tp": direct("np.transpose"),
    "tr": direct("np.trace"),
    "ncol": rewrite(_ncol),
    "nrow": rewrite(_nrow),
    "rep": rewrite(_rep),
    "seq": rewrite(_seq),
})

PYTHON_CONSTANTS = MappingProxyType({
    "e": "math.e",
    "pi": "math.pi",
    "π": "math.pi",
    "inf": "math.inf",
})


class PythonProfile(BackendProfile):
    """Export target: Python 3 with numpy."""

    name = "Python"
    file_extension = "py"
    index_base = 1
    true_literal = "True"
    false_literal = "False"

    functions = PYTHON_FUNCTIONS
    matrix_functions = PYTHON_MATRIX_FUNCTIONS
    constants = PYTHON_CONSTANTS
    operators = MappingProxyType({"^": "**"})
    runtime_helpers = MappingProxyType(RUNTIME_HELPERS)
    runtime_dependencies = MappingProxyType({"lookupTable": ("cubicSplines",)})

    def format_real(self, value: float) -> str:
        if math.isnan(value):
            return "math.nan"
        if math.isinf(value):
            return "math.inf" if value > 0 else "-math.inf"
        return self._real_text(value)

    def _list(self, values: Sequence[float]) -> str:
        return "[" + ",".join(self.format_real(v) for v in values) + "]"

    def format_array(self, values: Sequence[float]) -> str:
        return f"np.array({self._list(values)})"

    def format_matrix(self, rows: Sequence[Sequence[float]]) -> str:
        return "np.array([" + ",".join(self._list(row) for row in rows) + "])"

    def trace_by_name(self, state: str, row: str) -> str:
        return f"trace[{self.format_string(state)}][{row}]"

    def block_comment(self, lines: Sequence[str]) -> List[str]:
        return ['"""'] + [line.replace('"""', "'''") for line in lines] + ['"""']

    def assign(self, name: str, value: str) -> str:
        return f"{name} = {value}"

    def model_preamble(self) -> List[str]:
        module = self.helpers_file[:-len(".py")]
        return ["import math", "", "import numpy as np", "", f"from {module} import *", ""]

    def helpers_preamble(self) -> List[str]:
        return ["import math", "", "import numpy as np", ""]

    def table_lines(self, table: Table, table_format: TableFormat) -> List[str]:
        name = table.name
        if table_format == TableFormat.CSV:
            value = f'np.loadtxt("{name}.csv",delimiter=",",skiprows=1,ndmin=2)'
        elif table.type == TableType.MATRIX:
            value = self.format_matrix(table.data)
        else:
            value = "[" + ",".join(self._list(row) for row in table.data) + "]"

        headers = ",".join(self.format_string(h) for h in table.headers)
        lines = [self.assign(f"{name}_headers", f"[{headers}]"), self.assign(name, value)]
        if table.type == TableType.MATRIX:
            lines.append(self.assign(f"{name}data", f"oneBased({name})"))
        if table.uses_splines:
            lines.extend(self.spline_lines(table))
        return lines

    def table_helpers(self, table: Table):
        return ("oneBased",) if table.type == TableType.MATRIX else ()


__all__ = ["PythonProfile"]
