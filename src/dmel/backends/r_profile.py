"""
R backend profile.

Generated code targets base R only (no packages). Matrix tables become
numeric matrices, lookup and distribution tables become data.frames, and
the table runtime is emitted into functions.R.
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
from dmel.backends.r_runtime import RUNTIME_HELPERS
from dmel.model import Table, TableType


def _logb(args, translate):
    # logb(b,x): log of x in base b
    expect_args("logb", args, 2)
    return f"log({translate(args[1])},{translate(args[0])})"


def _chol(args, translate):
    # R's chol() returns the upper factor
    expect_args("chol", args, 1)
    return f"t(chol({translate(args[0])}))"


R_FUNCTIONS = MappingProxyType({
    "abs": direct("abs"),
    "acos": direct("acos"),
    "asin": direct("asin"),
    "atan": direct("atan"),
    "beta": direct("beta"),
    "ceil": direct("ceiling"),
    "choose": direct("choose"),
    "cos": direct("cos"),
    "cosh": direct("cosh"),
    "exp": direct("exp"),
    "fact": direct("factorial"),
    "floor": direct("floor"),
    "gamma": direct("gamma"),
    "log": direct("log"),
    "log10": direct("log10"),
    "logBeta": direct("lbeta"),
    "logGamma": direct("lgamma"),
    "max": direct("max"),
    "min": direct("min"),
    "round": direct("round"),
    "signum": direct("sign"),
    "sin": direct("sin"),
    "sinh": direct("sinh"),
    "sqrt": direct("sqrt"),
    "tan": direct("tan"),
    "tanh": direct("tanh"),
    "bound": define_once("bound<-function(x,a,b){max(a,min(x,b))}"),
    "cbrt": define_once("cbrt<-function(x){sign(x)*abs(x)^(1/3)}"),
    "erf": define_once("erf<-function(x){2*pnorm(x*sqrt(2))-1}"),
    "hypot": define_once("hypot<-function(x,y){sqrt(x^2+y^2)}"),
    "invErf": define_once("invErf<-function(x){qnorm((x+1)/2)/sqrt(2)}"),
    "logistic": define_once("logistic<-function(x){1/(1+exp(-x))}"),
    "logit": define_once("logit<-function(p){log(p/(1-p))}"),
    "oddsToProb": define_once("oddsToProb<-function(odds){odds/(1+odds)}"),
    "probRescale": define_once("probRescale<-function(p,t1,t2){1-(1-p)^(t2/t1)}"),
    "probToOdds": define_once("probToOdds<-function(p){p/(1-p)}"),
    "probToRate": define_once("probToRate<-function(p,t=1){-log(1-p)/t}"),
    "rateToProb": define_once("rateToProb<-function(rate,t=1){1-exp(-rate*t)}"),
    "logb": rewrite(_logb),
})

R_MATRIX_FUNCTIONS = MappingProxyType({
    "cumProd": direct("cumprod"),
    "cumSum": direct("cumsum"),
    "det": direct("det"),
    "diag": direct("diag"),
    "iden": direct("diag"),
    "inv": direct("solve"),
    "mean": direct("mean"),
    "ncol": direct("ncol"),
    "nrow": direct("nrow"),
    "prod": direct("prod"),
    "rep": direct("rep"),
    "seq": direct("seq"),
    "sum": direct("sum"),
    "tp": direct("t"),
    "tr": define_once("tr<-function(m){sum(diag(m))}"),
    "chol": rewrite(_chol),
})

R_CONSTANTS = MappingProxyType({
    "e": "exp(1)",
    "pi": "pi",
    "π": "pi",
    "inf": "Inf",
})


class RProfile(BackendProfile):
    """Export target: R."""

    name = "R"
    file_extension = "R"
    index_base = 1
    true_literal = "TRUE"
    false_literal = "FALSE"

    functions = R_FUNCTIONS
    matrix_functions = R_MATRIX_FUNCTIONS
    constants = R_CONSTANTS
    operators = MappingProxyType({"%": "%%"})
    runtime_helpers = MappingProxyType(RUNTIME_HELPERS)
    runtime_dependencies = MappingProxyType({"lookupTable": ("cubicSplines",)})

    def format_real(self, value: float) -> str:
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Inf" if value > 0 else "-Inf"
        return self._real_text(value)

    def format_array(self, values: Sequence[float]) -> str:
        return "c(" + ",".join(self.format_real(v) for v in values) + ")"

    def format_matrix(self, rows: Sequence[Sequence[float]]) -> str:
        return "rbind(" + ",".join(self.format_array(row) for row in rows) + ")"

    def trace_by_name(self, state: str, row: str) -> str:
        return f"trace${state}[{row}]"

    def block_comment(self, lines: Sequence[str]) -> List[str]:
        return ['"'] + [line.replace('"', "'") for line in lines] + ['"']

    def assign(self, name: str, value: str) -> str:
        return f"{name}<-{value}"

    def model_preamble(self) -> List[str]:
        return [f'source("{self.helpers_file}")', ""]

    def helpers_preamble(self) -> List[str]:
        return ["### Define Functions", ""]

    def table_lines(self, table: Table, table_format: TableFormat) -> List[str]:
        name = table.name
        lines = []
        if table.type == TableType.MATRIX:
            if table_format == TableFormat.CSV:
                lines.append(self.assign(name, f'as.matrix(read.csv("{name}.csv"))'))
            else:
                lines.append(self.assign(name, self.format_matrix(table.data)))
            lines.append(self.assign(f"{name}data", name))
            return lines

        if table_format == TableFormat.CSV:
            lines.append(self.assign(name, f'read.csv("{name}.csv")'))
        else:
            lines.append(self.assign(
                name, f"data.frame(matrix(nrow={table.num_rows},ncol={table.num_cols}))"))
            headers = ",".join(self.format_string(h) for h in table.headers)
            lines.append(f"names({name})<-c({headers})")
            for r, row in enumerate(table.data, start=1):
                lines.append(self.assign(f"{name}[{r},]", self.format_array(row)))
        if table.uses_splines:
            lines.extend(self.spline_lines(table))
        return lines


__all__ = ["RProfile"]
