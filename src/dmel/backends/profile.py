"""
Backend Profile: everything the translator needs to know about one
export target.

A profile maps each built-in name to a translation rule:

    DIRECT        emit <mapped name>(<translated args>)
    DEFINE_ONCE   emit <original name>(<translated args>) and register the
                  profile's definition text in the session's helper registry
    REWRITE_ARGS  hand the raw argument list to a profile rule that may
                  reorder, drop, duplicate or recompute arguments

It also owns literal formatting, the indexing base, reference syntax for
matrix tables and traces, and the writer primitives the exporter uses.

ARCHITECTURAL RULE:
    Profiles are immutable. They hold no per-session state; the helper
    registry lives in the TranslationSession. Each session gets its own
    profile instance.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from dmel.errors import ExpressionSyntaxError, UnknownSymbol
from dmel.model import Table
from dmel.numeric import Numeric


class TranslationMode(Enum):
    DIRECT = "direct"
    DEFINE_ONCE = "define_once"
    REWRITE_ARGS = "rewrite_args"


class TableFormat(Enum):
    """How exported code obtains table data."""
    INLINE = "inline"
    CSV = "csv"


Translate = Callable[[str], str]
RewriteRule = Callable[[List[str], Translate], str]


@dataclass(frozen=True)
class FunctionRule:
    """
    Translation rule for one built-in name.

    Properties:
        mode: TranslationMode
        target: Mapped name (DIRECT)
        definition: Helper source text (DEFINE_ONCE)
        rewrite: Argument rewrite rule (REWRITE_ARGS)
    """

    mode: TranslationMode
    target: str = ""
    definition: str = ""
    rewrite: Optional[RewriteRule] = None


def direct(target: str) -> FunctionRule:
    return FunctionRule(TranslationMode.DIRECT, target=target)


def define_once(definition: str) -> FunctionRule:
    return FunctionRule(TranslationMode.DEFINE_ONCE, definition=definition.strip("\n"))


def rewrite(rule: RewriteRule) -> FunctionRule:
    return FunctionRule(TranslationMode.REWRITE_ARGS, rewrite=rule)


def expect_args(name: str, args: Sequence[str], low: int, high: Optional[int] = None) -> None:
    """Raise ExpressionSyntaxError unless low <= len(args) <= high."""
    high = low if high is None else high
    if not low <= len(args) <= high:
        wanted = str(low) if low == high else f"{low}-{high}"
        raise ExpressionSyntaxError(
            f"{name}() takes {wanted} argument(s), got {len(args)}", symbol=name
        )


class BackendProfile(ABC):
    """
    Base class for export targets.

    Subclasses fill the class-level tables and implement the
    target-specific syntax hooks marked abstract.
    """

    name: str = ""
    file_extension: str = ""
    index_base: int = 1
    true_literal: str = "true"
    false_literal: str = "false"

    functions: Mapping[str, FunctionRule] = MappingProxyType({})
    matrix_functions: Mapping[str, FunctionRule] = MappingProxyType({})
    constants: Mapping[str, str] = MappingProxyType({})
    # Operators whose spelling differs in the target (e.g. power)
    operators: Mapping[str, str] = MappingProxyType({})

    # Runtime helpers (lookupTable, cubicSplines, calcTableEV, ...) and the
    # helpers each one calls
    runtime_helpers: Mapping[str, str] = MappingProxyType({})
    runtime_dependencies: Mapping[str, Tuple[str, ...]] = MappingProxyType({})

    # =========================================================================
    # FUNCTION TABLES
    # =========================================================================

    def function_rule(self, name: str, matrix: bool = False) -> FunctionRule:
        table = self.matrix_functions if matrix else self.functions
        rule = table.get(name)
        if rule is None:
            kind = "matrix function" if matrix else "function"
            raise UnknownSymbol(f"The {self.name} backend has no translation for {kind} '{name}'",
                                symbol=name)
        return rule

    def function_mode(self, name: str, matrix: bool = False) -> TranslationMode:
        return self.function_rule(name, matrix).mode

    def mapped_name(self, name: str, matrix: bool = False) -> str:
        rule = self.function_rule(name, matrix)
        return rule.target if rule.mode == TranslationMode.DIRECT else name

    def definition_text(self, name: str, matrix: bool = False) -> str:
        rule = self.function_rule(name, matrix)
        if rule.mode != TranslationMode.DEFINE_ONCE:
            raise KeyError(f"'{name}' is not a define-once function in the {self.name} backend")
        return rule.definition

    def rewrite_call(self, name: str, args: List[str], translate: Translate,
                     matrix: bool = False) -> str:
        rule = self.function_rule(name, matrix)
        if rule.mode != TranslationMode.REWRITE_ARGS:
            raise KeyError(f"'{name}' is not a rewrite function in the {self.name} backend")
        return rule.rewrite(args, translate)

    def constant_literal(self, name: str) -> str:
        try:
            return self.constants[name]
        except KeyError:
            raise UnknownSymbol(f"The {self.name} backend has no literal for constant '{name}'",
                                symbol=name)

    def runtime_helper(self, name: str) -> str:
        return self.runtime_helpers[name].strip("\n")

    # =========================================================================
    # LITERALS
    # =========================================================================

    def format_operator(self, op: str) -> str:
        return self.operators.get(op, op)

    def format_boolean(self, value: bool) -> str:
        return self.true_literal if value else self.false_literal

    @abstractmethod
    def format_real(self, value: float) -> str:
        """Literal for a real number, including NaN and infinities."""

    @abstractmethod
    def format_array(self, values: Sequence[float]) -> str:
        """Row-vector literal."""

    @abstractmethod
    def format_matrix(self, rows: Sequence[Sequence[float]]) -> str:
        """Row-bound sequence of row-vector literals."""

    def format_string(self, text: str) -> str:
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'

    def format_scalar(self, value: Numeric) -> str:
        if value.is_boolean():
            return self.format_boolean(value.value)
        if value.is_integer():
            return str(value.value)
        if value.is_real():
            return self.format_real(value.value)
        if value.nrow > 1:
            return self.format_matrix(value.value)
        return self.format_array(value.value[0])

    def _real_text(self, value: float) -> str:
        return repr(float(value))

    # =========================================================================
    # REFERENCES
    # =========================================================================

    def offset_index(self, index: str) -> str:
        """Shift a 0-based index expression to the target's indexing base."""
        return f"{index}+{self.index_base}" if self.index_base else index

    def call(self, name: str, args: Sequence[str]) -> str:
        return f"{name}({','.join(args)})"

    def person_reference(self, name: str) -> str:
        return f"person.{name}[p]"

    def matrix_element(self, table_name: str, row: str, col: str) -> str:
        """Element of a matrix table; row and col are already offset."""
        return f"{table_name}data[{row},{col}]"

    @abstractmethod
    def trace_by_name(self, state: str, row: str) -> str:
        """Trace column selected by state name; row is already offset."""

    def trace_by_index(self, row: str, col: str) -> str:
        return f"trace[{row},{col}]"

    # =========================================================================
    # WRITER PRIMITIVES
    # =========================================================================

    @property
    def model_file(self) -> str:
        return f"model.{self.file_extension}"

    @property
    def helpers_file(self) -> str:
        return f"functions.{self.file_extension}"

    def comment(self, text: str) -> str:
        return f"#{text}"

    @abstractmethod
    def block_comment(self, lines: Sequence[str]) -> List[str]:
        """Multi-line header block."""

    @abstractmethod
    def assign(self, name: str, value: str) -> str:
        """Assignment statement."""

    def model_preamble(self) -> List[str]:
        return []

    def helpers_preamble(self) -> List[str]:
        return []

    @abstractmethod
    def table_lines(self, table: Table, table_format: TableFormat) -> List[str]:
        """Statements defining a table's data in generated code."""

    def table_helpers(self, table: Table) -> Tuple[str, ...]:
        """Runtime helpers the table definition lines call."""
        return ()

    def spline_lines(self, table: Table) -> List[str]:
        """Per-column spline artifacts for a Cubic-Splines lookup table."""
        lines = []
        for c, spline in enumerate(table.splines, start=1):
            lines.append(self.assign(f"{table.name}_knots_{c}", self.format_array(spline.knots)))
            lines.append(self.assign(f"{table.name}_knotHeights_{c}",
                                     self.format_array(spline.knot_heights)))
            lines.append(self.assign(f"{table.name}_splineCoeffs_{c}",
                                     self.format_matrix(spline.coefficients)))
            lines.append(self.assign(f"{table.name}_boundaryCondition_{c}",
                                     str(spline.boundary_condition.code)))
        return lines


__all__ = [
    "BackendProfile",
    "FunctionRule",
    "TableFormat",
    "TranslationMode",
    "direct",
    "define_once",
    "rewrite",
    "expect_args",
]
