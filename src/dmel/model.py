"""
Model Declarations

Defines the declarations the translator reads from a model:
    - Tables (lookup, distribution, matrix)
    - Variables and parameters (name, defining expression, current value)
    - Model metadata
    - The Model registry (root container with name lookups)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about R/Python target syntax
        - Are read-only during translation
        - Are fully serializable
    Derived artifacts (splines) are recomputed by `Table.finalize()`,
    never stored by hand.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from dmel.errors import InvalidTableColumn
from dmel.numeric import Numeric
from dmel.splines import BoundaryCondition, Spline, fit_spline


class TableType(Enum):
    LOOKUP = "Lookup"
    DISTRIBUTION = "Distribution"
    MATRIX = "Matrix"


class LookupMethod(Enum):
    EXACT = "Exact"
    TRUNCATE = "Truncate"
    INTERPOLATE = "Interpolate"


class InterpolationMode(Enum):
    LINEAR = "Linear"
    CUBIC_SPLINES = "Cubic Splines"


class ExtrapolationPolicy(Enum):
    """
    Which ends of an interpolating lookup may extrapolate.

    NO clamps both ends, LEFT_ONLY clamps the right end, RIGHT_ONLY clamps
    the left end, YES keeps extrapolated values at both ends.
    """
    NO = "No"
    LEFT_ONLY = "Left only"
    RIGHT_ONLY = "Right only"
    YES = "Yes"


class ModelType(Enum):
    DECISION_TREE = "Decision Tree"
    MARKOV = "Markov Model"


class SimulationType(Enum):
    COHORT = "Cohort"
    MONTE_CARLO = "Monte Carlo"


_INT_RE = re.compile(r'^-?\d+$')


@dataclass
class Table:
    """
    A named table declared by the model author.

    Properties:
        name: Table identifier used in expressions
        type: TableType
        headers: Column names; column 0 is the index column
        data: Rows of reals, all the same length as headers
        lookup_method / interpolate / boundary / extrapolate:
            Lookup settings (ignored for other table types). Strings are
            accepted and converted to the matching enum.
        notes: Optional author note
        splines: One Spline per value column, filled by finalize() when
            interpolate is CUBIC_SPLINES

    Example:
        Table(name="Mort", type=TableType.LOOKUP, headers=["Age", "Male"],
              data=[[0, 0.01], [50, 0.02]],
              lookup_method="Interpolate", interpolate="Linear")
    """

    name: str
    type: TableType
    headers: List[str]
    data: List[List[float]]
    lookup_method: Optional[LookupMethod] = None
    interpolate: Optional[InterpolationMode] = None
    boundary: Optional[BoundaryCondition] = None
    extrapolate: Optional[ExtrapolationPolicy] = None
    notes: str = ""
    splines: List[Spline] = field(default_factory=list)

    def __post_init__(self):
        self.type = TableType(self.type)
        if self.type == TableType.LOOKUP:
            self.lookup_method = LookupMethod(self.lookup_method or LookupMethod.EXACT)
            self.interpolate = InterpolationMode(self.interpolate or InterpolationMode.LINEAR)
            self.boundary = BoundaryCondition.coerce(self.boundary or BoundaryCondition.NATURAL)
            self.extrapolate = ExtrapolationPolicy(self.extrapolate or ExtrapolationPolicy.NO)
        self.data = [[float(v) for v in row] for row in self.data]
        for r, row in enumerate(self.data):
            if len(row) != len(self.headers):
                raise ValueError(
                    f"Table '{self.name}' row {r} has {len(row)} values, expected {len(self.headers)}"
                )

    @property
    def num_rows(self) -> int:
        return len(self.data)

    @property
    def num_cols(self) -> int:
        return len(self.headers)

    @property
    def uses_splines(self) -> bool:
        return (self.type == TableType.LOOKUP
                and self.lookup_method == LookupMethod.INTERPOLATE
                and self.interpolate == InterpolationMode.CUBIC_SPLINES)

    def finalize(self) -> "Table":
        """Compute derived artifacts (splines). Returns self for chaining."""
        if not self.data:
            raise ValueError(f"Table '{self.name}' has no rows")
        if (self.type == TableType.LOOKUP and self.lookup_method == LookupMethod.INTERPOLATE
                and self.num_rows < 2):
            raise ValueError(f"Interpolating table '{self.name}' needs at least two rows")
        if self.uses_splines:
            knots = [row[0] for row in self.data]
            self.splines = [
                fit_spline(knots, [row[c] for row in self.data], self.boundary)
                for c in range(1, self.num_cols)
            ]
        else:
            self.splines = []
        return self

    def check_column(self, col: int) -> int:
        """Return col if it is a valid value column (1..num_cols-1)."""
        if col < 1 or col >= self.num_cols:
            raise InvalidTableColumn(
                f"Column {col} is out of range for table '{self.name}' "
                f"(valid: 1..{self.num_cols - 1})",
                symbol=self.name,
            )
        return col

    def column_index(self, ref: Union[str, int]) -> int:
        """
        Resolve a column reference to its column number.

        Args:
            ref: Integer column number, or a header name (quoted or bare)

        Raises:
            InvalidTableColumn: unknown header or column outside 1..num_cols-1
        """
        if isinstance(ref, str):
            text = ref.strip()
            if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
                text = text[1:-1]
            if _INT_RE.match(text):
                return self.check_column(int(text))
            if text in self.headers:
                return self.check_column(self.headers.index(text))
            raise InvalidTableColumn(f"Table '{self.name}' has no column '{text}'", symbol=self.name)
        return self.check_column(int(ref))

    def spline_for_column(self, col: int) -> Spline:
        if not self.splines:
            self.finalize()
        return self.splines[self.check_column(col) - 1]


@dataclass
class Variable:
    """
    A model variable (re-evaluated during simulation).

    Properties:
        name: Identifier used in expressions
        expression: Defining expression in the mini-language
        value: Current value computed by the evaluator (optional)
        notes: Optional author note
    """

    name: str
    expression: str = ""
    value: Optional[Numeric] = None
    notes: str = ""


@dataclass
class Parameter:
    """A model parameter (evaluated once, model scope)."""

    name: str
    expression: str = ""
    value: Optional[Numeric] = None
    notes: str = ""


@dataclass
class ModelMetadata:
    author: str = ""
    date_created: str = ""
    version_created: str = ""
    modifier: str = ""
    date_modified: str = ""
    version_modified: str = ""


@dataclass
class Model:
    """
    Root container: the registry of everything an expression can name.

    INVARIANTS:
        - Names are unique across tables, variables and parameters
        - Tables are finalized (splines computed) once added
    """

    name: str
    model_type: ModelType = ModelType.MARKOV
    sim_type: SimulationType = SimulationType.COHORT
    metadata: ModelMetadata = field(default_factory=ModelMetadata)
    parameters: List[Parameter] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)

    def __post_init__(self):
        self.model_type = ModelType(self.model_type)
        self.sim_type = SimulationType(self.sim_type)
        for table in self.tables:
            table.finalize()
        self.check_names()

    def check_names(self) -> None:
        """Raise ValueError if a name is declared more than once."""
        seen = set()
        declared = [t.name for t in self.tables] + [v.name for v in self.variables]
        for name in declared + [p.name for p in self.parameters]:
            if name in seen:
                raise ValueError(f"'{name}' is declared more than once in model '{self.name}'")
            seen.add(name)

    def add_table(self, table: Table) -> Table:
        if self.is_table(table.name) or self.is_variable(table.name) or self.is_parameter(table.name):
            raise ValueError(f"'{table.name}' is already declared in model '{self.name}'")
        self.tables.append(table.finalize())
        return table

    def get_table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def get_variable(self, name: str) -> Optional[Variable]:
        for var in self.variables:
            if var.name == name:
                return var
        return None

    def get_parameter(self, name: str) -> Optional[Parameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def is_table(self, name: str) -> bool:
        return self.get_table(name) is not None

    def is_variable(self, name: str) -> bool:
        return self.get_variable(name) is not None

    def is_parameter(self, name: str) -> bool:
        return self.get_parameter(name) is not None


__all__ = [
    "TableType",
    "LookupMethod",
    "InterpolationMode",
    "ExtrapolationPolicy",
    "ModelType",
    "SimulationType",
    "Table",
    "Variable",
    "Parameter",
    "ModelMetadata",
    "Model",
]
