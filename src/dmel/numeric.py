"""
Numeric values for the expression mini-language.

A Numeric is a tagged union: exactly one of REAL, INTEGER, BOOLEAN or
MATRIX is active. Values are immutable once constructed.

Matrices are stored as tuples of row tuples and are always rectangular.
How a value is written out as source text is the job of a Backend
Profile (`format_scalar`), not of this module.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union

from dmel.errors import MalformedMatrixLiteral
from dmel.scanner import split_args, strip_whitespace


class NumericType(Enum):
    """Tag of the active Numeric variant."""
    REAL = "real"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    MATRIX = "matrix"


Matrix = Tuple[Tuple[float, ...], ...]


@dataclass(frozen=True)
class Numeric:
    """
    Immutable tagged numeric value.

    Use the constructors rather than building one directly:
        Numeric.real(2.5)
        Numeric.integer(3)
        Numeric.boolean(True)
        Numeric.matrix([[1, 2], [3, 4]])

    Properties:
        type: Active NumericType tag
        value: float, int, bool or Matrix, matching the tag
    """

    type: NumericType
    value: Union[float, int, bool, Matrix]

    def __post_init__(self):
        if self.type == NumericType.MATRIX:
            rows = self.value
            if not rows or not rows[0]:
                raise MalformedMatrixLiteral("Matrix must have at least one row and one column")
            ncol = len(rows[0])
            for r, row in enumerate(rows):
                if len(row) != ncol:
                    raise MalformedMatrixLiteral(
                        f"Ragged matrix: row {r} has {len(row)} columns, expected {ncol}"
                    )

    @classmethod
    def real(cls, value: float) -> "Numeric":
        return cls(NumericType.REAL, float(value))

    @classmethod
    def integer(cls, value: int) -> "Numeric":
        return cls(NumericType.INTEGER, int(value))

    @classmethod
    def boolean(cls, value: bool) -> "Numeric":
        return cls(NumericType.BOOLEAN, bool(value))

    @classmethod
    def matrix(cls, rows: Sequence[Sequence[float]]) -> "Numeric":
        return cls(NumericType.MATRIX, tuple(tuple(float(v) for v in row) for row in rows))

    def is_real(self) -> bool:
        return self.type == NumericType.REAL

    def is_integer(self) -> bool:
        return self.type == NumericType.INTEGER

    def is_boolean(self) -> bool:
        return self.type == NumericType.BOOLEAN

    def is_matrix(self) -> bool:
        return self.type == NumericType.MATRIX

    @property
    def nrow(self) -> int:
        return len(self.value) if self.is_matrix() else 1

    @property
    def ncol(self) -> int:
        return len(self.value[0]) if self.is_matrix() else 1

    def get_double(self) -> float:
        """Return the scalar value as a float (booleans map to 0/1)."""
        if self.is_matrix():
            if self.nrow == 1 and self.ncol == 1:
                return self.value[0][0]
            raise TypeError("Cannot convert a matrix to a scalar")
        return float(self.value)

    def get_int(self) -> int:
        d = self.get_double()
        if d != math.floor(d):
            raise TypeError(f"Expected an integer, got {d}")
        return int(d)

    def get_prob(self) -> float:
        """Return the scalar value, which must lie in [0, 1]."""
        d = self.get_double()
        if d < 0 or d > 1:
            raise ValueError(f"Expected a probability in [0,1], got {d}")
        return d


def _parse_element(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise MalformedMatrixLiteral(f"Matrix element is not a number: '{text}'")


def parse_matrix(body: str) -> Numeric:
    """
    Parse the content between the outer brackets of a matrix literal.

    Accepted forms:
        "1,2,3"             -> 1x3 row vector
        "[1,2],[3,4]"       -> 2x2 matrix

    Raises:
        MalformedMatrixLiteral: ragged rows, empty rows or non-numeric elements
    """
    body = strip_whitespace(body)
    items = split_args(body)
    if not items:
        raise MalformedMatrixLiteral("Empty matrix literal")

    nested = [item.startswith("[") for item in items]
    if all(nested):
        rows = []
        for item in items:
            if not item.endswith("]"):
                raise MalformedMatrixLiteral(f"Malformed matrix row: '{item}'")
            rows.append([_parse_element(v) for v in split_args(item[1:-1])])
        return Numeric.matrix(rows)
    if any(nested):
        raise MalformedMatrixLiteral(f"Mixed scalar and row elements in matrix: [{body}]")

    return Numeric.matrix([[_parse_element(v) for v in items]])


__all__ = ["Numeric", "NumericType", "parse_matrix"]
