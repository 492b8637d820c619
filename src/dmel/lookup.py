"""
Native table runtime: lookup, interpolation and expected value.

These routines are what the live evaluator calls. The generated R and
Python runtimes (`dmel.backends.r_runtime`, `dmel.backends.python_runtime`)
implement the same algorithms; any change here must be mirrored there,
step for step, so exported models reproduce simulation results.

Data is a list of rows; column 0 is the index column. Columns are
numbered from 0, so the first value column is 1.
"""

import math
from typing import Optional, Sequence, Union

from dmel.errors import InvalidTableColumn
from dmel.model import ExtrapolationPolicy, InterpolationMode, LookupMethod, Table
from dmel.splines import BoundaryCondition, Spline, cubic_splines


Rows = Sequence[Sequence[float]]


def _check_column(data: Rows, col: int, table_name: Optional[str] = None) -> None:
    if not data:
        raise InvalidTableColumn(f"Column {col} is out of range (table has no rows)",
                                 symbol=table_name)
    if col < 1 or col >= len(data[0]):
        raise InvalidTableColumn(
            f"Column {col} is out of range (valid: 1..{len(data[0]) - 1})",
            symbol=table_name,
        )


def _exact(data: Rows, index: float, col: int) -> float:
    for row in data:
        if row[0] == index:
            return row[col]
    return math.nan


def _truncate(data: Rows, index: float, col: int) -> float:
    num_rows = len(data)
    if index < data[0][0]:
        return math.nan
    if index >= data[num_rows - 1][0]:
        return data[num_rows - 1][col]
    row = 0
    while data[row][0] < index:
        row += 1
    if index == data[row][0]:
        return data[row][col]
    return data[row - 1][col]


def _linear(data: Rows, index: float, col: int) -> float:
    num_rows = len(data)
    if index <= data[0][0]:
        slope = (data[1][col] - data[0][col]) / (data[1][0] - data[0][0])
        return data[0][col] - (data[0][0] - index) * slope
    if index > data[num_rows - 1][0]:
        last, prev = data[num_rows - 1], data[num_rows - 2]
        slope = (last[col] - prev[col]) / (last[0] - prev[0])
        return last[col] + (index - last[0]) * slope
    row = 0
    while data[row][0] < index:
        row += 1
    slope = (data[row][col] - data[row - 1][col]) / (data[row][0] - data[row - 1][0])
    return data[row - 1][col] + (index - data[row - 1][0]) * slope


def lookup_table(data: Rows, index: float, col: int,
                 lookup_method: Union[LookupMethod, str],
                 interpolate: Union[InterpolationMode, str],
                 boundary: Union[BoundaryCondition, str],
                 extrapolate: Union[ExtrapolationPolicy, str],
                 spline: Optional[Spline] = None) -> float:
    """
    Look up `col` of the row(s) matching `index`.

    Args:
        data: Table rows; column 0 is the index column
        index: Query value for the index column
        col: Value column number (1..ncol-1)
        lookup_method: Exact, Truncate or Interpolate
        interpolate: Linear or Cubic Splines (Interpolate only)
        boundary: Spline boundary tag, carried for signature parity
        extrapolate: No, Left only, Right only or Yes (Interpolate only)
        spline: Fitted spline for `col` (Cubic Splines only)

    Returns:
        The looked-up value; NaN when Exact finds no row or Truncate is
        queried below the first index.

    Raises:
        InvalidTableColumn: col outside 1..ncol-1
    """
    _check_column(data, col)
    method = LookupMethod(lookup_method)

    if method == LookupMethod.EXACT:
        return _exact(data, index, col)
    if method == LookupMethod.TRUNCATE:
        return _truncate(data, index, col)

    mode = InterpolationMode(interpolate)
    if mode == InterpolationMode.LINEAR:
        val = _linear(data, index, col)
    else:
        if spline is None:
            raise ValueError("Cubic spline lookup requires a fitted spline")
        val = cubic_splines(index, spline.knots, spline.knot_heights,
                            spline.coefficients, spline.boundary_condition)

    policy = ExtrapolationPolicy(extrapolate)
    first, last = data[0], data[len(data) - 1]
    if policy == ExtrapolationPolicy.NO:
        if index <= first[0]:
            val = first[col]
        elif index > last[0]:
            val = last[col]
    elif policy == ExtrapolationPolicy.LEFT_ONLY:
        if index > last[0]:
            val = last[col]
    elif policy == ExtrapolationPolicy.RIGHT_ONLY:
        if index <= first[0]:
            val = first[col]
    return val


def calc_table_ev(data: Rows, col: int) -> float:
    """Expected value of a distribution table: sum of index * column."""
    _check_column(data, col)
    ev = 0.0
    for row in data:
        ev = ev + row[0] * row[col]
    return ev


def lookup(table: Table, index: float, column: Union[str, int]) -> float:
    """Look up a column (number or header name) of a declared Lookup table."""
    col = table.column_index(column)
    spline = table.spline_for_column(col) if table.uses_splines else None
    return lookup_table(table.data, index, col, table.lookup_method, table.interpolate,
                        table.boundary, table.extrapolate, spline)


def expected_value(table: Table, column: Union[str, int]) -> float:
    """Expected value of a declared Distribution table."""
    return calc_table_ev(table.data, table.column_index(column))


__all__ = ["lookup_table", "calc_table_ev", "lookup", "expected_value"]
