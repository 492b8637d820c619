"""
CSV I/O for model tables.

CSV Format:
    header row (column names), then one row of numbers per table row.
    Column 0 is the index column.

Used by the exporter when tables are written next to the generated model
instead of inline, and to load tables authored in a spreadsheet.
"""

import csv
import math
import os
from typing import Optional, TextIO, Union

from dmel.errors import TableFormatError
from dmel.model import Table, TableType


def _parse_cell(cell: str, row_num: int, col: int) -> float:
    text = cell.strip()
    if text.lower() in ("nan", "na"):
        return math.nan
    try:
        return float(text)
    except ValueError as e:
        raise TableFormatError(f"Non-numeric value '{cell}' at row {row_num}, column {col + 1}") from e


def _read_rows(stream: TextIO, name: str):
    reader = csv.reader(stream)
    try:
        headers = [h.strip() for h in next(reader)]
    except StopIteration:
        raise TableFormatError(f"Table '{name}' CSV is empty", symbol=name)
    if not any(headers):
        raise TableFormatError(f"Table '{name}' CSV has a blank header row", symbol=name)

    data = []
    for row_num, row in enumerate(reader, start=2):  # header is line 1
        if not any(cell.strip() for cell in row):
            continue
        if len(row) != len(headers):
            raise TableFormatError(
                f"Table '{name}' row {row_num} has {len(row)} values, expected {len(headers)}",
                symbol=name,
            )
        data.append([_parse_cell(cell, row_num, c) for c, cell in enumerate(row)])
    return headers, data


def read_table_csv(source: Union[str, TextIO], name: Optional[str] = None,
                   table_type: Union[TableType, str] = TableType.LOOKUP, **settings) -> Table:
    """
    Read a table from a CSV file path or open text stream.

    Args:
        source: Path to a .csv file, or a readable text stream
        name: Table name (defaults to the file's base name)
        table_type: TableType of the new table
        **settings: Lookup settings passed to Table (lookup_method, ...)

    Returns:
        Finalized Table

    Raises:
        FileNotFoundError: If the path doesn't exist
        TableFormatError: Missing header, no data rows, ragged rows or
            non-numeric cells
    """
    if isinstance(source, str):
        if name is None:
            name = os.path.splitext(os.path.basename(source))[0]
        try:
            with open(source, "r", encoding="utf-8", newline="") as f:
                headers, data = _read_rows(f, name)
        except FileNotFoundError:
            raise FileNotFoundError(f"Table CSV file not found: {source}")
    else:
        name = name or "Table"
        headers, data = _read_rows(source, name)

    try:
        table = Table(name=name, type=table_type, headers=headers, data=data, **settings)
        return table.finalize()
    except ValueError as e:
        raise TableFormatError(str(e), symbol=name) from e


def write_table_csv(table: Table, target: Union[str, TextIO]) -> None:
    """Write a table as CSV (header row, then data rows) to a path or stream."""
    def _write(stream: TextIO):
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(table.headers)
        for row in table.data:
            writer.writerow([_cell_text(v) for v in row])

    if isinstance(target, str):
        with open(target, "w", encoding="utf-8", newline="") as f:
            _write(f)
    else:
        _write(target)


def _cell_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Inf" if value > 0 else "-Inf"
    if value == int(value):
        return str(int(value))
    return repr(value)


__all__ = ["read_table_csv", "write_table_csv"]
