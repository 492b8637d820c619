"""
Tests for reading and writing tables as CSV.
"""

import io
import math

import pytest

from dmel.errors import TableFormatError
from dmel.model import InterpolationMode, Table, TableType
from dmel.table_csv import read_table_csv, write_table_csv


CSV_TEXT = "Age,Male,Female\n40,0.002,0.001\n50,0.004,0.003\n"


class TestRead:
    def test_stream(self):
        table = read_table_csv(io.StringIO(CSV_TEXT), name="Mort")
        assert table.name == "Mort"
        assert table.type == TableType.LOOKUP
        assert table.headers == ["Age", "Male", "Female"]
        assert table.data == [[40.0, 0.002, 0.001], [50.0, 0.004, 0.003]]

    def test_stream_default_name(self):
        assert read_table_csv(io.StringIO(CSV_TEXT)).name == "Table"

    def test_path_default_name(self, tmp_path):
        path = tmp_path / "Mort.csv"
        path.write_text(CSV_TEXT, encoding="utf-8")
        assert read_table_csv(str(path)).name == "Mort"

    def test_settings_passed_to_table(self):
        table = read_table_csv(io.StringIO(CSV_TEXT), lookup_method="Interpolate",
                               interpolate="Cubic Splines")
        assert table.interpolate == InterpolationMode.CUBIC_SPLINES
        assert len(table.splines) == 2

    def test_nan_cells(self):
        table = read_table_csv(io.StringIO("x,y\n1,NA\n2,nan\n"))
        assert math.isnan(table.data[0][1])
        assert math.isnan(table.data[1][1])

    def test_blank_rows_skipped(self):
        table = read_table_csv(io.StringIO("x,y\n1,2\n\n3,4\n"))
        assert table.num_rows == 2

    def test_no_data_rows(self):
        with pytest.raises(TableFormatError, match="no rows"):
            read_table_csv(io.StringIO("x,y\n\n"), table_type=TableType.DISTRIBUTION)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_table_csv(str(tmp_path / "missing.csv"))


class TestReadErrors:
    def test_empty(self):
        with pytest.raises(TableFormatError):
            read_table_csv(io.StringIO(""))

    def test_blank_header(self):
        with pytest.raises(TableFormatError):
            read_table_csv(io.StringIO(",\n1,2\n"))

    def test_ragged_row(self):
        with pytest.raises(TableFormatError) as exc:
            read_table_csv(io.StringIO("x,y\n1,2\n3\n"), name="T")
        assert exc.value.symbol == "T"
        assert "row 3" in str(exc.value)

    def test_non_numeric(self):
        with pytest.raises(TableFormatError, match="'abc'"):
            read_table_csv(io.StringIO("x,y\n1,abc\n"))

    def test_table_validation_is_wrapped(self):
        # One row cannot be interpolated
        with pytest.raises(TableFormatError):
            read_table_csv(io.StringIO("x,y\n1,2\n"), lookup_method="Interpolate")


class TestWrite:
    def test_cells(self):
        table = Table(name="T", type=TableType.LOOKUP, headers=["x", "y"],
                      data=[[1, 0.25], [2, math.nan], [3, math.inf], [4, -math.inf]])
        out = io.StringIO()
        write_table_csv(table, out)
        assert out.getvalue() == "x,y\n1,0.25\n2,NaN\n3,Inf\n4,-Inf\n"

    def test_path_roundtrip(self, tmp_path):
        table = read_table_csv(io.StringIO(CSV_TEXT), name="Mort")
        path = str(tmp_path / "Mort.csv")
        write_table_csv(table, path)
        restored = read_table_csv(path)
        assert restored.headers == table.headers
        assert restored.data == table.data
