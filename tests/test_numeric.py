"""
Tests for Numeric values and matrix literal parsing.
"""

import dataclasses

import pytest

from dmel.errors import MalformedMatrixLiteral
from dmel.numeric import Numeric, NumericType, parse_matrix


class TestNumericConstructors:
    """Exactly one variant is active, and values are normalized."""

    def test_real(self):
        n = Numeric.real(2)
        assert n.type == NumericType.REAL
        assert n.value == 2.0
        assert isinstance(n.value, float)
        assert n.is_real() and not n.is_integer()

    def test_integer(self):
        n = Numeric.integer(3)
        assert n.is_integer()
        assert n.get_double() == 3.0

    def test_boolean(self):
        n = Numeric.boolean(True)
        assert n.is_boolean()
        assert n.get_double() == 1.0

    def test_matrix(self):
        n = Numeric.matrix([[1, 2], [3, 4]])
        assert n.is_matrix()
        assert n.nrow == 2
        assert n.ncol == 2
        assert n.value == ((1.0, 2.0), (3.0, 4.0))

    def test_scalar_shape(self):
        n = Numeric.real(1.5)
        assert (n.nrow, n.ncol) == (1, 1)

    def test_immutable(self):
        n = Numeric.real(1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            n.value = 2.0


class TestMatrixInvariants:
    """Matrices are rectangular and non-empty."""

    def test_ragged_rows_rejected(self):
        with pytest.raises(MalformedMatrixLiteral):
            Numeric.matrix([[1, 2], [3]])

    def test_empty_rejected(self):
        with pytest.raises(MalformedMatrixLiteral):
            Numeric.matrix([])

    def test_one_by_one_matrix_is_scalar_convertible(self):
        assert Numeric.matrix([[7]]).get_double() == 7.0

    def test_larger_matrix_is_not_scalar(self):
        with pytest.raises(TypeError):
            Numeric.matrix([[1, 2]]).get_double()


class TestAccessors:
    """Typed accessors validate their domain."""

    def test_get_int(self):
        assert Numeric.real(4.0).get_int() == 4

    def test_get_int_rejects_fraction(self):
        with pytest.raises(TypeError):
            Numeric.real(2.5).get_int()

    def test_get_prob(self):
        assert Numeric.real(0.25).get_prob() == 0.25

    def test_get_prob_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            Numeric.real(1.5).get_prob()


class TestParseMatrix:
    """Matrix literal bodies (text between the outer brackets)."""

    def test_row_vector(self):
        n = parse_matrix("1,2,3")
        assert n.nrow == 1
        assert n.value == ((1.0, 2.0, 3.0),)

    def test_nested_rows(self):
        assert parse_matrix("[1,2],[3,4]").value == ((1.0, 2.0), (3.0, 4.0))

    def test_whitespace_and_exponents(self):
        assert parse_matrix(" [1e-3, 2], [3, -4] ").value == ((0.001, 2.0), (3.0, -4.0))

    def test_ragged_rows(self):
        with pytest.raises(MalformedMatrixLiteral):
            parse_matrix("[1,2],[3]")

    def test_mixed_scalars_and_rows(self):
        with pytest.raises(MalformedMatrixLiteral):
            parse_matrix("1,[2]")

    def test_non_numeric_element(self):
        with pytest.raises(MalformedMatrixLiteral):
            parse_matrix("a,b")

    def test_empty(self):
        with pytest.raises(MalformedMatrixLiteral):
            parse_matrix("")
