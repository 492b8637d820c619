"""
Tests for the R and Python backend profiles.

These tests verify:
    - Every built-in name has a rule in every profile
    - Literal formatting (reals, NaN, infinities, vectors, matrices)
    - Table definition and spline artifact lines
"""

import math

import pytest

from dmel.backends import PROFILES, PythonProfile, RProfile, TableFormat, TranslationMode, get_profile
from dmel.catalogue import CONSTANTS, FUNCTIONS, MATRIX_FUNCTIONS
from dmel.errors import UnknownSymbol
from dmel.model import Table, TableType
from dmel.numeric import Numeric


def lookup_table(**settings) -> Table:
    return Table(name="Mort", type=TableType.LOOKUP, headers=["Age", "Male"],
                 data=[[0, 0.5], [1, 0.25], [2, 0.125]], **settings).finalize()


def matrix_table() -> Table:
    return Table(name="Trans", type=TableType.MATRIX, headers=["A", "B"],
                 data=[[0.9, 0.1], [0.2, 0.8]])


class TestProfileRegistry:
    def test_get_profile(self):
        assert isinstance(get_profile("r"), RProfile)
        assert isinstance(get_profile("Python"), PythonProfile)

    def test_fresh_instance_per_call(self):
        assert get_profile("r") is not get_profile("r")

    def test_unknown_target(self):
        with pytest.raises(ValueError):
            get_profile("julia")


@pytest.mark.parametrize("target", sorted(PROFILES))
class TestCatalogueCoverage:
    """Every catalogue name is translatable by every profile."""

    def test_functions(self, target):
        profile = get_profile(target)
        for name in FUNCTIONS:
            assert profile.function_rule(name).mode in TranslationMode

    def test_matrix_functions(self, target):
        profile = get_profile(target)
        for name in MATRIX_FUNCTIONS:
            assert profile.function_rule(name, matrix=True).mode in TranslationMode

    def test_constants(self, target):
        profile = get_profile(target)
        for name in CONSTANTS:
            assert profile.constant_literal(name)

    def test_define_once_rules_carry_definitions(self, target):
        profile = get_profile(target)
        for table in (profile.functions, profile.matrix_functions):
            for name, rule in table.items():
                if rule.mode == TranslationMode.DEFINE_ONCE:
                    assert name in rule.definition


class TestFunctionTables:
    def test_mapped_name(self):
        profile = RProfile()
        assert profile.function_mode("ceil") == TranslationMode.DIRECT
        assert profile.mapped_name("ceil") == "ceiling"
        assert profile.mapped_name("logit") == "logit"
        assert profile.mapped_name("iden", matrix=True) == "diag"

    def test_definition_text(self):
        assert RProfile().definition_text("logit").startswith("logit<-function")
        assert PythonProfile().definition_text("logit").startswith("def logit(")
        with pytest.raises(KeyError):
            RProfile().definition_text("ceil")

    def test_rewrite_call(self):
        assert RProfile().rewrite_call("chol", ["M"], lambda a: a, matrix=True) == "t(chol(M))"
        assert PythonProfile().rewrite_call("fact", ["5"], lambda a: a) == "math.factorial(int(5))"

    def test_unknown_function(self):
        with pytest.raises(UnknownSymbol):
            RProfile().function_rule("nope")

    def test_unknown_constant(self):
        with pytest.raises(UnknownSymbol):
            PythonProfile().constant_literal("tau")

    def test_python_define_once_helpers_run(self):
        profile = PythonProfile()
        namespace = {}
        exec("\n".join(profile.helpers_preamble()), namespace)
        for name in ("logit", "logistic", "rateToProb", "probToRate", "cbrt", "invErf"):
            exec(profile.definition_text(name), namespace)
        assert namespace["logistic"](namespace["logit"](0.3)) == pytest.approx(0.3)
        assert namespace["probToRate"](namespace["rateToProb"](0.2)) == pytest.approx(0.2)
        assert namespace["cbrt"](-8) == pytest.approx(-2)
        assert math.erf(namespace["invErf"](0.5)) == pytest.approx(0.5)


class TestLiterals:
    def test_reals(self):
        assert RProfile().format_real(0.5) == "0.5"
        assert RProfile().format_real(math.nan) == "NaN"
        assert RProfile().format_real(-math.inf) == "-Inf"
        assert PythonProfile().format_real(math.nan) == "math.nan"
        assert PythonProfile().format_real(math.inf) == "math.inf"

    def test_scalars(self):
        r = RProfile()
        assert r.format_scalar(Numeric.integer(3)) == "3"
        assert r.format_scalar(Numeric.real(2)) == "2.0"
        assert r.format_scalar(Numeric.boolean(True)) == "TRUE"
        assert PythonProfile().format_scalar(Numeric.boolean(False)) == "False"

    def test_vectors_and_matrices(self):
        r = RProfile()
        assert r.format_scalar(Numeric.matrix([[1, 2]])) == "c(1.0,2.0)"
        assert r.format_scalar(Numeric.matrix([[1], [2]])) == "rbind(c(1.0),c(2.0))"
        assert PythonProfile().format_scalar(Numeric.matrix([[1, 2]])) == "np.array([1.0,2.0])"

    def test_string_escaping(self):
        assert RProfile().format_string('a"b') == '"a\\"b"'

    def test_operators(self):
        assert RProfile().format_operator("^") == "^"
        assert PythonProfile().format_operator("^") == "**"
        assert PythonProfile().format_operator("+") == "+"

    def test_r_modulo(self):
        assert RProfile().format_operator("%") == "%%"
        assert PythonProfile().format_operator("%") == "%"


class TestReferences:
    def test_offset_index(self):
        assert RProfile().offset_index("i") == "i+1"

    def test_matrix_element(self):
        assert PythonProfile().matrix_element("Trans", "0+1", "1+1") == "Transdata[0+1,1+1]"

    def test_files(self):
        assert RProfile().model_file == "model.R"
        assert PythonProfile().helpers_file == "functions.py"


class TestRTableLines:
    def test_inline_lookup(self):
        lines = RProfile().table_lines(lookup_table(), TableFormat.INLINE)
        assert lines == [
            "Mort<-data.frame(matrix(nrow=3,ncol=2))",
            'names(Mort)<-c("Age","Male")',
            "Mort[1,]<-c(0.0,0.5)",
            "Mort[2,]<-c(1.0,0.25)",
            "Mort[3,]<-c(2.0,0.125)",
        ]

    def test_csv_lookup(self):
        lines = RProfile().table_lines(lookup_table(), TableFormat.CSV)
        assert lines == ['Mort<-read.csv("Mort.csv")']

    def test_matrix(self):
        lines = RProfile().table_lines(matrix_table(), TableFormat.INLINE)
        assert lines == ["Trans<-rbind(c(0.9,0.1),c(0.2,0.8))", "Transdata<-Trans"]

    def test_spline_artifacts(self):
        table = lookup_table(lookup_method="Interpolate", interpolate="Cubic Splines",
                             boundary="Clamped")
        lines = RProfile().table_lines(table, TableFormat.INLINE)
        assert "Mort_knots_1<-c(0.0,1.0,2.0)" in lines
        assert "Mort_knotHeights_1<-c(0.5,0.25,0.125)" in lines
        assert "Mort_boundaryCondition_1<-1" in lines
        assert any(line.startswith("Mort_splineCoeffs_1<-rbind(c(") for line in lines)


class TestPythonTableLines:
    def test_inline_lookup(self):
        lines = PythonProfile().table_lines(lookup_table(), TableFormat.INLINE)
        assert lines == [
            'Mort_headers = ["Age","Male"]',
            "Mort = [[0.0,0.5],[1.0,0.25],[2.0,0.125]]",
        ]

    def test_csv_lookup(self):
        lines = PythonProfile().table_lines(lookup_table(), TableFormat.CSV)
        assert lines[1] == 'Mort = np.loadtxt("Mort.csv",delimiter=",",skiprows=1,ndmin=2)'

    def test_matrix_is_one_based(self):
        profile = PythonProfile()
        table = matrix_table()
        lines = profile.table_lines(table, TableFormat.INLINE)
        assert lines[-1] == "Transdata = oneBased(Trans)"
        assert profile.table_helpers(table) == ("oneBased",)
        assert profile.table_helpers(lookup_table()) == ()


class TestRRuntime:
    """Emitted R helpers stop on tables they cannot read."""

    def test_empty_tables_stop(self):
        profile = RProfile()
        assert "numRows==0 ||" in profile.runtime_helper("lookupTable")
        assert "nrow(data)==0 ||" in profile.runtime_helper("calcTableEV")
