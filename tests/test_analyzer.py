"""
Tests for the Model Analyzer.

Tests verify that the analyzer correctly:
    - Inventories tables and symbol usage
    - Detects unknown symbols and unused declarations
    - Finds circular definitions
    - Measures expression complexity
    - Reports expressions it cannot scan
"""

from dmel.analyzer import analyze_model
from dmel.examples import build_example_markov_model
from dmel.model import Model, Parameter, Table, TableType, Variable
from dmel.translator import SymbolKind


def small_model(parameters=(), variables=()) -> Model:
    return Model(
        name="Small",
        parameters=list(parameters),
        variables=list(variables),
        tables=[
            Table(name="Mort", type=TableType.LOOKUP, headers=["Age", "Male"],
                  data=[[0, 0.1], [50, 0.2]]),
        ],
    )


def test_example_model_inventory():
    """The example model declares every table type and uses every table."""
    report = analyze_model(build_example_markov_model())

    assert report.model_name == "Example Markov Model"
    assert report.total_parameters == 4
    assert report.total_variables == 5
    assert report.total_tables == 4
    assert report.tables_by_type == {"Lookup": 2, "Distribution": 1, "Matrix": 1}
    assert report.unknown_symbols == {}
    assert report.unused_tables == set()
    assert report.unused_variables == {"pDie", "uSick", "pStay", "cCycle"}
    assert not report.has_cycles


def test_symbol_usage():
    """Usage is counted per expression, grouped by symbol kind."""
    report = analyze_model(build_example_markov_model())

    assert report.used(SymbolKind.TABLE_REF) == {"Mort", "Util", "Stay", "Trans"}
    assert report.used(SymbolKind.FUNCTION_CALL) == {"rateToProb"}
    assert report.used(SymbolKind.TRACE_REF) == {"trace"}
    assert report.symbol_usage["variable"] == {"age": 1}


def test_unknown_symbols():
    """Identifiers the translator would reject are reported per owner."""
    model = small_model(variables=[Variable(name="x", expression="foo*2+Mort[1,1]")])
    report = analyze_model(model)

    assert report.unknown_symbols == {"x": {"foo"}}
    assert "Unknown symbols in 'x': foo" in report.warnings


def test_selectors_and_bare_headers_are_known():
    """Distribution selectors and bare lookup headers are not unknown."""
    model = small_model(variables=[
        Variable(name="x", expression="Norm(0,1,~)+Mort[t,Male]"),
    ])
    report = analyze_model(model)

    assert report.unknown_symbols == {}
    assert report.used(SymbolKind.DISTRIBUTION_CALL) == {"Norm"}


def test_headers_known_only_in_column_position():
    """A bare header outside a lookup's column argument is unknown."""
    model = small_model(variables=[
        Variable(name="x", expression="Male*2"),
        Variable(name="y", expression="Mort[Mort[t,Male],Male]"),
        Variable(name="z", expression="Mort[Male,Age]"),
    ])
    report = analyze_model(model)

    assert report.unknown_symbols == {"x": {"Male"}, "z": {"Male"}}


def test_unused_declarations():
    """Declared but never referenced variables and tables are flagged."""
    model = small_model(variables=[Variable(name="x", expression="1"), Variable(name="y", expression="x")])
    report = analyze_model(model)

    assert report.unused_variables == {"y"}
    assert report.unused_tables == {"Mort"}
    assert "Unused tables: Mort" in report.warnings


def test_cycles():
    """Variables defined in terms of each other form a cycle."""
    model = small_model(variables=[
        Variable(name="a", expression="b+1"),
        Variable(name="b", expression="a*2"),
    ])
    report = analyze_model(model)

    assert report.has_cycles
    assert report.cycle_example == ["a", "b", "a"]
    assert "Circular definition: a -> b -> a" in report.warnings


def test_parameter_depending_on_variable():
    """Parameters are evaluated once and should not read variables."""
    model = small_model(
        parameters=[Parameter(name="p", expression="age*2")],
        variables=[Variable(name="age", expression="40+t")],
    )
    report = analyze_model(model)

    assert "Parameter 'p' depends on variables: age" in report.warnings


def test_expression_complexity():
    """Nesting depth and word counts are measured."""
    deep = "exp(" * 12 + "1" + ")" * 12
    model = small_model(variables=[Variable(name="x", expression=deep)])
    report = analyze_model(model)

    assert report.max_nesting_depth == 12
    assert report.total_words == 13
    assert any("nesting depth 12" in w for w in report.warnings)


def test_unscannable_expression():
    """An expression that cannot be scanned is reported, not raised."""
    model = small_model(variables=[
        Variable(name="bad", expression="'abc"),
        Variable(name="ok", expression="bad+1"),
    ])
    report = analyze_model(model)

    assert any(w.startswith("Cannot scan 'bad'") for w in report.warnings)
    assert report.unused_variables == {"ok"}


def test_no_warnings_clean_model():
    """A model whose declarations are all used has no warnings."""
    model = small_model(
        parameters=[Parameter(name="p", expression="0.5")],
        variables=[
            Variable(name="x", expression="Mort[t,'Male']*p"),
            Variable(name="y", expression="logit(x)"),
            Variable(name="z", expression="y+x"),
        ],
    )
    model.variables.append(Variable(name="w", expression="z"))
    report = analyze_model(model)

    assert report.unused_variables == {"w"}
    assert report.warnings == ["Unused variables: w"]
