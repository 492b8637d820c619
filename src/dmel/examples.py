"""
Example model builder for demos and tests.

Builds a small three-state Markov cohort model (Healthy, Sick, Dead) that
exercises every table type: a linear mortality lookup, a cubic-spline
utility lookup, a distribution table and a transition matrix.
"""
from dmel.model import (
    Model,
    ModelMetadata,
    ModelType,
    Parameter,
    SimulationType,
    Table,
    TableType,
    Variable,
)
from dmel.numeric import Numeric


def build_example_markov_model(start_age: int = 40) -> Model:
    model = Model(
        name="Example Markov Model",
        model_type=ModelType.MARKOV,
        sim_type=SimulationType.COHORT,
        metadata=ModelMetadata(
            author="Example Author",
            date_created="2024-01-15",
            version_created="0.1.0",
        ),
    )

    # Background mortality by age, interpolated linearly
    model.add_table(Table(
        name="Mort",
        type=TableType.LOOKUP,
        headers=["Age", "Male", "Female"],
        data=[
            [40, 0.0021, 0.0014],
            [50, 0.0045, 0.0029],
            [60, 0.0098, 0.0061],
            [70, 0.0241, 0.0152],
            [80, 0.0653, 0.0447],
        ],
        lookup_method="Interpolate",
        interpolate="Linear",
        extrapolate="Right only",
        notes="Annual probability of death",
    ))

    # Utility by years since diagnosis, smoothed with a natural spline
    model.add_table(Table(
        name="Util",
        type=TableType.LOOKUP,
        headers=["Years", "Sick"],
        data=[[0, 0.60], [1, 0.65], [3, 0.72], [5, 0.74]],
        lookup_method="Interpolate",
        interpolate="Cubic Splines",
        boundary="Natural",
    ))

    # Length of hospital stay (days) and its probability
    model.add_table(Table(
        name="Stay",
        type=TableType.DISTRIBUTION,
        headers=["Days", "Prob"],
        data=[[1, 0.2], [2, 0.5], [3, 0.2], [7, 0.1]],
    ))

    # Transition probabilities between Healthy, Sick and Dead
    model.add_table(Table(
        name="Trans",
        type=TableType.MATRIX,
        headers=["Healthy", "Sick", "Dead"],
        data=[
            [0.90, 0.08, 0.02],
            [0.10, 0.80, 0.10],
            [0.00, 0.00, 1.00],
        ],
    ))

    model.parameters = [
        Parameter(name="startAge", expression=str(start_age), value=Numeric.integer(start_age),
                  notes="Cohort age at cycle 0"),
        Parameter(name="pSick", expression="rateToProb(0.05)"),
        Parameter(name="cHosp", expression="1200*Stay(1)", notes="Expected cost per admission"),
        Parameter(name="dr", expression="0.035", value=Numeric.real(0.035)),
    ]

    model.variables = [
        Variable(name="age", expression="startAge+t"),
        Variable(name="pDie", expression="Mort[age,'Male']"),
        Variable(name="uSick", expression="Util[t,1]"),
        Variable(name="pStay", expression="Trans[1,1]"),
        Variable(name="cCycle", expression="cHosp*trace[t,'Sick']/((1+dr)^t)"),
    ]

    model.check_names()
    return model
