"""
Example analysis procedures.

    build_example_procedure():  one choice, one measurement
        x = choose([1, 2])
        y = measure(x + 3)

    build_nested_procedure():   a choice and a measurement under branches
        a = choose([-0.5, 0.0, 0.5])
        if a > 0:
            b = choose([-0.5, 0.0, 0.5])
        if a == 0:
            flag = measure(True)
        total = measure(a)

    THRESHOLD_SOURCE / THRESHOLD_ENVIRONMENT: a small subset-and-summarize
    analysis written as Python source, with a threshold choice nested in
    a branch.
"""
import statistics

from multiverse.expressions import (
    BinaryExpression,
    BinaryOperator,
    ListExpression,
    Literal,
    VariableReference,
)
from multiverse.statements import (
    Assignment,
    Block,
    ChoiceMarker,
    Conditional,
    MeasurementMarker,
)


def _values(*values) -> ListExpression:
    return ListExpression(tuple(Literal(v) for v in values))


def build_example_procedure() -> Block:
    return Block((
        ChoiceMarker(Assignment("x", _values(1, 2))),
        MeasurementMarker(Assignment(
            "y",
            BinaryExpression(BinaryOperator.ADD, VariableReference("x"), Literal(3)),
        )),
    ))


def build_nested_procedure(thresholds=(-0.5, 0.0, 0.5)) -> Block:
    a = VariableReference("a")
    return Block((
        ChoiceMarker(Assignment("a", _values(*thresholds))),
        Conditional(
            test=BinaryExpression(BinaryOperator.GREATER_THAN, a, Literal(0)),
            body=Block((ChoiceMarker(Assignment("b", _values(*thresholds))),)),
        ),
        Conditional(
            test=BinaryExpression(BinaryOperator.EQUALS, a, Literal(0)),
            body=Block((MeasurementMarker(Assignment("flag", Literal(True))),)),
        ),
        MeasurementMarker(Assignment("total", a)),
    ))


# Deterministic 10x10 grid: a and b take values -0.9 .. 0.9, c is the row number.
THRESHOLD_SOURCE = """
data = [{"a": (i % 10) / 5 - 0.9, "b": (i // 10) / 5 - 0.9, "c": i} for i in range(100)]
a_threshold = choose([-0.5, 0.0, 0.5])
if a_threshold > 0:
    b_threshold = choose([-0.5, 0.0, 0.5])
    b_outer_threshold = b_threshold
else:
    b_outer_threshold = 0.0
subset = [row for row in data if row["a"] > a_threshold and row["b"] > b_outer_threshold]
c = [row["c"] for row in subset]
mean_c = measure(statistics.mean(c))
std_c = measure(statistics.stdev(c))
z_c = measure(mean_c / std_c)
if a_threshold == 0:
    flag_zeros = measure(True)
"""

THRESHOLD_ENVIRONMENT = {"statistics": statistics}
