"""
Statement Tree for Analysis Procedures

Defines the structure of an analysis procedure body:
    - Assignments (plain and augmented) and expression statements
    - Conditionals and loops
    - Blocks (ordered statement sequences)
    - Choice markers (analytic decision points)
    - Measurement markers (named outputs of interest)

ARCHITECTURAL RULE:
    These objects:
        - Are immutable (frozen dataclasses, tuples for sequences)
        - Know nothing about execution
        - Represent structure, not behavior

A procedure handed to the engine is a Block. It is never mutated;
every transformation builds a new tree.
"""

from dataclasses import dataclass
from typing import Tuple

from .expressions import BinaryOperator, Expression


class Statement:
    """Base class for all statements."""
    pass


@dataclass(frozen=True)
class Assignment(Statement):
    """
    Binds `target` to the value of an expression.

    Example:
        y = x + 3

    Becomes:
        Assignment(
            target="y",
            value=BinaryExpression(BinaryOperator.ADD, VariableReference("x"), Literal(3))
        )
    """

    target: str
    value: Expression


@dataclass(frozen=True)
class AugmentedAssignment(Statement):
    """
    `target op= value`

    Updates the current binding of `target` in place where its type
    supports it (`lst += [1]` extends the same list object), then rebinds
    `target` to the result, as Python does.
    """

    target: str
    operator: BinaryOperator
    value: Expression


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """Evaluates an expression for its side effects and drops the result."""

    expression: Expression


@dataclass(frozen=True)
class Block(Statement):
    """
    An ordered sequence of statements.

    The root of every analysis procedure is a Block.
    """

    statements: Tuple[Statement, ...] = ()


@dataclass(frozen=True)
class Conditional(Statement):
    """
    `if test: body else: orelse`

    `elif` chains are a Conditional nested in `orelse`.
    """

    test: Expression
    body: Block
    orelse: Block = Block()


@dataclass(frozen=True)
class Loop(Statement):
    """`for target in iterable: body`"""

    target: str
    iterable: Expression
    body: Block


@dataclass(frozen=True)
class WhileLoop(Statement):
    """`while test: body`"""

    test: Expression
    body: Block


@dataclass(frozen=True)
class ChoiceMarker(Statement):
    """
    Declares an analytic decision point.

    Well-formed shape:
        ChoiceMarker(Assignment(target="x", value=<possibilities>))

    The possibilities expression is resolved once, in the outer
    environment, before any universe exists. Any other declaration
    shape is kept as-is and rejected by the scanner.
    """

    declaration: Statement


@dataclass(frozen=True)
class MeasurementMarker(Statement):
    """
    Declares a named output of interest.

    Well-formed shape:
        MeasurementMarker(Assignment(target="y", value=<expression>))

    The value expression is evaluated inside each universe, in that
    universe's own scope, and only if execution reaches the marker.
    """

    declaration: Statement


@dataclass(frozen=True)
class RecordMeasurement(Statement):
    """
    Copies the current value of `name` into the universe's result
    accumulator.

    Only appears in compiled universe templates.
    """

    name: str
