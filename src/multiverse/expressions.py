"""
Expression System for Analysis Procedures

Every value computed inside an analysis procedure (choice possibilities,
measurement values, conditions, arguments) is represented as an
Abstract Syntax Tree (AST), never as a string or a compiled code object.

This ensures:
    - Procedures can be scanned for choices/measurements structurally
    - One procedure can be rewritten into many universes
    - Serialization capability

ARCHITECTURAL RULE:
    Expressions are structure only.
    Evaluation lives in the interpreter layer.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple


class Expression(ABC):
    """
    Base class for all AST expressions.

    This is intentionally minimal.
    It exists to provide type-safety for the expression hierarchy.

    DO NOT:
        - Add evaluation logic here (belongs in interpreter layer)
        - Add string representations (belongs in backends)

    This class is structure only.
    """
    pass


class BinaryOperator(Enum):
    """
    Binary operators supported in procedure expressions.

    AND / OR short-circuit like their Python counterparts.
    """

    # Logical operators
    AND = "AND"
    OR = "OR"

    # Comparison operators
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    LESS_THAN = "<"
    LESS_EQUAL = "<="
    IN = "in"
    NOT_IN = "not in"
    IS = "is"
    IS_NOT = "is not"

    # Arithmetic operators
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    FLOOR_DIVIDE = "//"
    MODULO = "%"
    POWER = "**"


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Represents a binary logical, comparison or arithmetic expression.

    Example:
        x + 3

    Becomes:
        BinaryExpression(
            operator=BinaryOperator.ADD,
            left=VariableReference("x"),
            right=Literal(3)
        )

    IMPORTANT:
        This object is immutable (frozen=True).
        It does NOT evaluate itself.
    """

    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class Comparison(Expression):
    """
    A chained comparison such as `0 < f() < 2`.

    Becomes:
        Comparison(
            operands=(Literal(0), FunctionCall(VariableReference("f")), Literal(2)),
            operators=(BinaryOperator.LESS_THAN, BinaryOperator.LESS_THAN)
        )

    Each operand is evaluated at most once, left to right, and evaluation
    stops at the first comparison that is false.
    `len(operands) == len(operators) + 1`.
    """

    operands: Tuple[Expression, ...]
    operators: Tuple[BinaryOperator, ...]


@dataclass(frozen=True)
class VariableReference(Expression):
    """
    References a name.

    The name is looked up at evaluation time: first in the procedure's
    own local scope, then in the outer environment.

    IMPORTANT:
        This object does NOT validate that the name exists.
    """

    name: str


@dataclass(frozen=True)
class Literal(Expression):
    """
    Represents a literal constant value.

    Examples:
        - 1
        - -0.5
        - "treated"
        - True
        - None
    """

    value: Any


class UnaryOperator(Enum):
    """Unary operators."""
    NOT = "NOT"
    NEGATE = "-"
    POSITIVE = "+"


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """
    Represents a unary operation.

    Example:
        not (x > 0)

    Becomes:
        UnaryExpression(
            operator=UnaryOperator.NOT,
            operand=BinaryExpression(...)
        )
    """

    operator: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class FunctionCall(Expression):
    """
    Calls whatever the `function` expression evaluates to.

    Example:
        mean(c, axis=0)

    Becomes:
        FunctionCall(
            function=VariableReference("mean"),
            arguments=(VariableReference("c"),),
            keywords=(("axis", Literal(0)),)
        )
    """

    function: Expression
    arguments: Tuple[Expression, ...] = ()
    keywords: Tuple[Tuple[str, Expression], ...] = ()


@dataclass(frozen=True)
class AttributeAccess(Expression):
    """Reads `value.attribute`."""

    value: Expression
    attribute: str


@dataclass(frozen=True)
class Subscript(Expression):
    """Reads `value[index]`."""

    value: Expression
    index: Expression


@dataclass(frozen=True)
class ListExpression(Expression):
    """Builds a fresh list on every evaluation."""

    elements: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class TupleExpression(Expression):
    elements: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class DictExpression(Expression):
    """
    Builds a fresh dict on every evaluation.

    `keys` and `values` are index-aligned.
    """

    keys: Tuple[Expression, ...] = ()
    values: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ConditionalExpression(Expression):
    """
    `body if test else orelse`.

    Only the selected branch is evaluated.
    """

    test: Expression
    body: Expression
    orelse: Expression


@dataclass(frozen=True)
class Lambda(Expression):
    """
    An anonymous function of positional parameters.

    The body closes over the scope the lambda is evaluated in, so
    `filter(lambda row: row["a"] > threshold, data)` sees `threshold`.
    """

    parameters: Tuple[str, ...]
    body: Expression


@dataclass(frozen=True)
class ListComprehension(Expression):
    """
    `[element for target in iterable if condition ...]`

    A single generator clause. The target is bound in its own scope
    and does not leak into the enclosing procedure.
    """

    element: Expression
    target: str
    iterable: Expression
    conditions: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ChoiceValue(Expression):
    """
    Reads the concrete value of choice `name` from the universe's
    choice assignment.

    Only appears in compiled universe templates, never in a procedure
    handed to the engine.
    """

    name: str
