"""
Interpreter for statement trees.

Executes a (compiled, marker-free) statement tree against a Frame:
    - scope:         local names chained onto the outer environment
    - choice_values: the universe's choice assignment (read by ChoiceValue)
    - accumulator:   the universe's measurement results (written by
                     RecordMeasurement)

Evaluation follows Python semantics: short-circuit AND/OR, chained
comparisons that evaluate each operand once, lazy branches,
lambdas closing over their defining scope. Errors raised by evaluated code
propagate unchanged.
"""

from __future__ import annotations

import builtins
import operator
from collections import ChainMap
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from multiverse.expressions import (
    Expression,
    BinaryExpression,
    BinaryOperator,
    Comparison,
    UnaryExpression,
    UnaryOperator,
    VariableReference,
    Literal,
    FunctionCall,
    AttributeAccess,
    Subscript,
    ListExpression,
    TupleExpression,
    DictExpression,
    ConditionalExpression,
    Lambda,
    ListComprehension,
    ChoiceValue,
)
from multiverse.statements import (
    Statement,
    Assignment,
    AugmentedAssignment,
    ExpressionStatement,
    Block,
    Conditional,
    Loop,
    WhileLoop,
    ChoiceMarker,
    MeasurementMarker,
    RecordMeasurement,
)


_BINARY_OPERATIONS = {
    BinaryOperator.EQUALS: operator.eq,
    BinaryOperator.NOT_EQUALS: operator.ne,
    BinaryOperator.GREATER_THAN: operator.gt,
    BinaryOperator.GREATER_EQUAL: operator.ge,
    BinaryOperator.LESS_THAN: operator.lt,
    BinaryOperator.LESS_EQUAL: operator.le,
    BinaryOperator.IN: lambda left, right: left in right,
    BinaryOperator.NOT_IN: lambda left, right: left not in right,
    BinaryOperator.IS: operator.is_,
    BinaryOperator.IS_NOT: operator.is_not,
    BinaryOperator.ADD: operator.add,
    BinaryOperator.SUBTRACT: operator.sub,
    BinaryOperator.MULTIPLY: operator.mul,
    BinaryOperator.DIVIDE: operator.truediv,
    BinaryOperator.FLOOR_DIVIDE: operator.floordiv,
    BinaryOperator.MODULO: operator.mod,
    BinaryOperator.POWER: operator.pow,
}

_INPLACE_OPERATIONS = {
    BinaryOperator.ADD: operator.iadd,
    BinaryOperator.SUBTRACT: operator.isub,
    BinaryOperator.MULTIPLY: operator.imul,
    BinaryOperator.DIVIDE: operator.itruediv,
    BinaryOperator.FLOOR_DIVIDE: operator.ifloordiv,
    BinaryOperator.MODULO: operator.imod,
    BinaryOperator.POWER: operator.ipow,
}

_UNARY_OPERATIONS = {
    UnaryOperator.NOT: operator.not_,
    UnaryOperator.NEGATE: operator.neg,
    UnaryOperator.POSITIVE: operator.pos,
}


def outer_scope(environment: Optional[Mapping[str, Any]] = None) -> ChainMap:
    """
    The outer (pre-execution) scope: the caller's environment, then builtins.

    The environment mapping itself is never written to.
    """
    if environment is None:
        return ChainMap(vars(builtins))
    return ChainMap(environment, vars(builtins))


@dataclass
class Frame:
    """Execution state for one run of a statement tree."""

    scope: ChainMap
    choice_values: Mapping[str, Any] = field(default_factory=dict)
    accumulator: Optional[Dict[str, Any]] = None

    def child(self, names: Dict[str, Any]) -> "Frame":
        """A frame with an inner scope layered over this one."""
        return Frame(self.scope.new_child(names), self.choice_values, self.accumulator)


def lookup(name: str, frame: Frame) -> Any:
    try:
        return frame.scope[name]
    except KeyError:
        raise NameError(f"name '{name}' is not defined") from None


def evaluate(expr: Expression, frame: Frame) -> Any:
    """Evaluate an expression in `frame`."""
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, VariableReference):
        return lookup(expr.name, frame)

    if isinstance(expr, BinaryExpression):
        if expr.operator == BinaryOperator.AND:
            left = evaluate(expr.left, frame)
            return evaluate(expr.right, frame) if left else left
        if expr.operator == BinaryOperator.OR:
            left = evaluate(expr.left, frame)
            return left if left else evaluate(expr.right, frame)
        left = evaluate(expr.left, frame)
        right = evaluate(expr.right, frame)
        return _BINARY_OPERATIONS[expr.operator](left, right)

    if isinstance(expr, Comparison):
        left = evaluate(expr.operands[0], frame)
        result = True
        for op, operand in zip(expr.operators, expr.operands[1:]):
            right = evaluate(operand, frame)
            result = _BINARY_OPERATIONS[op](left, right)
            if not result:
                return result
            left = right
        return result

    if isinstance(expr, UnaryExpression):
        return _UNARY_OPERATIONS[expr.operator](evaluate(expr.operand, frame))

    if isinstance(expr, FunctionCall):
        function = evaluate(expr.function, frame)
        arguments = [evaluate(a, frame) for a in expr.arguments]
        keywords = {name: evaluate(value, frame) for name, value in expr.keywords}
        return function(*arguments, **keywords)

    if isinstance(expr, AttributeAccess):
        return getattr(evaluate(expr.value, frame), expr.attribute)

    if isinstance(expr, Subscript):
        return evaluate(expr.value, frame)[evaluate(expr.index, frame)]

    if isinstance(expr, ListExpression):
        return [evaluate(e, frame) for e in expr.elements]

    if isinstance(expr, TupleExpression):
        return tuple(evaluate(e, frame) for e in expr.elements)

    if isinstance(expr, DictExpression):
        return {
            evaluate(k, frame): evaluate(v, frame)
            for k, v in zip(expr.keys, expr.values)
        }

    if isinstance(expr, ConditionalExpression):
        if evaluate(expr.test, frame):
            return evaluate(expr.body, frame)
        return evaluate(expr.orelse, frame)

    if isinstance(expr, Lambda):
        return _make_function(expr, frame)

    if isinstance(expr, ListComprehension):
        result = []
        for item in evaluate(expr.iterable, frame):
            inner = frame.child({expr.target: item})
            if all(evaluate(c, inner) for c in expr.conditions):
                result.append(evaluate(expr.element, inner))
        return result

    if isinstance(expr, ChoiceValue):
        return frame.choice_values[expr.name]

    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def _make_function(expr: Lambda, frame: Frame):
    parameters = expr.parameters

    def function(*args):
        if len(args) != len(parameters):
            raise TypeError(
                f"<lambda>() takes {len(parameters)} positional argument(s) "
                f"but {len(args)} were given"
            )
        return evaluate(expr.body, frame.child(dict(zip(parameters, args))))

    function.__name__ = "<lambda>"
    return function


def execute(statement: Statement, frame: Frame) -> None:
    """Execute a statement in `frame`, mutating its scope/accumulator."""
    if isinstance(statement, Block):
        for inner in statement.statements:
            execute(inner, frame)

    elif isinstance(statement, Assignment):
        frame.scope[statement.target] = evaluate(statement.value, frame)

    elif isinstance(statement, AugmentedAssignment):
        current = lookup(statement.target, frame)
        value = evaluate(statement.value, frame)
        frame.scope[statement.target] = _INPLACE_OPERATIONS[statement.operator](current, value)

    elif isinstance(statement, ExpressionStatement):
        evaluate(statement.expression, frame)

    elif isinstance(statement, Conditional):
        if evaluate(statement.test, frame):
            execute(statement.body, frame)
        else:
            execute(statement.orelse, frame)

    elif isinstance(statement, Loop):
        for item in evaluate(statement.iterable, frame):
            frame.scope[statement.target] = item
            execute(statement.body, frame)

    elif isinstance(statement, WhileLoop):
        while evaluate(statement.test, frame):
            execute(statement.body, frame)

    elif isinstance(statement, RecordMeasurement):
        frame.accumulator[statement.name] = lookup(statement.name, frame)

    elif isinstance(statement, (ChoiceMarker, MeasurementMarker)):
        raise TypeError(
            f"{type(statement).__name__} must be compiled into a universe before execution"
        )

    else:
        raise TypeError(f"Unsupported Statement type: {type(statement)}")


__all__ = ["Frame", "outer_scope", "lookup", "evaluate", "execute"]
