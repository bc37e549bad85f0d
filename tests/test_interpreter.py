"""
Tests for the statement-tree interpreter.

These tests verify:
    - Expression evaluation (operators, calls, closures, comprehensions)
    - Statement execution and scoping
    - Outer-environment lookup and builtins
    - Errors from evaluated code propagate unchanged
"""

import math

import pytest
from multiverse.expressions import (
    AttributeAccess,
    BinaryExpression,
    BinaryOperator,
    ChoiceValue,
    Comparison,
    ConditionalExpression,
    DictExpression,
    FunctionCall,
    Lambda,
    ListComprehension,
    ListExpression,
    Literal,
    Subscript,
    TupleExpression,
    UnaryExpression,
    UnaryOperator,
    VariableReference,
)
from multiverse.interpreter import Frame, evaluate, execute, outer_scope
from multiverse.statements import (
    Assignment,
    AugmentedAssignment,
    Block,
    ChoiceMarker,
    Conditional,
    ExpressionStatement,
    Loop,
    RecordMeasurement,
    WhileLoop,
)


def _frame(environment=None, **names) -> Frame:
    frame = Frame(outer_scope(environment).new_child(), accumulator={})
    frame.scope.update(names)
    return frame


def _binary(op, left, right):
    return BinaryExpression(op, left, right)


class TestEvaluate:
    """Test expression evaluation."""

    def test_arithmetic(self):
        expr = _binary(BinaryOperator.ADD, VariableReference("x"), Literal(3))
        assert evaluate(expr, _frame(x=2)) == 5

    @pytest.mark.parametrize("op, right, expected", [
        (BinaryOperator.SUBTRACT, 2, 4),
        (BinaryOperator.MULTIPLY, 2, 12),
        (BinaryOperator.DIVIDE, 4, 1.5),
        (BinaryOperator.FLOOR_DIVIDE, 4, 1),
        (BinaryOperator.MODULO, 4, 2),
        (BinaryOperator.POWER, 3, 216),
        (BinaryOperator.GREATER_THAN, 2, True),
        (BinaryOperator.LESS_EQUAL, 2, False),
        (BinaryOperator.NOT_EQUALS, 6, False),
    ])
    def test_binary_operators(self, op, right, expected):
        assert evaluate(_binary(op, Literal(6), Literal(right)), _frame()) == expected

    def test_membership(self):
        values = ListExpression((Literal(1), Literal(2)))
        assert evaluate(_binary(BinaryOperator.IN, Literal(2), values), _frame()) is True
        assert evaluate(_binary(BinaryOperator.NOT_IN, Literal(2), values), _frame()) is False

    def test_and_short_circuits(self):
        """The right operand is not evaluated when the left one is falsy."""
        expr = _binary(BinaryOperator.AND, Literal(False), VariableReference("undefined_name"))
        assert evaluate(expr, _frame()) is False

    def test_or_short_circuits(self):
        expr = _binary(BinaryOperator.OR, Literal(1), VariableReference("undefined_name"))
        assert evaluate(expr, _frame()) == 1

    def test_identity_operators(self):
        assert evaluate(_binary(BinaryOperator.IS, VariableReference("x"), Literal(None)), _frame(x=None)) is True
        assert evaluate(_binary(BinaryOperator.IS_NOT, VariableReference("x"), Literal(None)), _frame(x=0)) is True

    def test_chained_comparison_evaluates_operands_once(self):
        calls = []

        def middle():
            calls.append(1)
            return 1

        expr = Comparison(
            (Literal(0), FunctionCall(VariableReference("middle")), Literal(2)),
            (BinaryOperator.LESS_THAN, BinaryOperator.LESS_THAN),
        )
        assert evaluate(expr, _frame({"middle": middle})) is True
        assert calls == [1]

    def test_chained_comparison_short_circuits(self):
        expr = Comparison(
            (Literal(3), Literal(1), VariableReference("undefined_name")),
            (BinaryOperator.LESS_THAN, BinaryOperator.LESS_THAN),
        )
        assert evaluate(expr, _frame()) is False

    def test_unary(self):
        assert evaluate(UnaryExpression(UnaryOperator.NEGATE, Literal(0.5)), _frame()) == -0.5
        assert evaluate(UnaryExpression(UnaryOperator.NOT, Literal(0)), _frame()) is True

    def test_call_with_keywords(self):
        call = FunctionCall(
            VariableReference("round"),
            (Literal(3.14159),),
            (("ndigits", Literal(2)),),
        )
        assert evaluate(call, _frame()) == 3.14

    def test_environment_lookup(self):
        call = FunctionCall(AttributeAccess(VariableReference("math"), "sqrt"), (Literal(16),))
        assert evaluate(call, _frame({"math": math})) == 4.0

    def test_locals_shadow_environment(self):
        frame = _frame({"x": 1}, x=2)
        assert evaluate(VariableReference("x"), frame) == 2

    def test_undefined_name(self):
        with pytest.raises(NameError, match="undefined_name"):
            evaluate(VariableReference("undefined_name"), _frame())

    def test_containers_and_subscript(self):
        d = DictExpression((Literal("a"),), (Literal(1),))
        assert evaluate(Subscript(d, Literal("a")), _frame()) == 1
        assert evaluate(TupleExpression((Literal(1), Literal(2))), _frame()) == (1, 2)

    def test_containers_are_fresh(self):
        expr = ListExpression((Literal(1),))
        frame = _frame()
        assert evaluate(expr, frame) is not evaluate(expr, frame)

    def test_conditional_expression_is_lazy(self):
        expr = ConditionalExpression(Literal(True), Literal("yes"), VariableReference("undefined_name"))
        assert evaluate(expr, _frame()) == "yes"

    def test_lambda_closes_over_scope(self):
        keep = Lambda(("v",), _binary(BinaryOperator.GREATER_THAN, VariableReference("v"), VariableReference("t")))
        call = FunctionCall(
            VariableReference("list"),
            (FunctionCall(VariableReference("filter"), (keep, VariableReference("data"))),),
        )
        assert evaluate(call, _frame(t=1, data=[0, 1, 2, 3])) == [2, 3]

    def test_lambda_arity(self):
        function = evaluate(Lambda(("a", "b"), VariableReference("a")), _frame())
        with pytest.raises(TypeError):
            function(1)

    def test_list_comprehension(self):
        comp = ListComprehension(
            element=_binary(BinaryOperator.MULTIPLY, VariableReference("v"), Literal(10)),
            target="v",
            iterable=VariableReference("data"),
            conditions=(_binary(BinaryOperator.MODULO, VariableReference("v"), Literal(2)),),
        )
        frame = _frame(data=[1, 2, 3])
        assert evaluate(comp, frame) == [10, 30]
        # Comprehension targets do not leak
        assert "v" not in frame.scope

    def test_choice_value(self):
        frame = Frame(outer_scope(), choice_values={"x": 7})
        assert evaluate(ChoiceValue("x"), frame) == 7

    def test_errors_propagate_unchanged(self):
        expr = _binary(BinaryOperator.DIVIDE, Literal(1), Literal(0))
        with pytest.raises(ZeroDivisionError):
            evaluate(expr, _frame())


class TestExecute:
    """Test statement execution."""

    def test_assignment_and_record(self):
        frame = _frame()
        execute(Block((Assignment("y", Literal(4)), RecordMeasurement("y"))), frame)
        assert frame.scope["y"] == 4
        assert frame.accumulator == {"y": 4}

    def test_assignment_does_not_touch_environment(self):
        environment = {"x": 1}
        frame = _frame(environment)
        execute(Assignment("x", Literal(2)), frame)
        assert environment == {"x": 1}
        assert frame.scope["x"] == 2

    def test_augmented_assignment(self):
        frame = _frame(n=3)
        execute(AugmentedAssignment("n", BinaryOperator.MULTIPLY, Literal(4)), frame)
        assert frame.scope["n"] == 12

    def test_augmented_assignment_mutates_in_place(self):
        log = [1]
        frame = _frame(log=log)
        execute(AugmentedAssignment("log", BinaryOperator.ADD, ListExpression((Literal(2),))), frame)
        assert frame.scope["log"] is log
        assert log == [1, 2]

    def test_augmented_assignment_needs_binding(self):
        with pytest.raises(NameError):
            execute(AugmentedAssignment("n", BinaryOperator.ADD, Literal(1)), _frame())

    def test_conditional_branches(self):
        tree = Conditional(
            test=_binary(BinaryOperator.GREATER_THAN, VariableReference("a"), Literal(0)),
            body=Block((Assignment("side", Literal("body")),)),
            orelse=Block((Assignment("side", Literal("orelse")),)),
        )
        positive, negative = _frame(a=1), _frame(a=-1)
        execute(tree, positive)
        execute(tree, negative)
        assert positive.scope["side"] == "body"
        assert negative.scope["side"] == "orelse"

    def test_for_loop(self):
        frame = _frame(total=0)
        execute(Loop("i", FunctionCall(VariableReference("range"), (Literal(4),)), Block((
            Assignment("total", _binary(BinaryOperator.ADD, VariableReference("total"), VariableReference("i"))),
        ))), frame)
        assert frame.scope["total"] == 6
        assert frame.scope["i"] == 3

    def test_while_loop(self):
        frame = _frame(n=0)
        execute(WhileLoop(
            _binary(BinaryOperator.LESS_THAN, VariableReference("n"), Literal(5)),
            Block((Assignment("n", _binary(BinaryOperator.ADD, VariableReference("n"), Literal(2))),)),
        ), frame)
        assert frame.scope["n"] == 6

    def test_expression_statement_side_effect(self):
        seen = []
        frame = _frame({"seen": seen})
        execute(ExpressionStatement(FunctionCall(
            AttributeAccess(VariableReference("seen"), "append"), (Literal(1),),
        )), frame)
        assert seen == [1]

    def test_uncompiled_marker_rejected(self):
        with pytest.raises(TypeError, match="compiled"):
            execute(ChoiceMarker(Assignment("x", Literal([1, 2]))), _frame())
