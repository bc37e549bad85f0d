"""
Tests for the annotation scanner/validator.

These tests verify:
    - Choices and measurements are found at every nesting depth
    - Possibilities are resolved once, in the outer environment
    - Every ConstructionError case
"""

import pytest
from multiverse.errors import (
    ConditionalDeclarationWarning,
    ConstructionError,
    DuplicateChoiceError,
    DuplicateMeasurementError,
    IdentifierCollisionError,
    InsufficientPossibilitiesError,
    MalformedChoiceError,
    MalformedMeasurementError,
    NoChoicesError,
    NoMeasurementsError,
    UnresolvedPossibilitiesError,
)
from multiverse.expressions import (
    BinaryExpression,
    BinaryOperator,
    FunctionCall,
    ListExpression,
    Literal,
    VariableReference,
)
from multiverse.examples import build_example_procedure, build_nested_procedure
from multiverse.scanner import scan, resolve_possibilities
from multiverse.statements import (
    Assignment,
    Block,
    ChoiceMarker,
    Conditional,
    ExpressionStatement,
    MeasurementMarker,
)


def _choose(name, *values):
    return ChoiceMarker(Assignment(name, ListExpression(tuple(Literal(v) for v in values))))


def _measure(name, expr=None):
    return MeasurementMarker(Assignment(name, expr or Literal(0)))


class TestScan:
    """Test declaration extraction."""

    def test_simple_procedure(self):
        result = scan(build_example_procedure())
        assert result.choices == {"x": [1, 2]}
        assert result.measurements == ["y"]
        assert result.conditional == []

    def test_nested_declarations_are_registered(self):
        """A choice under a branch is registered like a top-level one."""
        with pytest.warns(ConditionalDeclarationWarning):
            result = scan(build_nested_procedure())
        assert result.choice_ids == ["a", "b"]
        assert result.choices["b"] == [-0.5, 0.0, 0.5]
        assert result.measurements == ["flag", "total"]
        assert result.conditional == ["b", "flag"]

    def test_declaration_order_preserved(self):
        tree = Block((_choose("z", 1, 2), _choose("a", 3, 4), _measure("m2"), _measure("m1")))
        result = scan(tree)
        assert result.choice_ids == ["z", "a"]
        assert result.measurements == ["m2", "m1"]

    def test_possibilities_from_environment(self):
        tree = Block((
            ChoiceMarker(Assignment("k", FunctionCall(VariableReference("range"), (VariableReference("n"),)))),
            _measure("y"),
        ))
        result = scan(tree, {"n": 3})
        assert result.choices["k"] == [0, 1, 2]

    def test_possibilities_evaluated_once(self):
        calls = []

        def options():
            calls.append(1)
            return ["left", "right"]

        tree = Block((
            ChoiceMarker(Assignment("side", FunctionCall(VariableReference("options")))),
            _measure("y"),
        ))
        scan(tree, {"options": options})
        assert len(calls) == 1

    def test_block_local_names_not_visible(self):
        """Possibilities cannot see names assigned inside the procedure."""
        tree = Block((
            Assignment("local_options", ListExpression((Literal(1), Literal(2)))),
            ChoiceMarker(Assignment("x", VariableReference("local_options"))),
            _measure("y"),
        ))
        with pytest.raises(UnresolvedPossibilitiesError) as info:
            scan(tree)
        assert info.value.name == "x"
        assert isinstance(info.value.__cause__, NameError)

    def test_measurement_value_not_evaluated(self):
        tree = Block((_choose("x", 1, 2), _measure("y", VariableReference("not_defined_yet"))))
        assert scan(tree).measurements == ["y"]

    def test_resolve_possibilities(self):
        assert resolve_possibilities(range(3)) == [0, 1, 2]
        assert resolve_possibilities(7) == [7]
        assert resolve_possibilities((1, 2)) == [1, 2]

    def test_error_while_consuming_possibilities(self):
        """A TypeError raised inside a possibilities generator is not mistaken for a scalar."""
        def options():
            yield 1
            raise TypeError("generator failed")

        tree = Block((
            ChoiceMarker(Assignment("x", FunctionCall(VariableReference("options")))),
            _measure("y"),
        ))
        with pytest.raises(UnresolvedPossibilitiesError) as info:
            scan(tree, {"options": options})
        assert info.value.name == "x"
        assert isinstance(info.value.__cause__, TypeError)
        assert "generator failed" in str(info.value)

    def test_resolve_possibilities_propagates_iteration_errors(self):
        def broken():
            yield 1
            raise TypeError("generator failed")

        with pytest.raises(TypeError, match="generator failed"):
            resolve_possibilities(broken())


class TestValidation:
    """Each invalid procedure fails construction with its own error."""

    def test_malformed_choice(self):
        tree = Block((
            ChoiceMarker(ExpressionStatement(BinaryExpression(BinaryOperator.ADD, Literal(1), Literal(2)))),
            _measure("y"),
        ))
        with pytest.raises(MalformedChoiceError):
            scan(tree)

    def test_malformed_measurement(self):
        tree = Block((
            _choose("x", 1, 2),
            MeasurementMarker(ExpressionStatement(VariableReference("x"))),
        ))
        with pytest.raises(MalformedMeasurementError):
            scan(tree)

    def test_single_possibility(self):
        tree = Block((ChoiceMarker(Assignment("x", Literal(1))), _measure("y")))
        with pytest.raises(InsufficientPossibilitiesError) as info:
            scan(tree)
        assert info.value.count == 1

    def test_empty_possibilities(self):
        tree = Block((_choose("x"), _measure("y")))
        with pytest.raises(InsufficientPossibilitiesError):
            scan(tree)

    def test_duplicate_choice(self):
        tree = Block((_choose("x", 1, 2), _choose("x", 4, 5), _measure("y")))
        with pytest.raises(DuplicateChoiceError) as info:
            scan(tree)
        assert info.value.name == "x"

    def test_duplicate_choice_in_branch(self):
        tree = Block((
            _choose("x", 1, 2),
            Conditional(Literal(False), Block((_choose("x", 3, 4),))),
            _measure("y"),
        ))
        with pytest.raises(DuplicateChoiceError):
            scan(tree)

    def test_duplicate_measurement(self):
        tree = Block((_choose("x", 1, 2), _measure("y"), _measure("y")))
        with pytest.raises(DuplicateMeasurementError):
            scan(tree)

    def test_no_choices(self):
        with pytest.raises(NoChoicesError):
            scan(Block((_measure("y"),)))

    def test_no_measurements(self):
        with pytest.raises(NoMeasurementsError):
            scan(Block((_choose("x", 1, 2),)))

    def test_collision(self):
        tree = Block((_choose("x", 1, 2), _measure("x")))
        with pytest.raises(IdentifierCollisionError) as info:
            scan(tree)
        assert info.value.names == ("x",)

    def test_all_errors_are_construction_errors(self):
        with pytest.raises(ConstructionError):
            scan(Block())
