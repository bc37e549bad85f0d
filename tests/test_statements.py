"""
Tests for the statement tree and its generic traversal.

These tests verify:
    - Statement objects and their defaults
    - walk() visits every statement, at every depth, in source order
    - postwalk() rebuilds trees bottom-up without touching the original
"""

import pytest
from multiverse.expressions import BinaryExpression, BinaryOperator, Literal, VariableReference
from multiverse.statements import (
    Assignment,
    Block,
    ChoiceMarker,
    Conditional,
    ExpressionStatement,
    Loop,
    MeasurementMarker,
    WhileLoop,
)
from multiverse.walk import children, walk, postwalk, is_marker, nesting_depth


def _nested_tree() -> Block:
    return Block((
        Assignment("n", Literal(0)),
        Conditional(
            test=VariableReference("flag"),
            body=Block((
                Loop("i", VariableReference("items"), Block((
                    MeasurementMarker(Assignment("m", VariableReference("i"))),
                ))),
            )),
            orelse=Block((ChoiceMarker(Assignment("c", Literal([1, 2]))),)),
        ),
    ))


class TestStatements:
    """Test statement objects."""

    def test_conditional_default_orelse(self):
        cond = Conditional(test=Literal(True), body=Block())
        assert cond.orelse == Block()

    def test_statements_immutable(self):
        assign = Assignment("x", Literal(1))
        with pytest.raises(AttributeError):
            assign.target = "y"

    def test_marker_wraps_any_statement(self):
        """Markers accept malformed declarations; the scanner rejects them."""
        marker = ChoiceMarker(ExpressionStatement(Literal(3)))
        assert isinstance(marker.declaration, ExpressionStatement)


class TestWalk:
    """Test depth-first traversal."""

    def test_children(self):
        loop = Loop("i", Literal([]), Block())
        assert children(loop) == (Block(),)
        assert children(Assignment("x", Literal(1))) == ()

    def test_walk_reaches_every_depth(self):
        kinds = [type(s).__name__ for s, _ in walk(_nested_tree())]
        assert kinds == [
            "Block",
            "Assignment",
            "Conditional",
            "Block",
            "Loop",
            "Block",
            "MeasurementMarker",
            "Block",
            "ChoiceMarker",
        ]

    def test_walk_reports_ancestors(self):
        found = {
            type(s).__name__: [type(a).__name__ for a in ancestors]
            for s, ancestors in walk(_nested_tree())
            if is_marker(s)
        }
        assert found["MeasurementMarker"] == ["Block", "Conditional", "Block", "Loop", "Block"]
        assert found["ChoiceMarker"] == ["Block", "Conditional", "Block"]

    def test_nesting_depth(self):
        assert nesting_depth(_nested_tree()) == 2
        assert nesting_depth(Block((Assignment("x", Literal(1)),))) == 0

    def test_while_loop_is_descended(self):
        tree = Block((WhileLoop(Literal(False), Block((Assignment("x", Literal(1)),))),))
        assert any(isinstance(s, Assignment) for s, _ in walk(tree))


class TestPostwalk:
    """Test bottom-up rewriting."""

    def test_identity_rewrite_preserves_tree(self):
        tree = _nested_tree()
        assert postwalk(tree, lambda s: s) == tree

    def test_rewrite_replaces_nested_nodes(self):
        def bump(statement):
            if isinstance(statement, Assignment) and statement.target == "n":
                return Assignment("n", Literal(1))
            return statement

        tree = _nested_tree()
        rewritten = postwalk(tree, bump)
        assert rewritten.statements[0] == Assignment("n", Literal(1))
        # The original is untouched
        assert tree.statements[0] == Assignment("n", Literal(0))

    def test_replacement_in_branch_is_wrapped_in_block(self):
        def unwrap(statement):
            if isinstance(statement, Block) and len(statement.statements) == 1 \
                    and isinstance(statement.statements[0], Assignment):
                return statement.statements[0]
            return statement

        tree = Block((
            Conditional(
                test=BinaryExpression(BinaryOperator.EQUALS, VariableReference("a"), Literal(0)),
                body=Block((Assignment("x", Literal(1)),)),
            ),
        ))
        rewritten = postwalk(tree, unwrap)
        assert rewritten.statements[0].body == Block((Assignment("x", Literal(1)),))
