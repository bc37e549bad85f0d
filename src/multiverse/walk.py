"""
Generic traversal and rewriting of statement trees.

Two primitives cover every pass the engine needs:
    - walk():     depth-first, pre-order iteration over every statement,
                  with the chain of enclosing statements
    - postwalk(): bottom-up rebuild, letting a callback replace any node

Both descend into every branch and loop body regardless of whether it
would be reached at run time.
"""

from __future__ import annotations

from typing import Callable, Iterator, Tuple

from multiverse.statements import (
    Statement,
    Block,
    Conditional,
    Loop,
    WhileLoop,
    ChoiceMarker,
    MeasurementMarker,
)


def children(statement: Statement) -> Tuple[Statement, ...]:
    """Direct child statements, in source order."""
    if isinstance(statement, Block):
        return statement.statements
    if isinstance(statement, Conditional):
        return (statement.body, statement.orelse)
    if isinstance(statement, (Loop, WhileLoop)):
        return (statement.body,)
    # Markers are leaves: their declaration is inspected, not descended into.
    return ()


def walk(statement: Statement, ancestors: Tuple[Statement, ...] = ()) -> Iterator[Tuple[Statement, Tuple[Statement, ...]]]:
    """
    Yield `(statement, ancestors)` pairs in depth-first pre-order.

    `ancestors` runs from the root down to the direct parent.
    """
    yield statement, ancestors
    inner = ancestors + (statement,)
    for child in children(statement):
        yield from walk(child, inner)


def postwalk(statement: Statement, visit: Callable[[Statement], Statement]) -> Statement:
    """
    Rebuild `statement` bottom-up, passing every node to `visit`.

    Children are rewritten before their parent is visited, so `visit`
    always sees a node whose subtrees are already rewritten. `visit`
    returns the node unchanged to keep it.
    """
    if isinstance(statement, Block):
        rebuilt = Block(tuple(postwalk(s, visit) for s in statement.statements))
    elif isinstance(statement, Conditional):
        rebuilt = Conditional(
            test=statement.test,
            body=_as_block(postwalk(statement.body, visit)),
            orelse=_as_block(postwalk(statement.orelse, visit)),
        )
    elif isinstance(statement, Loop):
        rebuilt = Loop(
            target=statement.target,
            iterable=statement.iterable,
            body=_as_block(postwalk(statement.body, visit)),
        )
    elif isinstance(statement, WhileLoop):
        rebuilt = WhileLoop(
            test=statement.test,
            body=_as_block(postwalk(statement.body, visit)),
        )
    else:
        rebuilt = statement
    return visit(rebuilt)


def _as_block(statement: Statement) -> Block:
    if isinstance(statement, Block):
        return statement
    return Block((statement,))


def is_marker(statement: Statement) -> bool:
    return isinstance(statement, (ChoiceMarker, MeasurementMarker))


def nesting_depth(statement: Statement) -> int:
    """Number of enclosing conditionals/loops around the deepest statement."""
    deepest = 0
    for _, ancestors in walk(statement):
        depth = sum(1 for a in ancestors if isinstance(a, (Conditional, Loop, WhileLoop)))
        deepest = max(deepest, depth)
    return deepest


__all__ = ["children", "walk", "postwalk", "is_marker", "nesting_depth"]
