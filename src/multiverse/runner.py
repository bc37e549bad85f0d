"""
Multiverse construction and exploration.

Construction (eager, single pass, nothing runs):
    enter(tree)         scan -> product -> compile -> Multiverse
    explore_tree(tree)  enter, then explore every universe
    enter_source / explore_source take Python source instead of a tree

Exploration:
    explore(m, i)           run universe i, return its record (m untouched)
    explore_inplace(m, i)   run universe i, overwrite slot i
    explore_inplace(m)      every universe, in increasing index order

Nothing is memoized: every call re-runs the universe from scratch.
Faults raised by user code propagate unchanged and stop the loop; slots
after the failing index keep whatever they held before.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from multiverse.choice_set import build_choice_assignments
from multiverse.compiler import compile_template
from multiverse.frontend import parse_procedure
from multiverse.model import Multiverse
from multiverse.missing import MISSING
from multiverse.scanner import scan
from multiverse.statements import Block


def enter(tree: Block, environment: Optional[Mapping[str, Any]] = None) -> Multiverse:
    """
    Build a multiverse from an analysis procedure without running it.

    Args:
        tree: The analysis procedure
        environment: Outer scope (functions, modules, constants) visible to
            the procedure and used to resolve choice possibilities

    Returns:
        Multiverse with every measurement slot unset (None)

    Raises:
        ConstructionError subclass if the procedure is invalid
    """
    declarations = scan(tree, environment)
    assignments = build_choice_assignments(declarations.choices)
    template = compile_template(tree, environment)
    return Multiverse(
        choices=tuple(declarations.choices),
        measurements=tuple(declarations.measurements),
        universes=[template.instantiate(a) for a in assignments],
        choice_values=assignments,
        measurement_values=[None] * len(assignments),
    )


def explore_tree(tree: Block, environment: Optional[Mapping[str, Any]] = None) -> Multiverse:
    """enter() followed by explore_inplace() over every universe."""
    return explore_inplace(enter(tree, environment))


def enter_source(source: str, environment: Optional[Mapping[str, Any]] = None) -> Multiverse:
    """enter() on a procedure written as Python source (see multiverse.frontend)."""
    return enter(parse_procedure(source), environment)


def explore_source(source: str, environment: Optional[Mapping[str, Any]] = None) -> Multiverse:
    return explore_tree(parse_procedure(source), environment)


def explore(multiverse: Multiverse, index: int) -> Dict[str, Any]:
    """
    Run universe `index` and return its full measurement record.

    Measurements not reached on this universe's path are MISSING.
    The multiverse is not modified.
    """
    universe = multiverse.universes[multiverse.check_index(index)]
    reached = universe()
    return {name: reached.get(name, MISSING) for name in multiverse.measurements}


def explore_inplace(multiverse: Multiverse, index: Optional[int] = None) -> Multiverse:
    """
    Run one universe (or all of them) and store the results.

    With `index`, overwrites that slot. Without, runs every index in
    increasing order. Returns the same multiverse.
    """
    if index is None:
        for i in range(len(multiverse)):
            multiverse.store_record(i, explore(multiverse, i))
    else:
        multiverse.store_record(index, explore(multiverse, index))
    return multiverse


__all__ = [
    "enter",
    "enter_source",
    "explore_tree",
    "explore_source",
    "explore",
    "explore_inplace",
]
