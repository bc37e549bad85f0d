"""
Procedure Analyzer: early diagnostics and inventory of analysis procedures.

This module provides lightweight analysis of a procedure before (or
instead of) building its multiverse:
    - Statement inventory and nesting depth
    - Declared choices and measurements
    - Declarations that sit under a conditional branch or loop
    - Expected universe count, and how many of those universes may be
      redundant because a conditional choice cannot affect them
    - Warning flags

IMPORTANT: This is a read-only report. It does NOT change how the
multiverse is built; conditional choices are always multiplied in.
"""

from __future__ import annotations

import warnings
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from multiverse.choice_set import count_assignments
from multiverse.errors import ConditionalDeclarationWarning
from multiverse.scanner import scan
from multiverse.statements import Block, ChoiceMarker, MeasurementMarker
from multiverse.walk import walk, nesting_depth, is_marker


@dataclass
class TreeReport:
    """Analysis report for one procedure."""

    total_statements: int = 0
    statement_kinds: Dict[str, int] = field(default_factory=dict)
    max_nesting_depth: int = 0

    choices: Dict[str, int] = field(default_factory=dict)  # id -> number of possibilities
    measurements: List[str] = field(default_factory=list)
    conditional_choices: List[str] = field(default_factory=list)
    conditional_measurements: List[str] = field(default_factory=list)

    universe_count: int = 0
    # Upper bound on universes that only differ in a choice declared under a branch
    possibly_redundant_universes: int = 0

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_tree(tree: Block, environment: Optional[Mapping[str, Any]] = None) -> TreeReport:
    """
    Analyze a procedure.

    Validation is the scanner's: an invalid procedure raises the same
    ConstructionError that enter() would.

    Returns a TreeReport with metrics and warnings.
    """
    report = TreeReport()

    kinds: Counter = Counter()
    for statement, _ in walk(tree):
        if isinstance(statement, Block):
            continue
        kinds[type(statement).__name__] += 1
    report.statement_kinds = dict(kinds)
    report.total_statements = sum(kinds.values())
    report.max_nesting_depth = nesting_depth(tree)

    # The scanner warns about conditional declarations; the report carries them instead.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConditionalDeclarationWarning)
        declarations = scan(tree, environment)

    report.choices = {name: len(p) for name, p in declarations.choices.items()}
    report.measurements = list(declarations.measurements)
    report.conditional_choices = [n for n in declarations.conditional if n in declarations.choices]
    report.conditional_measurements = [n for n in declarations.conditional if n in report.measurements]
    report.universe_count = count_assignments(declarations.choices)

    # Each conditional choice with k values can turn one meaningful universe
    # into k; at most (k - 1)/k of the product is redundant per such choice.
    if report.conditional_choices:
        distinct = report.universe_count
        for name in report.conditional_choices:
            distinct //= report.choices[name]
        report.possibly_redundant_universes = report.universe_count - distinct

    # =========================================================================
    # WARNING FLAGS
    # =========================================================================

    for name in report.conditional_choices:
        report.add_warning(
            f"Choice '{name}' is declared under a conditional branch or loop; "
            f"universes differing only in '{name}' may be redundant"
        )

    for name in report.conditional_measurements:
        report.add_warning(
            f"Measurement '{name}' is declared under a conditional branch or loop; "
            f"it will be missing where the branch is not taken"
        )

    marker_count = sum(1 for s, _ in walk(tree) if is_marker(s))
    if report.total_statements == marker_count:
        report.add_warning("Procedure contains only choice/measurement declarations")

    if report.universe_count > 10_000:
        report.add_warning(f"Large multiverse: {report.universe_count} universes")

    return report


def count_markers(tree: Block) -> Dict[str, int]:
    """Raw number of choice and measurement markers, valid or not."""
    counts = {"choices": 0, "measurements": 0}
    for statement, _ in walk(tree):
        if isinstance(statement, ChoiceMarker):
            counts["choices"] += 1
        elif isinstance(statement, MeasurementMarker):
            counts["measurements"] += 1
    return counts


__all__ = ["TreeReport", "analyze_tree", "count_markers"]
