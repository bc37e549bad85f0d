"""
Universe compiler.

Rewrites a validated procedure ONCE into a universe template:
    - every choice marker becomes an assignment reading its concrete
      value from the universe's choice assignment
    - every measurement marker becomes its assignment followed by a
      RecordMeasurement of the same name

The template is then instantiated per choice assignment. Compiled volume
is therefore independent of how many universes the multiverse has.

Compilation is purely structural and never fails. Faults raised by user
code surface only when a universe is invoked, and are not caught here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from multiverse.expressions import ChoiceValue
from multiverse.interpreter import Frame, execute, outer_scope
from multiverse.statements import (
    Assignment,
    Block,
    ChoiceMarker,
    MeasurementMarker,
    RecordMeasurement,
    Statement,
)
from multiverse.walk import postwalk


def _strip_markers(statement: Statement) -> Statement:
    if isinstance(statement, ChoiceMarker):
        name = statement.declaration.target
        return Assignment(name, ChoiceValue(name))
    if isinstance(statement, MeasurementMarker):
        declaration = statement.declaration
        return Block((declaration, RecordMeasurement(declaration.target)))
    return statement


@dataclass(frozen=True)
class UniverseTemplate:
    """
    A marker-free procedure, parameterized by a choice assignment.

    Properties:
        body: The rewritten procedure
        environment: Outer scope every universe's local scope chains onto
    """

    body: Block
    environment: Optional[Mapping[str, Any]] = None

    def run(self, choice_values: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Execute the template for one choice assignment.

        A fresh local scope and a fresh accumulator are created per call;
        nothing is shared between calls.
        """
        accumulator: Dict[str, Any] = {}
        frame = Frame(
            scope=outer_scope(self.environment).new_child(),
            choice_values=choice_values,
            accumulator=accumulator,
        )
        execute(self.body, frame)
        return accumulator

    def instantiate(self, choice_values: Mapping[str, Any]) -> "Universe":
        return Universe(self, dict(choice_values))


@dataclass(frozen=True, eq=False)
class Universe:
    """
    One executable instance of the procedure, bound to one choice assignment.

    Calling it takes no arguments and returns {measurement id: value} for
    the measurements actually reached on this execution path. Every call
    recomputes from scratch.
    """

    template: UniverseTemplate
    choice_values: Dict[str, Any]

    def __call__(self) -> Dict[str, Any]:
        return self.template.run(self.choice_values)


def compile_template(tree: Block, environment: Optional[Mapping[str, Any]] = None) -> UniverseTemplate:
    """
    Build the universe template for a validated procedure.

    `tree` must already have passed the scanner; markers are assumed
    well-formed.
    """
    body = postwalk(tree, _strip_markers)
    if not isinstance(body, Block):
        body = Block((body,))
    return UniverseTemplate(body=body, environment=environment)


__all__ = ["UniverseTemplate", "Universe", "compile_template"]
