"""
Annotation scanner and validator.

Walks an analysis procedure once, depth-first, and extracts every choice
and measurement declaration, wherever it sits: a declaration inside a
conditional branch or loop body is registered exactly like a top-level one,
whether or not that branch would ever run.

This is Phase 1 of the engine. Choice possibilities are resolved here,
once, against the outer environment only; the procedure's own statements
have not run, so block-local names are not visible. Measurement values are
left untouched for Phase 2 (universe execution).
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from multiverse.errors import (
    ConditionalDeclarationWarning,
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
from multiverse.interpreter import Frame, evaluate, outer_scope
from multiverse.statements import (
    Assignment,
    Block,
    ChoiceMarker,
    Conditional,
    Loop,
    MeasurementMarker,
    Statement,
    WhileLoop,
)
from multiverse.walk import walk


@dataclass
class ScanResult:
    """
    Validated declarations of one procedure.

    Properties:
        choices:
            choice id -> resolved possibilities, in declaration order
        measurements:
            measurement ids, in declaration order
        conditional:
            ids (of either kind) declared under a conditional or loop
    """

    choices: Dict[str, List[Any]] = field(default_factory=dict)
    measurements: List[str] = field(default_factory=list)
    conditional: List[str] = field(default_factory=list)

    @property
    def choice_ids(self) -> List[str]:
        return list(self.choices)


def resolve_possibilities(value: Any) -> List[Any]:
    """
    Materialize a possibilities value as a list.

    A non-iterable value counts as a single possibility. Errors raised
    while an iterable is being consumed propagate.
    """
    try:
        iterator = iter(value)
    except TypeError:
        return [value]
    return list(iterator)


def _describe(statement: Statement) -> str:
    return type(statement).__name__


def _is_conditional(ancestors) -> bool:
    return any(isinstance(a, (Conditional, Loop, WhileLoop)) for a in ancestors)


def scan(tree: Block, environment: Optional[Mapping[str, Any]] = None) -> ScanResult:
    """
    Extract and validate choice/measurement declarations.

    Args:
        tree: The analysis procedure
        environment: Outer scope used to resolve choice possibilities

    Returns:
        ScanResult

    Raises:
        ConstructionError subclass on the first invalid declaration, or
        when the procedure has no choices, no measurements, or an id used
        as both.
    """
    outer = Frame(outer_scope(environment))
    result = ScanResult()

    for statement, ancestors in walk(tree):
        if isinstance(statement, ChoiceMarker):
            declaration = statement.declaration
            if not isinstance(declaration, Assignment):
                raise MalformedChoiceError(_describe(declaration))
            name = declaration.target
            if name in result.choices:
                raise DuplicateChoiceError(name)
            try:
                possibilities = resolve_possibilities(evaluate(declaration.value, outer))
            except Exception as e:
                raise UnresolvedPossibilitiesError(name, e) from e
            if len(possibilities) < 2:
                raise InsufficientPossibilitiesError(name, len(possibilities))
            result.choices[name] = possibilities

        elif isinstance(statement, MeasurementMarker):
            declaration = statement.declaration
            if not isinstance(declaration, Assignment):
                raise MalformedMeasurementError(_describe(declaration))
            name = declaration.target
            if name in result.measurements:
                raise DuplicateMeasurementError(name)
            result.measurements.append(name)

        else:
            continue

        if _is_conditional(ancestors):
            result.conditional.append(name)
            warnings.warn(
                f"'{name}' is declared inside a conditional branch or loop; "
                f"it is registered for every universe regardless of reachability",
                ConditionalDeclarationWarning,
                stacklevel=2,
            )

    if not result.choices:
        raise NoChoicesError()
    if not result.measurements:
        raise NoMeasurementsError()
    overlap = [name for name in result.choices if name in result.measurements]
    if overlap:
        raise IdentifierCollisionError(overlap)

    return result


__all__ = ["ScanResult", "scan", "resolve_possibilities"]
