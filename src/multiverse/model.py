"""
Core Multiverse Object

A multiverse is the full collection of universes built from one analysis
procedure, together with:
    - the declared choice ids and measurement ids
    - the choice assignment of every universe
    - the measurement record of every universe (None until explored)

ARCHITECTURAL RULE:
    The four per-universe sequences are index-aligned:
        universes[i], choice_values[i] and measurement_values[i]
    all describe universe i, and always have the same length.

    Declarations, universes and choice assignments are fixed at
    construction. Measurement slots are the only mutable state, and only
    the runner writes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from multiverse.compiler import Universe
from multiverse.errors import InconsistentMultiverseError
from multiverse.missing import MISSING


@dataclass
class Multiverse:
    """
    Root container for an explored (or not yet explored) multiverse.

    Properties:
        choices:
            Choice ids, in declaration order

        measurements:
            Measurement ids, in declaration order

        universes:
            One zero-argument callable per choice assignment

        choice_values:
            Choice assignment of each universe ({choice id: value})

        measurement_values:
            Measurement record of each universe, or None while unexplored

    INVARIANTS:
        - len(universes) == len(choice_values) == len(measurement_values)
        - an explored slot covers exactly the declared measurement ids
        - a slot never goes back to None
    """

    choices: Tuple[str, ...]
    measurements: Tuple[str, ...]
    universes: List[Universe] = field(default_factory=list)
    choice_values: List[Dict[str, Any]] = field(default_factory=list)
    measurement_values: List[Optional[Dict[str, Any]]] = field(default_factory=list)

    def __post_init__(self):
        self.choices = tuple(self.choices)
        self.measurements = tuple(self.measurements)
        lengths = {
            "universes": len(self.universes),
            "choice_values": len(self.choice_values),
            "measurement_values": len(self.measurement_values),
        }
        if len(set(lengths.values())) != 1:
            raise InconsistentMultiverseError(lengths)

    def __len__(self) -> int:
        return len(self.universes)

    def __repr__(self) -> str:
        return f"Multiverse(choices = {self.choices}, measurements = {self.measurements})"

    def choice_table(self) -> List[Dict[str, Any]]:
        """Choice assignment of every universe, by index (a copy)."""
        return [dict(assignment) for assignment in self.choice_values]

    def measurement_table(self) -> List[Optional[Dict[str, Any]]]:
        """Measurement record of every universe, by index (None = unexplored, a copy)."""
        return [None if record is None else dict(record) for record in self.measurement_values]

    def placeholder_record(self) -> Dict[str, Any]:
        """All measurement ids mapped to MISSING."""
        return {name: MISSING for name in self.measurements}

    def is_explored(self, index: int) -> bool:
        return self.measurement_values[self.check_index(index)] is not None

    def check_index(self, index: int) -> int:
        """
        Validate a universe index.

        Indices are 0-based; negative indices are rejected rather than
        counted from the end.
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"universe index must be an int, got {type(index).__name__}")
        if not 0 <= index < len(self):
            raise IndexError(f"universe index {index} out of range for {len(self)} universes")
        return index

    def store_record(self, index: int, record: Dict[str, Any]) -> None:
        """Overwrite slot `index`. Used by the runner only."""
        self.measurement_values[self.check_index(index)] = record


__all__ = ["Multiverse"]
