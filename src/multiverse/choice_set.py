"""Cartesian product of choice possibilities."""

from itertools import product
from typing import Any, Dict, List, Mapping, Sequence


def build_choice_assignments(choices: Mapping[str, Sequence[Any]]) -> List[Dict[str, Any]]:
    """
    Every combination of one value per choice, as ordered dicts.

    The last-declared choice varies fastest and the first-declared slowest
    (nested-loop order), so the result is reproducible for a fixed
    declaration order and fixed possibility order.

    Example:
        build_choice_assignments({"a": [1, 2], "b": ["x", "y"]})
        -> [{"a": 1, "b": "x"}, {"a": 1, "b": "y"},
            {"a": 2, "b": "x"}, {"a": 2, "b": "y"}]
    """
    names = list(choices)
    return [dict(zip(names, values)) for values in product(*(choices[n] for n in names))]


def count_assignments(choices: Mapping[str, Sequence[Any]]) -> int:
    """Size of the product without building it."""
    total = 1
    for possibilities in choices.values():
        total *= len(possibilities)
    return total


__all__ = ["build_choice_assignments", "count_assignments"]
