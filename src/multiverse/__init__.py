"""
Multiverse Analysis Package

Runs one analysis procedure once for every combination of its analytic
choices and collects a table of outcomes.

ARCHITECTURAL LAYERS:
---------------------
    1. Tree:      expressions, statements, walk (structure only)
    2. Phase 1:   scanner (declarations resolved in the outer scope),
                  choice_set (Cartesian product)
    3. Phase 2:   compiler + interpreter (one template, one universe per
                  choice assignment, run in its own scope)
    4. Results:   model (Multiverse), runner (explore), table (rows)

Front end, serialization, analyzer and backends sit outside the core and
consume it unchanged.
"""

from multiverse.missing import MISSING, is_missing
from multiverse.model import Multiverse
from multiverse.runner import (
    enter,
    enter_source,
    explore,
    explore_inplace,
    explore_source,
    explore_tree,
)
from multiverse.table import rows

__version__ = "0.1.0"

__all__ = [
    "MISSING",
    "is_missing",
    "Multiverse",
    "enter",
    "enter_source",
    "explore",
    "explore_inplace",
    "explore_source",
    "explore_tree",
    "rows",
]
