"""
Row/column views of a multiverse for external tooling.

Row i is the merge of choice assignment i and measurement record i.
Unexplored universes show every measurement as MISSING. Columns are the
choice ids followed by the measurement ids, both in declaration order.
"""

from typing import Any, Dict, List

from multiverse.model import Multiverse


def column_names(multiverse: Multiverse) -> List[str]:
    return list(multiverse.choices) + list(multiverse.measurements)


def row(multiverse: Multiverse, index: int) -> Dict[str, Any]:
    index = multiverse.check_index(index)
    record = multiverse.measurement_values[index]
    if record is None:
        record = multiverse.placeholder_record()
    merged = dict(multiverse.choice_values[index])
    merged.update(record)
    return merged


def rows(multiverse: Multiverse) -> List[Dict[str, Any]]:
    return [row(multiverse, i) for i in range(len(multiverse))]


def columns(multiverse: Multiverse) -> Dict[str, List[Any]]:
    """Column-oriented view: {column name: values by universe index}."""
    table = rows(multiverse)
    return {name: [r[name] for r in table] for name in column_names(multiverse)}


__all__ = ["column_names", "row", "rows", "columns"]
