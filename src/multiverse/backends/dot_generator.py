"""
Graphviz DOT diagram generator for multiverses.

Draws the "garden of forking paths": a tree with one level per choice
(in declaration order) and one leaf per universe.

Supports two modes:
    - SIMPLE: Choice values on edges, universe index on leaves
    - DETAILED: Leaves also show the measurement record
                (or "not explored" for unset slots)
"""

from enum import Enum
from typing import Any, Dict, List, Tuple

from multiverse.model import Multiverse


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"          # Just forking paths
    DETAILED = "detailed"      # Include measurement results


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    # Escape backslashes first
    s = s.replace('\\', '\\\\')
    # Escape quotes
    s = s.replace('"', '\\"')
    # Newlines become DOT line breaks
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _format_value(value: Any) -> str:
    return repr(value)


def _record_label(multiverse: Multiverse, index: int) -> str:
    record = multiverse.measurement_values[index]
    if record is None:
        return "not explored"
    return "\n".join(f"{name} = {_format_value(value)}" for name, value in record.items())


def generate_dot(multiverse: Multiverse, mode: DotMode = DotMode.SIMPLE) -> str:
    """
    Generate Graphviz DOT format for a multiverse.

    Args:
        multiverse: Multiverse to visualize
        mode: Visualization mode (SIMPLE, DETAILED)

    Returns:
        String containing DOT graph definition
    """
    lines = []

    # Header
    lines.append("digraph multiverse {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    # Root node
    lines.append('  ROOT [shape=ellipse, fillcolor=lightgreen, label="procedure"];')

    # =========================================================================
    # FORKS (one node per distinct choice prefix)
    # =========================================================================

    node_ids: Dict[Tuple, str] = {(): "ROOT"}
    edges: List[str] = []

    last = len(multiverse.choices) - 1

    for index, assignment in enumerate(multiverse.choice_values):
        prefix: Tuple = ()
        leaf_id = f"U{index}"
        for depth, name in enumerate(multiverse.choices):
            value = assignment[name]
            edge_label = _escape_dot_string(f"{name} = {_format_value(value)}")
            if depth == last:
                # Every universe gets its own leaf, even for repeated values
                edges.append(f"  {node_ids[prefix]} -> {leaf_id} [label={edge_label}];")
                break
            child = prefix + (_format_value(value),)
            if child not in node_ids:
                node_id = f"F{len(node_ids)}"
                node_ids[child] = node_id
                edges.append(f"  {node_ids[prefix]} -> {node_id} [label={edge_label}];")
                lines.append(f'  {node_id} [shape=point, label=""];')
            prefix = child

        label = f"universe {index}"
        if mode == DotMode.DETAILED:
            label = f"{label}\n{_record_label(multiverse, index)}"
        fill = "lightblue"
        if mode == DotMode.DETAILED and multiverse.measurement_values[index] is None:
            fill = "lightgrey"
        lines.append(f"  {leaf_id} [label={_escape_dot_string(label)}, fillcolor={fill}];")

    # =========================================================================
    # EDGES
    # =========================================================================

    lines.extend(edges)

    # Footer
    lines.append("}")

    return "\n".join(lines)


def save_dot_file(multiverse: Multiverse, filename: str, mode: DotMode = DotMode.SIMPLE) -> None:
    """
    Generate DOT and save to file.

    Args:
        multiverse: Multiverse to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
    """
    dot = generate_dot(multiverse, mode=mode)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
