#!/usr/bin/env python3
"""
Complete Pipeline Demo: Source → Tree → Analysis → Multiverse → Diagrams

Shows the full workflow:
1. Parse an analysis procedure written as Python source
2. Analyze the procedure
3. Build and explore the multiverse
4. Print the outcome table
5. Generate Graphviz diagrams
"""

from multiverse.analyzer import analyze_tree
from multiverse.backends import generate_dot, save_dot_file, DotMode
from multiverse.examples import THRESHOLD_ENVIRONMENT, THRESHOLD_SOURCE
from multiverse.frontend import parse_procedure
from multiverse.runner import enter, explore_inplace
from multiverse.serialization import tree_to_yaml
from multiverse.table import column_names, rows


def main():
    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Source → Tree → Multiverse → Diagrams")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Parse source
    # =========================================================================
    print("\n1. PARSING PROCEDURE...")
    tree = parse_procedure(THRESHOLD_SOURCE)
    print(f"   ✓ Top-level statements: {len(tree.statements)}")

    # =========================================================================
    # STEP 2: Analyze procedure
    # =========================================================================
    print("\n2. ANALYZING PROCEDURE...")
    report = analyze_tree(tree, THRESHOLD_ENVIRONMENT)
    print(f"   ✓ Choices: {report.choices}")
    print(f"   ✓ Measurements: {report.measurements}")
    print(f"   ✓ Universes: {report.universe_count}")
    print(f"   ✓ Possibly redundant universes: {report.possibly_redundant_universes}")

    if report.warnings:
        print(f"\n   Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"      - {warning}")

    # =========================================================================
    # STEP 3: Build and explore
    # =========================================================================
    print("\n3. EXPLORING MULTIVERSE...")
    multiverse = enter(tree, THRESHOLD_ENVIRONMENT)
    explore_inplace(multiverse)
    print(f"   ✓ {multiverse}")

    # =========================================================================
    # STEP 4: Outcome table
    # =========================================================================
    print("\n4. OUTCOMES:")
    print("-" * 80)
    names = column_names(multiverse)
    print("   " + " | ".join(f"{name:>12}" for name in names))
    for row in rows(multiverse):
        cells = []
        for name in names:
            value = row[name]
            cells.append(f"{value:>12.4g}" if isinstance(value, float) else f"{value!r:>12}")
        print("   " + " | ".join(cells))

    # =========================================================================
    # STEP 5: Diagrams and export
    # =========================================================================
    print("\n5. GENERATING DIAGRAMS...")
    for mode in [DotMode.SIMPLE, DotMode.DETAILED]:
        filename = f"multiverse_{mode.value}.dot"
        save_dot_file(multiverse, filename, mode=mode)
        print(f"   ✓ Saved {filename}")

    lines = generate_dot(multiverse, mode=DotMode.SIMPLE).split('\n')
    for line in lines[:10]:
        print(f"   {line}")
    if len(lines) > 10:
        print(f"   ... ({len(lines) - 10} more lines)")

    with open("threshold_procedure.yaml", "w") as f:
        f.write(tree_to_yaml(tree))
    print("   ✓ Procedure exported to threshold_procedure.yaml")

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE!")
    print("\nTo visualize the diagrams:")
    print("  dot -Tpng multiverse_simple.dot -o multiverse_simple.png")
    print("  dot -Tpng multiverse_detailed.dot -o multiverse_detailed.png")
    print("=" * 80)


if __name__ == "__main__":
    main()
