"""Fixed-point bump propagation.

Two rules are applied pass after pass until a pass changes nothing:

1. Nested packages share one bump: the lower side of every (outer, inner)
   pair is raised to the higher side, in either direction.
2. A package with any bump forces at least a PATCH bump on every package
   that directly depends on it. Dependents are never raised past PATCH by
   this rule.

Bumps only ever rise and there are four levels, so the loop ends after at
most ``3 * len(packages)`` changing passes.
"""

from __future__ import annotations

from .graph import PackageGraph
from .models import PackageStatus
from .versions import BumpLevel

NESTED_REASON = "nested packages should have equal bump"


def _nested_pass(graph: PackageGraph, statuses: dict[str, PackageStatus]) -> int:
    changes = 0
    for outer, inner in graph.nested_pairs:
        for src, dst in ((outer, inner), (inner, outer)):
            if statuses[dst].escalate(statuses[src].bump, NESTED_REASON):
                changes += 1
    return changes


def _dependency_pass(graph: PackageGraph, statuses: dict[str, PackageStatus]) -> int:
    changes = 0
    for name in graph.packages:
        if statuses[name].bump == BumpLevel.NONE:
            continue
        for dependent in graph.dependents(name):
            if statuses[dependent].escalate(
                BumpLevel.PATCH, f"dependency ({name}) had a bump"
            ):
                changes += 1
    return changes


def propagate(graph: PackageGraph, statuses: dict[str, PackageStatus]) -> int:
    """Escalate bumps until nested and dependency constraints all hold.

    Args:
        graph: Package graph providing nesting and dependency relations.
        statuses: Status for every package in the graph; modified in place.

    Returns:
        Total number of escalations made. Zero on already-converged input.

    Raises:
        RuntimeError: If the loop fails to converge within its pass bound.
    """
    max_passes = 3 * len(graph.packages) + 1
    total = 0
    for _ in range(max_passes):
        changes = _nested_pass(graph, statuses) + _dependency_pass(graph, statuses)
        if not changes:
            return total
        total += changes
    raise RuntimeError(f"Bump propagation did not converge after {max_passes} passes")
