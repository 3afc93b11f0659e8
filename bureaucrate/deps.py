"""Dependency string handling.

Parses PEP 508 dependency strings so internal workspace dependencies can be
told apart from external ones.
"""

from __future__ import annotations

from collections.abc import Iterable

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from .errors import WorkspaceError


def dep_canonical_name(dep_str: str) -> str:
    """Extract the canonical package name from a PEP 508 dependency string.

    Handles version specifiers, extras, and normalizes the name per PEP 503
    (lowercase, hyphens instead of underscores).

    Examples:
        "requests>=2.0" → "requests"
        "My_Package[extra]~=1.0" → "my-package"

    Raises:
        WorkspaceError: If the string is not a valid requirement.
    """
    try:
        return canonicalize_name(Requirement(dep_str).name)
    except InvalidRequirement as e:
        raise WorkspaceError(f"Invalid dependency {dep_str!r}: {e}") from e


def internal_deps(
    dep_strs: Iterable[str], workspace_names: set[str], *, self_name: str
) -> list[str]:
    """Filter dependency strings down to workspace members.

    Returns canonical names in first-seen order, without duplicates. A
    package listing itself (e.g., ``pkg[extra]`` inside its own extras) is
    not a dependency edge.
    """
    found: list[str] = []
    for dep_str in dep_strs:
        name = dep_canonical_name(dep_str)
        # Only track internal deps, ignore external packages
        if name in workspace_names and name != self_name and name not in found:
            found.append(name)
    return found
