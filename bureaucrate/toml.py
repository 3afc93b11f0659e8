"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying pyproject.toml
files. This is important for maintaining readable, diff-friendly files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import tomlkit
from packaging.utils import canonicalize_name
from pydantic import ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError, PersistenceError, WorkspaceError
from .models import BureaucrateConfig


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.

    Raises:
        WorkspaceError: If the file is missing, unreadable or not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise WorkspaceError(f"Cannot read {path}: {e}") from e
    except TOMLKitError as e:
        raise WorkspaceError(f"Invalid TOML in {path}: {e}") from e


def save_pyproject(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    try:
        path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Cannot write {path}: {e}") from e


def get_project_name(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract the canonical package name from [project].name.

    Names are normalized per PEP 503 (lowercase, hyphens instead of
    underscores) for consistent comparison.

    Returns:
        The canonical name, or None if the document has no [project].name
        (e.g., a virtual workspace root).
    """
    name = doc.get("project", {}).get("name")
    return canonicalize_name(str(name)) if name else None


def get_project_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract version from [project].version, defaulting to '0.0.0'."""
    return str(doc.get("project", {}).get("version", "0.0.0"))


def get_all_dependency_strings(doc: tomlkit.TOMLDocument) -> list[str]:
    """Collect all dependency strings from a pyproject.toml.

    Gathers dependencies from three locations:
    - [project].dependencies (main runtime deps)
    - [project].optional-dependencies.* (extras like [dev], [test])
    - [dependency-groups].* (PEP 735 dependency groups)

    Returns raw PEP 508 strings like "requests>=2.0" or "pkg[extra]~=1.0".
    Include-group tables inside [dependency-groups] are skipped.
    """
    project = doc.get("project", {})
    deps: list[str] = [str(d) for d in project.get("dependencies", [])]
    # Collect optional dependency groups (e.g., [project.optional-dependencies.dev])
    for group_deps in project.get("optional-dependencies", {}).values():
        deps.extend(str(d) for d in group_deps)
    # Collect PEP 735 dependency groups (e.g., [dependency-groups.test])
    for group_deps in doc.get("dependency-groups", {}).values():
        deps.extend(str(d) for d in group_deps if isinstance(d, str))
    return deps


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns from [tool.uv.workspace].

    These patterns (e.g., "packages/*", "libs/*") define which directories
    contain workspace packages.

    Raises:
        WorkspaceError: If no workspace members are defined.
    """
    members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members")
    if not members:
        raise WorkspaceError(
            "No [tool.uv.workspace] members defined in root pyproject.toml"
        )
    return [str(m) for m in members]


def get_workspace_exclude_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract [tool.uv.workspace].exclude patterns (empty if absent)."""
    exclude = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("exclude")
    return [str(e) for e in exclude or []]


def load_config(doc: tomlkit.TOMLDocument) -> BureaucrateConfig:
    """Read the optional [tool.bureaucrate] table of the root pyproject.toml.

    Raises:
        ConfigError: If the table has unknown keys or values of the wrong type.
    """
    table = doc.get("tool", {}).get("bureaucrate", {})
    try:
        return BureaucrateConfig.model_validate(table.unwrap() if table else {})
    except ValidationError as e:
        raise ConfigError("Invalid [tool.bureaucrate] configuration", details=str(e)) from e


def with_project_version(pyproject_path: Path, new_version: str) -> tomlkit.TOMLDocument:
    """Load a manifest and set [project].version in memory.

    Raises:
        PersistenceError: If the manifest cannot be read or parsed, or has
            no [project] table.
    """
    try:
        doc = load_pyproject(pyproject_path)
    except WorkspaceError as e:
        raise PersistenceError(e.message) from e
    if "project" not in doc:
        raise PersistenceError(f"No [project] table in {pyproject_path}")
    # Cast needed because tomlkit types are complex unions
    project = cast(dict[str, Any], doc["project"])
    project["version"] = new_version
    return doc


def set_project_version(pyproject_path: Path, new_version: str) -> None:
    """Rewrite [project].version in place, leaving everything else untouched.

    Raises:
        PersistenceError: If the manifest cannot be read, parsed or written.
    """
    save_pyproject(pyproject_path, with_project_version(pyproject_path, new_version))
