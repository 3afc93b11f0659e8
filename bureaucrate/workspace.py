"""Workspace discovery.

Reads a uv workspace (root pyproject.toml with [tool.uv.workspace]) and
returns every member package with its version and internal dependencies.
"""

from __future__ import annotations

import glob
from pathlib import Path

import tomlkit

from .deps import internal_deps
from .errors import WorkspaceError
from .models import PackageInfo
from .shell import info, step
from .toml import (
    get_all_dependency_strings,
    get_project_name,
    get_project_version,
    get_workspace_exclude_globs,
    get_workspace_member_globs,
    load_pyproject,
)
from .versions import parse_version


def _member_dirs(root: Path, root_doc: tomlkit.TOMLDocument) -> list[Path]:
    """Expand member globs, minus excludes, to directories with a pyproject.toml."""
    excluded: set[Path] = set()
    for pattern in get_workspace_exclude_globs(root_doc):
        excluded.update(Path(m).resolve() for m in glob.glob(str(root / pattern)))

    dirs: list[Path] = []
    for pattern in get_workspace_member_globs(root_doc):
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if p.resolve() in excluded or p in dirs:
                continue
            if (p / "pyproject.toml").exists():
                dirs.append(p)
    return dirs


def discover_packages(root: Path) -> dict[str, PackageInfo]:
    """Scan the workspace and discover all packages.

    Reads [tool.uv.workspace].members from root pyproject.toml to find
    package directories, then extracts name, version, and internal deps
    from each package's pyproject.toml. A root pyproject.toml that is also
    a project (has [project].name) is a member too, at path ".".

    Args:
        root: Workspace root directory.

    Returns:
        Map of package name to PackageInfo, root project first, then members
        in sorted directory order.

    Raises:
        WorkspaceError: If the workspace metadata cannot be resolved.
    """
    step("Discovering workspace packages")

    root_doc = load_pyproject(root / "pyproject.toml")
    docs: list[tuple[str, tomlkit.TOMLDocument]] = []
    if get_project_name(root_doc):
        docs.append((".", root_doc))

    for d in _member_dirs(root, root_doc):
        if d.resolve() == root.resolve():
            continue
        docs.append((d.relative_to(root).as_posix(), load_pyproject(d / "pyproject.toml")))

    if not docs:
        raise WorkspaceError("No packages found matching workspace members")

    # First pass: collect names so internal deps can be recognised
    names: dict[str, tuple[str, tomlkit.TOMLDocument]] = {}
    for rel, doc in docs:
        name = get_project_name(doc)
        if name is None:
            raise WorkspaceError(f"{rel}/pyproject.toml has no [project].name")
        if name in names:
            raise WorkspaceError(
                f"Package {name} is defined twice ({names[name][0]} and {rel})"
            )
        names[name] = (rel, doc)

    # Second pass: identify which deps are internal (within workspace)
    workspace_names = set(names)
    packages: dict[str, PackageInfo] = {}
    for name, (rel, doc) in names.items():
        version = get_project_version(doc)
        try:
            parse_version(version)
        except ValueError as e:
            raise WorkspaceError(
                f"{rel}/pyproject.toml: version {version!r} is not a semantic version",
                details=str(e),
            ) from e
        packages[name] = PackageInfo(
            name=name,
            path=rel,
            version=version,
            deps=internal_deps(
                get_all_dependency_strings(doc), workspace_names, self_name=name
            ),
        )

    # Print discovered packages for user feedback
    for name, pkg in packages.items():
        deps = f" → [{', '.join(pkg.deps)}]" if pkg.deps else ""
        info(f"{name} {pkg.version} ({pkg.path}){deps}")

    return packages
