"""Package graph utilities.

Derives the two relations bump propagation works on from the flat package
map: direct dependency edges, and nesting (one package's directory lying
inside another's).
"""

from __future__ import annotations

from pathlib import PurePosixPath

from .errors import WorkspaceError
from .models import PackageInfo, PackageStatus
from .shell import warn


def is_under(path: str, directory: str) -> bool:
    """Check whether ``path`` equals or lies below ``directory``.

    Comparison is by path component, so "packages/ab/x.py" is not under
    "packages/a". The directory "." contains everything.

    Examples:
        is_under("packages/a/src/m.py", "packages/a") → True
        is_under("packages/ab/m.py", "packages/a") → False
    """
    dir_parts = PurePosixPath(directory).parts
    return PurePosixPath(path).parts[: len(dir_parts)] == dir_parts


def find_nested_pairs(packages: dict[str, PackageInfo]) -> list[tuple[str, str]]:
    """Find every (outer, inner) pair where inner lives inside outer.

    Emits a warning for each pair found; nesting is allowed, but nested
    packages share the outer package's changelog and bump.

    Raises:
        WorkspaceError: If two packages share the same directory.
    """
    pairs: list[tuple[str, str]] = []
    for outer in packages.values():
        for inner in packages.values():
            if inner.name == outer.name or not is_under(inner.path, outer.path):
                continue
            if PurePosixPath(inner.path) == PurePosixPath(outer.path):
                raise WorkspaceError(
                    f"Packages {outer.name} and {inner.name} share directory {outer.path}"
                )
            warn(
                f"package {inner.name} is nested inside {outer.name}, "
                "changelog will be merged"
            )
            pairs.append((outer.name, inner.name))
    return pairs


class PackageGraph:
    """Workspace packages plus their dependency and nesting relations.

    Attributes:
        packages: Map of package name → PackageInfo, in discovery order.
        nested_pairs: (outer, inner) name pairs, see find_nested_pairs().
        outers: Names of packages not nested in any other package. Only
                these have their commit history scanned.
    """

    def __init__(self, packages: dict[str, PackageInfo]) -> None:
        self.packages = packages
        # Track reverse dependencies (who depends on each package)
        self._dependents: dict[str, list[str]] = {n: [] for n in packages}
        for name, pkg in packages.items():
            for dep in pkg.deps:
                if dep not in packages:
                    raise WorkspaceError(
                        f"Package {name} depends on unknown package {dep}"
                    )
                self._dependents[dep].append(name)

        self.nested_pairs = find_nested_pairs(packages)
        nested = {inner for _, inner in self.nested_pairs}
        self.outers = [n for n in packages if n not in nested]

    def _check(self, name: str) -> PackageInfo:
        try:
            return self.packages[name]
        except KeyError:
            raise WorkspaceError(f"Unknown package {name}") from None

    def depends_on(self, a: str, b: str) -> bool:
        """Return True if package ``a`` directly depends on package ``b``."""
        self._check(b)
        return b in self._check(a).deps

    def dependents(self, name: str) -> list[str]:
        """Names of packages that directly depend on ``name``."""
        self._check(name)
        return list(self._dependents[name])

    def new_statuses(self) -> dict[str, PackageStatus]:
        """Create a fresh PackageStatus for every package in the graph."""
        return {name: PackageStatus(package=pkg) for name, pkg in self.packages.items()}
