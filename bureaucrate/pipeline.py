"""Release bookkeeping pipeline: discover → attribute → classify → propagate → report/write.

This module orchestrates a bureaucrate run:
1. Discover all packages in the workspace and build the package graph
2. For each top-level package, collect the commits that touched it since
   the last release and let the classifier turn them into a changelog
   entry and a bump level
3. Propagate bumps across nested packages and dependents
4. Either render a dry-run report, or write changelogs and new versions

Nothing is written until every package's final bump is known and every
changelog and manifest has been read, so a failure at any of those steps
leaves the workspace untouched.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import tomlkit

from .changelog import save_changelog, updated_changelog
from .classifier import Classifier, apply_verdict
from .graph import PackageGraph
from .history import CommitAttributor, GitHistory
from .models import BureaucrateConfig, PackageStatus
from .propagate import propagate
from .report import render_report
from .shell import info, step
from .toml import load_config, load_pyproject, save_pyproject, with_project_version
from .versions import BumpLevel
from .workspace import discover_packages


def classify_packages(
    graph: PackageGraph,
    attributor: CommitAttributor,
    classifier: Classifier,
    statuses: dict[str, PackageStatus],
) -> None:
    """Attribute commits to each top-level package and classify them.

    Nested packages are skipped here; they receive their bump through
    propagation only.
    """
    step("Checking for updates")

    for name in graph.outers:
        pkg = graph.packages[name]
        commits = attributor.attribute(pkg)
        verdict = classifier.classify(pkg, commits)
        apply_verdict(statuses[name], verdict)
        info(f"{name} ({pkg.path}): {len(commits)} commits, {verdict.bump.label} bump")


def propagate_bumps(graph: PackageGraph, statuses: dict[str, PackageStatus]) -> None:
    """Reconcile bumps across the graph and report the final levels."""
    step("Propagating bumps")

    changes = propagate(graph, statuses)
    info(f"{changes} escalations")
    for name, status in statuses.items():
        if status.bump > BumpLevel.NONE:
            info(f"{name}: {status.package.version} → {status.final_version}")


def write_results(
    root: Path,
    statuses: dict[str, PackageStatus],
    config: BureaucrateConfig,
    when: date | None = None,
) -> None:
    """Append changelog entries and rewrite manifest versions.

    Every changelog and manifest is read and updated in memory first, so a
    file that cannot be read or parsed aborts the run before anything is
    written.

    Args:
        root: Workspace root directory.
        statuses: Converged package statuses.
        config: Changelog filename and marker settings.
        when: Date stamped on changelog entries, defaulting to today (UTC).
    """
    step("Writing changelogs and versions")

    changelogs: list[tuple[str, Path, str]] = []
    for name, status in statuses.items():
        if not status.changelog.strip():
            continue
        path = root / status.package.path / config.changelog_file
        content = updated_changelog(
            path, status.final_version, status.changelog, config.marker, when
        )
        changelogs.append((name, path, content))

    manifests: list[tuple[str, Path, tomlkit.TOMLDocument]] = []
    for name, status in statuses.items():
        if status.bump == BumpLevel.NONE:
            continue
        path = root / status.package.path / "pyproject.toml"
        manifests.append((name, path, with_project_version(path, status.final_version)))

    for name, path, content in changelogs:
        save_changelog(path, content)
        info(f"{name}: updated {path.relative_to(root)}")

    for name, path, doc in manifests:
        save_pyproject(path, doc)
        info(f"{name}: version set to {statuses[name].final_version}")


def run_release(
    root: Path,
    *,
    since: str | None,
    generator: str,
    execute: bool = False,
    when: date | None = None,
) -> str | None:
    """Execute a full bookkeeping run.

    Args:
        root: Workspace root, which must also be inside a git repository.
        since: Boundary revision (last release). None scans the whole history.
        generator: Classifier script, as "path/to/script.py[:callable]".
        execute: If True, write changelogs and versions; otherwise dry run.
        when: Date for changelog entries, defaulting to today (UTC).

    Returns:
        The Markdown report in dry-run mode, None in execute mode.
    """
    config = load_config(load_pyproject(root / "pyproject.toml"))
    graph = PackageGraph(discover_packages(root))
    statuses = graph.new_statuses()

    classifier = Classifier.from_target(generator)
    attributor = CommitAttributor(GitHistory(root), since)

    classify_packages(graph, attributor, classifier, statuses)
    propagate_bumps(graph, statuses)

    if not execute:
        return render_report(statuses.values())

    write_results(root, statuses, config, when)
    return None
