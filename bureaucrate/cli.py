"""CLI entry point for bureaucrate."""

from __future__ import annotations

from pathlib import Path

import click

from bureaucrate.errors import BureaucrateError
from bureaucrate.pipeline import run_release


@click.command()
@click.version_option(package_name="bureaucrate")
@click.argument("rev", required=False)
@click.option(
    "--root",
    "from_root",
    is_flag=True,
    help="Walk from the beginning of history instead of from REV.",
)
@click.option(
    "--generator",
    required=True,
    metavar="SCRIPT[:FUNC]",
    help="Python classifier script turning commits into a changelog and bump.",
)
@click.option(
    "--execute",
    is_flag=True,
    help="Write changelogs and versions. Default is a dry run.",
)
@click.option(
    "--workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="uv workspace root.",
)
def cli(
    rev: str | None, from_root: bool, generator: str, execute: bool, workspace: Path
) -> None:
    """Generate changelogs and version bumps for a uv workspace.

    REV is the last release revision; only commits after it are considered.
    Pass --root instead to consider the whole history.
    """
    if (rev is None) == (not from_root):
        raise click.UsageError("Pass exactly one of REV or --root.")

    try:
        report = run_release(workspace, since=rev, generator=generator, execute=execute)
    except BureaucrateError as e:
        raise click.ClickException(str(e)) from e

    if report is not None:
        click.echo(report)
