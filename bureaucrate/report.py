"""Dry-run report rendering."""

from __future__ import annotations

from collections.abc import Iterable

from .changelog import shift_headings
from .models import PackageStatus
from .versions import BumpLevel

INTRO = (
    "Hey, seems like you need to have changelog and version bumps for your PR?\n\n"
    "Don't worry, I've got you covered: if you have proper commit messages, "
    "then the changelog generated by me should be okay for you.\n"
)


def render_report(statuses: Iterable[PackageStatus]) -> str:
    """Render proposed changelog entries and version bumps as Markdown.

    Packages with an empty changelog are left out of "Changes", and
    packages without a bump are left out of "Bumps".
    """
    statuses = list(statuses)
    lines: list[str] = [INTRO, "# Changes\n"]
    lines.append(
        "After your confirmation, I will append the following entries "
        "to changelogs of packages:\n"
    )
    for status in statuses:
        if not status.changelog.strip():
            continue
        pkg = status.package
        lines.append(
            f"## {pkg.name} v{status.final_version} ({status.bump.label} bump)\n"
        )
        lines.append(shift_headings(status.changelog))

    lines.append("# Bumps\n")
    lines.append(
        "I may not be able to describe reason for bump, "
        "but they should be required:\n"
    )
    for status in statuses:
        if status.bump == BumpLevel.NONE:
            continue
        pkg = status.package
        lines.append(f"{pkg.name} `{pkg.version}` -> `{status.final_version}`\n")
        lines.extend(f"- {reason}" for reason in status.bump_reasons)
        lines.append("")
    return "\n".join(lines).rstrip("\n") + "\n"
