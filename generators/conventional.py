"""Conventional-commit classifier for bureaucrate.

Usage:
    bureaucrate v1.2.0 --generator generators/conventional.py

Groups ``type(scope)!: description`` commits into changelog sections and
picks the bump: breaking → major, feat → minor, fix/perf → patch. Commits
that do not follow the convention are listed under "Other" and do not
bump anything on their own.
"""

from __future__ import annotations

import re

from bureaucrate.models import CommitRecord

HEADER = re.compile(r"^(?P<type>\w+)(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?: (?P<desc>.+)$")

SECTIONS = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "perf": "Performance",
    "other": "Other",
}
BUMPS = {"feat": "minor", "fix": "patch", "perf": "patch"}
ORDER = ["none", "patch", "minor", "major"]


def commit_handler(commits: list[CommitRecord]) -> dict[str, str]:
    """Group conventional commits into a changelog and pick the bump level."""
    breaking: list[str] = []
    grouped: dict[str, list[str]] = {}
    bump = "none"

    for commit in commits:
        subject, _, body = commit.message.partition("\n")
        match = HEADER.match(subject.strip())
        if match is None:
            grouped.setdefault("other", []).append(f"- {subject.strip()}")
            continue

        kind = match["type"].lower()
        scope = f"**{match['scope']}:** " if match["scope"] else ""
        line = f"- {scope}{match['desc']}"
        if match["breaking"] or "BREAKING CHANGE:" in body:
            breaking.append(line)
            bump = "major"
            continue
        if kind not in SECTIONS:
            continue
        grouped.setdefault(kind, []).append(line)
        candidate = BUMPS.get(kind, "none")
        if ORDER.index(candidate) > ORDER.index(bump):
            bump = candidate

    out: list[str] = []
    if breaking:
        out += ["# Breaking Changes", "", *breaking, ""]
    for kind, title in SECTIONS.items():
        if kind in grouped:
            out += [f"# {title}", "", *grouped[kind], ""]
    return {"changelog": "\n".join(out), "bump": bump}
