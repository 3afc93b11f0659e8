"""Changelog file updates.

Each package's changelog holds a marker line. New entries go directly
below it, so the newest release is always on top and anything written by
hand above the marker stays put.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

from .errors import PersistenceError


def shift_headings(body: str) -> str:
    """Trim ``body`` and demote every Markdown heading by one level.

    Entries are nested under a "## [vX.Y.Z]" heading, so a classifier's
    "## Fixes" becomes "### Fixes".
    """
    lines = []
    for line in body.strip().splitlines():
        lines.append(f"#{line}" if line.startswith("#") else line)
    return "\n".join(lines) + "\n"


def render_entry(version: str, body: str, when: date | None = None) -> str:
    """Format one changelog entry.

    Args:
        version: The package's new version.
        body: Classifier changelog text.
        when: Release date, defaulting to today (UTC).
    """
    when = when or datetime.now(timezone.utc).date()
    return f"## [v{version}] {when:%Y-%m-%d}\n\n{shift_headings(body)}\n"


def insert_entry(old: str, entry: str, marker: str) -> str:
    """Insert ``entry`` right after the marker line of ``old``.

    If ``old`` has no marker, the marker is added at the top, followed by the
    entry and then all of the old content.
    """
    marker_line = marker.rstrip("\n") + "\n"
    offset = old.find(marker_line)
    if offset == -1:
        if old.endswith(marker.rstrip("\n")):
            return old + "\n" + entry
        return marker_line + entry + old
    split = offset + len(marker_line)
    return old[:split] + entry + old[split:]


def updated_changelog(
    path: Path, version: str, body: str, marker: str, when: date | None = None
) -> str:
    """Return the content of ``path`` with a new release entry inserted.

    Nothing is written. A missing changelog counts as empty.

    Raises:
        PersistenceError: If the file exists but cannot be read.
    """
    try:
        old = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        old = ""
    except (OSError, UnicodeDecodeError) as e:
        raise PersistenceError(f"Cannot read {path}: {e}") from e
    return insert_entry(old, render_entry(version, body, when), marker)


def save_changelog(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Cannot write {path}: {e}") from e


def write_changelog(
    path: Path, version: str, body: str, marker: str, when: date | None = None
) -> None:
    """Prepend a release entry to the changelog at ``path``.

    A missing changelog is created.

    Raises:
        PersistenceError: If the file cannot be read or written.
    """
    save_changelog(path, updated_changelog(path, version, body, marker, when))
