"""Revision history walking and per-package commit attribution.

Git is driven through its plumbing commands (rev-list, diff-tree) so the
ordering and rename detection match what git itself reports.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from .errors import ConfigError, DataIntegrityError
from .graph import is_under
from .models import CommitRecord, PackageInfo
from .shell import git


def _decode(raw: bytes, what: str, sha: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DataIntegrityError(f"Commit {sha} has a non-UTF-8 {what}: {e}") from e


def parse_name_status(raw: bytes) -> list[str]:
    """Parse ``git diff-tree -z --name-status`` output into a list of paths.

    Renames and copies ("R100", "C75") carry two paths, old then new; both
    are returned so a file moved out of a package still counts as a change
    to that package.
    """
    fields = raw.split(b"\0")
    paths: list[str] = []
    i = 0
    while i < len(fields) and fields[i]:
        status = fields[i]
        count = 2 if status[:1] in (b"R", b"C") else 1
        for field in fields[i + 1 : i + 1 + count]:
            paths.append(field.decode("utf-8", errors="surrogateescape"))
        i += 1 + count
    return paths


class GitHistory:
    """Read-only access to a git repository's history.

    Walk results, diffs and commit metadata are cached, so attributing
    many packages against the same history costs one git call per commit
    and parent rather than one per package.
    """

    def __init__(self, repo: Path) -> None:
        self.repo = repo
        self._walks: dict[str | None, list[tuple[str, list[str]]]] = {}
        self._diffs: dict[tuple[str, str | None], list[str]] = {}
        self._commits: dict[str, CommitRecord] = {}
        self._prefix: str | None = None

    @property
    def prefix(self) -> str:
        """Path of the working directory relative to the repository top level.

        Empty when the workspace root is the repository root. Diff paths are
        relative to the top level, package paths to the workspace root.
        """
        if self._prefix is None:
            out = git("rev-parse", "--show-prefix", cwd=self.repo)
            self._prefix = out.decode("utf-8", errors="surrogateescape").strip()
        return self._prefix

    def resolve(self, rev: str) -> str:
        """Resolve a revision name (tag, branch, sha) to a commit id.

        Raises:
            ConfigError: If the revision does not name a commit.
        """
        try:
            out = git("rev-parse", "--verify", f"{rev}^{{commit}}", cwd=self.repo)
        except DataIntegrityError as e:
            raise ConfigError(f"Unknown revision {rev!r}", details=e.details) from e
        return out.decode("ascii").strip()

    def walk(self, hide: str | None = None) -> list[tuple[str, list[str]]]:
        """List commits reachable from HEAD, newest first.

        Ordering is topological with commit time breaking ties: no commit
        appears before any of its descendants. When ``hide`` is given, that
        commit and everything reachable from it are excluded.

        Returns:
            (commit id, parent ids) tuples.
        """
        if hide not in self._walks:
            args = ["rev-list", "--date-order", "--parents", "HEAD"]
            if hide is not None:
                args.append(f"^{hide}")
            out = git(*args, "--", cwd=self.repo).decode("ascii")
            entries = []
            for line in out.splitlines():
                sha, *parents = line.split()
                entries.append((sha, parents))
            self._walks[hide] = entries
        return self._walks[hide]

    def changed_paths(self, commit: str, parent: str | None) -> list[str]:
        """Paths changed between ``parent`` and ``commit``.

        Paths are workspace-relative without "a/"/"b/" prefixes. For a root
        commit (``parent`` is None) the diff is taken against the empty tree,
        so every file the commit introduces is reported.
        """
        key = (commit, parent)
        if key not in self._diffs:
            args = ["diff-tree", "-r", "-z", "--no-commit-id", "--name-status", "-M"]
            if parent is None:
                args += ["--root", commit]
            else:
                args += [parent, commit]
            self._diffs[key] = parse_name_status(git(*args, "--", cwd=self.repo))
        return self._diffs[key]

    def commit(self, sha: str) -> CommitRecord:
        """Read a commit's message and mailmap-resolved author.

        Raises:
            DataIntegrityError: If the message or author is not valid UTF-8.
        """
        if sha not in self._commits:
            raw = git("show", "-s", "--format=%aN%x00%aE%x00%B", sha, cwd=self.repo)
            name, email, message = raw.split(b"\0", 2)
            self._commits[sha] = CommitRecord(
                id=sha,
                author_name=_decode(name, "author name", sha),
                author_email=_decode(email, "author email", sha),
                # Drop the newline the format terminator appends
                message=_decode(message, "message", sha).removesuffix("\n"),
            )
        return self._commits[sha]


class CommitAttributor:
    """Finds the commits that touched each package since a boundary.

    Args:
        history: The repository history to read.
        boundary: Revision of the last release. None walks the whole history.
    """

    def __init__(self, history: GitHistory, boundary: str | None) -> None:
        self.history = history
        self.hide = history.resolve(boundary) if boundary is not None else None

    def touches(self, sha: str, parents: list[str], directory: str) -> bool:
        """Check whether a commit changed anything under ``directory``.

        Each parent of a merge commit is diffed separately; a change relative
        to any parent counts.
        """
        for parent in parents or [None]:
            if any(is_under(p, directory) for p in self.history.changed_paths(sha, parent)):
                return True
        return False

    def attribute(self, package: PackageInfo) -> list[CommitRecord]:
        """Return the commits touching ``package``, in walk order.

        A commit touching several packages is included in each package's
        list, and at most once per list.
        """
        directory = PurePosixPath(self.history.prefix, package.path).as_posix()
        return [
            self.history.commit(sha)
            for sha, parents in self.history.walk(self.hide)
            if self.touches(sha, parents, directory)
        ]
