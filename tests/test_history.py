"""Tests for bureaucrate.history."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from bureaucrate.errors import ConfigError, DataIntegrityError
from bureaucrate.history import CommitAttributor, GitHistory, parse_name_status
from bureaucrate.models import PackageInfo

A = PackageInfo(name="a", path="packages/a", version="1.0.0")
B = PackageInfo(name="b", path="packages/b", version="1.0.0")


def ids(commits) -> list[str]:
    return [c.id for c in commits]


class TestParseNameStatus:
    def test_plain_entries(self) -> None:
        raw = b"M\0packages/a/x.py\0A\0README.md\0D\0old.txt\0"
        assert parse_name_status(raw) == ["packages/a/x.py", "README.md", "old.txt"]

    def test_renames_report_both_paths(self) -> None:
        raw = b"R100\0packages/a/x.py\0packages/b/x.py\0M\0z\0"
        assert parse_name_status(raw) == ["packages/a/x.py", "packages/b/x.py", "z"]

    def test_copies_report_both_paths(self) -> None:
        assert parse_name_status(b"C75\0src\0dst\0") == ["src", "dst"]

    def test_empty(self) -> None:
        assert parse_name_status(b"") == []


class TestGitHistoryMocked:
    @patch("bureaucrate.history.git")
    def test_walk_parses_parents(self, mock_git: MagicMock, tmp_path) -> None:
        mock_git.return_value = b"c3 c2 c1\nc2 c0\nc1 c0\nc0\n"
        history = GitHistory(tmp_path)

        assert history.walk() == [
            ("c3", ["c2", "c1"]),
            ("c2", ["c0"]),
            ("c1", ["c0"]),
            ("c0", []),
        ]
        args = mock_git.call_args[0]
        assert args[:4] == ("rev-list", "--date-order", "--parents", "HEAD")

    @patch("bureaucrate.history.git")
    def test_walk_hides_boundary(self, mock_git: MagicMock, tmp_path) -> None:
        mock_git.return_value = b""
        GitHistory(tmp_path).walk("deadbeef")
        assert "^deadbeef" in mock_git.call_args[0]

    @patch("bureaucrate.history.git")
    def test_diffs_are_cached(self, mock_git: MagicMock, tmp_path) -> None:
        mock_git.return_value = b"M\0f\0"
        history = GitHistory(tmp_path)
        history.changed_paths("c1", "c0")
        history.changed_paths("c1", "c0")
        assert mock_git.call_count == 1

    @patch("bureaucrate.history.git")
    def test_root_commit_diffs_against_empty_tree(
        self, mock_git: MagicMock, tmp_path
    ) -> None:
        mock_git.return_value = b"A\0f\0"
        assert GitHistory(tmp_path).changed_paths("c0", None) == ["f"]
        assert "--root" in mock_git.call_args[0]

    @patch("bureaucrate.history.git")
    def test_unknown_revision_is_config_error(
        self, mock_git: MagicMock, tmp_path
    ) -> None:
        mock_git.side_effect = DataIntegrityError("git rev-parse failed", details="bad")
        with pytest.raises(ConfigError, match="Unknown revision 'v9'"):
            GitHistory(tmp_path).resolve("v9")


class TestGitHistory:
    def test_commit_metadata(self, repo) -> None:
        sha = repo.commit("feat: add thing\n\nLonger body.", {"f.txt": "x"})
        commit = GitHistory(repo.path).commit(sha)

        assert commit.id == sha
        assert commit.author_name == "Test Author"
        assert commit.author_email == "test@example.com"
        assert commit.message.rstrip("\n") == "feat: add thing\n\nLonger body."

    def test_author_is_mailmap_resolved(self, repo) -> None:
        repo.write(".mailmap", "Real Name <real@example.com> <test@example.com>\n")
        sha = repo.commit("fix: x", {"f.txt": "x"})
        commit = GitHistory(repo.path).commit(sha)

        assert commit.author_name == "Real Name"
        assert commit.author_email == "real@example.com"

    def test_non_utf8_message_is_fatal(self, repo) -> None:
        sha = repo.commit(b"fix: caf\xe9\n", {"f.txt": "x"})
        with pytest.raises(DataIntegrityError, match="non-UTF-8 message"):
            GitHistory(repo.path).commit(sha)

    def test_resolve_tag(self, repo) -> None:
        sha = repo.commit("init", {"f.txt": "x"})
        repo.git("tag", "v1.0.0")
        assert GitHistory(repo.path).resolve("v1.0.0") == sha

    def test_resolve_unknown(self, repo) -> None:
        repo.commit("init", {"f.txt": "x"})
        with pytest.raises(ConfigError, match="Unknown revision"):
            GitHistory(repo.path).resolve("no-such-tag")

    def test_walk_puts_descendants_first(self, repo) -> None:
        first = repo.commit("one", {"f.txt": "1"})
        second = repo.commit("two", {"f.txt": "2"})
        third = repo.commit("three", {"f.txt": "3"})
        walk = GitHistory(repo.path).walk()
        assert [sha for sha, _ in walk] == [third, second, first]
        assert walk[-1][1] == []


class TestCommitAttributor:
    def test_only_commits_under_package(self, repo) -> None:
        c_a = repo.commit("touch a", {"packages/a/x.py": "1"})
        repo.commit("touch b", {"packages/b/x.py": "1"})
        repo.commit("touch root", {"README.md": "hi"})
        repo.commit("touch lookalike", {"packages/ab/x.py": "1"})

        attributor = CommitAttributor(GitHistory(repo.path), None)
        assert ids(attributor.attribute(A)) == [c_a]

    def test_shared_commit_goes_to_every_package(self, repo) -> None:
        both = repo.commit(
            "touch both", {"packages/a/x.py": "1", "packages/b/x.py": "1"}
        )
        attributor = CommitAttributor(GitHistory(repo.path), None)
        assert ids(attributor.attribute(A)) == [both]
        assert ids(attributor.attribute(B)) == [both]

    def test_order_is_newest_first(self, repo) -> None:
        first = repo.commit("1", {"packages/a/x.py": "1"})
        second = repo.commit("2", {"packages/a/x.py": "2"})
        attributor = CommitAttributor(GitHistory(repo.path), None)
        assert ids(attributor.attribute(A)) == [second, first]

    def test_rename_out_of_package_counts_for_both(self, repo) -> None:
        repo.commit("add", {"packages/a/mod.py": "content\n" * 20})
        repo.git("mv", "packages/a/mod.py", "packages/b/mod.py")
        moved = repo.commit("move")
        attributor = CommitAttributor(GitHistory(repo.path), None)
        assert moved in ids(attributor.attribute(A))
        assert ids(attributor.attribute(B)) == [moved]

    def test_deletion_counts(self, repo) -> None:
        repo.commit("add", {"packages/a/x.py": "1"})
        removed = repo.commit("remove", remove=("packages/a/x.py",))
        attributor = CommitAttributor(GitHistory(repo.path), None)
        assert ids(attributor.attribute(A))[0] == removed

    def test_boundary_excludes_reachable_commits(self, repo) -> None:
        repo.commit("old a", {"packages/a/x.py": "1"})
        repo.commit("release", {"packages/a/x.py": "2"})
        repo.git("tag", "v1")
        new = repo.commit("new a", {"packages/a/x.py": "3"})

        attributor = CommitAttributor(GitHistory(repo.path), "v1")
        assert ids(attributor.attribute(A)) == [new]

    def test_boundary_at_head_yields_nothing(self, repo) -> None:
        repo.commit("a", {"packages/a/x.py": "1"})
        attributor = CommitAttributor(GitHistory(repo.path), "HEAD")
        assert attributor.attribute(A) == []

    def test_root_mode_attributes_root_commit(self, repo) -> None:
        root = repo.commit("initial", {"packages/a/x.py": "1"})
        attributor = CommitAttributor(GitHistory(repo.path), None)
        assert ids(attributor.attribute(A)) == [root]

    def test_unknown_boundary_is_config_error(self, repo) -> None:
        repo.commit("a", {"packages/a/x.py": "1"})
        with pytest.raises(ConfigError):
            CommitAttributor(GitHistory(repo.path), "v404")

    def test_merge_commits_and_branch_commits(self, repo) -> None:
        repo.commit("base", {"README.md": "base"})
        repo.git("tag", "base")
        repo.git("checkout", "-q", "-b", "feature")
        feature = repo.commit("feature a", {"packages/a/x.py": "feature"})
        repo.git("checkout", "-q", "main")
        mainline = repo.commit("main b", {"packages/b/x.py": "main"})
        repo.git(
            "merge", "-q", "--no-ff", "--no-edit", "feature", "-m", "merge feature"
        )
        merge = repo.git("rev-parse", "HEAD")

        attributor = CommitAttributor(GitHistory(repo.path), "base")
        a_ids = ids(attributor.attribute(A))
        b_ids = ids(attributor.attribute(B))

        # The merge changes a relative to its first parent and b relative to
        # its second, so it belongs to both.
        assert a_ids == [merge, feature]
        assert b_ids == [merge, mainline]

    def test_workspace_in_repo_subdirectory(self, repo) -> None:
        repo.commit("outside", {"packages/a/x.py": "1"})
        inside = repo.commit("inside", {"ws/packages/a/x.py": "1"})
        attributor = CommitAttributor(GitHistory(repo.path / "ws"), None)
        assert ids(attributor.attribute(A)) == [inside]
