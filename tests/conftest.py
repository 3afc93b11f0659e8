"""Shared test fixtures."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest
import tomlkit

from bureaucrate.models import PackageInfo


class GitRepo:
    """A throwaway git repository with deterministic commit times."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._tick = 0
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")

    def git(self, *args: str) -> str:
        timestamp = f"{1_700_000_000 + self._tick * 60} +0000"
        env = {
            **os.environ,
            "GIT_CONFIG_NOSYSTEM": "1",
            "HOME": str(self.path),
            "GIT_AUTHOR_DATE": timestamp,
            "GIT_COMMITTER_DATE": timestamp,
        }
        result = subprocess.run(
            [
                "git",
                "-c", "user.name=Test Author",
                "-c", "user.email=test@example.com",
                "-c", "commit.gpgsign=false",
                *args,
            ],
            cwd=self.path,
            env=env,
            check=True,
            capture_output=True,
        )
        return result.stdout.decode("utf-8", errors="replace").strip()

    def write(self, rel: str, content: str) -> None:
        target = self.path / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    def commit(
        self,
        message: str | bytes,
        files: dict[str, str] | None = None,
        remove: tuple[str, ...] = (),
    ) -> str:
        """Write ``files``, delete ``remove``, commit everything, return the sha."""
        for rel, content in (files or {}).items():
            self.write(rel, content)
        for rel in remove:
            (self.path / rel).unlink()
        self.git("add", "-A")
        self._tick += 1
        msg_file = self.path / ".git" / "TEST_MSG"
        if isinstance(message, bytes):
            msg_file.write_bytes(message)
        else:
            msg_file.write_text(message)
        self.git("commit", "-q", "--allow-empty", "-F", str(msg_file))
        return self.git("rev-parse", "HEAD")


@pytest.fixture
def repo(tmp_path: Path) -> GitRepo:
    """Create an empty git repository."""
    return GitRepo(tmp_path)


def pyproject_text(name: str, version: str, deps: list[str] | None = None) -> str:
    dep_list = ", ".join(f'"{d}"' for d in deps or [])
    return (
        f'[project]\nname = "{name}"\nversion = "{version}"\n'
        f"dependencies = [{dep_list}]\n"
    )


def _workspace_files(
    members: dict[str, tuple[str, str, list[str]]],
    member_globs: tuple[str, ...] = ("packages/*",),
    root_project: tuple[str, str, list[str]] | None = None,
    extra_root: str = "",
) -> dict[str, str]:
    """Build the file map for a uv workspace.

    Args:
        members: Map of package dir → (name, version, deps).
        member_globs: Patterns for [tool.uv.workspace].members.
        root_project: Optional (name, version, deps) for the root itself.
        extra_root: Extra TOML appended to the root pyproject.
    """
    root = ""
    if root_project:
        root = pyproject_text(*root_project) + "\n"
    globs = ", ".join(f'"{g}"' for g in member_globs)
    root += f"[tool.uv.workspace]\nmembers = [{globs}]\n" + extra_root
    files = {"pyproject.toml": root}
    for rel, (name, version, deps) in members.items():
        files[f"{rel}/pyproject.toml"] = pyproject_text(name, version, deps)
    return files


@pytest.fixture
def workspace_files():
    """Factory building the file map of a uv workspace, see _workspace_files()."""
    return _workspace_files


@pytest.fixture
def write_files():
    """Factory writing a file map below a directory."""

    def write(root: Path, files: dict[str, str]) -> Path:
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return root

    return write


@pytest.fixture
def core_cli_packages() -> dict[str, PackageInfo]:
    """Two packages: cli depends on core."""
    return {
        "core": PackageInfo(name="core", path="packages/core", version="1.2.3"),
        "cli": PackageInfo(
            name="cli", path="packages/cli", version="0.4.0", deps=["core"]
        ),
    }


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
# Package manifest
[project]
name = "test-package"
version = "1.0.0"
dependencies = [
    "requests>=2.0",
    "internal-dep>=1.0",
]

[project.optional-dependencies]
dev = ["pytest>=8.0", "another-internal>=0.5"]

[dependency-groups]
test = ["pytest>=8.0", "group-internal>=0.1"]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"
dependencies = ["click>=8.0", "pydantic>=2.0"]

[project.optional-dependencies]
dev = ["pytest>=8.0"]
docs = ["sphinx>=7.0"]

[dependency-groups]
test = ["hypothesis>=6.0", {include-group = "lint"}]
lint = ["ruff>=0.5"]

[tool.uv.workspace]
members = ["packages/*", "libs/*"]
exclude = ["packages/legacy"]

[tool.bureaucrate]
changelog-file = "CHANGES.md"
"""
    return tomlkit.parse(content)
