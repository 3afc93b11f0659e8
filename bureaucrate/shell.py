"""Shell and git utilities.

Provides a thin wrapper around subprocess calls to git, plus output
formatting helpers. Progress output goes to stderr so that reports printed
on stdout can be piped or captured unchanged.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from .errors import DataIntegrityError


def git(*args: str, cwd: Path | None = None) -> bytes:
    """Run a git command and return its raw stdout.

    Output is returned undecoded: callers decide how strictly to treat
    commit text that is not valid UTF-8.

    Args:
        *args: Arguments to pass to git (e.g., "rev-list", "HEAD").
        cwd: Repository directory. Defaults to the current directory.

    Raises:
        DataIntegrityError: If git exits with a non-zero status.
    """
    result = subprocess.run(["git", *args], capture_output=True, cwd=cwd)
    if result.returncode != 0:
        raise DataIntegrityError(
            f"git {args[0]} failed with exit code {result.returncode}",
            details=result.stderr.decode("utf-8", errors="replace").strip(),
        )
    return result.stdout


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of a run in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}", file=sys.stderr)


def info(msg: str) -> None:
    """Print an indented progress line under the current step."""
    print(f"  {msg}", file=sys.stderr)


def warn(msg: str) -> None:
    """Print a non-fatal warning."""
    print(f"  Warning: {msg}", file=sys.stderr)
