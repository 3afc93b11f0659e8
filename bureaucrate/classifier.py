"""Loading and invoking the changelog classifier script.

The classifier is a plain Python file supplied per run. It exposes a
callable (``commit_handler`` unless another name is given) that receives a
package's commits and returns its changelog text and requested bump::

    def commit_handler(commits):
        return {"changelog": "### Fixes\\n- ...", "bump": "patch"}

The callable may also return a ClassifierVerdict directly.
"""

from __future__ import annotations

import importlib.util
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import ClassifierError
from .models import ClassifierVerdict, CommitRecord, PackageInfo, PackageStatus
from .versions import BumpLevel

DEFAULT_HANDLER = "commit_handler"

Handler = Callable[[list[CommitRecord]], Any]


def split_target(target: str) -> tuple[Path, str]:
    """Split "path/to/script.py[:callable]" into path and callable name."""
    path, sep, attr = target.rpartition(":")
    # A bare path, or a Windows drive letter ("C:\\..."), has no callable part
    if not sep or not attr or "/" in attr or "\\" in attr:
        return Path(target), DEFAULT_HANDLER
    return Path(path), attr


def load_handler(path: Path, attr: str = DEFAULT_HANDLER) -> Handler:
    """Import a classifier script and return its handler callable.

    Raises:
        ClassifierError: If the script cannot be found or imported, or does
            not define a callable ``attr``.
    """
    if not path.is_file():
        raise ClassifierError(f"Classifier script not found: {path}")

    module_spec = importlib.util.spec_from_file_location(
        f"bureaucrate_classifier_{path.stem}", path
    )
    if module_spec is None or module_spec.loader is None:
        raise ClassifierError(f"Cannot load classifier script {path}")
    module = importlib.util.module_from_spec(module_spec)
    try:
        module_spec.loader.exec_module(module)
    except Exception as e:
        raise ClassifierError(
            f"Classifier script {path} failed to load: {type(e).__name__}: {e}"
        ) from e

    handler = getattr(module, attr, None)
    if not callable(handler):
        raise ClassifierError(f"Classifier script {path} defines no callable {attr!r}")
    return handler


class Classifier:
    """Invokes a classifier handler and validates what it returns."""

    def __init__(self, handler: Handler, source: str = "<classifier>") -> None:
        self.handler = handler
        self.source = source

    @classmethod
    def from_target(cls, target: str) -> Classifier:
        """Build a classifier from a "path/to/script.py[:callable]" target."""
        path, attr = split_target(target)
        return cls(load_handler(path, attr), source=target)

    def classify(
        self, package: PackageInfo, commits: list[CommitRecord]
    ) -> ClassifierVerdict:
        """Run the handler for one package.

        Raises:
            ClassifierError: If the handler raises or returns a malformed
                verdict.
        """
        try:
            raw = self.handler(list(commits))
        except Exception as e:
            raise ClassifierError(
                f"Classifier {self.source} failed for {package.name}: "
                f"{type(e).__name__}: {e}"
            ) from e

        if isinstance(raw, ClassifierVerdict):
            return raw
        if not isinstance(raw, Mapping):
            raise ClassifierError(
                f"Classifier {self.source} returned {type(raw).__name__} for "
                f"{package.name}, expected a mapping with 'changelog' and 'bump'"
            )
        try:
            return ClassifierVerdict.model_validate(dict(raw))
        except ValidationError as e:
            raise ClassifierError(
                f"Classifier {self.source} returned a malformed verdict for {package.name}",
                details=str(e),
            ) from e


def apply_verdict(status: PackageStatus, verdict: ClassifierVerdict) -> None:
    """Record a verdict on a package's status, seeding its bump."""
    status.changelog = verdict.changelog
    status.bump = verdict.bump
    if status.bump > BumpLevel.NONE:
        status.bump_reasons.append(
            f"changelog generator decided to bump to {status.bump.label}"
        )
