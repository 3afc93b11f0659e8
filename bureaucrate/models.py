"""Data models for bureaucrate.

These Pydantic models represent the core data structures passed between
the workspace reader, the commit attributor, the classifier, and the
bump propagator.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .versions import BumpLevel

DEFAULT_MARKER = "<!-- bureaucrate goes here -->"


class PackageInfo(BaseModel):
    """Metadata for a single package in the workspace.

    Attributes:
        name: Canonical (PEP 503) package name; also the package's identity.
        path: POSIX path from workspace root to the package directory.
              The workspace root project itself uses ".".
        version: Current version string from pyproject.toml.
        deps: Internal (workspace) dependency names. External deps are not
              tracked since they never take part in bump propagation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    version: str
    deps: list[str] = Field(default_factory=list)


class CommitRecord(BaseModel):
    """A commit as handed to the classifier.

    Author fields are mailmap-resolved.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    author_name: str
    author_email: str
    message: str


class ClassifierVerdict(BaseModel):
    """What the classifier decided for one package.

    Attributes:
        changelog: Free-form Markdown for the changelog entry (may be empty).
        bump: Requested bump. Raw values such as "minor" or 2 are coerced.
    """

    changelog: str
    bump: BumpLevel = BumpLevel.NONE

    @field_validator("bump", mode="before")
    @classmethod
    def _coerce_bump(cls, value: object) -> BumpLevel:
        return BumpLevel.from_raw(value)


class PackageStatus(BaseModel):
    """Mutable per-package state for a single run.

    Created when the package graph is built, filled in by the classifier,
    escalated by the propagator, and read by the report and the writer.
    """

    package: PackageInfo
    changelog: str = ""
    bump: BumpLevel = BumpLevel.NONE
    bump_reasons: list[str] = Field(default_factory=list)

    @property
    def final_version(self) -> str:
        return self.bump.apply(self.package.version)

    def escalate(self, bump: BumpLevel, reason: str) -> bool:
        """Raise the bump to ``bump`` and record why.

        Returns:
            True if the bump changed. Lower or equal levels are ignored, so
            a status can never be demoted.
        """
        if bump <= self.bump:
            return False
        self.bump = bump
        self.bump_reasons.append(reason)
        return True


class BureaucrateConfig(BaseModel):
    """Settings from the optional [tool.bureaucrate] table.

    Attributes:
        changelog_file: Changelog filename inside each package directory.
        marker: Line after which new changelog entries are inserted.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    changelog_file: str = Field(default="CHANGELOG.md", alias="changelog-file")
    marker: str = DEFAULT_MARKER
