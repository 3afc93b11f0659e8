"""Exception hierarchy for bureaucrate.

Every error is fatal for the run: the CLI reports it and exits non-zero
before anything is written to disk.
"""

from __future__ import annotations


class BureaucrateError(Exception):
    """Base class for all bureaucrate errors.

    Attributes:
        message: Human-readable description.
        details: Optional extra context, such as a subprocess's stderr.
    """

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n{self.details}"
        return self.message


class ConfigError(BureaucrateError):
    """Invalid invocation or configuration (e.g., unknown boundary revision)."""


class WorkspaceError(ConfigError):
    """Workspace metadata could not be resolved."""


class DataIntegrityError(BureaucrateError):
    """Revision history could not be read faithfully."""


class ClassifierError(BureaucrateError):
    """The classifier script failed to load, raised, or returned garbage."""


class PersistenceError(BureaucrateError):
    """A changelog or manifest could not be read or written."""
