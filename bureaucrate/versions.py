"""Version parsing and bump levels.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0"),
and defines the ordered set of bump levels a release can request.
"""

from __future__ import annotations

from enum import IntEnum

import semver


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3" → "1.2.3"

    Only the first 3 components are used (major.minor.patch).
    Prerelease/build metadata is not supported.
    """
    parts = version_str.split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    return semver.Version.parse(".".join(parts[:3]))


class BumpLevel(IntEnum):
    """Granularity of a semantic-version increase.

    Levels are totally ordered, so ``max()`` and comparisons work directly:
    NONE < PATCH < MINOR < MAJOR.
    """

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @property
    def label(self) -> str:
        """Display name used in reports, e.g. "Minor"."""
        return self.name.capitalize()

    def __str__(self) -> str:
        return self.label

    @classmethod
    def from_raw(cls, value: object) -> BumpLevel:
        """Coerce a classifier's raw bump value into a level.

        Accepts a BumpLevel, a level name in any case ("patch", "Major"),
        or an integer 0-3.

        Raises:
            ValueError: If the value names no level.
        """
        if isinstance(value, cls):
            return value
        # bool is an int subclass; True is not a bump level
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"bump level out of range: {value}") from None
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown bump level: {value!r}") from None
        raise ValueError(f"unsupported bump value: {value!r}")

    def apply(self, version_str: str) -> str:
        """Return the version that results from applying this bump.

        Examples:
            BumpLevel.NONE.apply("1.2.3") → "1.2.3"
            BumpLevel.PATCH.apply("1.2.3") → "1.2.4"
            BumpLevel.MINOR.apply("1.2.3") → "1.3.0"
            BumpLevel.MAJOR.apply("1.2.3") → "2.0.0"
        """
        if self is BumpLevel.NONE:
            return version_str
        version = parse_version(version_str)
        if self is BumpLevel.PATCH:
            return str(version.bump_patch())
        if self is BumpLevel.MINOR:
            return str(version.bump_minor())
        return str(version.bump_major())
