"""Schema version handling for Engine library stores.

This module provides the SchemaVersion type, the registry of known
versions, and the helper that reads the version recorded in a store.
"""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass
from functools import total_ordering


@total_ordering
@dataclass(frozen=True)
class SchemaVersion:
    """Version of an Engine library schema.

    Versions compare lexicographically by (major, minor, patch). Any three
    integers form a valid version; whether it is usable is decided by
    is_supported().
    """

    major: int
    minor: int
    patch: int

    _VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")

    @classmethod
    def parse(cls, version_str: str) -> SchemaVersion:
        """Parse a "major.minor.patch" string into a SchemaVersion.

        Args:
            version_str: Version string like "1.7.1".

        Returns:
            Parsed SchemaVersion.

        Raises:
            ValueError: If version string is invalid.
        """
        match = cls._VERSION_PATTERN.match(version_str.strip())
        if not match:
            raise ValueError(f"Invalid schema version string: {version_str}")

        return cls(
            major=int(match.group(1)),
            minor=int(match.group(2)),
            patch=int(match.group(3)),
        )

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __lt__(self, other: SchemaVersion) -> bool:
        if not isinstance(other, SchemaVersion):
            return NotImplemented
        return (self.major, self.minor, self.patch) < (
            other.major,
            other.minor,
            other.patch,
        )


# Schema shipped with device firmware 1.0.0
VERSION_FIRMWARE_1_0_0 = SchemaVersion(1, 6, 0)

# Schema shipped with device firmware 1.0.3
VERSION_FIRMWARE_1_0_3 = SchemaVersion(1, 7, 1)

VERSION_LATEST = VERSION_FIRMWARE_1_0_3

# Ordered oldest to newest
KNOWN_VERSIONS: tuple[SchemaVersion, ...] = (
    VERSION_FIRMWARE_1_0_0,
    VERSION_FIRMWARE_1_0_3,
)


def is_supported(version: SchemaVersion) -> bool:
    """Return True if the version is one of the known schema versions."""
    return version in KNOWN_VERSIONS


def get_schema_version(conn: sqlite3.Connection) -> SchemaVersion | None:
    """Get the schema version recorded in a store's Information row.

    Args:
        conn: An open store connection.

    Returns:
        The recorded version, or None if the Information table is missing
        or empty.
    """
    try:
        row = conn.execute(
            "SELECT schemaVersionMajor, schemaVersionMinor, schemaVersionPatch "
            "FROM Information ORDER BY id LIMIT 1"
        ).fetchone()
    except sqlite3.OperationalError:
        # Table doesn't exist
        return None
    if row is None:
        return None
    return SchemaVersion(int(row[0]), int(row[1]), int(row[2]))
