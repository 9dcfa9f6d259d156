"""Exceptions raised by enginelib.

Every error is a distinct subclass of EngineLibraryError so callers can
tell "not analyzed yet" apart from "analysis is damaged", and either of
those apart from schema problems.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from enginelib.db.schema.version import SchemaVersion


class EngineLibraryError(Exception):
    """Base exception for all enginelib errors."""


class LibraryNotFoundError(EngineLibraryError):
    """Raised when a library directory is missing one of its store files.

    Attributes:
        directory: The library directory that was opened.
        missing: Paths of the store files that do not exist.
    """

    def __init__(self, directory: Path, missing: list[Path]) -> None:
        self.directory = directory
        self.missing = missing
        names = ", ".join(p.name for p in missing)
        super().__init__(f"No Engine library at {directory}: missing {names}")


class UnsupportedVersionError(EngineLibraryError):
    """Raised when a schema version is not one of the known versions.

    Attributes:
        version: The version that was requested or found on disk.
    """

    def __init__(self, version: SchemaVersion, message: str | None = None) -> None:
        self.version = version
        super().__init__(message or f"Unsupported schema version: {version}")


class SchemaInconsistencyError(EngineLibraryError):
    """Raised when a store's structure does not match its claimed version."""


class TrackNotFoundError(EngineLibraryError):
    """Raised when saving performance data for a track the music store lacks."""

    def __init__(self, track_id: int) -> None:
        self.track_id = track_id
        super().__init__(f"Track {track_id} does not exist in the music store")


class NoPerformanceDataError(EngineLibraryError):
    """Raised when a track has no stored performance data.

    This is the normal state for a track that was never analyzed.
    """

    def __init__(self, track_id: int) -> None:
        self.track_id = track_id
        super().__init__(f"No performance data stored for track {track_id}")


class CorruptPerformanceDataError(EngineLibraryError):
    """Raised when stored performance data violates its format.

    Attributes:
        track_id: Track whose performance data is damaged.
        reason: Description of the first violation found.
    """

    def __init__(self, track_id: int, reason: str) -> None:
        self.track_id = track_id
        self.reason = reason
        super().__init__(f"Performance data for track {track_id} is corrupt: {reason}")


class DegenerateBeatGridError(EngineLibraryError):
    """Raised when a beat grid's two points give no usable beat spacing."""


class HandleClosedError(EngineLibraryError):
    """Raised when a closed library handle is used."""


class ConfigError(EngineLibraryError):
    """Raised when configuration cannot be loaded or fails validation."""
