"""enginelib: versioned access to Engine DJ library stores."""

from enginelib.db.schema import (
    KNOWN_VERSIONS,
    VERSION_FIRMWARE_1_0_0,
    VERSION_FIRMWARE_1_0_3,
    VERSION_LATEST,
    SchemaVersion,
    create_schema,
    is_supported,
    verify_music_schema,
    verify_performance_schema,
)
from enginelib.domain import (
    STANDARD_PAD_COLOURS,
    BeatGrid,
    HotCue,
    Loop,
    MusicalKey,
    PadColour,
    PerformanceRecord,
    calculate_bpm,
    calculate_duration_ms,
    normalize_beat_grid,
)
from enginelib.exceptions import (
    ConfigError,
    CorruptPerformanceDataError,
    DegenerateBeatGridError,
    EngineLibraryError,
    HandleClosedError,
    LibraryNotFoundError,
    NoPerformanceDataError,
    SchemaInconsistencyError,
    TrackNotFoundError,
    UnsupportedVersionError,
)
from enginelib.library import EngineLibrary, create_library

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Library
    "EngineLibrary",
    "create_library",
    # Schema
    "SchemaVersion",
    "KNOWN_VERSIONS",
    "VERSION_FIRMWARE_1_0_0",
    "VERSION_FIRMWARE_1_0_3",
    "VERSION_LATEST",
    "create_schema",
    "is_supported",
    "verify_music_schema",
    "verify_performance_schema",
    # Performance data
    "PerformanceRecord",
    "BeatGrid",
    "HotCue",
    "Loop",
    "MusicalKey",
    "PadColour",
    "STANDARD_PAD_COLOURS",
    "calculate_bpm",
    "calculate_duration_ms",
    "normalize_beat_grid",
    # Errors
    "EngineLibraryError",
    "ConfigError",
    "CorruptPerformanceDataError",
    "DegenerateBeatGridError",
    "HandleClosedError",
    "LibraryNotFoundError",
    "NoPerformanceDataError",
    "SchemaInconsistencyError",
    "TrackNotFoundError",
    "UnsupportedVersionError",
]
