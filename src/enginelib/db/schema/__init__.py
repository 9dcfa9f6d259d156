"""Schema management for Engine library stores.

This package provides the schema version type, the per-version schema
snapshots for the music and performance stores, and verification of a
live store against its claimed version.

Module organization:
- version.py: SchemaVersion, known versions, get_schema_version
- definition.py: Schema snapshots and creation (create_schema, apply_schema)
- verify.py: Structural verification (verify_music_schema,
  verify_performance_schema)

Usage:
    from enginelib.db.schema import VERSION_LATEST, create_schema
    from enginelib.db.schema import verify_music_schema
"""

from .definition import SchemaDefinition, apply_schema, create_schema
from .verify import (
    read_information,
    read_structure,
    verify_music_schema,
    verify_performance_schema,
)
from .version import (
    KNOWN_VERSIONS,
    VERSION_FIRMWARE_1_0_0,
    VERSION_FIRMWARE_1_0_3,
    VERSION_LATEST,
    SchemaVersion,
    get_schema_version,
    is_supported,
)

__all__ = [
    # Versions
    "SchemaVersion",
    "KNOWN_VERSIONS",
    "VERSION_FIRMWARE_1_0_0",
    "VERSION_FIRMWARE_1_0_3",
    "VERSION_LATEST",
    "get_schema_version",
    "is_supported",
    # Creation
    "SchemaDefinition",
    "apply_schema",
    "create_schema",
    # Verification
    "read_information",
    "read_structure",
    "verify_music_schema",
    "verify_performance_schema",
]
