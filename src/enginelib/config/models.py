"""Configuration models.

Config files are validated with Pydantic so that a bad value is reported
with its location instead of surfacing later as an opaque store error.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from enginelib.db.schema.version import (
    KNOWN_VERSIONS,
    VERSION_LATEST,
    SchemaVersion,
    is_supported,
)


class LibraryConfig(BaseModel):
    """Settings for creating libraries."""

    model_config = ConfigDict(extra="forbid")

    default_schema_version: str = str(VERSION_LATEST)
    """Schema version used by create_library() when none is given."""

    @field_validator("default_schema_version")
    @classmethod
    def _validate_version(cls, value: str) -> str:
        version = SchemaVersion.parse(value)
        if not is_supported(version):
            known = ", ".join(str(v) for v in KNOWN_VERSIONS)
            raise ValueError(f"schema version {value} is not one of: {known}")
        return str(version)

    @property
    def schema_version(self) -> SchemaVersion:
        """The default schema version as a SchemaVersion."""
        return SchemaVersion.parse(self.default_schema_version)


class StoreConfig(BaseModel):
    """Settings for store connections."""

    model_config = ConfigDict(extra="forbid")

    timeout: float = Field(default=30.0, gt=0)
    """Seconds to wait for a store lock."""

    slow_transaction_seconds: float = Field(default=5.0, gt=0)
    """Log a warning for save transactions slower than this."""


class EngineLibConfig(BaseModel):
    """Root configuration, as read from config.toml."""

    model_config = ConfigDict(extra="forbid")

    library: LibraryConfig = Field(default_factory=LibraryConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
