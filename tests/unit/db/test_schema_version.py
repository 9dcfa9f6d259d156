"""Unit tests for schema version handling."""

import sqlite3

import pytest

from enginelib.db.schema.version import (
    KNOWN_VERSIONS,
    VERSION_FIRMWARE_1_0_0,
    VERSION_FIRMWARE_1_0_3,
    VERSION_LATEST,
    SchemaVersion,
    get_schema_version,
    is_supported,
)


class TestSchemaVersionParsing:
    """Tests for SchemaVersion.parse() method."""

    def test_parse_standard_version(self):
        """Parse a major.minor.patch string."""
        version = SchemaVersion.parse("1.7.1")
        assert version.major == 1
        assert version.minor == 7
        assert version.patch == 1

    def test_parse_with_whitespace(self):
        """Surrounding whitespace is ignored."""
        assert SchemaVersion.parse("  1.6.0  ") == SchemaVersion(1, 6, 0)

    @pytest.mark.parametrize("text", ["1.7", "a.b.c", "", "1.7.1-beta"])
    def test_parse_invalid_raises(self, text):
        """Malformed strings raise ValueError."""
        with pytest.raises(ValueError, match="Invalid schema version string"):
            SchemaVersion.parse(text)


class TestSchemaVersionComparison:
    """Tests for SchemaVersion comparison operators."""

    def test_equal_versions(self):
        """Versions with the same components compare equal."""
        assert SchemaVersion(1, 7, 1) == SchemaVersion(1, 7, 1)
        assert SchemaVersion(1, 7, 1) != SchemaVersion(1, 7, 0)

    def test_ordering_is_lexicographic(self):
        """Major dominates minor, which dominates patch."""
        assert SchemaVersion(1, 6, 0) < SchemaVersion(1, 7, 1)
        assert SchemaVersion(1, 7, 1) < SchemaVersion(2, 0, 0)
        assert SchemaVersion(1, 9, 9) < SchemaVersion(2, 0, 0)
        assert SchemaVersion(1, 7, 0) <= SchemaVersion(1, 7, 0)
        assert SchemaVersion(1, 7, 2) > SchemaVersion(1, 7, 1)
        assert SchemaVersion(1, 7, 1) >= SchemaVersion(1, 6, 9)

    def test_str_renders_dotted(self):
        """str() gives major.minor.patch."""
        assert str(SchemaVersion(1, 7, 1)) == "1.7.1"

    def test_hashable(self):
        """Versions can be used as dict keys and set members."""
        assert len({SchemaVersion(1, 6, 0), SchemaVersion(1, 6, 0)}) == 1


class TestKnownVersions:
    """Tests for the registry of known versions."""

    def test_known_versions_ordered(self):
        """KNOWN_VERSIONS runs oldest to newest."""
        assert list(KNOWN_VERSIONS) == sorted(KNOWN_VERSIONS)

    def test_latest_is_firmware_1_0_3(self):
        """VERSION_LATEST is the newest known version."""
        assert VERSION_LATEST == VERSION_FIRMWARE_1_0_3 == SchemaVersion(1, 7, 1)
        assert VERSION_LATEST == max(KNOWN_VERSIONS)

    def test_known_versions_are_supported(self):
        """Every known version is supported."""
        assert is_supported(VERSION_FIRMWARE_1_0_0)
        assert is_supported(VERSION_FIRMWARE_1_0_3)

    def test_unknown_versions_are_not_supported(self):
        """Versions between or beyond the known ones are unsupported."""
        assert not is_supported(SchemaVersion(1, 7, 0))
        assert not is_supported(SchemaVersion(1, 8, 0))
        assert not is_supported(SchemaVersion(0, 0, 0))


class TestGetSchemaVersion:
    """Tests for get_schema_version function."""

    def test_reads_information_row(self):
        """The version is read from the Information row."""
        conn = sqlite3.connect(":memory:")
        conn.execute(
            "CREATE TABLE Information (id INTEGER PRIMARY KEY, uuid TEXT, "
            "schemaVersionMajor INTEGER, schemaVersionMinor INTEGER, "
            "schemaVersionPatch INTEGER)"
        )
        conn.execute(
            "INSERT INTO Information VALUES (1, 'abc', 1, 6, 0)"
        )
        assert get_schema_version(conn) == SchemaVersion(1, 6, 0)
        conn.close()

    def test_missing_table_returns_none(self):
        """A store without an Information table has no version."""
        conn = sqlite3.connect(":memory:")
        assert get_schema_version(conn) is None
        conn.close()

    def test_empty_table_returns_none(self):
        """An empty Information table has no version."""
        conn = sqlite3.connect(":memory:")
        conn.execute(
            "CREATE TABLE Information (id INTEGER PRIMARY KEY, "
            "schemaVersionMajor INTEGER, schemaVersionMinor INTEGER, "
            "schemaVersionPatch INTEGER)"
        )
        assert get_schema_version(conn) is None
        conn.close()
