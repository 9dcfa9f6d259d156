"""Schema definitions for Engine library stores.

Each known schema version owns a complete snapshot of the DDL and seed
data for both stores. There is no migration between versions, so a
snapshot is never expressed as a diff against an older one.
"""

import logging
import sqlite3
from typing import NamedTuple

from enginelib.db.schema.version import (
    VERSION_FIRMWARE_1_0_0,
    VERSION_FIRMWARE_1_0_3,
    SchemaVersion,
    is_supported,
)
from enginelib.exceptions import UnsupportedVersionError

logger = logging.getLogger(__name__)


class SchemaDefinition(NamedTuple):
    """DDL and seed data for both stores at one schema version."""

    music_sql: str
    performance_sql: str


MUSIC_SCHEMA_1_6_0 = """
-- Library identity and schema version (exactly one row)
CREATE TABLE Information (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT,
    schemaVersionMajor INTEGER,
    schemaVersionMinor INTEGER,
    schemaVersionPatch INTEGER,
    currentPlayedIndiciator INTEGER
);

CREATE TABLE AlbumArt (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    hash TEXT,
    albumArt BLOB
);

CREATE INDEX index_AlbumArt_hash ON AlbumArt (hash);

CREATE TABLE Track (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    playOrder INTEGER,
    length INTEGER,
    lengthCalculated INTEGER,
    bpm INTEGER,
    year INTEGER,
    path TEXT,
    filename TEXT,
    bitrate INTEGER,
    bpmAnalyzed REAL,
    trackType INTEGER,
    idAlbumArt INTEGER REFERENCES AlbumArt (id) ON DELETE RESTRICT,
    fileBytes INTEGER
);

CREATE INDEX index_Track_filename ON Track (filename);
CREATE INDEX index_Track_path ON Track (path);
CREATE INDEX index_Track_idAlbumArt ON Track (idAlbumArt);

CREATE TABLE MetaData (
    id INTEGER REFERENCES Track (id) ON DELETE CASCADE,
    type INTEGER,
    text TEXT,
    PRIMARY KEY (id, type)
);

CREATE INDEX index_MetaData_type_text ON MetaData (type, text);

CREATE TABLE MetaDataInteger (
    id INTEGER REFERENCES Track (id) ON DELETE CASCADE,
    type INTEGER,
    value INTEGER,
    PRIMARY KEY (id, type)
);

CREATE INDEX index_MetaDataInteger_type_value ON MetaDataInteger (type, value);

CREATE TABLE Crate (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT,
    path TEXT,
    UNIQUE (path)
);

CREATE INDEX index_Crate_title ON Crate (title);

CREATE TABLE CrateParentList (
    crateOriginId INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    crateParentId INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    PRIMARY KEY (crateOriginId, crateParentId)
);

CREATE TABLE CrateHierarchy (
    crateId INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    crateIdChild INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    PRIMARY KEY (crateId, crateIdChild)
);

CREATE TABLE CrateTrackList (
    crateId INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    trackId INTEGER REFERENCES Track (id) ON DELETE CASCADE,
    PRIMARY KEY (crateId, trackId)
);

CREATE INDEX index_CrateTrackList_trackId ON CrateTrackList (trackId);

CREATE TABLE Playlist (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT,
    UNIQUE (title)
);

CREATE TABLE PlaylistTrackList (
    playlistId INTEGER REFERENCES Playlist (id) ON DELETE CASCADE,
    trackId INTEGER REFERENCES Track (id) ON DELETE CASCADE,
    trackIdInOriginDatabase INTEGER,
    databaseUuid TEXT,
    trackNumber INTEGER
);

CREATE INDEX index_PlaylistTrackList_playlistId ON PlaylistTrackList (playlistId);
CREATE INDEX index_PlaylistTrackList_trackId ON PlaylistTrackList (trackId);

-- Seed: placeholder album art referenced by tracks without artwork
INSERT INTO AlbumArt (hash, albumArt) VALUES ('', NULL);
"""

PERFORMANCE_SCHEMA_1_6_0 = """
-- Library identity and schema version (exactly one row)
CREATE TABLE Information (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT,
    schemaVersionMajor INTEGER,
    schemaVersionMinor INTEGER,
    schemaVersionPatch INTEGER,
    currentPlayedIndiciator INTEGER
);

-- One row per analyzed track; id is the music store's Track.id
CREATE TABLE PerformanceData (
    id INTEGER PRIMARY KEY,
    isAnalyzed NUMERIC NOT NULL DEFAULT 1,
    isRendered NUMERIC NOT NULL DEFAULT 0,
    sampleRate REAL NOT NULL,
    totalSamples INTEGER NOT NULL CHECK (totalSamples >= 0),
    keyCode INTEGER NOT NULL DEFAULT 0,
    averageLoudness REAL NOT NULL DEFAULT 0,
    defaultFirstBeatIndex INTEGER NOT NULL,
    defaultFirstBeatSampleOffset REAL NOT NULL,
    defaultLastBeatIndex INTEGER NOT NULL,
    defaultLastBeatSampleOffset REAL NOT NULL,
    adjustedFirstBeatIndex INTEGER NOT NULL,
    adjustedFirstBeatSampleOffset REAL NOT NULL,
    adjustedLastBeatIndex INTEGER NOT NULL,
    adjustedLastBeatSampleOffset REAL NOT NULL,
    defaultMainCueSampleOffset REAL NOT NULL,
    adjustedMainCueSampleOffset REAL NOT NULL,
    hasSeratoValues NUMERIC NOT NULL DEFAULT 0,
    hasTraktorValues NUMERIC NOT NULL DEFAULT 0
);

-- Exactly eight rows per PerformanceData row (slot 0-7)
CREATE TABLE PerformanceHotCue (
    trackId INTEGER NOT NULL REFERENCES PerformanceData (id) ON DELETE CASCADE,
    slot INTEGER NOT NULL,
    isSet NUMERIC NOT NULL,
    label TEXT NOT NULL,
    sampleOffset REAL NOT NULL,
    colour INTEGER NOT NULL,
    PRIMARY KEY (trackId, slot)
);

-- Exactly eight rows per PerformanceData row (slot 0-7)
CREATE TABLE PerformanceLoop (
    trackId INTEGER NOT NULL REFERENCES PerformanceData (id) ON DELETE CASCADE,
    slot INTEGER NOT NULL,
    isStartSet NUMERIC NOT NULL,
    isEndSet NUMERIC NOT NULL,
    label TEXT NOT NULL,
    startSampleOffset REAL NOT NULL,
    endSampleOffset REAL NOT NULL,
    colour INTEGER NOT NULL,
    PRIMARY KEY (trackId, slot)
);
"""

MUSIC_SCHEMA_1_7_1 = """
-- Library identity and schema version (exactly one row)
CREATE TABLE Information (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT,
    schemaVersionMajor INTEGER,
    schemaVersionMinor INTEGER,
    schemaVersionPatch INTEGER,
    currentPlayedIndiciator INTEGER,
    lastRekordBoxLibraryImportReadCounter INTEGER
);

CREATE TABLE AlbumArt (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    hash TEXT,
    albumArt BLOB
);

CREATE INDEX index_AlbumArt_hash ON AlbumArt (hash);

CREATE TABLE Track (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    playOrder INTEGER,
    length INTEGER,
    lengthCalculated INTEGER,
    bpm INTEGER,
    year INTEGER,
    path TEXT,
    filename TEXT,
    bitrate INTEGER,
    bpmAnalyzed REAL,
    trackType INTEGER,
    isExternalTrack NUMERIC,
    uuidOfExternalDatabase TEXT,
    idTrackInExternalDatabase INTEGER,
    idAlbumArt INTEGER REFERENCES AlbumArt (id) ON DELETE RESTRICT,
    fileBytes INTEGER,
    pdbImportKey INTEGER DEFAULT 0
);

CREATE INDEX index_Track_filename ON Track (filename);
CREATE INDEX index_Track_path ON Track (path);
CREATE INDEX index_Track_idAlbumArt ON Track (idAlbumArt);
CREATE INDEX index_Track_uuidOfExternalDatabase ON Track (uuidOfExternalDatabase);
CREATE INDEX index_Track_idTrackInExternalDatabase ON Track (idTrackInExternalDatabase);

CREATE TABLE MetaData (
    id INTEGER REFERENCES Track (id) ON DELETE CASCADE,
    type INTEGER,
    text TEXT,
    PRIMARY KEY (id, type)
);

CREATE INDEX index_MetaData_type_text ON MetaData (type, text);

CREATE TABLE MetaDataInteger (
    id INTEGER REFERENCES Track (id) ON DELETE CASCADE,
    type INTEGER,
    value INTEGER,
    PRIMARY KEY (id, type)
);

CREATE INDEX index_MetaDataInteger_type_value ON MetaDataInteger (type, value);

CREATE TABLE Crate (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT,
    path TEXT,
    UNIQUE (path)
);

CREATE INDEX index_Crate_title ON Crate (title);

CREATE TABLE CrateParentList (
    crateOriginId INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    crateParentId INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    PRIMARY KEY (crateOriginId, crateParentId)
);

CREATE TABLE CrateHierarchy (
    crateId INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    crateIdChild INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    PRIMARY KEY (crateId, crateIdChild)
);

CREATE TABLE CrateTrackList (
    crateId INTEGER REFERENCES Crate (id) ON DELETE CASCADE,
    trackId INTEGER REFERENCES Track (id) ON DELETE CASCADE,
    PRIMARY KEY (crateId, trackId)
);

CREATE INDEX index_CrateTrackList_trackId ON CrateTrackList (trackId);

CREATE TABLE Playlist (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT,
    UNIQUE (title)
);

CREATE TABLE PlaylistTrackList (
    playlistId INTEGER REFERENCES Playlist (id) ON DELETE CASCADE,
    trackId INTEGER REFERENCES Track (id) ON DELETE CASCADE,
    trackIdInOriginDatabase INTEGER,
    databaseUuid TEXT,
    trackNumber INTEGER
);

CREATE INDEX index_PlaylistTrackList_playlistId ON PlaylistTrackList (playlistId);
CREATE INDEX index_PlaylistTrackList_trackId ON PlaylistTrackList (trackId);

-- Seed: placeholder album art referenced by tracks without artwork
INSERT INTO AlbumArt (hash, albumArt) VALUES ('', NULL);
"""

PERFORMANCE_SCHEMA_1_7_1 = """
-- Library identity and schema version (exactly one row)
CREATE TABLE Information (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT,
    schemaVersionMajor INTEGER,
    schemaVersionMinor INTEGER,
    schemaVersionPatch INTEGER,
    currentPlayedIndiciator INTEGER,
    lastRekordBoxLibraryImportReadCounter INTEGER
);

-- One row per analyzed track; id is the music store's Track.id
CREATE TABLE PerformanceData (
    id INTEGER PRIMARY KEY,
    isAnalyzed NUMERIC NOT NULL DEFAULT 1,
    isRendered NUMERIC NOT NULL DEFAULT 0,
    sampleRate REAL NOT NULL,
    totalSamples INTEGER NOT NULL CHECK (totalSamples >= 0),
    keyCode INTEGER NOT NULL DEFAULT 0,
    averageLoudness REAL NOT NULL DEFAULT 0,
    defaultFirstBeatIndex INTEGER NOT NULL,
    defaultFirstBeatSampleOffset REAL NOT NULL,
    defaultLastBeatIndex INTEGER NOT NULL,
    defaultLastBeatSampleOffset REAL NOT NULL,
    adjustedFirstBeatIndex INTEGER NOT NULL,
    adjustedFirstBeatSampleOffset REAL NOT NULL,
    adjustedLastBeatIndex INTEGER NOT NULL,
    adjustedLastBeatSampleOffset REAL NOT NULL,
    defaultMainCueSampleOffset REAL NOT NULL,
    adjustedMainCueSampleOffset REAL NOT NULL,
    hasSeratoValues NUMERIC NOT NULL DEFAULT 0,
    hasTraktorValues NUMERIC NOT NULL DEFAULT 0,
    hasRekordboxValues NUMERIC NOT NULL DEFAULT 0
);

-- Exactly eight rows per PerformanceData row (slot 0-7)
CREATE TABLE PerformanceHotCue (
    trackId INTEGER NOT NULL REFERENCES PerformanceData (id) ON DELETE CASCADE,
    slot INTEGER NOT NULL,
    isSet NUMERIC NOT NULL,
    label TEXT NOT NULL,
    sampleOffset REAL NOT NULL,
    colour INTEGER NOT NULL,
    PRIMARY KEY (trackId, slot)
);

-- Exactly eight rows per PerformanceData row (slot 0-7)
CREATE TABLE PerformanceLoop (
    trackId INTEGER NOT NULL REFERENCES PerformanceData (id) ON DELETE CASCADE,
    slot INTEGER NOT NULL,
    isStartSet NUMERIC NOT NULL,
    isEndSet NUMERIC NOT NULL,
    label TEXT NOT NULL,
    startSampleOffset REAL NOT NULL,
    endSampleOffset REAL NOT NULL,
    colour INTEGER NOT NULL,
    PRIMARY KEY (trackId, slot)
);
"""

_SCHEMAS: dict[SchemaVersion, SchemaDefinition] = {
    VERSION_FIRMWARE_1_0_0: SchemaDefinition(
        MUSIC_SCHEMA_1_6_0, PERFORMANCE_SCHEMA_1_6_0
    ),
    VERSION_FIRMWARE_1_0_3: SchemaDefinition(
        MUSIC_SCHEMA_1_7_1, PERFORMANCE_SCHEMA_1_7_1
    ),
}


def create_schema(version: SchemaVersion) -> SchemaDefinition:
    """Get the schema definition for both stores at a known version.

    Args:
        version: Schema version to build.

    Returns:
        SchemaDefinition holding the music and performance store SQL.

    Raises:
        UnsupportedVersionError: If version is not a known version.
    """
    if not is_supported(version):
        raise UnsupportedVersionError(version)
    return _SCHEMAS[version]


def apply_schema(
    conn: sqlite3.Connection, sql: str, uuid: str, version: SchemaVersion
) -> None:
    """Create a store's tables from a schema snapshot.

    Runs the snapshot DDL and seed data, then records the library uuid and
    schema version in the store's single Information row.

    Args:
        conn: An open connection to an empty store.
        sql: Schema snapshot, as returned by create_schema().
        uuid: Library identifier shared by both stores.
        version: Version the snapshot belongs to.
    """
    conn.executescript(sql)
    conn.execute(
        "INSERT INTO Information "
        "(uuid, schemaVersionMajor, schemaVersionMinor, schemaVersionPatch, "
        "currentPlayedIndiciator) VALUES (?, ?, ?, ?, 0)",
        (uuid, version.major, version.minor, version.patch),
    )
    if conn.in_transaction:
        conn.commit()
    logger.debug("Applied schema %s", version)
