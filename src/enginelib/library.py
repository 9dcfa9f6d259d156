"""Library handle for an Engine library directory.

An Engine library is a directory holding two SQLite stores: the music
store (m.db) and the performance store (p.db). Both record the same uuid
and schema version in their Information table.

Usage:
    from enginelib import EngineLibrary, create_library

    with EngineLibrary.open(Path("/media/usb/Engine Library")) as library:
        record = library.load_performance_data(42)
        record.set_hot_cues([HotCue(is_set=True, label="Drop", sample_offset=1e6)])
        record.save()
"""

from __future__ import annotations

import logging
import os
import shutil
import sqlite3
import tempfile
import uuid as uuid_module
from pathlib import Path

from enginelib.config.models import EngineLibConfig
from enginelib.db.connection import (
    MUSIC_DB_FILENAME,
    PERFORMANCE_DB_FILENAME,
    connect_store,
    get_connection,
    transaction,
)
from enginelib.db.performance import (
    get_performance_data,
    performance_data_exists,
    upsert_performance_data,
)
from enginelib.db.schema import (
    SchemaVersion,
    apply_schema,
    create_schema,
    is_supported,
    read_information,
    verify_music_schema,
    verify_performance_schema,
)
from enginelib.domain.models import PerformanceRecord
from enginelib.exceptions import (
    HandleClosedError,
    LibraryNotFoundError,
    SchemaInconsistencyError,
    TrackNotFoundError,
    UnsupportedVersionError,
)
from enginelib.logging.context import LibraryContextFilter, library_context

logger = logging.getLogger(__name__)
logger.addFilter(LibraryContextFilter())

_STAGING_PREFIX = ".enginelib-"


class EngineLibrary:
    """An open Engine library.

    Instances are created by EngineLibrary.open() or create_library(); the
    constructor does no validation of its own.

    The handle owns one connection to each store until close() is called.
    Use it as a context manager to close it on exit.
    """

    def __init__(
        self,
        directory: Path,
        music_conn: sqlite3.Connection,
        performance_conn: sqlite3.Connection,
        uuid: str,
        version: SchemaVersion,
        config: EngineLibConfig,
    ) -> None:
        self._directory = directory
        self._music_conn = music_conn
        self._performance_conn = performance_conn
        self._uuid = uuid
        self._version = version
        self._config = config
        self._closed = False

    @classmethod
    def open(
        cls, directory: Path | str, config: EngineLibConfig | None = None
    ) -> EngineLibrary:
        """Open an existing library directory.

        Args:
            directory: Directory holding m.db and p.db.
            config: Configuration; defaults to EngineLibConfig().

        Returns:
            An open EngineLibrary.

        Raises:
            LibraryNotFoundError: If either store file does not exist.
            UnsupportedVersionError: If the music store's version is unknown.
            SchemaInconsistencyError: If a store does not match its version,
                or the two stores disagree on uuid or version.
        """
        directory = Path(directory)
        config = config or EngineLibConfig()

        music_path = directory / MUSIC_DB_FILENAME
        performance_path = directory / PERFORMANCE_DB_FILENAME
        missing = [p for p in (music_path, performance_path) if not p.is_file()]
        if missing:
            raise LibraryNotFoundError(directory, missing)

        timeout = config.store.timeout
        music_conn = connect_store(music_path, timeout=timeout)
        performance_conn: sqlite3.Connection | None = None
        try:
            library_uuid, version = read_information(music_conn)
            if not is_supported(version):
                raise UnsupportedVersionError(version)
            verify_music_schema(music_conn, version)

            performance_conn = connect_store(performance_path, timeout=timeout)
            verify_performance_schema(performance_conn, version)
            performance_uuid, _ = read_information(performance_conn)
            if performance_uuid != library_uuid:
                raise SchemaInconsistencyError(
                    f"performance store belongs to library {performance_uuid}, "
                    f"music store to {library_uuid}"
                )
        except BaseException:
            if performance_conn is not None:
                performance_conn.close()
            music_conn.close()
            raise

        logger.info(
            "Opened library %s at %s (schema %s)", library_uuid, directory, version
        )
        return cls(
            directory, music_conn, performance_conn, library_uuid, version, config
        )

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def music_db_path(self) -> Path:
        return self._directory / MUSIC_DB_FILENAME

    @property
    def performance_db_path(self) -> Path:
        return self._directory / PERFORMANCE_DB_FILENAME

    @property
    def uuid(self) -> str:
        """Library identifier shared by both stores."""
        return self._uuid

    @property
    def version(self) -> SchemaVersion:
        return self._version

    @property
    def is_supported(self) -> bool:
        """True if the library's schema version is a known version."""
        return is_supported(self._version)

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise HandleClosedError(f"Library {self._uuid} has been closed")

    def verify(self) -> None:
        """Re-check both stores against the library's schema version.

        Raises:
            SchemaInconsistencyError: On the first mismatch found.
            HandleClosedError: If the handle has been closed.
        """
        self._ensure_open()
        verify_music_schema(self._music_conn, self._version)
        verify_performance_schema(self._performance_conn, self._version)

    def track_exists(self, track_id: int) -> bool:
        """Return True if the music store has a Track row with this id."""
        self._ensure_open()
        row = self._music_conn.execute(
            "SELECT 1 FROM Track WHERE id = ?", (track_id,)
        ).fetchone()
        return row is not None

    def has_performance_data(self, track_id: int) -> bool:
        """Return True if performance data is stored for the track."""
        self._ensure_open()
        return performance_data_exists(self._performance_conn, track_id)

    def load_performance_data(self, track_id: int) -> PerformanceRecord:
        """Load the performance data for a track.

        The returned record is attached to this library, so record.save()
        writes it back here.

        Raises:
            NoPerformanceDataError: If the track has never been analyzed.
            CorruptPerformanceDataError: If the stored data is damaged.
            HandleClosedError: If the handle has been closed.
        """
        self._ensure_open()
        with library_context(self._uuid, track_id):
            record = get_performance_data(self._performance_conn, track_id)
            logger.debug("Loaded performance data")
        record._library = self
        return record

    def save_performance_data(self, record: PerformanceRecord) -> None:
        """Create or overwrite the performance data for a track.

        The header row and all sixteen slot rows are written in a single
        transaction. On any error the transaction is rolled back, the
        previous data is left intact, and the error is re-raised.

        Raises:
            TrackNotFoundError: If the track is not in the music store.
            HandleClosedError: If the handle has been closed.
        """
        self._ensure_open()
        track_id = record.track_id
        with library_context(self._uuid, track_id):
            if not self.track_exists(track_id):
                raise TrackNotFoundError(track_id)

            with transaction(
                self._performance_conn,
                slow_threshold=self._config.store.slow_transaction_seconds,
            ) as conn:
                upsert_performance_data(conn, record)
            logger.debug("Saved performance data")

    def close(self) -> None:
        """Close both store connections. Calling close() again is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._performance_conn.close()
        self._music_conn.close()
        logger.debug("Closed library %s", self._uuid)

    def __enter__(self) -> EngineLibrary:
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return (
            f"EngineLibrary({str(self._directory)!r}, uuid={self._uuid!r}, "
            f"version={self._version}, {state})"
        )


def _build_store(
    path: Path,
    sql: str,
    library_uuid: str,
    version: SchemaVersion,
    verify,
    timeout: float,
) -> None:
    with get_connection(path, timeout=timeout, create=True) as conn:
        apply_schema(conn, sql, library_uuid, version)
        verify(conn, version)


def create_library(
    directory: Path | str,
    version: SchemaVersion | None = None,
    config: EngineLibConfig | None = None,
) -> EngineLibrary:
    """Create a new, empty library and open it.

    Both stores are built in a staging directory inside the target and
    moved into place only once each has verified against its schema.

    Args:
        directory: Target directory; created if absent.
        version: Schema version to create. Defaults to the configured
            default_schema_version.
        config: Configuration; defaults to EngineLibConfig().

    Returns:
        An open EngineLibrary for the new library.

    Raises:
        UnsupportedVersionError: If version is not a known version. Nothing
            is created on disk in that case.
        FileExistsError: If either store file already exists.
    """
    directory = Path(directory)
    config = config or EngineLibConfig()
    if version is None:
        version = config.library.schema_version

    # Raises UnsupportedVersionError before anything touches the disk
    schema = create_schema(version)

    directory.mkdir(parents=True, exist_ok=True)
    targets = {
        MUSIC_DB_FILENAME: directory / MUSIC_DB_FILENAME,
        PERFORMANCE_DB_FILENAME: directory / PERFORMANCE_DB_FILENAME,
    }
    for target in targets.values():
        if target.exists():
            raise FileExistsError(f"Store already exists: {target}")

    library_uuid = str(uuid_module.uuid4())
    staging = Path(tempfile.mkdtemp(dir=directory, prefix=_STAGING_PREFIX))
    moved: list[Path] = []
    try:
        _build_store(
            staging / MUSIC_DB_FILENAME,
            schema.music_sql,
            library_uuid,
            version,
            verify_music_schema,
            config.store.timeout,
        )
        _build_store(
            staging / PERFORMANCE_DB_FILENAME,
            schema.performance_sql,
            library_uuid,
            version,
            verify_performance_schema,
            config.store.timeout,
        )
        for name, target in targets.items():
            os.replace(staging / name, target)
            moved.append(target)
    except BaseException:
        # A half-moved library must not look like a valid one
        for target in moved:
            target.unlink(missing_ok=True)
        shutil.rmtree(staging, ignore_errors=True)
        raise
    shutil.rmtree(staging, ignore_errors=True)

    logger.info(
        "Created library %s at %s (schema %s)", library_uuid, directory, version
    )
    return EngineLibrary.open(directory, config)
