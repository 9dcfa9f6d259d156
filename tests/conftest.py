"""Shared test fixtures for enginelib."""

import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from enginelib import EngineLibrary, create_library
from enginelib.db.connection import connect_store


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def temp_db(temp_dir: Path) -> Path:
    """Create a temporary store path."""
    return temp_dir / "test_store.db"


@pytest.fixture
def library_dir(temp_dir: Path) -> Path:
    """Return a not-yet-existing library directory inside temp_dir."""
    return temp_dir / "Engine Library"


@pytest.fixture
def library(library_dir: Path):
    """Create a library at the latest schema version and close it afterwards."""
    lib = create_library(library_dir)
    yield lib
    lib.close()


@pytest.fixture
def add_track(library: EngineLibrary) -> Callable[..., int]:
    """Return a factory that inserts a Track row into the music store.

    The row is written through a separate connection, the way another
    application sharing the library would add it.
    """

    def _add_track(filename: str = "track.mp3") -> int:
        conn = connect_store(library.music_db_path)
        try:
            cursor = conn.execute(
                "INSERT INTO Track (path, filename, length) VALUES (?, ?, ?)",
                (f"../Music/{filename}", filename, 240),
            )
            return cursor.lastrowid
        finally:
            conn.close()

    return _add_track


@pytest.fixture
def performance_conn(library: EngineLibrary):
    """Open a second connection to the library's performance store."""
    conn = connect_store(library.performance_db_path)
    yield conn
    conn.close()
