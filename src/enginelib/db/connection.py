"""Store connection management for Engine libraries."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from enginelib.exceptions import SchemaInconsistencyError
from enginelib.logging.context import LibraryContextFilter

logger = logging.getLogger(__name__)
logger.addFilter(LibraryContextFilter())

MUSIC_DB_FILENAME = "m.db"
PERFORMANCE_DB_FILENAME = "p.db"

DEFAULT_TIMEOUT = 30.0


def connect_store(
    db_path: Path, timeout: float = DEFAULT_TIMEOUT, create: bool = False
) -> sqlite3.Connection:
    """Open a store with the settings every enginelib connection uses.

    Connections run in autocommit mode; writes that must be atomic go
    through transaction().

    Args:
        db_path: Path to the store file.
        timeout: How long to wait for locks (seconds). Default 30s.
        create: Create the file if it does not exist. When False, a missing
            file raises sqlite3.OperationalError instead of being created.

    Returns:
        An sqlite3 Connection object.

    Raises:
        sqlite3.OperationalError: If the store cannot be opened.
        SchemaInconsistencyError: If the file is not an SQLite database.
    """
    mode = "rwc" if create else "rw"
    uri = f"{db_path.resolve().as_uri()}?mode={mode}"
    conn = sqlite3.connect(uri, uri=True, timeout=timeout, isolation_level=None)

    try:
        # Enable foreign keys
        conn.execute("PRAGMA foreign_keys = ON")

        # The device firmware expects rollback-journal stores, not WAL
        conn.execute("PRAGMA journal_mode = DELETE")

        conn.execute(f"PRAGMA busy_timeout = {int(timeout * 1000)}")

        # Reads the file header, so a file that is not a database fails here
        conn.execute("PRAGMA schema_version").fetchone()
    except sqlite3.OperationalError:
        conn.close()
        raise
    except sqlite3.DatabaseError as e:
        conn.close()
        raise SchemaInconsistencyError(f"{db_path} is not a store: {e}") from e

    # Return rows as dictionaries
    conn.row_factory = sqlite3.Row

    logger.debug("Opened store %s (mode=%s)", db_path, mode)
    return conn


@contextmanager
def get_connection(
    db_path: Path, timeout: float = DEFAULT_TIMEOUT, create: bool = False
) -> Iterator[sqlite3.Connection]:
    """Context manager around connect_store() that always closes.

    Args:
        db_path: Path to the store file.
        timeout: How long to wait for locks (seconds).
        create: Create the file if it does not exist.

    Yields:
        An sqlite3 Connection object.
    """
    conn = connect_store(db_path, timeout=timeout, create=create)
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction(
    conn: sqlite3.Connection, slow_threshold: float | None = None
) -> Iterator[sqlite3.Connection]:
    """Context manager for atomic store transactions.

    Automatically commits on success, rolls back on exception.
    Uses BEGIN IMMEDIATE for write-intent transactions.

    Args:
        conn: An autocommit-mode connection from connect_store().
        slow_threshold: Log a warning when the transaction takes longer
            than this many seconds. None disables the check.

    Example:
        with transaction(conn):
            conn.execute("INSERT INTO ...", (...))
            conn.execute("UPDATE ...", (...))

    Yields:
        The connection for direct query execution.

    Raises:
        Exception: Re-raises any exception after rollback.
    """
    start_time = time.monotonic()

    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
    finally:
        elapsed = time.monotonic() - start_time
        if slow_threshold is not None and elapsed > slow_threshold:
            logger.warning(
                "Slow transaction: %.2fs (threshold: %.1fs)",
                elapsed,
                slow_threshold,
            )
