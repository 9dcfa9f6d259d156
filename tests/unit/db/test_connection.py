"""Unit tests for store connections and transactions."""

import logging
import sqlite3
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from enginelib.db.connection import connect_store, get_connection, transaction
from enginelib.exceptions import SchemaInconsistencyError


class TestConnectStore:
    """Tests for connect_store function."""

    def test_does_not_create_missing_file(self, temp_db: Path):
        """Opening a missing store fails instead of creating it."""
        with pytest.raises(sqlite3.OperationalError):
            connect_store(temp_db)
        assert not temp_db.exists()

    def test_creates_file_when_asked(self, temp_db: Path):
        """create=True creates the store file."""
        conn = connect_store(temp_db, create=True)
        conn.close()
        assert temp_db.exists()

    def test_applies_pragmas(self, temp_db: Path):
        """Foreign keys are enforced and the store uses a rollback journal."""
        conn = connect_store(temp_db, create=True)

        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "delete"
        assert conn.execute("PRAGMA busy_timeout").fetchone()[0] == 30000

        conn.close()

    def test_timeout_sets_busy_timeout(self, temp_db: Path):
        """The timeout argument is applied as busy_timeout in milliseconds."""
        conn = connect_store(temp_db, timeout=2.5, create=True)
        assert conn.execute("PRAGMA busy_timeout").fetchone()[0] == 2500
        conn.close()

    def test_autocommit_mode(self, temp_db: Path):
        """Connections are in autocommit mode."""
        conn = connect_store(temp_db, create=True)
        assert conn.isolation_level is None
        conn.execute("CREATE TABLE t (x INTEGER)")
        conn.execute("INSERT INTO t VALUES (1)")
        assert not conn.in_transaction
        conn.close()

    def test_rows_support_column_access(self, temp_db: Path):
        """Rows can be indexed by column name."""
        conn = connect_store(temp_db, create=True)
        row = conn.execute("SELECT 1 AS answer").fetchone()
        assert row["answer"] == 1
        conn.close()

    def test_not_a_database(self, temp_db: Path):
        """A file that is not SQLite raises SchemaInconsistencyError."""
        temp_db.write_bytes(b"\x00\x01garbage" * 100)
        with pytest.raises(SchemaInconsistencyError, match="is not a store"):
            connect_store(temp_db)

    def test_closes_connection_when_setup_fails(self, temp_db: Path):
        """A connection whose PRAGMAs fail is closed before raising."""
        conn = MagicMock()
        conn.execute.side_effect = sqlite3.DatabaseError("file is not a database")
        with patch("enginelib.db.connection.sqlite3.connect", return_value=conn):
            with pytest.raises(SchemaInconsistencyError):
                connect_store(temp_db)
        conn.close.assert_called_once()

    def test_closes_connection_when_locked(self, temp_db: Path):
        """Operational errors close the connection and propagate unchanged."""
        conn = MagicMock()
        conn.execute.side_effect = sqlite3.OperationalError("database is locked")
        with patch("enginelib.db.connection.sqlite3.connect", return_value=conn):
            with pytest.raises(sqlite3.OperationalError, match="locked"):
                connect_store(temp_db)
        conn.close.assert_called_once()


class TestGetConnection:
    """Tests for get_connection context manager."""

    def test_closes_on_exit(self, temp_db: Path):
        """The connection is closed when the block exits."""
        with get_connection(temp_db, create=True) as conn:
            conn.execute("SELECT 1")
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")


class TestTransaction:
    """Tests for transaction context manager."""

    @pytest.fixture
    def conn(self, temp_db: Path):
        conn = connect_store(temp_db, create=True)
        conn.execute("CREATE TABLE t (x INTEGER NOT NULL)")
        yield conn
        conn.close()

    def test_commits_on_success(self, conn, temp_db: Path):
        """Writes are visible to other connections after the block."""
        with transaction(conn):
            conn.execute("INSERT INTO t VALUES (1)")
            conn.execute("INSERT INTO t VALUES (2)")

        with get_connection(temp_db) as other:
            assert other.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 2

    def test_rolls_back_on_error(self, conn):
        """All writes are discarded when the block raises."""
        with pytest.raises(sqlite3.IntegrityError):
            with transaction(conn):
                conn.execute("INSERT INTO t VALUES (1)")
                conn.execute("INSERT INTO t VALUES (NULL)")

        assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0
        assert not conn.in_transaction

    def test_reraises_original_exception(self, conn):
        """Non-database exceptions propagate unchanged."""
        with pytest.raises(KeyError, match="boom"):
            with transaction(conn):
                conn.execute("INSERT INTO t VALUES (1)")
                raise KeyError("boom")

        assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0

    def test_warns_on_slow_transaction(
        self, conn, caplog: pytest.LogCaptureFixture
    ):
        """A transaction slower than the threshold logs a warning."""
        with patch("enginelib.db.connection.time") as mock_time:
            mock_time.monotonic.side_effect = [0.0, 10.0]
            with caplog.at_level(logging.WARNING, logger="enginelib.db.connection"):
                with transaction(conn, slow_threshold=5.0):
                    conn.execute("INSERT INTO t VALUES (1)")

        assert "Slow transaction" in caplog.text

    def test_no_warning_without_threshold(
        self, conn, caplog: pytest.LogCaptureFixture
    ):
        """No threshold means no slow-transaction warning."""
        with patch("enginelib.db.connection.time") as mock_time:
            mock_time.monotonic.side_effect = [0.0, 10.0]
            with caplog.at_level(logging.WARNING, logger="enginelib.db.connection"):
                with transaction(conn):
                    conn.execute("INSERT INTO t VALUES (1)")

        assert "Slow transaction" not in caplog.text
