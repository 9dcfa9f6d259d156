"""Schema verification for Engine library stores.

A live store is compared against a reference store built in memory from
the same snapshot create_schema() hands out, so verification can never
drift from creation.
"""

from __future__ import annotations

import logging
import sqlite3
from functools import lru_cache
from typing import NamedTuple

from enginelib.db.schema.definition import create_schema
from enginelib.db.schema.version import SchemaVersion
from enginelib.exceptions import SchemaInconsistencyError

logger = logging.getLogger(__name__)


class ColumnInfo(NamedTuple):
    """One row of PRAGMA table_info, without the column position."""

    name: str
    type: str
    notnull: bool
    default: str | None
    pk: int


class StoreStructure(NamedTuple):
    """Tables, their columns and the named indices of one store."""

    tables: dict[str, tuple[ColumnInfo, ...]]
    indices: dict[str, str]


def read_structure(conn: sqlite3.Connection) -> StoreStructure:
    """Read the structural metadata of an open store.

    SQLite's internal tables and automatic indices are ignored.

    Args:
        conn: An open store connection.

    Returns:
        StoreStructure describing the store.
    """
    tables: dict[str, tuple[ColumnInfo, ...]] = {}
    indices: dict[str, str] = {}

    rows = conn.execute(
        "SELECT type, name, tbl_name FROM sqlite_master "
        "WHERE type IN ('table', 'index') AND name NOT LIKE 'sqlite_%' "
        "ORDER BY name"
    ).fetchall()
    for kind, name, tbl_name in rows:
        if kind == "index":
            indices[name] = tbl_name
            continue
        columns = conn.execute(f'PRAGMA table_info("{name}")').fetchall()
        tables[name] = tuple(
            ColumnInfo(
                name=col[1],
                type=col[2].upper(),
                notnull=bool(col[3]),
                default=col[4],
                pk=col[5],
            )
            for col in columns
        )

    return StoreStructure(tables=tables, indices=indices)


@lru_cache(maxsize=None)
def _reference_structure(sql: str) -> StoreStructure:
    """Build the structure a snapshot produces, using an in-memory store."""
    conn = sqlite3.connect(":memory:")
    try:
        conn.executescript(sql)
        return read_structure(conn)
    finally:
        conn.close()


def _compare_structure(
    store_name: str, actual: StoreStructure, expected: StoreStructure
) -> str | None:
    """Describe the first difference between two structures, or return None."""
    missing_tables = sorted(set(expected.tables) - set(actual.tables))
    if missing_tables:
        return f"{store_name} store is missing table {missing_tables[0]}"

    extra_tables = sorted(set(actual.tables) - set(expected.tables))
    if extra_tables:
        return f"{store_name} store has unexpected table {extra_tables[0]}"

    for table, expected_columns in expected.tables.items():
        actual_columns = actual.tables[table]
        expected_names = [c.name for c in expected_columns]
        actual_names = [c.name for c in actual_columns]
        if actual_names != expected_names:
            missing = [n for n in expected_names if n not in actual_names]
            if missing:
                return f"{store_name} table {table} is missing column {missing[0]}"
            extra = [n for n in actual_names if n not in expected_names]
            if extra:
                return f"{store_name} table {table} has unexpected column {extra[0]}"
            return f"{store_name} table {table} has columns in an unexpected order"
        for actual_col, expected_col in zip(actual_columns, expected_columns):
            if actual_col != expected_col:
                return (
                    f"{store_name} column {table}.{expected_col.name} does not "
                    f"match its definition"
                )

    missing_indices = sorted(set(expected.indices) - set(actual.indices))
    if missing_indices:
        return f"{store_name} store is missing index {missing_indices[0]}"

    extra_indices = sorted(set(actual.indices) - set(expected.indices))
    if extra_indices:
        return f"{store_name} store has unexpected index {extra_indices[0]}"

    for index, table in expected.indices.items():
        if actual.indices[index] != table:
            return f"{store_name} index {index} is not defined on table {table}"

    return None


def read_information(conn: sqlite3.Connection) -> tuple[str, SchemaVersion]:
    """Read the library uuid and schema version from a store.

    Args:
        conn: An open store connection.

    Returns:
        Tuple of (uuid, schema version).

    Raises:
        SchemaInconsistencyError: If the Information table is missing, does
            not hold exactly one row, or records a malformed version.
    """
    try:
        rows = conn.execute(
            "SELECT uuid, schemaVersionMajor, schemaVersionMinor, "
            "schemaVersionPatch FROM Information"
        ).fetchall()
    except sqlite3.OperationalError as e:
        raise SchemaInconsistencyError(
            f"Store has no readable Information table: {e}"
        ) from e

    if len(rows) != 1:
        raise SchemaInconsistencyError(
            f"Information table must hold exactly one row, found {len(rows)}"
        )

    uuid, major, minor, patch = rows[0]
    if uuid is None or None in (major, minor, patch):
        raise SchemaInconsistencyError("Information row is incomplete")
    if not all(isinstance(part, int) for part in (major, minor, patch)):
        raise SchemaInconsistencyError(
            f"Information row holds a non-integer schema version: "
            f"{major!r}.{minor!r}.{patch!r}"
        )
    return str(uuid), SchemaVersion(major, minor, patch)


def _verify_store(
    store_name: str,
    conn: sqlite3.Connection,
    sql: str,
    version: SchemaVersion,
) -> None:
    problem = _compare_structure(
        store_name, read_structure(conn), _reference_structure(sql)
    )
    if problem is not None:
        raise SchemaInconsistencyError(f"{problem} (schema {version})")

    _, recorded = read_information(conn)
    if recorded != version:
        raise SchemaInconsistencyError(
            f"{store_name} store records schema {recorded}, expected {version}"
        )
    logger.debug("Verified %s store against schema %s", store_name, version)


def verify_music_schema(conn: sqlite3.Connection, version: SchemaVersion) -> None:
    """Verify that a music store matches the given schema version.

    Args:
        conn: An open music store connection.
        version: Schema version the store claims to have.

    Raises:
        UnsupportedVersionError: If version is not a known version.
        SchemaInconsistencyError: On the first structural mismatch found.
    """
    _verify_store("music", conn, create_schema(version).music_sql, version)


def verify_performance_schema(
    conn: sqlite3.Connection, version: SchemaVersion
) -> None:
    """Verify that a performance store matches the given schema version.

    Args:
        conn: An open performance store connection.
        version: Schema version the store claims to have.

    Raises:
        UnsupportedVersionError: If version is not a known version.
        SchemaInconsistencyError: On the first structural mismatch found.
    """
    _verify_store(
        "performance", conn, create_schema(version).performance_sql, version
    )
