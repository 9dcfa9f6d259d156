"""Store layer for Engine libraries.

Module organization:
- connection.py: Store connections and transactions
- performance.py: Performance data repository (PerformanceData and slot rows)
- schema/: Schema versions, snapshots and verification

Usage:
    from enginelib.db import connect_store, transaction
    from enginelib.db import get_performance_data, upsert_performance_data
"""

from .connection import (
    MUSIC_DB_FILENAME,
    PERFORMANCE_DB_FILENAME,
    connect_store,
    get_connection,
    transaction,
)
from .performance import (
    delete_performance_data,
    get_performance_data,
    performance_data_exists,
    upsert_performance_data,
)

__all__ = [
    # Connections
    "MUSIC_DB_FILENAME",
    "PERFORMANCE_DB_FILENAME",
    "connect_store",
    "get_connection",
    "transaction",
    # Performance data
    "delete_performance_data",
    "get_performance_data",
    "performance_data_exists",
    "upsert_performance_data",
]
