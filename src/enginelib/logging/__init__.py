"""Logging support for enginelib.

The library only emits records through per-module loggers; handlers and
formatting are left to the application. Records emitted during a library
operation carry the library uuid and track id.
"""

from enginelib.logging.context import (
    LibraryContextFilter,
    clear_library_context,
    get_library_context,
    library_context,
    set_library_context,
)

__all__ = [
    "LibraryContextFilter",
    "clear_library_context",
    "get_library_context",
    "library_context",
    "set_library_context",
]
