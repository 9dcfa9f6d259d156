"""Library context for structured logging.

Provides context propagation using contextvars, enabling automatic
injection of the library uuid and track id into log records emitted while
a library operation runs.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_library_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "library_id", default=None
)
_track_id: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "track_id", default=None
)


def set_library_context(library_id: str, track_id: int | None = None) -> None:
    """Set the current library context.

    Args:
        library_id: Library uuid.
        track_id: Track being loaded or saved, if any.
    """
    _library_id.set(library_id)
    _track_id.set(track_id)


def clear_library_context() -> None:
    """Clear the current library context."""
    _library_id.set(None)
    _track_id.set(None)


@contextmanager
def library_context(
    library_id: str, track_id: int | None = None
) -> Generator[None, None, None]:
    """Context manager for a library operation.

    Sets the context on entry and restores the previous one on exit.

    Example:
        with library_context(library.uuid, 42):
            logger.info("Saving performance data")  # Includes context
    """
    old_library_id = _library_id.get()
    old_track_id = _track_id.get()
    try:
        set_library_context(library_id, track_id)
        yield
    finally:
        _library_id.set(old_library_id)
        _track_id.set(old_track_id)


def get_library_context() -> tuple[str | None, int | None]:
    """Get the current (library_id, track_id) context; either may be None."""
    return _library_id.get(), _track_id.get()


class LibraryContextFilter(logging.Filter):
    """Logging filter that injects library context into log records.

    Adds library_id and track_id attributes and a compact library_tag
    like "[1a2b3c4d:T42] " for use in format strings. enginelib attaches
    it to its own loggers; applications may add it to their handlers too.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        library_id, track_id = get_library_context()

        record.library_id = library_id
        record.track_id = track_id

        if library_id:
            short_id = library_id[:8]
            if track_id is not None:
                record.library_tag = f"[{short_id}:T{track_id}] "
            else:
                record.library_tag = f"[{short_id}] "
        else:
            record.library_tag = ""

        return True  # Never filter out records
