"""Performance data repository for the performance store.

One PerformanceRecord maps to one PerformanceData row plus exactly eight
PerformanceHotCue rows and eight PerformanceLoop rows.

Note:
    Functions here do NOT commit. Callers manage transactions.
"""

from __future__ import annotations

import sqlite3

from enginelib.domain import (
    HOT_CUE_SLOTS,
    LOOP_SLOTS,
    BeatGrid,
    HotCue,
    Loop,
    MusicalKey,
    PadColour,
    PerformanceRecord,
    fill_slots,
)
from enginelib.exceptions import CorruptPerformanceDataError, NoPerformanceDataError

_SCALAR_COLUMNS = (
    "sampleRate",
    "totalSamples",
    "keyCode",
    "averageLoudness",
    "defaultFirstBeatIndex",
    "defaultFirstBeatSampleOffset",
    "defaultLastBeatIndex",
    "defaultLastBeatSampleOffset",
    "adjustedFirstBeatIndex",
    "adjustedFirstBeatSampleOffset",
    "adjustedLastBeatIndex",
    "adjustedLastBeatSampleOffset",
    "defaultMainCueSampleOffset",
    "adjustedMainCueSampleOffset",
)

_COLUMN_LIST = ", ".join(_SCALAR_COLUMNS)
_PLACEHOLDERS = ", ".join("?" for _ in _SCALAR_COLUMNS)
_UPDATE_LIST = ",\n        ".join(
    f"{col} = excluded.{col}" for col in _SCALAR_COLUMNS
)

_UPSERT_SQL = f"""
    INSERT INTO PerformanceData (id, isAnalyzed, {_COLUMN_LIST})
    VALUES (?, 1, {_PLACEHOLDERS})
    ON CONFLICT(id) DO UPDATE SET
        isAnalyzed = 1,
        {_UPDATE_LIST}
"""


def performance_data_exists(conn: sqlite3.Connection, track_id: int) -> bool:
    """Return True if the performance store has a row for the track."""
    row = conn.execute(
        "SELECT 1 FROM PerformanceData WHERE id = ?", (track_id,)
    ).fetchone()
    return row is not None


def _check_slots(track_id: int, kind: str, slots: list[int], expected: int) -> None:
    """Validate that slot numbers are exactly 0..expected-1 in order."""
    if len(slots) != expected:
        raise CorruptPerformanceDataError(
            track_id, f"expected {expected} {kind} slots, found {len(slots)}"
        )
    if slots != list(range(expected)):
        raise CorruptPerformanceDataError(
            track_id, f"{kind} slot numbers are not 0-{expected - 1}: {slots}"
        )


def _real(track_id: int, row: sqlite3.Row, column: str) -> float:
    value = row[column]
    # REAL affinity hands back int for whole numbers written by other tools
    if not isinstance(value, (int, float)):
        raise CorruptPerformanceDataError(
            track_id, f"{column} is not a number: {value!r}"
        )
    return float(value)


def _integer(track_id: int, row: sqlite3.Row, column: str) -> int:
    value = row[column]
    if not isinstance(value, int):
        raise CorruptPerformanceDataError(
            track_id, f"{column} is not an integer: {value!r}"
        )
    return value


def _text(track_id: int, row: sqlite3.Row, column: str) -> str:
    value = row[column]
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CorruptPerformanceDataError(
            track_id, f"{column} is not text: {value!r}"
        )
    return value


def _colour(track_id: int, row: sqlite3.Row) -> PadColour:
    value = _integer(track_id, row, "colour")
    try:
        return PadColour.from_argb(value)
    except ValueError as e:
        raise CorruptPerformanceDataError(track_id, str(e)) from e


def _row_to_hot_cue(track_id: int, row: sqlite3.Row) -> HotCue:
    return HotCue(
        is_set=bool(_integer(track_id, row, "isSet")),
        label=_text(track_id, row, "label"),
        sample_offset=_real(track_id, row, "sampleOffset"),
        colour=_colour(track_id, row),
    )


def _row_to_loop(track_id: int, row: sqlite3.Row) -> Loop:
    return Loop(
        is_start_set=bool(_integer(track_id, row, "isStartSet")),
        is_end_set=bool(_integer(track_id, row, "isEndSet")),
        label=_text(track_id, row, "label"),
        start_offset=_real(track_id, row, "startSampleOffset"),
        end_offset=_real(track_id, row, "endSampleOffset"),
        colour=_colour(track_id, row),
    )


def _row_to_beat_grid(track_id: int, row: sqlite3.Row, prefix: str) -> BeatGrid:
    return BeatGrid(
        first_beat_index=_integer(track_id, row, f"{prefix}FirstBeatIndex"),
        first_beat_sample_offset=_real(track_id, row, f"{prefix}FirstBeatSampleOffset"),
        last_beat_index=_integer(track_id, row, f"{prefix}LastBeatIndex"),
        last_beat_sample_offset=_real(track_id, row, f"{prefix}LastBeatSampleOffset"),
    )


def _row_to_performance_record(
    row: sqlite3.Row, hot_cues: list[HotCue], loops: list[Loop]
) -> PerformanceRecord:
    """Convert a PerformanceData row and its slots to a PerformanceRecord.

    Integer columns must hold integers and real columns numbers; values of
    any other storage class are never coerced.

    Args:
        row: sqlite3.Row from a SELECT on the PerformanceData table.
        hot_cues: The eight decoded hot cue slots.
        loops: The eight decoded loop slots.

    Returns:
        PerformanceRecord instance populated from the rows.

    Raises:
        CorruptPerformanceDataError: If a scalar field is missing or invalid.
    """
    track_id = row["id"]

    missing = [col for col in _SCALAR_COLUMNS if row[col] is None]
    if missing:
        raise CorruptPerformanceDataError(track_id, f"{missing[0]} is NULL")

    total_samples = _integer(track_id, row, "totalSamples")
    if total_samples < 0:
        raise CorruptPerformanceDataError(
            track_id, f"negative sample count {total_samples}"
        )

    key_code = _integer(track_id, row, "keyCode")
    try:
        key = MusicalKey.from_code(key_code)
    except ValueError as e:
        raise CorruptPerformanceDataError(
            track_id, f"unknown key code {key_code}"
        ) from e

    return PerformanceRecord(
        track_id=track_id,
        sample_rate=_real(track_id, row, "sampleRate"),
        total_samples=total_samples,
        key=key,
        average_loudness=_real(track_id, row, "averageLoudness"),
        default_beat_grid=_row_to_beat_grid(track_id, row, "default"),
        adjusted_beat_grid=_row_to_beat_grid(track_id, row, "adjusted"),
        hot_cues=tuple(hot_cues),
        loops=tuple(loops),
        default_main_cue_offset=_real(track_id, row, "defaultMainCueSampleOffset"),
        adjusted_main_cue_offset=_real(track_id, row, "adjustedMainCueSampleOffset"),
    )


def get_performance_data(conn: sqlite3.Connection, track_id: int) -> PerformanceRecord:
    """Load the performance data stored for a track.

    Args:
        conn: Performance store connection.
        track_id: Track ID from the music store.

    Returns:
        The stored PerformanceRecord.

    Raises:
        NoPerformanceDataError: If the track has never been analyzed.
        CorruptPerformanceDataError: If the stored data breaks the format.
    """
    row = conn.execute(
        f"SELECT id, {_COLUMN_LIST} FROM PerformanceData WHERE id = ?",
        (track_id,),
    ).fetchone()
    if row is None:
        raise NoPerformanceDataError(track_id)

    cue_rows = conn.execute(
        "SELECT slot, isSet, label, sampleOffset, colour "
        "FROM PerformanceHotCue WHERE trackId = ? ORDER BY slot",
        (track_id,),
    ).fetchall()
    cue_slots = [_integer(track_id, r, "slot") for r in cue_rows]
    _check_slots(track_id, "hot cue", cue_slots, HOT_CUE_SLOTS)

    loop_rows = conn.execute(
        "SELECT slot, isStartSet, isEndSet, label, startSampleOffset, "
        "endSampleOffset, colour FROM PerformanceLoop WHERE trackId = ? ORDER BY slot",
        (track_id,),
    ).fetchall()
    loop_slots = [_integer(track_id, r, "slot") for r in loop_rows]
    _check_slots(track_id, "loop", loop_slots, LOOP_SLOTS)

    hot_cues = [_row_to_hot_cue(track_id, r) for r in cue_rows]
    loops = [_row_to_loop(track_id, r) for r in loop_rows]
    return _row_to_performance_record(row, hot_cues, loops)


def upsert_performance_data(
    conn: sqlite3.Connection, record: PerformanceRecord
) -> None:
    """Create or overwrite the stored performance data for a track.

    Hot cues and loops are fitted to exactly eight slots before writing.

    Args:
        conn: Performance store connection.
        record: Record to write.

    Note:
        This function does NOT commit. Run it inside a transaction so the
        header row and all slot rows are written as one unit.
    """
    track_id = record.track_id
    default_grid = record.default_beat_grid
    adjusted_grid = record.adjusted_beat_grid

    conn.execute(
        _UPSERT_SQL,
        (
            track_id,
            record.sample_rate,
            record.total_samples,
            MusicalKey.to_code(record.key),
            record.average_loudness,
            default_grid.first_beat_index,
            default_grid.first_beat_sample_offset,
            default_grid.last_beat_index,
            default_grid.last_beat_sample_offset,
            adjusted_grid.first_beat_index,
            adjusted_grid.first_beat_sample_offset,
            adjusted_grid.last_beat_index,
            adjusted_grid.last_beat_sample_offset,
            record.default_main_cue_offset,
            record.adjusted_main_cue_offset,
        ),
    )

    conn.execute("DELETE FROM PerformanceHotCue WHERE trackId = ?", (track_id,))
    conn.executemany(
        """
        INSERT INTO PerformanceHotCue (
            trackId, slot, isSet, label, sampleOffset, colour
        ) VALUES (?, ?, ?, ?, ?, ?)
        """,
        [
            (
                track_id,
                slot,
                int(cue.is_set),
                cue.label,
                cue.sample_offset,
                cue.colour.to_argb(),
            )
            for slot, cue in enumerate(
                fill_slots(record.hot_cues, HOT_CUE_SLOTS, HotCue)
            )
        ],
    )

    conn.execute("DELETE FROM PerformanceLoop WHERE trackId = ?", (track_id,))
    conn.executemany(
        """
        INSERT INTO PerformanceLoop (
            trackId, slot, isStartSet, isEndSet, label,
            startSampleOffset, endSampleOffset, colour
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (
                track_id,
                slot,
                int(loop.is_start_set),
                int(loop.is_end_set),
                loop.label,
                loop.start_offset,
                loop.end_offset,
                loop.colour.to_argb(),
            )
            for slot, loop in enumerate(fill_slots(record.loops, LOOP_SLOTS, Loop))
        ],
    )


def delete_performance_data(conn: sqlite3.Connection, track_id: int) -> bool:
    """Delete the stored performance data for a track.

    Slot rows are removed by the ON DELETE CASCADE foreign keys.

    Returns:
        True if a row was deleted.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute("DELETE FROM PerformanceData WHERE id = ?", (track_id,))
    return cursor.rowcount > 0
