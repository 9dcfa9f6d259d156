"""Unit tests for the performance data repository."""

from pathlib import Path

import pytest

from enginelib.db.connection import connect_store, transaction
from enginelib.db.performance import (
    delete_performance_data,
    get_performance_data,
    performance_data_exists,
    upsert_performance_data,
)
from enginelib.db.schema import VERSION_LATEST, apply_schema, create_schema
from enginelib.domain import (
    STANDARD_PAD_COLOURS,
    BeatGrid,
    HotCue,
    Loop,
    MusicalKey,
    PerformanceRecord,
)
from enginelib.exceptions import CorruptPerformanceDataError, NoPerformanceDataError


@pytest.fixture
def conn(temp_dir: Path):
    """An empty performance store at the latest version."""
    conn = connect_store(temp_dir / "p.db", create=True)
    apply_schema(
        conn,
        create_schema(VERSION_LATEST).performance_sql,
        "3b8d4c9e-8f0b-4d8a-a0b2-7f5b2a1c9e10",
        VERSION_LATEST,
    )
    yield conn
    conn.close()


def make_record(track_id: int = 1, **overrides) -> PerformanceRecord:
    """Build a fully populated record."""
    fields = dict(
        track_id=track_id,
        sample_rate=44100.0,
        total_samples=10_584_000,
        key=MusicalKey.A_MINOR,
        average_loudness=0.52,
        default_beat_grid=BeatGrid(-4, -3457.0, 812, 10_584_122.0),
        adjusted_beat_grid=BeatGrid(-4, -3400.0, 812, 10_584_200.0),
        hot_cues=[
            HotCue(True, "Intro", 1000.0, STANDARD_PAD_COLOURS[0]),
            HotCue(True, "Drop", 2_000_000.0, STANDARD_PAD_COLOURS[1]),
        ],
        loops=[
            Loop(True, True, "Break", 500_000.0, 600_000.0, STANDARD_PAD_COLOURS[2]),
        ],
        default_main_cue_offset=1000.0,
        adjusted_main_cue_offset=1200.0,
    )
    fields.update(overrides)
    return PerformanceRecord(**fields)


class TestUpsertAndGet:
    """Tests for upsert_performance_data and get_performance_data."""

    def test_round_trip(self, conn):
        """A stored record loads back equal to what was written."""
        record = make_record()
        with transaction(conn):
            upsert_performance_data(conn, record)

        loaded = get_performance_data(conn, 1)
        assert loaded == record
        assert loaded.hot_cues[1].label == "Drop"
        assert loaded.loops[0].is_set

    def test_writes_exactly_eight_slot_rows(self, conn):
        """Eight hot cue rows and eight loop rows are stored per track."""
        with transaction(conn):
            upsert_performance_data(conn, make_record())

        cues = conn.execute(
            "SELECT slot FROM PerformanceHotCue WHERE trackId = 1 ORDER BY slot"
        ).fetchall()
        loops = conn.execute(
            "SELECT slot FROM PerformanceLoop WHERE trackId = 1 ORDER BY slot"
        ).fetchall()
        assert [r["slot"] for r in cues] == list(range(8))
        assert [r["slot"] for r in loops] == list(range(8))

    def test_unset_key_stored_as_zero(self, conn):
        """A record without a key stores key code 0 and loads as None."""
        with transaction(conn):
            upsert_performance_data(conn, make_record(key=None))

        row = conn.execute("SELECT keyCode FROM PerformanceData").fetchone()
        assert row["keyCode"] == 0
        assert get_performance_data(conn, 1).key is None

    def test_overwrite_replaces_slots(self, conn):
        """A second save replaces hot cues instead of merging them."""
        with transaction(conn):
            upsert_performance_data(conn, make_record())
        replacement = make_record(hot_cues=[HotCue(True, "Only", 42.0)], loops=[])
        with transaction(conn):
            upsert_performance_data(conn, replacement)

        loaded = get_performance_data(conn, 1)
        assert loaded.hot_cues[0].label == "Only"
        assert loaded.hot_cues[1] == HotCue()
        assert all(loop == Loop() for loop in loaded.loops)
        count = conn.execute("SELECT COUNT(*) FROM PerformanceData").fetchone()[0]
        assert count == 1

    def test_marks_row_analyzed(self, conn):
        """Stored rows are flagged as analyzed."""
        with transaction(conn):
            upsert_performance_data(conn, make_record())
        row = conn.execute("SELECT isAnalyzed FROM PerformanceData").fetchone()
        assert row["isAnalyzed"] == 1

    def test_does_not_commit(self, conn):
        """Writes outside a transaction are left to the caller to commit."""
        conn.execute("BEGIN")
        upsert_performance_data(conn, make_record())
        assert conn.in_transaction
        conn.execute("ROLLBACK")
        assert not performance_data_exists(conn, 1)


class TestGetMissingOrCorrupt:
    """Tests that missing and corrupt data are told apart."""

    @pytest.fixture
    def stored(self, conn):
        with transaction(conn):
            upsert_performance_data(conn, make_record(track_id=7))
        return conn

    def test_missing_row_raises_no_data(self, conn):
        """A track never analyzed raises NoPerformanceDataError."""
        with pytest.raises(NoPerformanceDataError) as exc_info:
            get_performance_data(conn, 99)
        assert exc_info.value.track_id == 99

    def test_missing_hot_cue_slot(self, stored):
        """Seven hot cue rows is corrupt."""
        stored.execute("DELETE FROM PerformanceHotCue WHERE trackId = 7 AND slot = 3")
        with pytest.raises(CorruptPerformanceDataError, match="expected 8 hot cue"):
            get_performance_data(stored, 7)

    def test_extra_loop_slot(self, stored):
        """A ninth loop row is corrupt."""
        stored.execute(
            "INSERT INTO PerformanceLoop (trackId, slot, isStartSet, isEndSet, "
            "label, startSampleOffset, endSampleOffset, colour) "
            "VALUES (7, 8, 0, 0, '', -1, -1, 0)"
        )
        with pytest.raises(CorruptPerformanceDataError, match="found 9"):
            get_performance_data(stored, 7)

    def test_misnumbered_slot(self, stored):
        """Eight rows that are not numbered 0-7 is corrupt."""
        stored.execute("UPDATE PerformanceHotCue SET slot = 12 WHERE slot = 0")
        with pytest.raises(CorruptPerformanceDataError, match="slot numbers"):
            get_performance_data(stored, 7)

    def test_unknown_key_code(self, stored):
        """A key code outside 0-24 is corrupt."""
        stored.execute("UPDATE PerformanceData SET keyCode = 99 WHERE id = 7")
        with pytest.raises(CorruptPerformanceDataError) as exc_info:
            get_performance_data(stored, 7)
        assert exc_info.value.track_id == 7
        assert "99" in exc_info.value.reason

    def test_colour_out_of_range(self, stored):
        """A colour that does not fit in 32 bits is corrupt."""
        stored.execute("UPDATE PerformanceLoop SET colour = -1 WHERE slot = 2")
        with pytest.raises(CorruptPerformanceDataError, match="out of range"):
            get_performance_data(stored, 7)

    @pytest.mark.parametrize(
        ("table", "column", "value", "match"),
        [
            ("PerformanceData", "sampleRate", "'garbage'", "not a number"),
            ("PerformanceData", "averageLoudness", "X'00'", "not a number"),
            ("PerformanceData", "totalSamples", "'many'", "not an integer"),
            ("PerformanceData", "keyCode", "2.5", "not an integer"),
            ("PerformanceData", "adjustedLastBeatIndex", "'end'", "not an integer"),
            ("PerformanceHotCue", "sampleOffset", "'garbage'", "not a number"),
            ("PerformanceHotCue", "label", "X'4142'", "not text"),
            ("PerformanceLoop", "endSampleOffset", "'never'", "not a number"),
            ("PerformanceLoop", "colour", "'red'", "not an integer"),
            ("PerformanceLoop", "isEndSet", "0.5", "not an integer"),
        ],
    )
    def test_wrong_storage_class(self, stored, table, column, value, match):
        """Values of the wrong type are corrupt, never coerced."""
        stored.execute(f"UPDATE {table} SET {column} = {value}")
        with pytest.raises(CorruptPerformanceDataError, match=match) as exc_info:
            get_performance_data(stored, 7)
        assert exc_info.value.track_id == 7
        assert column in exc_info.value.reason

    def test_fractional_key_code_not_truncated(self, stored):
        """A key code of 2.5 is not read as key code 2."""
        stored.execute("UPDATE PerformanceData SET keyCode = 2.5 WHERE id = 7")
        with pytest.raises(CorruptPerformanceDataError, match="keyCode"):
            get_performance_data(stored, 7)

    def test_whole_number_in_real_column(self, stored):
        """An integer written to a REAL column by another tool still loads."""
        stored.execute("UPDATE PerformanceData SET averageLoudness = 1 WHERE id = 7")
        assert get_performance_data(stored, 7).average_loudness == 1.0

    def test_corrupt_is_not_no_data(self, stored):
        """Corrupt data never surfaces as NoPerformanceDataError."""
        stored.execute("DELETE FROM PerformanceLoop WHERE trackId = 7")
        with pytest.raises(CorruptPerformanceDataError):
            get_performance_data(stored, 7)


class TestExistsAndDelete:
    """Tests for performance_data_exists and delete_performance_data."""

    def test_exists(self, conn):
        """Existence follows the header row."""
        assert not performance_data_exists(conn, 1)
        with transaction(conn):
            upsert_performance_data(conn, make_record())
        assert performance_data_exists(conn, 1)

    def test_delete_cascades_to_slots(self, conn):
        """Deleting the header removes all slot rows."""
        with transaction(conn):
            upsert_performance_data(conn, make_record())
        with transaction(conn):
            assert delete_performance_data(conn, 1) is True

        assert not performance_data_exists(conn, 1)
        remaining = conn.execute("SELECT COUNT(*) FROM PerformanceHotCue").fetchone()
        assert remaining[0] == 0

    def test_delete_missing_returns_false(self, conn):
        """Deleting a track with no data reports nothing deleted."""
        with transaction(conn):
            assert delete_performance_data(conn, 1) is False
