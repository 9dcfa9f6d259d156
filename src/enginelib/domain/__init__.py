"""Domain models, enums and calculations for Engine library performance data.

This package contains the types a track's analysis is made of, independent
of the store layer:

- Domain models: PerformanceRecord, BeatGrid, HotCue, Loop, PadColour
- Domain enums: MusicalKey
- Calculations: calculate_bpm, calculate_duration_ms, normalize_beat_grid

Usage:
    from enginelib.domain import PerformanceRecord, BeatGrid, HotCue
    from enginelib.domain import normalize_beat_grid
"""

from .calculations import (
    NORMALIZED_FIRST_BEAT_INDEX,
    calculate_bpm,
    calculate_duration_ms,
    normalize_beat_grid,
)
from .enums import MusicalKey
from .models import (
    HOT_CUE_SLOTS,
    LOOP_SLOTS,
    STANDARD_PAD_COLOURS,
    BeatGrid,
    HotCue,
    Loop,
    PadColour,
    PerformanceRecord,
    fill_slots,
)

__all__ = [
    # Models
    "PerformanceRecord",
    "BeatGrid",
    "HotCue",
    "Loop",
    "PadColour",
    "STANDARD_PAD_COLOURS",
    "HOT_CUE_SLOTS",
    "LOOP_SLOTS",
    "fill_slots",
    # Enums
    "MusicalKey",
    # Calculations
    "NORMALIZED_FIRST_BEAT_INDEX",
    "calculate_bpm",
    "calculate_duration_ms",
    "normalize_beat_grid",
]
