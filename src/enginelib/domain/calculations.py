"""Derived calculations over performance data.

All functions here are pure: they never touch a store and never mutate
their inputs.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import TYPE_CHECKING

from enginelib.exceptions import DegenerateBeatGridError

if TYPE_CHECKING:
    from enginelib.domain.models import BeatGrid

# Index the device assigns to the first beat of an analyzed track
NORMALIZED_FIRST_BEAT_INDEX = -4


def calculate_bpm(sample_rate: float, beat_grid: BeatGrid) -> float:
    """Calculate the tempo implied by a beat grid.

    Returns 0 when both beat indices are equal. Equal sample offsets with
    differing indices give inf or nan, which is returned unchanged.

    Args:
        sample_rate: Track sample rate in Hz.
        beat_grid: Beat grid to measure.

    Returns:
        Beats per minute.
    """
    beats = beat_grid.last_beat_index - beat_grid.first_beat_index
    if beats == 0:
        return 0.0

    samples = beat_grid.last_beat_sample_offset - beat_grid.first_beat_sample_offset
    numerator = sample_rate * 60 * beats
    if samples == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / samples


def calculate_duration_ms(sample_rate: float, total_samples: int) -> int:
    """Calculate track duration in whole milliseconds.

    Args:
        sample_rate: Track sample rate in Hz.
        total_samples: Number of samples in the track.

    Returns:
        Duration truncated toward zero, or 0 when sample_rate is 0.
    """
    if sample_rate == 0:
        return 0
    return int(1000 * total_samples / sample_rate)


def _is_normalized(beat_grid: BeatGrid, track_length: float) -> bool:
    """Return True if the grid already follows the device's convention."""
    beats = beat_grid.last_beat_index - NORMALIZED_FIRST_BEAT_INDEX
    if beat_grid.first_beat_index != NORMALIZED_FIRST_BEAT_INDEX or beats < 1:
        return False

    last_offset = beat_grid.last_beat_sample_offset
    samples_per_beat = (last_offset - beat_grid.first_beat_sample_offset) / beats
    if not math.isfinite(samples_per_beat) or samples_per_beat <= 0:
        return False
    if last_offset < track_length:
        return False

    previous = last_offset - samples_per_beat
    # Spacing recomputed from the endpoints can be a few ulps off
    return (
        beats == 1
        or previous < track_length
        or math.isclose(previous, track_length, rel_tol=1e-9)
    )


def normalize_beat_grid(beat_grid: BeatGrid, track_length: float) -> BeatGrid:
    """Normalize a beat grid to the device's indexing convention.

    The returned grid has its first beat at index -4, keeping the beat
    spacing of the input grid, and its last beat at the first beat at or
    beyond track_length samples. A grid that already has that shape is
    returned as it is, so normalizing twice gives the same floats.

    Args:
        beat_grid: Grid to normalize.
        track_length: Track length in samples.

    Returns:
        A normalized BeatGrid.

    Raises:
        DegenerateBeatGridError: If the two grid points do not define a
            positive, finite beat spacing.
    """
    if _is_normalized(beat_grid, track_length):
        return beat_grid

    index_span = beat_grid.last_beat_index - beat_grid.first_beat_index
    offset_span = (
        beat_grid.last_beat_sample_offset - beat_grid.first_beat_sample_offset
    )
    if index_span == 0 or offset_span == 0:
        raise DegenerateBeatGridError(
            f"Beat grid points coincide (indices {beat_grid.first_beat_index}, "
            f"{beat_grid.last_beat_index}; offsets "
            f"{beat_grid.first_beat_sample_offset}, "
            f"{beat_grid.last_beat_sample_offset})"
        )

    samples_per_beat = offset_span / index_span
    if not math.isfinite(samples_per_beat) or samples_per_beat <= 0:
        raise DegenerateBeatGridError(
            f"Beat grid spacing must be positive and finite, got {samples_per_beat}"
        )

    first_offset = (
        beat_grid.first_beat_sample_offset
        + (NORMALIZED_FIRST_BEAT_INDEX - beat_grid.first_beat_index) * samples_per_beat
    )
    # At least one beat past the first so the grid keeps its spacing
    beats_to_end = max(1, math.ceil((track_length - first_offset) / samples_per_beat))
    # Rounding in the division above can leave the last beat just short
    while first_offset + beats_to_end * samples_per_beat < track_length:
        beats_to_end += 1

    return replace(
        beat_grid,
        first_beat_index=NORMALIZED_FIRST_BEAT_INDEX,
        first_beat_sample_offset=first_offset,
        last_beat_index=NORMALIZED_FIRST_BEAT_INDEX + beats_to_end,
        last_beat_sample_offset=first_offset + beats_to_end * samples_per_beat,
    )
