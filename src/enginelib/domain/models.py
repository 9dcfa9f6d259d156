"""Domain models for Engine library performance data.

These models represent a track's analysis independent of the store
layout. PerformanceRecord is the unit that is loaded from and saved to a
library; everything else is a value type it is built from.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from itertools import islice
from typing import TYPE_CHECKING, Any, TypeVar

from enginelib.domain.calculations import calculate_bpm, calculate_duration_ms
from enginelib.domain.enums import MusicalKey

if TYPE_CHECKING:
    from enginelib.library import EngineLibrary

T = TypeVar("T")

# The device always stores exactly this many hot cue and loop slots
HOT_CUE_SLOTS = 8
LOOP_SLOTS = 8


@dataclass(frozen=True)
class PadColour:
    """RGBA colour of a performance pad, one byte per component."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ValueError(f"Colour component {name} out of range: {value}")

    def to_argb(self) -> int:
        """Pack the colour into a 32-bit ARGB integer."""
        return (self.a << 24) | (self.r << 16) | (self.g << 8) | self.b

    @classmethod
    def from_argb(cls, value: int) -> PadColour:
        """Unpack a 32-bit ARGB integer.

        Raises:
            ValueError: If value does not fit in 32 unsigned bits.
        """
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"Colour value out of range: {value}")
        return cls(
            r=(value >> 16) & 0xFF,
            g=(value >> 8) & 0xFF,
            b=value & 0xFF,
            a=(value >> 24) & 0xFF,
        )


# Default colours the device assigns to pads 1-8
STANDARD_PAD_COLOURS: tuple[PadColour, ...] = (
    PadColour(0xEA, 0xC5, 0x32, 0xFF),
    PadColour(0xEA, 0x8F, 0x32, 0xFF),
    PadColour(0xB8, 0x55, 0xBF, 0xFF),
    PadColour(0xBA, 0x2A, 0x41, 0xFF),
    PadColour(0x86, 0xC6, 0x4B, 0xFF),
    PadColour(0x20, 0xC6, 0x7C, 0xFF),
    PadColour(0x00, 0xA8, 0xB1, 0xFF),
    PadColour(0x15, 0x8E, 0xE2, 0xFF),
)


@dataclass(frozen=True)
class BeatGrid:
    """Two (beat index, sample offset) points defining a track's tempo map.

    The device analyses tracks so that the first beat is at index -4 and
    the last beat is the first beat at or past the end of the track. Grids
    loaded from a store do not have to follow that convention; see
    normalize_beat_grid().
    """

    first_beat_index: int = 0
    first_beat_sample_offset: float = 0.0
    last_beat_index: int = 0
    last_beat_sample_offset: float = 0.0


@dataclass(frozen=True)
class HotCue:
    """One hot cue slot. Unset slots have offset -1 and an empty label."""

    is_set: bool = False
    label: str = ""
    sample_offset: float = -1.0
    colour: PadColour = field(default_factory=PadColour)


@dataclass(frozen=True)
class Loop:
    """One saved loop slot."""

    is_start_set: bool = False
    is_end_set: bool = False
    label: str = ""
    start_offset: float = -1.0
    end_offset: float = -1.0
    colour: PadColour = field(default_factory=PadColour)

    @property
    def is_set(self) -> bool:
        """Return True only when both loop ends are set."""
        return self.is_start_set and self.is_end_set


def fill_slots(
    items: Iterable[T], slot_count: int, factory: Callable[[], T]
) -> tuple[T, ...]:
    """Fit items into exactly slot_count slots.

    Items beyond slot_count are dropped; missing slots are filled with
    factory() values.
    """
    slots = list(islice(items, slot_count))
    slots.extend(factory() for _ in range(slot_count - len(slots)))
    return tuple(slots)


@dataclass
class PerformanceRecord:
    """Analysis results for one track (domain model).

    hot_cues and loops always hold exactly eight slots. Supplying more keeps
    the first eight; supplying fewer pads with unset slots.
    """

    track_id: int
    sample_rate: float = 0.0
    total_samples: int = 0
    key: MusicalKey | None = None
    # Typically close to 0.5 for a well-mastered track; range is not enforced
    average_loudness: float = 0.0
    default_beat_grid: BeatGrid = field(default_factory=BeatGrid)
    adjusted_beat_grid: BeatGrid = field(default_factory=BeatGrid)
    hot_cues: tuple[HotCue, ...] = ()
    loops: tuple[Loop, ...] = ()
    default_main_cue_offset: float = 0.0
    adjusted_main_cue_offset: float = 0.0
    # Library the record was loaded through, if any
    _library: EngineLibrary | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __setattr__(self, name: str, value: Any) -> None:
        # Applies to __init__ and to plain assignment alike
        if name == "hot_cues":
            value = fill_slots(value, HOT_CUE_SLOTS, HotCue)
        elif name == "loops":
            value = fill_slots(value, LOOP_SLOTS, Loop)
        super().__setattr__(name, value)

    def set_hot_cues(self, hot_cues: Iterable[HotCue]) -> None:
        """Replace all hot cue slots, keeping at most the first eight."""
        self.hot_cues = hot_cues  # type: ignore[assignment]

    def set_loops(self, loops: Iterable[Loop]) -> None:
        """Replace all loop slots, keeping at most the first eight."""
        self.loops = loops  # type: ignore[assignment]

    @property
    def bpm(self) -> float:
        """Tempo derived from the adjusted beat grid and sample rate."""
        return calculate_bpm(self.sample_rate, self.adjusted_beat_grid)

    @property
    def duration_ms(self) -> int:
        """Track duration in whole milliseconds."""
        return calculate_duration_ms(self.sample_rate, self.total_samples)

    def save(self) -> None:
        """Save the record back through the library it was loaded from.

        Raises:
            RuntimeError: If the record was not loaded through a library.
            HandleClosedError: If that library has since been closed.
        """
        if self._library is None:
            raise RuntimeError(
                f"Performance data for track {self.track_id} is not attached "
                "to a library; use EngineLibrary.save_performance_data()"
            )
        self._library.save_performance_data(self)
