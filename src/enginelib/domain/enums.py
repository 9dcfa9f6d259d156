"""Domain enums for Engine library performance data."""

from __future__ import annotations

from enum import Enum


class MusicalKey(Enum):
    """Musical key of a track, valued by the device's key code.

    Codes follow the circle of fifths, alternating each major key with its
    relative minor. Code 0 is reserved on disk for "no key", which is
    represented in Python as None rather than a member.
    """

    C_MAJOR = 1
    A_MINOR = 2
    G_MAJOR = 3
    E_MINOR = 4
    D_MAJOR = 5
    B_MINOR = 6
    A_MAJOR = 7
    F_SHARP_MINOR = 8
    E_MAJOR = 9
    D_FLAT_MINOR = 10
    B_MAJOR = 11
    A_FLAT_MINOR = 12
    F_SHARP_MAJOR = 13
    E_FLAT_MINOR = 14
    D_FLAT_MAJOR = 15
    B_FLAT_MINOR = 16
    A_FLAT_MAJOR = 17
    F_MINOR = 18
    E_FLAT_MAJOR = 19
    C_MINOR = 20
    B_FLAT_MAJOR = 21
    G_MINOR = 22
    F_MAJOR = 23
    D_MINOR = 24

    @property
    def is_minor(self) -> bool:
        """Return True for minor keys."""
        return self.value % 2 == 0

    @classmethod
    def from_code(cls, code: int) -> MusicalKey | None:
        """Convert a stored key code to a key.

        Args:
            code: Key code from the performance store.

        Returns:
            The key, or None for code 0.

        Raises:
            ValueError: If the code is not 0 and not a key code.
        """
        if code == 0:
            return None
        return cls(code)

    @staticmethod
    def to_code(key: MusicalKey | None) -> int:
        """Convert a key (or None) to its stored key code."""
        return 0 if key is None else key.value
