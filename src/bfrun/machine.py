from __future__ import annotations

from enum import Enum

import numpy as np

DEFAULT_TAPE_SIZE = 30000
CELL_MAX = 255


class OverflowPolicy(Enum):
    WRAP = 'wrap'
    CLAMP = 'clamp'


class TapeMachine:
    """Fixed-size tape of 8-bit cells with a cursor.

    ``tape_policy`` decides what happens when the cursor runs off either end
    of the tape, ``cell_policy`` what happens when a cell goes below 0 or
    above 255. Either wraps around or saturates at the nearest bound.
    """

    def __init__(
        self,
        size: int = DEFAULT_TAPE_SIZE,
        tape_policy: OverflowPolicy = OverflowPolicy.WRAP,
        cell_policy: OverflowPolicy = OverflowPolicy.WRAP,
    ):
        if size <= 0:
            raise ValueError(f"Tape size must be positive, got {size}")
        self.size = size
        self.tape_policy = tape_policy
        self.cell_policy = cell_policy
        self.reset()

    def reset(self) -> None:
        self.cells = np.zeros(self.size, dtype=np.uint8)
        self.cursor = 0

    @staticmethod
    def add_with_wrap(first: int, other: int, modulus: int) -> int:
        """Returns ``(first + other) % modulus`` for ``0 <= first < modulus``."""
        return (first + other % modulus) % modulus

    @staticmethod
    def sub_with_wrap(first: int, other: int, modulus: int) -> int:
        """Returns ``(first - other) % modulus`` for ``0 <= first < modulus``."""
        return (first - other % modulus) % modulus

    @property
    def current(self) -> int:
        return int(self.cells[self.cursor])

    def _store(self, value: int) -> None:
        self.cells[self.cursor] = np.uint8(value)

    def move_left(self, shift: int) -> None:
        if shift < 0:
            raise ValueError(f"Shift must be non-negative, got {shift}")
        if self.tape_policy is OverflowPolicy.WRAP:
            self.cursor = self.sub_with_wrap(self.cursor, shift, self.size)
        else:
            self.cursor = max(0, self.cursor - shift)

    def move_right(self, shift: int) -> None:
        if shift < 0:
            raise ValueError(f"Shift must be non-negative, got {shift}")
        if self.tape_policy is OverflowPolicy.WRAP:
            self.cursor = self.add_with_wrap(self.cursor, shift, self.size)
        else:
            self.cursor = min(self.size - 1, self.cursor + shift)

    def add(self, value: int) -> None:
        current = self.current
        if self.cell_policy is OverflowPolicy.WRAP:
            self._store(self.add_with_wrap(current, value, CELL_MAX + 1))
        else:
            self._store(min(CELL_MAX, current + value))

    def subtract(self, value: int) -> None:
        current = self.current
        if self.cell_policy is OverflowPolicy.WRAP:
            self._store(self.sub_with_wrap(current, value, CELL_MAX + 1))
        else:
            self._store(max(0, current - value))

    def read_char(self, char: str) -> None:
        # Text sources hand over code points; only the low byte is kept.
        self._store(ord(char) % (CELL_MAX + 1))

    def write_char(self) -> str:
        return chr(self.current)

    def is_nonzero(self) -> bool:
        return self.current != 0
