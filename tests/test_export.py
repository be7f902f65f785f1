import numpy as np
import pytest

from bfrun.export import dump_tape


def test_raw_trims_trailing_zeros():
    cells = np.array([65, 0, 66, 0, 0], dtype=np.uint8)
    assert dump_tape(cells) == b"A\x00B"
    assert dump_tape(cells, trim=False) == b"A\x00B\x00\x00"


def test_hex():
    assert dump_tape(np.array([255, 1, 0], dtype=np.uint8), 'hex') == b"ff 01\n"


def test_binary():
    assert dump_tape(np.array([5], dtype=np.uint8), 'binary') == b"00000101\n"


def test_decimal_rows_of_eight():
    cells = np.arange(1, 11, dtype=np.uint8)
    assert dump_tape(cells, 'decimal') == b"1 2 3 4 5 6 7 8\n9 10\n"


def test_all_zero_tape_is_empty():
    assert dump_tape(np.zeros(16, dtype=np.uint8), 'hex') == b""


def test_unknown_format():
    with pytest.raises(ValueError):
        dump_tape(np.zeros(1, dtype=np.uint8), 'octal')
