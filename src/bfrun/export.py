from __future__ import annotations

import numpy as np

FORMATS = ('raw', 'decimal', 'hex', 'binary')

_ROW_WIDTH = {'decimal': 8, 'hex': 16, 'binary': 8}


def _rows(cells: np.ndarray, width: int, fmt: str):
    for i in range(0, len(cells), width):
        yield " ".join(format(int(v), fmt) for v in cells[i:i + width])


def dump_tape(cells: np.ndarray, fmt: str = 'raw', *, trim: bool = True) -> bytes:
    """Serialize tape cells.

    ``raw`` writes the cells as bytes. The text formats write one row of
    space separated values per line. With ``trim`` the trailing zero cells
    are left out.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unknown tape format: {fmt!r} (expected one of {', '.join(FORMATS)})")
    cells = np.asarray(cells, dtype=np.uint8)
    if trim:
        cells = np.trim_zeros(cells, 'b')

    if fmt == 'raw':
        return cells.tobytes()

    value_fmt = {'decimal': 'd', 'hex': '02x', 'binary': '08b'}[fmt]
    lines = list(_rows(cells, _ROW_WIDTH[fmt], value_fmt))
    text = "\n".join(lines)
    if lines:
        text += "\n"
    return text.encode('ascii')
