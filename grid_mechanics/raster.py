"""Bresenham rasterization of a drag gesture into grid cells."""
from __future__ import annotations

from typing import List, Tuple

GridPoint = Tuple[int, int]


def _bresenham(x1: int, y1: int, x2: int, y2: int) -> List[GridPoint]:
    diff_x = abs(x1 - x2)
    diff_y = abs(y1 - y2)
    sign_x = 1 if x1 < x2 else -1
    sign_y = 1 if y1 < y2 else -1
    error = diff_x - diff_y

    cells: List[GridPoint] = []
    while True:
        cells.append((x1, y1))
        if x1 == x2 and y1 == y2:
            return cells
        error2 = 2 * error
        if error2 > -diff_y:
            error -= diff_y
            x1 += sign_x
        if error2 < diff_x:
            error += diff_x
            y1 += sign_y


def rasterize_line(x1: int, y1: int, x2: int, y2: int) -> List[GridPoint]:
    """Cells of the discrete line from (x1, y1) to (x2, y2), both included.

    The walk always runs from the lexicographically smaller endpoint, so
    swapping the endpoints yields exactly the reversed sequence.
    """
    if (x2, y2) < (x1, y1):
        cells = _bresenham(x2, y2, x1, y1)
        cells.reverse()
        return cells
    return _bresenham(x1, y1, x2, y2)
