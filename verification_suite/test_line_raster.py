"""Line rasterization used for drag gestures."""
from __future__ import annotations

import sys
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from grid_mechanics import rasterize_line  # noqa: E402


def _is_connected(cells) -> bool:
    return all(
        max(abs(a[0] - b[0]), abs(a[1] - b[1])) == 1 for a, b in zip(cells, cells[1:])
    )


def test_single_point() -> None:
    assert rasterize_line(0, 0, 0, 0) == [(0, 0)]
    assert rasterize_line(-4, 7, -4, 7) == [(-4, 7)]


def test_horizontal_and_vertical() -> None:
    assert rasterize_line(0, 0, 3, 0) == [(0, 0), (1, 0), (2, 0), (3, 0)]
    assert rasterize_line(2, 5, 2, 2) == [(2, 5), (2, 4), (2, 3), (2, 2)]


def test_diagonal() -> None:
    assert rasterize_line(0, 0, 3, 3) == [(0, 0), (1, 1), (2, 2), (3, 3)]
    assert rasterize_line(0, 3, 3, 0) == [(0, 3), (1, 2), (2, 1), (3, 0)]


def test_shallow_slope() -> None:
    assert rasterize_line(0, 0, 3, 1) == [(0, 0), (1, 0), (2, 1), (3, 1)]


def test_endpoints_included_and_no_repeats() -> None:
    for end in [(7, 2), (-5, 9), (3, -8), (-6, -6), (0, 11)]:
        cells = rasterize_line(1, 1, *end)
        assert cells[0] == (1, 1)
        assert cells[-1] == end
        assert len(cells) == len(set(cells))
        assert len(cells) == max(abs(end[0] - 1), abs(end[1] - 1)) + 1
        assert _is_connected(cells)


def test_swapping_endpoints_reverses_the_walk() -> None:
    for x1, y1, x2, y2 in [(0, 0, 5, 2), (3, 1, -2, 6), (0, 0, 4, 1), (9, 9, 1, 4), (2, 0, 0, 5)]:
        forward = rasterize_line(x1, y1, x2, y2)
        backward = rasterize_line(x2, y2, x1, y1)
        assert backward == list(reversed(forward))
