"""Conversion between the editor grid and the layout file's skewed basis."""
from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from numbers import Rational
from typing import Optional, Tuple, Union

Number = Union[int, float, str, Fraction]
GridPoint = Tuple[int, int]

# Skew basis of the file format: one grid step is (16, -13) along x and
# (16, 13) along y in file space.
SKEW_X = 13
SKEW_Y = 16
SKEW_DIVISOR = SKEW_X * SKEW_Y * 2

# The grid cell the file's origin lands on.
ORIGIN_X = 20
ORIGIN_Y = 50


class GeometryError(ValueError):
    """A coordinate does not map onto an integral cell of the target basis."""


@dataclass(frozen=True)
class Offset:
    x: int
    y: int

    def as_tuple(self) -> GridPoint:
        return (self.x, self.y)


def _exact(value: Number) -> Fraction:
    if isinstance(value, bool):
        raise TypeError(f"coordinate must be numeric, got {value!r}")
    if isinstance(value, (Rational, str)):
        return Fraction(value.strip() if isinstance(value, str) else value)
    return Fraction(repr(float(value)))


def _integral(ox: Fraction, oy: Fraction) -> Optional[Offset]:
    if ox.denominator != 1 or oy.denominator != 1:
        return None
    return Offset(int(ox), int(oy))


def editor_offset(x1: Number, y1: Number, x2: Number, y2: Number) -> Optional[Offset]:
    """Offset between two file-space points expressed in grid steps.

    Returns None when the points are not an integral number of cells apart.
    """
    dx = _exact(x1) - _exact(x2)
    dy = _exact(y1) - _exact(y2)
    ox = (SKEW_X * dx - SKEW_Y * dy) / SKEW_DIVISOR
    oy = (-SKEW_X * dx - SKEW_Y * dy) / SKEW_DIVISOR
    return _integral(ox, oy)


def file_offset(x1: Number, y1: Number, x2: Number, y2: Number) -> Optional[Offset]:
    """Offset between two grid points expressed in file-space units."""
    dx = _exact(x1) - _exact(x2)
    dy = _exact(y1) - _exact(y2)
    ox = SKEW_Y * dx - SKEW_Y * dy
    oy = -SKEW_X * dx - SKEW_X * dy
    return _integral(ox, oy)


def file_to_grid(fx: Number, fy: Number) -> GridPoint:
    offset = editor_offset(0, 0, fx, fy)
    if offset is None:
        raise GeometryError(f"file position ({fx}, {fy}) is not on the block grid")
    return (ORIGIN_X - offset.x, offset.y - ORIGIN_Y)


def grid_to_file(x: Number, y: Number) -> GridPoint:
    offset = file_offset(0, 0, ORIGIN_X - _exact(x), _exact(y) + ORIGIN_Y)
    if offset is None:
        raise GeometryError(f"grid position ({x}, {y}) is not an integral cell")
    return offset.as_tuple()


__all__ = [
    "GeometryError",
    "Offset",
    "editor_offset",
    "file_offset",
    "file_to_grid",
    "grid_to_file",
    "ORIGIN_X",
    "ORIGIN_Y",
]
