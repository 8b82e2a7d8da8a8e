"""Shared UI helpers for the designer: palette colors and stage/cell mapping."""
from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

import pygame

from grid_mechanics.raster import GridPoint

# --- Palette & drawing helpers ---------------------------------------------


def _clamp_channel(x: float) -> int:
    return max(0, min(255, int(x)))


def blend_color(color: tuple[int, int, int], target: tuple[int, int, int], t: float) -> tuple[int, int, int]:
    t = max(0.0, min(1.0, t))
    return tuple(_clamp_channel(c + (target[i] - c) * t) for i, c in enumerate(color))


def lighten_color(color: tuple[int, int, int], amount: float = 0.15) -> tuple[int, int, int]:
    return blend_color(color, (255, 255, 255), amount)


def darken_color(color: tuple[int, int, int], amount: float = 0.15) -> tuple[int, int, int]:
    return blend_color(color, (0, 0, 0), amount)


DESIGNER_THEME: dict[str, tuple[int, int, int]] = {
    "bg": (20, 24, 28),
    "stage": (14, 16, 22),
    "stage_border": (92, 108, 132),
    "grid_major": (44, 48, 56),
    "grid_minor": (32, 34, 40),
    "ghost": (120, 200, 255),
    "hover": (90, 130, 190),
}


# --- Stage <-> grid cell mapping --------------------------------------------


def screen_to_cell(
    pos: Tuple[int, int],
    stage: pygame.Rect,
    cell_size: int,
    scroll: Tuple[int, int] = (0, 0),
) -> Optional[GridPoint]:
    """Grid cell under a screen position, None outside the stage."""
    if not stage.collidepoint(pos):
        return None
    x = math.floor((pos[0] - stage.x) / cell_size) + scroll[0]
    y = math.floor((pos[1] - stage.y) / cell_size) + scroll[1]
    return (x, y)


def cell_to_screen(
    cell: GridPoint,
    stage: pygame.Rect,
    cell_size: int,
    scroll: Tuple[int, int] = (0, 0),
) -> pygame.Rect:
    x = stage.x + (cell[0] - scroll[0]) * cell_size
    y = stage.y + (cell[1] - scroll[1]) * cell_size
    return pygame.Rect(x, y, cell_size, cell_size)


def draw_cells(
    surface: pygame.Surface,
    cells: Iterable[GridPoint],
    color: Tuple[int, int, int],
    stage: pygame.Rect,
    cell_size: int,
    scroll: Tuple[int, int] = (0, 0),
    outline: Optional[Tuple[int, int, int]] = None,
) -> None:
    for cell in cells:
        rect = cell_to_screen(cell, stage, cell_size, scroll)
        if not stage.colliderect(rect):
            continue
        pygame.draw.rect(surface, color, rect.inflate(-1, -1))
        if outline:
            pygame.draw.rect(surface, outline, rect, 1)
