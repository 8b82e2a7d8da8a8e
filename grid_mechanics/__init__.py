"""Grid geometry for the fuselage designer: file-space transform and line rasterizer."""

from .transform import (
    GeometryError,
    Offset,
    editor_offset,
    file_offset,
    file_to_grid,
    grid_to_file,
    ORIGIN_X,
    ORIGIN_Y,
)
from .raster import rasterize_line

__all__ = [
    "GeometryError",
    "Offset",
    "editor_offset",
    "file_offset",
    "file_to_grid",
    "grid_to_file",
    "ORIGIN_X",
    "ORIGIN_Y",
    "rasterize_line",
]
