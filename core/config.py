"""Designer settings and JSON helpers."""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, get_type_hints, get_origin, get_args

from .blocks import BLOCK_NAMES, DEFAULT_KIND

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

SETTINGS_FILENAME = "designer_settings.json"

DEFAULT_COLORS: Dict[int, Color] = {
    0: (200, 70, 70),
    144: (150, 150, 160),
    210: (230, 170, 60),
    732: (80, 140, 220),
    733: (80, 200, 140),
    734: (200, 110, 200),
    735: (220, 200, 90),
}


@dataclass
class PaletteEntry:
    kind: int
    name: str
    color: Color = (180, 180, 180)


def default_palette() -> List[PaletteEntry]:
    return [
        PaletteEntry(kind=kind, name=name, color=DEFAULT_COLORS.get(kind, (180, 180, 180)))
        for kind, name in BLOCK_NAMES.items()
    ]


@dataclass
class DesignerSettings:
    """Persisted designer preferences."""

    window_size: Tuple[int, int] = (1100, 720)
    cell_size: int = 16  # pixels per grid cell
    stage_margin: int = 5  # empty cells kept around the used area
    palette: List[PaletteEntry] = field(default_factory=default_palette)
    default_kind: int = DEFAULT_KIND
    default_level: int = 0
    last_file: Optional[str] = None

    def color_for(self, kind: object) -> Color:
        for entry in self.palette:
            if entry.kind == kind:
                return entry.color
        return (180, 180, 180)


def _dataclass_from_dict(cls, data: Dict) -> object:
    field_types = get_type_hints(cls)
    kwargs = {}
    for key, value in data.items():
        expected = field_types.get(key)
        if expected is None:
            logger.debug("ignoring unknown %s field %r", cls.__name__, key)
            continue
        origin = get_origin(expected)
        if origin is list:
            inner = get_args(expected)[0]
            if hasattr(inner, "__dataclass_fields__"):
                kwargs[key] = [_dataclass_from_dict(inner, v) for v in value]
                continue
        if origin is tuple and isinstance(value, list):
            kwargs[key] = tuple(value)
            continue
        if hasattr(expected, "__dataclass_fields__"):
            kwargs[key] = _dataclass_from_dict(expected, value)
        else:
            kwargs[key] = value
    return cls(**kwargs)


def load_json(path: Path, cls):
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return _dataclass_from_dict(cls, data)


def save_json(path: Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(obj), f, indent=2)


def load_settings(path: Path) -> DesignerSettings:
    """Read settings, falling back to defaults when the file is absent or broken."""
    if not path.exists():
        return DesignerSettings()
    try:
        settings = load_json(path, DesignerSettings)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("ignoring unreadable settings %s: %s", path, exc)
        return DesignerSettings()
    if not settings.palette:
        settings.palette = default_palette()
    return settings


def save_settings(path: Path, settings: DesignerSettings) -> None:
    save_json(path, settings)
