"""File I/O helpers for fuselage layouts."""
from __future__ import annotations

import logging
from pathlib import Path

from .blocks import BlockRegistry
from .layout import (
    DEFAULT_DECKS,
    DEFAULT_FUSELAGE,
    LayoutDocument,
    decode_layout,
    encode_layout,
)

logger = logging.getLogger(__name__)

LAYOUT_SUFFIX = ".fus"
DEFAULT_LAYOUT_NAME = "Yanmori 2" + LAYOUT_SUFFIX


def coerce_layout_path(path: Path) -> Path:
    if path.suffix == LAYOUT_SUFFIX:
        return path
    return path.with_name(path.name + LAYOUT_SUFFIX)


def read_layout_text(path: Path) -> str:
    # newline="" keeps CR/LF as written; the decoder splits on either.
    with path.open("r", encoding="utf-8", newline="") as f:
        return f.read()


def load_layout_file(path: Path) -> LayoutDocument:
    """Decode a .fus file without touching any registry."""
    doc = decode_layout(read_layout_text(path))
    logger.info("read %d blocks from %s", len(doc.blocks), path)
    return doc


def save_layout_file(
    path: Path,
    registry: BlockRegistry,
    *,
    fuselage: str = DEFAULT_FUSELAGE,
    decks: int = DEFAULT_DECKS,
) -> Path:
    """Write the registry as a .fus file with CRLF line endings on every platform."""
    path = coerce_layout_path(path)
    text = encode_layout(registry, fuselage=fuselage, decks=decks)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)
    logger.info("wrote %d blocks to %s", len(registry), path)
    return path
