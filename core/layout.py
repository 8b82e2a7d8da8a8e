"""Fuselage layout (.fus) codec: INI sections <-> registry blocks."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Dict, List, Optional, Tuple

from grid_mechanics.transform import file_to_grid, grid_to_file

from . import ini_format
from .blocks import ID_FLOOR, RESERVED_IDS, Block, BlockKind, BlockRegistry, is_remove_kind

logger = logging.getLogger(__name__)

# Reserved sections of the format.
METADATA_SECTION = "0"
DECKS_SECTION = "3"
ID_RANGE_SECTION = "999999999"
RESERVED_SECTION_IDS = RESERVED_IDS

FUSELAGE_FIELD = "fuselage"
DECKS_FIELD = "decks"
# The game loads every section between these two ids, so the range
# must cover all blocks.
FIRST_ID_FIELD = "first_fucker"
LAST_ID_FIELD = "last_fucker"

LEVEL_FIELD = "level"
KIND_FIELD = "name"
X_FIELD = "x"
Y_FIELD = "y"
BLOCK_FIELDS = (LEVEL_FIELD, KIND_FIELD, X_FIELD, Y_FIELD)

DEFAULT_FUSELAGE = "Yanmori 2"
DEFAULT_DECKS = 2

_INTEGER = re.compile(r"^\s*[+-]?\d+\s*$")


class FormatError(ValueError):
    """Text that is not a fuselage layout the game would accept."""


@dataclass
class LayoutDocument:
    """A decoded layout file: its blocks plus the metadata sections."""

    blocks: List[Block] = field(default_factory=list)
    fuselage: str = DEFAULT_FUSELAGE
    decks: int = DEFAULT_DECKS
    id_range: Optional[Tuple[int, int]] = None


def _parse_int(value: object, what: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and _INTEGER.match(value):
        return int(value)
    raise FormatError(f"{what} must be an integer, got {value!r}")


def _parse_coordinate(value: object, what: str) -> Fraction:
    if value is None or isinstance(value, bool):
        raise FormatError(f"{what} must be a number, got {value!r}")
    try:
        return Fraction(str(value).strip())
    except (ValueError, ZeroDivisionError) as exc:
        raise FormatError(f"{what} must be a number, got {value!r}") from exc


def _parse_kind(value: object) -> BlockKind:
    if isinstance(value, str) and _INTEGER.match(value):
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return str(value)


def _parse_block(section_key: str, section: Dict[str, object]) -> Block:
    block_id = _parse_int(section_key, "Block section key")
    if block_id < 0:
        raise FormatError(f"Block id must be non-negative, got {block_id}")
    for required in (KIND_FIELD, X_FIELD, Y_FIELD):
        if required not in section:
            raise FormatError(f"Block {block_id} is missing '{required}'")

    fx = _parse_coordinate(section[X_FIELD], f"Block {block_id} x")
    fy = _parse_coordinate(section[Y_FIELD], f"Block {block_id} y")
    x, y = file_to_grid(fx, fy)
    level = _parse_int(section.get(LEVEL_FIELD, 0), f"Block {block_id} level")
    attributes = {k: v for k, v in section.items() if k not in BLOCK_FIELDS}
    return Block(
        id=block_id,
        level=level,
        x=x,
        y=y,
        kind=_parse_kind(section[KIND_FIELD]),
        attributes=attributes,
        field_order=tuple(section.keys()),
    )


def _is_reserved(key: str) -> bool:
    return bool(_INTEGER.match(key)) and int(key) in RESERVED_SECTION_IDS


def decode_layout(text: str) -> LayoutDocument:
    """Parse layout text into blocks; nothing is installed anywhere.

    Raises FormatError when the marker section is missing or a block is
    malformed, GeometryError when a block sits off the grid.
    """
    data = ini_format.decode(text)

    header = data.get(METADATA_SECTION)
    if not isinstance(header, dict) or FUSELAGE_FIELD not in header:
        raise FormatError("not a recognized layout file")

    doc = LayoutDocument(fuselage=str(header[FUSELAGE_FIELD]))
    decks = data.get(DECKS_SECTION)
    if isinstance(decks, dict) and DECKS_FIELD in decks:
        doc.decks = _parse_int(decks[DECKS_FIELD], "Deck count")
    id_range = data.get(ID_RANGE_SECTION)
    if isinstance(id_range, dict) and FIRST_ID_FIELD in id_range and LAST_ID_FIELD in id_range:
        doc.id_range = (
            _parse_int(id_range[FIRST_ID_FIELD], FIRST_ID_FIELD),
            _parse_int(id_range[LAST_ID_FIELD], LAST_ID_FIELD),
        )

    seen_ids: set = set()
    occupied: Dict[Tuple[int, int, int], Block] = {}
    for key, section in data.items():
        if not isinstance(section, dict):
            logger.debug("ignoring top-level key %r outside any section", key)
            continue
        if _is_reserved(key):
            continue
        block = _parse_block(key, section)
        if block.id in seen_ids:
            raise FormatError(f"Block id {block.id} appears more than once")
        seen_ids.add(block.id)
        if is_remove_kind(block.kind):
            logger.warning("dropping block %d: it carries the remove kind", block.id)
            continue
        previous = occupied.get(block.location)
        if previous is not None:
            logger.warning(
                "block %d replaces block %d at level %d (%d, %d)",
                block.id,
                previous.id,
                *block.location,
            )
        occupied[block.location] = block

    doc.blocks = list(occupied.values())
    return doc


def load_into(registry: BlockRegistry, text: str) -> LayoutDocument:
    """Decode `text` and install its blocks; the registry is untouched on failure."""
    doc = decode_layout(text)
    registry.replace_all(doc.blocks)
    logger.info("loaded %d blocks (%s)", len(doc.blocks), doc.fuselage)
    return doc


def _block_section(block: Block) -> Dict[str, object]:
    fx, fy = grid_to_file(block.x, block.y)
    section: Dict[str, object] = {
        LEVEL_FIELD: block.level,
        KIND_FIELD: block.kind,
        X_FIELD: fx,
        Y_FIELD: fy,
    }
    for key, value in block.attributes.items():
        if key not in section:
            section[key] = value
    if not block.field_order:
        return section
    # blocks read from a file keep that file's field order
    order = [key for key in block.field_order if key in section]
    order += [key for key in section if key not in order]
    return {key: section[key] for key in order}


def layout_sections(
    registry: BlockRegistry,
    *,
    fuselage: str = DEFAULT_FUSELAGE,
    decks: int = DEFAULT_DECKS,
) -> Dict[str, object]:
    """Build the section mapping in the order the game expects."""
    sections: Dict[int, object] = {
        int(METADATA_SECTION): {FUSELAGE_FIELD: fuselage},
        int(DECKS_SECTION): {DECKS_FIELD: decks},
    }
    for block in registry:
        sections[block.id] = _block_section(block)

    lowest, highest = registry.id_range() or (ID_FLOOR, ID_FLOOR)
    sections[int(ID_RANGE_SECTION)] = {FIRST_ID_FIELD: lowest, LAST_ID_FIELD: highest}
    # Numeric section keys are written in ascending order.
    return {str(key): sections[key] for key in sorted(sections)}


def encode_layout(
    registry: BlockRegistry,
    *,
    fuselage: str = DEFAULT_FUSELAGE,
    decks: int = DEFAULT_DECKS,
) -> str:
    return ini_format.encode(layout_sections(registry, fuselage=fuselage, decks=decks))


def decode(text: str) -> BlockRegistry:
    registry = BlockRegistry()
    load_into(registry, text)
    return registry


def encode(registry: BlockRegistry) -> str:
    return encode_layout(registry)
