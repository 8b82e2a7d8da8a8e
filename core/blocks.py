"""Block model and the location-indexed block registry."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

BlockKind = Union[int, str]
Location = Tuple[int, int, int]  # (level, x, y)

REMOVE_KIND = 0
DEFAULT_KIND = 144

BLOCK_NAMES: Dict[int, str] = {
    REMOVE_KIND: "Remove blocks",
    144: "Invisible wall",
    210: "Engine space",
    732: "Front hull",
    733: "Starboard hull",
    734: "Aft hull",
    735: "Port hull",
}

LEVEL_NAMES: Dict[int, str] = {0: "B1", 1: "B2"}

# Floor of the highest-id tracker, so ids allocated in the editor start
# above it. File ids below the floor are kept as they are.
ID_FLOOR = 99999

# Section numbers the layout file uses for its metadata; no block may own them.
RESERVED_IDS = (0, 3, 999999999)


@dataclass
class Block:
    id: int
    level: int
    x: int
    y: int
    kind: BlockKind
    attributes: Dict[str, object] = field(default_factory=dict)
    # field order of the file section the block was read from, if any
    field_order: Tuple[str, ...] = field(default=(), compare=False, repr=False)

    @property
    def location(self) -> Location:
        return (self.level, self.x, self.y)

    @property
    def display_name(self) -> str:
        if isinstance(self.kind, int) and self.kind in BLOCK_NAMES:
            return BLOCK_NAMES[self.kind]
        return f"Block {self.kind}"


def is_remove_kind(kind: object) -> bool:
    return kind == REMOVE_KIND and not isinstance(kind, bool)


class BlockRegistry:
    """Blocks indexed by id and by (level, x, y); at most one block per cell."""

    def __init__(self, blocks: Iterable[Block] = ()) -> None:
        self._by_id: Dict[int, Block] = {}
        self._by_location: Dict[Location, int] = {}
        self.highest_id = ID_FLOOR
        blocks = list(blocks)
        if blocks:
            self.replace_all(blocks)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Block]:
        return iter(list(self._by_id.values()))

    def __contains__(self, location: object) -> bool:
        return location in self._by_location

    def get(self, block_id: int) -> Optional[Block]:
        return self._by_id.get(block_id)

    def lookup(self, x: int, y: int, level: int) -> Optional[Block]:
        block_id = self._by_location.get((level, x, y))
        if block_id is None:
            return None
        return self._by_id[block_id]

    def upsert(self, x: int, y: int, level: int, kind: BlockKind) -> Optional[Block]:
        """Place `kind` at a cell; the remove kind deletes the cell's block instead.

        An occupied cell keeps its block and id and only changes kind. An empty
        cell gets a fresh id one above the running maximum.
        """
        if is_remove_kind(kind):
            self.remove(x, y, level)
            return None

        existing = self.lookup(x, y, level)
        if existing is not None:
            existing.kind = kind
            return existing

        self.highest_id += 1
        while self.highest_id in RESERVED_IDS:
            self.highest_id += 1
        block = Block(id=self.highest_id, level=level, x=x, y=y, kind=kind)
        self._by_id[block.id] = block
        self._by_location[block.location] = block.id
        return block

    def remove(self, x: int, y: int, level: int) -> Optional[Block]:
        block = self.lookup(x, y, level)
        if block is None:
            return None
        # Only steps back by one; the tracker is not rescanned for the true
        # maximum.
        if block.id == self.highest_id:
            self.highest_id -= 1
        del self._by_id[block.id]
        del self._by_location[block.location]
        return block

    def replace_all(self, blocks: Iterable[Block]) -> None:
        """Swap in a complete block set, e.g. after loading a file.

        Raises ValueError and leaves the registry untouched when ids or
        locations repeat, when a block carries the remove kind, or when an id
        is one of the reserved section numbers.
        """
        by_id: Dict[int, Block] = {}
        by_location: Dict[Location, int] = {}
        for block in blocks:
            if block.id in RESERVED_IDS:
                raise ValueError(f"Block id {block.id} is a reserved section number")
            if is_remove_kind(block.kind):
                raise ValueError(f"Block {block.id} carries the remove kind")
            if block.id in by_id:
                raise ValueError(f"Duplicate block id {block.id}")
            if block.location in by_location:
                raise ValueError(
                    f"Blocks {by_location[block.location]} and {block.id} share location {block.location}"
                )
            by_id[block.id] = block
            by_location[block.location] = block.id

        self._by_id = by_id
        self._by_location = by_location
        self.highest_id = max([ID_FLOOR, *by_id.keys()])

    def clear(self) -> None:
        self.replace_all([])

    def all_for_level(self, level: int) -> List[Block]:
        return [block for block in self._by_id.values() if block.level == level]

    def count(self, level: Optional[int] = None) -> int:
        if level is None:
            return len(self._by_id)
        return sum(1 for block in self._by_id.values() if block.level == level)

    def extent(self, level: int) -> Tuple[int, int]:
        """Highest x and y used on a level, (0, 0) when the level is empty."""
        highest_x = 0
        highest_y = 0
        for block in self.all_for_level(level):
            highest_x = max(highest_x, block.x)
            highest_y = max(highest_y, block.y)
        return (highest_x, highest_y)

    def id_range(self) -> Optional[Tuple[int, int]]:
        if not self._by_id:
            return None
        return (min(self._by_id), max(self._by_id))
