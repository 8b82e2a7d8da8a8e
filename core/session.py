"""Editor session: registry, active level/kind and stage notifications."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from grid_mechanics.raster import GridPoint, rasterize_line

from . import layout
from .blocks import DEFAULT_KIND, LEVEL_NAMES, Block, BlockKind, BlockRegistry, is_remove_kind


class StageObserver(Protocol):
    """Rendering surface that mirrors the blocks of the active level.

    `set_active_level` clears the surface; the session re-enters the blocks
    of the new level right after.
    """

    def enter(self, block: Block) -> None: ...

    def exit(self, block: Block) -> None: ...

    def set_active_level(self, level: int) -> None: ...


@dataclass
class LevelSummary:
    level: int
    level_name: str
    total: int
    on_level: int
    extent: GridPoint


@dataclass
class EditorSession:
    """State the designer used to keep in globals, owned by the caller."""

    registry: BlockRegistry = field(default_factory=BlockRegistry)
    current_level: int = 0
    current_kind: BlockKind = DEFAULT_KIND
    fuselage: str = layout.DEFAULT_FUSELAGE
    decks: int = layout.DEFAULT_DECKS
    observer: Optional[StageObserver] = None

    def attach(self, observer: Optional[StageObserver]) -> None:
        self.observer = observer
        self.refresh_stage()

    def refresh_stage(self) -> None:
        if self.observer is None:
            return
        self.observer.set_active_level(self.current_level)
        for block in self.registry.all_for_level(self.current_level):
            self.observer.enter(block)

    def set_level(self, level: int) -> None:
        if level not in LEVEL_NAMES:
            raise ValueError(f"Unknown level {level}; expected one of {sorted(LEVEL_NAMES)}")
        self.current_level = level
        self.refresh_stage()

    def set_kind(self, kind: BlockKind) -> None:
        self.current_kind = kind

    def paint(self, x: int, y: int) -> Optional[Block]:
        """Apply the current kind to one cell of the active level."""
        level = self.current_level
        if is_remove_kind(self.current_kind):
            removed = self.registry.remove(x, y, level)
            if removed is not None and self.observer is not None:
                self.observer.exit(removed)
            return None

        existed = self.registry.lookup(x, y, level) is not None
        block = self.registry.upsert(x, y, level, self.current_kind)
        if block is not None and self.observer is not None:
            if existed:
                self.observer.exit(block)
            self.observer.enter(block)
        return block

    def draw_line(self, x1: int, y1: int, x2: int, y2: int) -> List[GridPoint]:
        cells = rasterize_line(x1, y1, x2, y2)
        for x, y in cells:
            self.paint(x, y)
        return cells

    def preview_line(self, x1: int, y1: int, x2: int, y2: int) -> List[GridPoint]:
        """Cells a draw would touch, without changing anything (ghost preview)."""
        return rasterize_line(x1, y1, x2, y2)

    def load_text(self, text: str) -> layout.LayoutDocument:
        """Replace the registry with the decoded file; unchanged if decoding fails."""
        doc = layout.load_into(self.registry, text)
        self.fuselage = doc.fuselage
        self.decks = doc.decks
        self.refresh_stage()
        return doc

    def dump_text(self) -> str:
        return layout.encode_layout(self.registry, fuselage=self.fuselage, decks=self.decks)

    def level_summary(self) -> LevelSummary:
        level = self.current_level
        return LevelSummary(
            level=level,
            level_name=LEVEL_NAMES.get(level, str(level)),
            total=self.registry.count(),
            on_level=self.registry.count(level),
            extent=self.registry.extent(level),
        )
