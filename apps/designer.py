"""Fuselage designer app: paint blocks on a grid and load/save .fus layouts."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pygame
import pygame_gui
from pygame_gui.windows import UIFileDialog

sys.path.append(str(Path(__file__).resolve().parent.parent))

from core import (  # noqa: E402
    Block,
    EditorSession,
    LEVEL_NAMES,
    BLOCK_NAMES,
    DEFAULT_LAYOUT_NAME,
    DesignerSettings,
    load_settings,
    save_settings,
    save_layout_file,
)
from core.config import SETTINGS_FILENAME  # noqa: E402
from core.persistence import read_layout_text  # noqa: E402
from apps.shared_ui import (  # noqa: E402
    DESIGNER_THEME,
    cell_to_screen,
    darken_color,
    draw_cells,
    lighten_color,
    screen_to_cell,
)
from grid_mechanics.raster import GridPoint  # noqa: E402

logger = logging.getLogger(__name__)

BASE_PATH = Path(__file__).resolve().parent.parent


class StageView:
    """Pygame stage mirroring the blocks of the active level."""

    def __init__(self, rect: pygame.Rect, settings: DesignerSettings) -> None:
        self.rect = rect
        self.settings = settings
        self.cell_size = settings.cell_size
        self.scroll: Tuple[int, int] = (0, 0)
        self.level: int = 0
        # id -> (x, y, kind) snapshot of what is currently shown
        self.sprites: Dict[int, Tuple[int, int, object]] = {}

    # StageObserver -------------------------------------------------------
    def enter(self, block: Block) -> None:
        self.sprites[block.id] = (block.x, block.y, block.kind)

    def exit(self, block: Block) -> None:
        self.sprites.pop(block.id, None)

    def set_active_level(self, level: int) -> None:
        self.level = level
        self.sprites.clear()

    # ---------------------------------------------------------------------
    def cell_at(self, pos: Tuple[int, int]) -> Optional[GridPoint]:
        return screen_to_cell(pos, self.rect, self.cell_size, self.scroll)

    def pan(self, dx: int, dy: int) -> None:
        self.scroll = (self.scroll[0] + dx, self.scroll[1] + dy)

    def draw(
        self,
        surface: pygame.Surface,
        ghost: List[GridPoint],
        hover: Optional[GridPoint],
        extent: Tuple[int, int],
    ) -> None:
        theme = DESIGNER_THEME
        pygame.draw.rect(surface, theme["stage"], self.rect)
        self._draw_grid(surface)

        # used area plus the margin kept free for growing the fuselage
        margin = self.settings.stage_margin
        used = cell_to_screen((0, 0), self.rect, self.cell_size, self.scroll)
        used.width = (extent[0] + margin) * self.cell_size
        used.height = (extent[1] + margin) * self.cell_size
        pygame.draw.rect(surface, theme["grid_major"], used.clip(self.rect), 1)

        for x, y, kind in self.sprites.values():
            color = self.settings.color_for(kind)
            draw_cells(surface, [(x, y)], color, self.rect, self.cell_size, self.scroll, darken_color(color, 0.4))
        if ghost:
            draw_cells(surface, ghost, lighten_color(theme["ghost"], 0.2), self.rect, self.cell_size, self.scroll)
        if hover is not None:
            rect = cell_to_screen(hover, self.rect, self.cell_size, self.scroll)
            pygame.draw.rect(surface, theme["hover"], rect, 1)
        pygame.draw.rect(surface, theme["stage_border"], self.rect, 1)

    def _draw_grid(self, surface: pygame.Surface) -> None:
        size = self.cell_size
        cols = self.rect.width // size + 1
        rows = self.rect.height // size + 1
        for i in range(cols):
            x = self.rect.x + i * size
            major = (i + self.scroll[0]) % 10 == 0
            color = DESIGNER_THEME["grid_major" if major else "grid_minor"]
            pygame.draw.line(surface, color, (x, self.rect.top), (x, self.rect.bottom - 1), 1)
        for j in range(rows):
            y = self.rect.y + j * size
            major = (j + self.scroll[1]) % 10 == 0
            color = DESIGNER_THEME["grid_major" if major else "grid_minor"]
            pygame.draw.line(surface, color, (self.rect.left, y), (self.rect.right - 1, y), 1)


class DesignerApp:
    def __init__(self, settings_path: Optional[Path] = None, layout_path: Optional[Path] = None) -> None:
        self.settings_path = settings_path or BASE_PATH / SETTINGS_FILENAME
        self.settings = load_settings(self.settings_path)

        pygame.init()
        pygame.display.set_caption("Fuselage Designer")
        self.window_size = tuple(self.settings.window_size)
        self.window_surface = pygame.display.set_mode(self.window_size)
        self.manager = pygame_gui.UIManager(self.window_size)
        self.theme = DESIGNER_THEME
        self.clock = pygame.time.Clock()
        self.running = True

        self.session = EditorSession(
            current_level=self.settings.default_level,
            current_kind=self.settings.default_kind,
        )
        stage_rect = pygame.Rect(20, 60, self.window_size[0] - 300, self.window_size[1] - 80)
        self.stage = StageView(stage_rect, self.settings)
        self.session.attach(self.stage)

        self.layout_path: Optional[Path] = None
        self.dirty = False
        self.status_hint = ""
        self.draw_start: Optional[GridPoint] = None
        self.draw_end: Optional[GridPoint] = None
        self.ghost_cells: List[GridPoint] = []
        self.hover_cell: Optional[GridPoint] = None
        self.file_dialog: Optional[UIFileDialog] = None
        self.file_dialog_mode: Optional[str] = None  # open | save

        self._build_ui()
        self._sync_labels()
        if layout_path is not None:
            self.open_layout(layout_path)

    def _build_ui(self) -> None:
        self.btn_load = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect((20, 16), (90, 30)), text="Load", manager=self.manager
        )
        self.btn_save = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect((116, 16), (90, 30)), text="Save", manager=self.manager
        )
        self.level_buttons: Dict[int, pygame_gui.elements.UIButton] = {}
        x = 230
        for level, name in LEVEL_NAMES.items():
            self.level_buttons[level] = pygame_gui.elements.UIButton(
                relative_rect=pygame.Rect((x, 16), (60, 30)), text=name, manager=self.manager
            )
            x += 66

        panel_x = self.window_size[0] - 264
        self.palette_buttons: Dict[int, pygame_gui.elements.UIButton] = {}
        y = 60
        for entry in self.settings.palette:
            self.palette_buttons[entry.kind] = pygame_gui.elements.UIButton(
                relative_rect=pygame.Rect((panel_x, y), (244, 28)),
                text=entry.name,
                manager=self.manager,
                tool_tip_text=f"Block type {entry.kind}",
            )
            y += 32

        y += 12
        self.lbl_kind = pygame_gui.elements.UILabel(
            relative_rect=pygame.Rect((panel_x, y), (244, 22)), text="", manager=self.manager
        )
        self.lbl_level = pygame_gui.elements.UILabel(
            relative_rect=pygame.Rect((panel_x, y + 26), (244, 22)), text="", manager=self.manager
        )
        self.lbl_count = pygame_gui.elements.UILabel(
            relative_rect=pygame.Rect((panel_x, y + 52), (244, 22)), text="", manager=self.manager
        )
        self.lbl_block = pygame_gui.elements.UILabel(
            relative_rect=pygame.Rect((panel_x, y + 90), (244, 22)), text="", manager=self.manager
        )
        self.lbl_block_pos = pygame_gui.elements.UILabel(
            relative_rect=pygame.Rect((panel_x, y + 116), (244, 22)), text="", manager=self.manager
        )
        status_x = x + 10
        self.lbl_status = pygame_gui.elements.UILabel(
            relative_rect=pygame.Rect((status_x, 16), (panel_x - 20 - status_x, 30)),
            text="",
            manager=self.manager,
        )

    # --- state changes -----------------------------------------------------
    def select_kind(self, kind: int) -> None:
        self.session.set_kind(kind)
        self._sync_labels()

    def select_level(self, level: int) -> None:
        self.session.set_level(level)
        self._cancel_gesture()
        self._sync_labels()

    def apply_gesture(self, start: GridPoint, end: GridPoint) -> List[GridPoint]:
        cells = self.session.draw_line(start[0], start[1], end[0], end[1])
        self.dirty = True
        self._sync_labels()
        return cells

    def _cancel_gesture(self) -> None:
        self.draw_start = None
        self.draw_end = None
        self.ghost_cells = []

    def open_layout(self, path: Path) -> bool:
        try:
            doc = self.session.load_text(read_layout_text(path))
        except (OSError, ValueError) as exc:
            logger.warning("failed to open %s: %s", path, exc)
            self.status_hint = f"Failed to open {path.name}: {exc}"
            self._sync_labels()
            return False
        self.layout_path = path
        self.dirty = False
        self.status_hint = f"Opened {path.name} ({len(doc.blocks)} blocks)"
        self._remember_file(path)
        self._sync_labels()
        return True

    def save_layout(self, path: Path) -> Optional[Path]:
        try:
            written = save_layout_file(
                path,
                self.session.registry,
                fuselage=self.session.fuselage,
                decks=self.session.decks,
            )
        except OSError as exc:
            logger.warning("failed to save %s: %s", path, exc)
            self.status_hint = f"Failed to save {path.name}: {exc}"
            self._sync_labels()
            return None
        self.layout_path = written
        self.dirty = False
        self.status_hint = f"Saved {written.name}"
        self._remember_file(written)
        self._sync_labels()
        return written

    def _remember_file(self, path: Path) -> None:
        self.settings.last_file = str(path)
        try:
            save_settings(self.settings_path, self.settings)
        except OSError as exc:
            logger.warning("could not store settings: %s", exc)

    def _open_file_dialog(self, mode: str) -> None:
        if self.file_dialog is not None:
            self.file_dialog.kill()
        if self.layout_path is not None:
            initial = self.layout_path
        elif self.settings.last_file:
            initial = Path(self.settings.last_file)
        elif mode == "save":
            initial = BASE_PATH / "layouts" / DEFAULT_LAYOUT_NAME
        else:
            initial = BASE_PATH / "layouts"
        rect = pygame.Rect((self.window_size[0] // 2 - 240, self.window_size[1] // 2 - 200), (480, 400))
        self.file_dialog = UIFileDialog(
            rect=rect,
            manager=self.manager,
            window_title="Open layout" if mode == "open" else "Save layout as",
            initial_file_path=str(initial),
            allow_existing_files_only=(mode == "open"),
        )
        self.file_dialog_mode = mode

    # --- labels ------------------------------------------------------------
    def _sync_labels(self) -> None:
        summary = self.session.level_summary()
        kind = self.session.current_kind
        kind_name = BLOCK_NAMES.get(kind, f"Block {kind}") if isinstance(kind, int) else str(kind)
        self.lbl_kind.set_text(f"Tool: {kind_name}")
        self.lbl_level.set_text(f"Level: {summary.level_name}")
        self.lbl_count.set_text(f"{summary.total} total, {summary.on_level} on {summary.level_name}")
        suffix = " *" if self.dirty else ""
        self.lbl_status.set_text(self.status_hint + suffix)
        for level, button in self.level_buttons.items():
            if level == summary.level:
                button.select()
            else:
                button.unselect()
        for entry_kind, button in self.palette_buttons.items():
            if entry_kind == kind:
                button.select()
            else:
                button.unselect()
        self._sync_hover_labels()

    def _sync_hover_labels(self) -> None:
        block = None
        if self.hover_cell is not None:
            block = self.session.registry.lookup(self.hover_cell[0], self.hover_cell[1], self.session.current_level)
        if block is None:
            self.lbl_block.set_text("")
            self.lbl_block_pos.set_text("")
            return
        self.lbl_block.set_text(f"#{block.id} {block.display_name}")
        self.lbl_block_pos.set_text(f"x {block.x}, y {block.y}")

    # --- main loop ---------------------------------------------------------
    def run(self) -> None:
        while self.running:
            dt = self.clock.tick(60) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                consumed = self.manager.process_events(event)
                self._handle_ui_event(event)
                if not consumed:
                    self._handle_stage_event(event)
            self.manager.update(dt)
            self._draw()
        pygame.quit()

    def _handle_ui_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame_gui.UI_FILE_DIALOG_PATH_PICKED and event.ui_element == self.file_dialog:
            path = Path(event.text)
            if self.file_dialog_mode == "open":
                self.open_layout(path)
            else:
                self.save_layout(path)
            self.file_dialog = None
            self.file_dialog_mode = None
            return
        if event.type == pygame_gui.UI_WINDOW_CLOSE and event.ui_element == self.file_dialog:
            self.file_dialog = None
            self.file_dialog_mode = None
            return
        if event.type != pygame_gui.UI_BUTTON_PRESSED:
            return
        if event.ui_element == self.btn_load:
            self._open_file_dialog("open")
        elif event.ui_element == self.btn_save:
            self._open_file_dialog("save")
        for level, button in self.level_buttons.items():
            if event.ui_element == button:
                self.select_level(level)
        for kind, button in self.palette_buttons.items():
            if event.ui_element == button:
                self.select_kind(kind)

    def _handle_stage_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                if self.draw_start is not None:
                    self._cancel_gesture()
                else:
                    self.running = False
            elif event.key == pygame.K_LEFT:
                self.stage.pan(-1, 0)
            elif event.key == pygame.K_RIGHT:
                self.stage.pan(1, 0)
            elif event.key == pygame.K_UP:
                self.stage.pan(0, -1)
            elif event.key == pygame.K_DOWN:
                self.stage.pan(0, 1)
            elif event.key == pygame.K_s and (event.mod & (pygame.KMOD_CTRL | pygame.KMOD_META)):
                if self.layout_path is not None:
                    self.save_layout(self.layout_path)
                else:
                    self._open_file_dialog("save")
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            cell = self.stage.cell_at(event.pos)
            if cell is not None:
                self.draw_start = cell
                self.draw_end = cell
                self.ghost_cells = self.session.preview_line(*cell, *cell)
        elif event.type == pygame.MOUSEMOTION:
            self.hover_cell = self.stage.cell_at(event.pos)
            self._sync_hover_labels()
            if self.draw_start is not None and self.hover_cell is not None and self.hover_cell != self.draw_end:
                self.draw_end = self.hover_cell
                self.ghost_cells = self.session.preview_line(*self.draw_start, *self.draw_end)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            if self.draw_start is not None:
                end = self.stage.cell_at(event.pos) or self.draw_end or self.draw_start
                self.apply_gesture(self.draw_start, end)
            self._cancel_gesture()

    def _draw(self) -> None:
        self.window_surface.fill(self.theme["bg"])
        extent = self.session.registry.extent(self.session.current_level)
        self.stage.draw(self.window_surface, self.ghost_cells, self.hover_cell, extent)
        self.manager.draw_ui(self.window_surface)
        pygame.display.update()


def main(settings_path: Optional[Path] = None, layout_path: Optional[Path] = None):
    app = DesignerApp(settings_path=settings_path, layout_path=layout_path)
    app.run()


if __name__ == "__main__":
    main()
