"""Headless designer checks: palette/level state, gestures, open/save."""
from __future__ import annotations

import os
import sys
from pathlib import Path

# Allow pygame to initialize without a real display
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

import pygame  # noqa: E402
import pytest  # noqa: E402

from apps.designer import DesignerApp  # noqa: E402
from core.layout import decode_layout  # noqa: E402

SAMPLE = PACKAGE_ROOT / "layouts" / "sample_yanmori2.fus"


@pytest.fixture
def app(tmp_path: Path):
    designer = DesignerApp(settings_path=tmp_path / "designer_settings.json")
    yield designer
    pygame.quit()


def test_initial_state(app: DesignerApp) -> None:
    assert app.session.current_level == 0
    assert app.session.current_kind == 144
    assert set(app.level_buttons) == {0, 1}
    assert 0 in app.palette_buttons and 210 in app.palette_buttons
    assert app.lbl_level.text == "Level: B1"
    app._draw()


def test_gesture_paints_and_stage_follows(app: DesignerApp) -> None:
    app.select_kind(210)
    cells = app.apply_gesture((0, 0), (3, 0))
    assert cells == [(0, 0), (1, 0), (2, 0), (3, 0)]
    assert len(app.stage.sprites) == 4
    assert all(kind == 210 for _, _, kind in app.stage.sprites.values())
    assert app.dirty

    app.select_level(1)
    assert app.stage.sprites == {}
    app.select_level(0)
    assert len(app.stage.sprites) == 4

    app.select_kind(0)
    app.apply_gesture((1, 0), (2, 0))
    assert sorted((x, y) for x, y, _ in app.stage.sprites.values()) == [(0, 0), (3, 0)]
    app._draw()


def test_save_and_reopen(app: DesignerApp, tmp_path: Path) -> None:
    app.apply_gesture((0, 0), (2, 2))
    written = app.save_layout(tmp_path / "hull")
    assert written == tmp_path / "hull.fus"
    assert not app.dirty
    assert app.settings.last_file == str(written)
    assert (tmp_path / "designer_settings.json").exists()

    doc = decode_layout(written.read_text(encoding="utf-8"))
    assert sorted((b.x, b.y) for b in doc.blocks) == [(0, 0), (1, 1), (2, 2)]

    app.apply_gesture((5, 5), (5, 5))
    assert app.open_layout(written)
    assert app.session.registry.count() == 3
    assert not app.dirty


def test_open_sample_and_bad_file(app: DesignerApp, tmp_path: Path) -> None:
    assert app.open_layout(SAMPLE)
    assert app.session.registry.count() == 6
    assert len(app.stage.sprites) == 5

    bad = tmp_path / "bad.fus"
    bad.write_text("[3]\ndecks = 2\n", encoding="utf-8")
    assert not app.open_layout(bad)
    assert app.session.registry.count() == 6
    assert "Failed to open" in app.status_hint
    assert not app.open_layout(tmp_path / "missing.fus")
    app._draw()


def test_hover_label_shows_block(app: DesignerApp) -> None:
    block = app.session.paint(1, 1)
    app.hover_cell = (1, 1)
    app._sync_hover_labels()
    assert app.lbl_block.text == f"#{block.id} Invisible wall"
    app.hover_cell = (4, 4)
    app._sync_hover_labels()
    assert app.lbl_block.text == ""
