"""Layout (.fus) codec: reserved sections, id range, block positions."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from core import ini_format  # noqa: E402
from core.blocks import ID_FLOOR, BlockRegistry  # noqa: E402
from core.layout import (  # noqa: E402
    FormatError,
    decode,
    decode_layout,
    encode,
    encode_layout,
    layout_sections,
    load_into,
)
from grid_mechanics import GeometryError  # noqa: E402

SAMPLE = PACKAGE_ROOT / "layouts" / "sample_yanmori2.fus"

HEADER = "[0]\nfuselage = Yanmori 2\n[3]\ndecks = 2\n"


def _sample_text() -> str:
    with SAMPLE.open("r", encoding="utf-8", newline="") as f:
        return f.read()


def test_sample_decodes_to_grid_cells() -> None:
    doc = decode_layout(_sample_text())
    assert doc.fuselage == "Yanmori 2"
    assert doc.decks == 2
    assert doc.id_range == (100000, 100005)
    by_id = {block.id: block for block in doc.blocks}
    assert len(by_id) == 6
    engine = by_id[100002]
    assert (engine.level, engine.x, engine.y, engine.kind) == (0, 2, 1, 210)
    assert by_id[100000].location == (0, 2, 0)
    assert by_id[100005].location == (1, 2, 1)


def test_sample_reencodes_byte_for_byte() -> None:
    text = _sample_text()
    doc = decode_layout(text)
    again = encode_layout(BlockRegistry(doc.blocks), fuselage=doc.fuselage, decks=doc.decks)
    assert again == text


def test_empty_registry_encoding() -> None:
    text = encode(BlockRegistry())
    assert text == (
        "[0]\r\nfuselage = Yanmori 2\r\n\r\n"
        "[3]\r\ndecks = 2\r\n\r\n"
        f"[999999999]\r\nfirst_fucker = {ID_FLOOR}\r\nlast_fucker = {ID_FLOOR}\r\n"
    )


def test_sections_are_numerically_ordered() -> None:
    registry = BlockRegistry()
    registry.upsert(0, 0, 0, 144)
    registry.upsert(1, 0, 0, 144)
    keys = list(layout_sections(registry).keys())
    assert keys == ["0", "3", "100000", "100001", "999999999"]


def test_id_range_covers_all_blocks() -> None:
    registry = BlockRegistry()
    for x in range(4):
        registry.upsert(x, 0, 0, 144)
    registry.remove(0, 0, 0)
    data = ini_format.decode(encode(registry))
    assert data["999999999"] == {"first_fucker": "100001", "last_fucker": "100003"}


def test_block_fields_in_file_space() -> None:
    registry = BlockRegistry()
    registry.upsert(5, 3, 1, 732)
    data = ini_format.decode(encode(registry))
    assert data["100000"] == {"level": "1", "name": "732", "x": "608", "y": "884"}


def test_round_trip_through_registry() -> None:
    registry = BlockRegistry()
    registry.upsert(0, 0, 0, 144)
    registry.upsert(7, 2, 0, 210)
    registry.upsert(3, 9, 1, 733)
    restored = decode(encode(registry))
    assert sorted((b.id, b.location, b.kind) for b in restored) == sorted(
        (b.id, b.location, b.kind) for b in registry
    )
    assert restored.highest_id == registry.highest_id


def test_metadata_round_trips() -> None:
    registry = BlockRegistry()
    text = encode_layout(registry, fuselage="Kestrel", decks=1)
    doc = decode_layout(text)
    assert doc.fuselage == "Kestrel"
    assert doc.decks == 1


def test_missing_marker_is_rejected() -> None:
    with pytest.raises(FormatError):
        decode_layout("[3]\ndecks = 2\n")
    with pytest.raises(FormatError):
        decode_layout("[0]\nother = 1\n")
    with pytest.raises(FormatError):
        decode_layout("fuselage = top level\n")


def test_off_grid_block_raises_geometry_error() -> None:
    with pytest.raises(GeometryError):
        decode_layout(HEADER + "[100000]\nname = 144\nx = 481\ny = 910\n")


def test_malformed_blocks_raise_format_error() -> None:
    cases = [
        "[abc]\nname = 144\nx = 480\ny = 910\n",
        "[100000]\nx = 480\ny = 910\n",
        "[100000]\nname = 144\ny = 910\n",
        "[100000]\nname = 144\nx = wide\ny = 910\n",
        "[100000]\nlevel = top\nname = 144\nx = 480\ny = 910\n",
        "[100000]\nname = 144\nx = 480\ny = 910\n[0100000]\nname = 144\nx = 496\ny = 897\n",
    ]
    for body in cases:
        with pytest.raises(FormatError):
            decode_layout(HEADER + body)


def test_failed_load_leaves_registry_untouched() -> None:
    registry = BlockRegistry()
    kept = registry.upsert(1, 1, 0, 210)
    for text in ["nothing here", HEADER + "[100000]\nname = 144\nx = 1\ny = 0\n"]:
        with pytest.raises(ValueError):
            load_into(registry, text)
        assert list(registry) == [kept]
        assert registry.highest_id == kept.id


def test_level_defaults_to_zero() -> None:
    doc = decode_layout(HEADER + "[100000]\nname = 144\nx = 480\ny = 910\n")
    assert doc.blocks[0].level == 0


def test_remove_kind_blocks_are_dropped(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        doc = decode_layout(HEADER + "[100000]\nname = 0\nx = 480\ny = 910\n")
    assert doc.blocks == []
    assert "remove kind" in caplog.text


def test_later_block_wins_shared_cell() -> None:
    text = HEADER + (
        "[100000]\nname = 144\nx = 480\ny = 910\n"
        "[100001]\nname = 210\nx = 480\ny = 910\n"
    )
    doc = decode_layout(text)
    assert [(b.id, b.kind) for b in doc.blocks] == [(100001, 210)]


def test_extra_block_fields_are_preserved() -> None:
    text = HEADER + "[100000]\nname = 144\nx = 480\ny = 910\nrotation = 2\n"
    registry = decode(text)
    out = ini_format.decode(encode(registry))
    assert out["100000"]["rotation"] == "2"
    # file order is kept; the defaulted level goes last
    assert list(out["100000"].keys()) == ["name", "x", "y", "rotation", "level"]


def test_non_numeric_kind_kept_as_text() -> None:
    doc = decode_layout(HEADER + "[100000]\nname = custom_part\nx = 480\ny = 910\n")
    assert doc.blocks[0].kind == "custom_part"


def test_lf_and_crlf_inputs_agree() -> None:
    text = _sample_text()
    lf = decode_layout(text.replace("\r\n", "\n"))
    crlf = decode_layout(text)
    assert [(b.id, b.location, b.kind) for b in lf.blocks] == [(b.id, b.location, b.kind) for b in crlf.blocks]


def test_ids_below_floor_keep_their_value() -> None:
    registry = decode(HEADER + "[42]\nname = 144\nx = 480\ny = 910\n")
    assert registry.get(42) is not None
    assert registry.highest_id == ID_FLOOR


def test_block_next_to_id_range_section_survives_save() -> None:
    registry = decode(HEADER + "[999999998]\nname = 144\nx = 480\ny = 910\n")
    registry.upsert(1, 0, 0, 144)
    restored = decode(encode(registry))
    assert len(restored) == 2
    assert sorted(b.id for b in restored) == [999999998, 1000000000]


def test_file_field_order_survives_resave() -> None:
    text = (
        "[0]\r\nfuselage = Yanmori 2\r\n\r\n"
        "[3]\r\ndecks = 2\r\n\r\n"
        "[100000]\r\nx = 480\r\ny = 910\r\nname = 144\r\nrotation = 2\r\nlevel = 0\r\n\r\n"
        "[999999999]\r\nfirst_fucker = 100000\r\nlast_fucker = 100000\r\n"
    )
    assert encode(decode(text)) == text


def test_editor_blocks_use_default_field_order() -> None:
    registry = decode(HEADER + "[100000]\nx = 480\ny = 910\nname = 144\n")
    registry.upsert(1, 0, 0, 210)
    out = ini_format.decode(encode(registry))
    assert list(out["100000"].keys()) == ["x", "y", "name", "level"]
    assert list(out["100001"].keys()) == ["level", "name", "x", "y"]
