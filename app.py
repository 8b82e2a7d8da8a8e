"""Entry point: open the fuselage designer, or check a layout file headlessly."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from core import BlockRegistry, LEVEL_NAMES, load_layout_file

logger = logging.getLogger("fuselage_designer")


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit fuselage block layouts (.fus files).")
    parser.add_argument("layout", nargs="?", type=Path, help="layout file to open")
    parser.add_argument("--settings", type=Path, default=None, help="designer settings JSON")
    parser.add_argument("--check", action="store_true", help="validate the layout and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    return parser.parse_args(argv)


def check_layout(path: Path) -> int:
    try:
        doc = load_layout_file(path)
        registry = BlockRegistry(doc.blocks)
    except (OSError, ValueError) as exc:
        logger.error("%s: %s", path, exc)
        return 1
    print(f"{path.name}: fuselage {doc.fuselage!r}, {doc.decks} decks, {len(registry)} blocks")
    for level, name in LEVEL_NAMES.items():
        print(f"  {name}: {registry.count(level)} blocks")
    id_range = registry.id_range()
    if id_range is not None:
        print(f"  ids {id_range[0]}..{id_range[1]}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.check:
        if args.layout is None:
            logger.error("--check needs a layout file")
            return 2
        return check_layout(args.layout)

    from apps.designer import main as designer_main

    designer_main(settings_path=args.settings, layout_path=args.layout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
