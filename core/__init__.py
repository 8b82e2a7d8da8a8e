"""Core of the fuselage designer (text codec, block registry, layout files)."""

from .blocks import (  # noqa: F401
    Block,
    BlockRegistry,
    BLOCK_NAMES,
    LEVEL_NAMES,
    DEFAULT_KIND,
    REMOVE_KIND,
    ID_FLOOR,
)
from .layout import (  # noqa: F401
    FormatError,
    LayoutDocument,
    decode_layout,
    encode_layout,
    load_into,
)
from .session import EditorSession, StageObserver  # noqa: F401
from .config import (  # noqa: F401
    DesignerSettings,
    PaletteEntry,
    load_settings,
    save_settings,
    load_json,
    save_json,
)
from .persistence import (  # noqa: F401
    load_layout_file,
    save_layout_file,
    coerce_layout_path,
    DEFAULT_LAYOUT_NAME,
)
