"""INI-style text codec with arrays, dotted sub-sections and escaping."""
from __future__ import annotations

import json
import logging
import re
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

Scalar = Union[str, bool, None, int, float]
Value = Union[Scalar, List[Scalar], "Section"]
Section = Dict[str, Value]

EOL = "\r\n"

_LINE_SPLIT = re.compile(r"[\r\n]+")
_COMMENT = re.compile(r"^\s*;")
# section         |key = value
_LINE = re.compile(r"^\[([^\]]*)\]$|^([^=]+)(=(.*))?$")
_UNESCAPED_DOT = re.compile(r"(?<!\\)\.")
_LITERALS = {"true": True, "false": False, "null": None}


def _json_literal(value: object) -> str:
    # Mirror JSON.stringify: integral floats have no trailing ".0".
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return json.dumps(value, ensure_ascii=False)


def safe(value: object) -> str:
    """Render a key or scalar so that `unsafe` reads it back unchanged."""
    if (
        not isinstance(value, str)
        or "\r" in value
        or "\n" in value
        or value.startswith("[")
        or (len(value) > 1 and value[0] == '"' and value[-1] == '"')
        or value != value.strip()
    ):
        return _json_literal(value)
    return value.replace(";", "\\;")


def unsafe(value: Optional[str]) -> str:
    """Strip quoting, escapes and trailing comments from a raw value."""
    value = (value or "").strip()

    if len(value) > 0 and value[0] == '"' and value[-1] == '"':
        try:
            parsed = json.loads(value)
        except ValueError:
            return value
        return parsed if isinstance(parsed, str) else value

    out: List[str] = []
    escaped = False
    for char in value:
        if escaped:
            out.append(char if char in ("\\", ";") else "\\" + char)
            escaped = False
        elif char == ";":
            break
        elif char == "\\":
            escaped = True
        else:
            out.append(char)
    if escaped:
        out.append("\\")
    return "".join(out)


def dot_split(key: str) -> List[str]:
    """Split on unescaped dots; `\\.` stays a literal dot inside a segment."""
    return [part.replace("\\.", ".") for part in _UNESCAPED_DOT.split(key)]


def _escape_dots(key: str) -> str:
    return key.replace(".", "\\.")


def _coerce(raw: str) -> Scalar:
    return _LITERALS[raw] if raw in _LITERALS else raw


def _is_empty(value: Optional[Value]) -> bool:
    return value is None or value is False or value == ""


def decode(text: str) -> Section:
    """Parse INI text into nested dicts.

    Lines that are neither a section header nor a key line are skipped, the
    same way the game's own loader tolerates them.
    """
    out: Section = {}
    current: Section = out

    for lineno, line in enumerate(_LINE_SPLIT.split(text), start=1):
        if not line.strip() or _COMMENT.match(line):
            continue
        match = _LINE.match(line)
        if not match:
            logger.debug("skipping unparsable line %d: %r", lineno, line)
            continue

        if match.group(1) is not None:
            name = unsafe(match.group(1))
            existing = out.get(name)
            if not isinstance(existing, dict):
                existing = out[name] = {}
            current = existing
            continue

        key = unsafe(match.group(2))
        value: Scalar = _coerce(unsafe(match.group(4))) if match.group(3) else True

        if len(key) > 2 and key.endswith("[]"):
            key = key[:-2]
            # an empty earlier value (missing, false, null, "") starts a fresh list
            if _is_empty(current.get(key)):
                current[key] = []
            elif not isinstance(current[key], list):
                current[key] = [current[key]]

        # keep appending even when a later line forgot the brackets
        slot = current.get(key)
        if isinstance(slot, list):
            slot.append(value)
        else:
            current[key] = value

    _flatten_dotted_sections(out)
    return out


def _walk_sections(root: Section, parts: List[str]) -> Optional[Section]:
    parent = root
    for part in parts:
        child = parent.get(part)
        if child is None:
            child = parent[part] = {}
        elif not isinstance(child, dict):
            return None
        parent = child
    return parent


def _flatten_dotted_sections(out: Section) -> None:
    # {"a": {"y": 1}, "a.b": {"x": 2}} -> {"a": {"y": 1, "b": {"x": 2}}}
    for key in list(out.keys()):
        value = out[key]
        if not isinstance(value, dict):
            continue
        parts = dot_split(key)
        leaf = parts.pop()
        if not parts and leaf == key:
            continue

        parent = _walk_sections(out, parts)
        if parent is None:
            logger.debug("leaving %r unflattened: parent is not a section", key)
            continue
        target = parent.get(leaf)
        if leaf not in parent:
            parent[leaf] = value
        elif isinstance(target, dict) and target is not value:
            target.update(value)
        else:
            logger.debug("leaving %r unflattened: %r is not a section", key, leaf)
            continue
        del out[key]


def encode(obj: Section, section: Optional[str] = None) -> str:
    """Serialize nested dicts; sub-dicts become dotted `[a.b]` sections."""
    children: List[str] = []
    out = ""

    for key, value in obj.items():
        if isinstance(value, list):
            for item in value:
                out += safe(key + "[]") + " = " + safe(item) + EOL
        elif isinstance(value, dict):
            children.append(key)
        else:
            out += safe(key) + " = " + safe(value) + EOL

    if section and out:
        out = "[" + safe(section) + "]" + EOL + out

    for key in children:
        path = (section + "." if section else "") + _escape_dots(key)
        child = encode(obj[key], path)
        if out and child:
            out += EOL
        out += child

    return out
