# delimswap/config.py
from __future__ import annotations

import codecs
import json
import os
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List


DEFAULT_ENCODING = "utf-8"
DEFAULT_INCLUDE = ["*.csv", "*.tsv", "*.txt"]
DEFAULT_WORKERS = min(4, os.cpu_count() or 1)
DEFAULT_FILE_OUT = Path("new.csv")
DEFAULT_DIR_SUFFIX = "_converted"

# Names people tend to type instead of fighting shell quoting
SEPARATOR_ALIASES = {
    "comma": ",",
    "semicolon": ";",
    "tab": "\t",
    "pipe": "|",
    "space": " ",
    "colon": ":",
}

_ZWJ = "\u200d"


@dataclass(frozen=True)
class ConvertOptions:
    original_sep: str
    new_sep: str
    check: bool = False
    encoding: str = DEFAULT_ENCODING


@dataclass(frozen=True)
class TreeOptions:
    include: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    workers: int = DEFAULT_WORKERS
    recursive: bool = True


def decode_separator(value: str) -> str:
    """
    Turn a separator as typed on the command line into the real string.

    Accepts:
      - aliases: comma, semicolon, tab, pipe, space, colon (case-insensitive)
      - backslash escapes: \\t, \\x1f, \\u00a6 ...
      - anything else verbatim
    """
    alias = SEPARATOR_ALIASES.get(value.strip().lower())
    if alias is not None:
        return alias

    # an unpaired trailing backslash is a literal, not the start of an escape
    body, tail = value, ""
    if (len(value) - len(value.rstrip("\\"))) % 2 == 1:
        body, tail = value[:-1], "\\"

    out = body
    if "\\" in body:
        try:
            out = body.encode("latin-1", "backslashreplace").decode("unicode_escape")
        except UnicodeDecodeError as e:
            raise ValueError(f"Invalid escape in separator {value!r}: {e}") from e
    out += tail

    if out == "":
        raise ValueError("Separator must not be empty")
    return out


def _is_extender(ch: str) -> bool:
    cp = ord(ch)
    if unicodedata.combining(ch) or unicodedata.category(ch) in ("Mn", "Mc", "Me"):
        return True
    # variation selectors + emoji skin tone modifiers
    return 0xFE00 <= cp <= 0xFE0F or 0xE0100 <= cp <= 0xE01EF or 0x1F3FB <= cp <= 0x1F3FF


def _is_regional_indicator(ch: str) -> bool:
    return 0x1F1E6 <= ord(ch) <= 0x1F1FF


def is_single_grapheme(value: str) -> bool:
    """
    True if `value` renders as one user-perceived character.

    Covers the cases that matter for separators: a base char plus combining
    marks / variation selectors, CRLF, flag pairs and ZWJ emoji sequences.
    """
    if not value:
        return False
    if value == "\r\n":
        return True
    if len(value) == 2 and all(_is_regional_indicator(c) for c in value):
        return True
    if _is_extender(value[0]) or value[0] == _ZWJ:
        return False

    i = 1
    while i < len(value):
        ch = value[i]
        if _is_extender(ch):
            i += 1
            continue
        if ch == _ZWJ and i + 1 < len(value):
            # ZWJ glues the next base char into the same cluster
            i += 2
            continue
        return False
    return True


def build_options(
    original_sep: str,
    new_sep: str,
    *,
    check: bool = False,
    encoding: str = DEFAULT_ENCODING,
) -> ConvertOptions:
    orig = decode_separator(original_sep)
    new = decode_separator(new_sep)

    if not is_single_grapheme(new):
        raise ValueError(f"New separator must be a single character, got {new!r}")
    if orig == new:
        raise ValueError(f"Original and new separator are the same: {orig!r}")

    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ValueError(f"Unknown encoding: {encoding}") from e

    return ConvertOptions(original_sep=orig, new_sep=new, check=check, encoding=encoding)


# key -> accepted python types
_CONFIG_KEYS: Dict[str, tuple] = {
    "encoding": (str,),
    "check": (bool,),
    "workers": (int,),
    "include": (list,),
    "out": (str,),
}


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load CLI defaults from JSON.

    Expected JSON:
    {
      "encoding": "latin-1",
      "check": true,
      "workers": 8,
      "include": ["*.csv", "*.dat"],
      "out": "out/converted"
    }
    """
    path = path.expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Config is not valid JSON: {path} ({e})") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config JSON must be an object: {path}")

    out: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in _CONFIG_KEYS:
            raise ValueError(f"Unknown config key '{key}' in: {path}")

        types = _CONFIG_KEYS[key]
        # bool is an int subclass; don't let `true` pass as a worker count
        if not isinstance(value, types) or (key == "workers" and isinstance(value, bool)):
            raise ValueError(f"Config key '{key}' has wrong type in: {path}")

        if key == "workers" and value < 1:
            raise ValueError(f"'workers' must be >= 1 in: {path}")
        if key == "include" and not all(isinstance(p, str) and p for p in value):
            raise ValueError(f"'include' must be a list of glob strings in: {path}")

        out[key] = value

    return out
