"""
Shared fixtures for delimswap tests.
"""

from pathlib import Path

import pytest

from delimswap.config import ConvertOptions


@pytest.fixture
def semi_to_comma() -> ConvertOptions:
    return ConvertOptions(original_sep=";", new_sep=",")


@pytest.fixture
def semi_to_comma_checked() -> ConvertOptions:
    return ConvertOptions(original_sep=";", new_sep=",", check=True)


def write_bytes(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return path


@pytest.fixture
def csv_tree(tmp_path: Path) -> Path:
    """A small input tree: two matching files, one nested, one ignored."""
    root = tmp_path / "data"
    write_bytes(root / "a.csv", "x;y\n1;2\n")
    write_bytes(root / "sub" / "b.csv", "p;q;r\n1;2;3\n4;5;6\n")
    write_bytes(root / "notes.md", "not;a;table\n")
    write_bytes(root / ".hidden" / "c.csv", "h;i\n")
    return root
