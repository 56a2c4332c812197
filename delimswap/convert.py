# delimswap/convert.py
from __future__ import annotations

import codecs
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, TextIO, Tuple

from .config import ConvertOptions


ProgressFn = Callable[[int], None]


class DelimiterCountError(ValueError):
    """A line has a different number of delimiters than the header line."""

    def __init__(self, expected: int, found: int, line_number: int, path: Optional[Path] = None):
        self.expected = expected
        self.found = found
        self.line_number = line_number
        self.path = path
        msg = f"{expected} delimiters at header, while {found} at line {line_number}."
        if path is not None:
            msg = f"{path}: {msg}"
        super().__init__(msg)


@dataclass(frozen=True)
class LineOutcome:
    delimiters: Optional[int]
    bytes_read: int


@dataclass
class FileResult:
    src: Optional[Path]
    dst: Optional[Path]
    lines: int = 0
    bytes_read: int = 0
    header_delimiters: Optional[int] = None
    ok: bool = True
    error: Optional[str] = None


def count_delimiters(line: str, sep: str) -> int:
    # str.count and str.replace agree on non-overlapping matches
    return line.count(sep)


def convert_line(line: str, opts: ConvertOptions) -> Tuple[str, Optional[int]]:
    n = count_delimiters(line, opts.original_sep) if opts.check else None
    return line.replace(opts.original_sep, opts.new_sep), n


def _process_line(line: str, writer: TextIO, opts: ConvertOptions, encoder: codecs.IncrementalEncoder) -> LineOutcome:
    out, n = convert_line(line, opts)
    writer.write(out)
    # incremental so a BOM is only counted once, like it sits in the file
    return LineOutcome(delimiters=n, bytes_read=len(encoder.encode(line)))


def convert_stream(
    reader: Iterable[str],
    writer: TextIO,
    opts: ConvertOptions,
    *,
    on_progress: Optional[ProgressFn] = None,
    path: Optional[Path] = None,
) -> FileResult:
    """
    Stream `reader` line by line into `writer`, swapping delimiters.

    `reader` must keep line terminators (open files with newline="").
    With opts.check the first line sets the expected delimiter count and the
    first line that disagrees raises DelimiterCountError.
    """
    result = FileResult(src=path, dst=None)
    expected: Optional[int] = None
    encoder = codecs.getincrementalencoder(opts.encoding)(errors="replace")

    for line_number, line in enumerate(reader, start=1):
        outcome = _process_line(line, writer, opts, encoder)
        result.lines = line_number
        result.bytes_read += outcome.bytes_read
        if on_progress is not None:
            on_progress(outcome.bytes_read)

        if outcome.delimiters is None:
            continue
        if expected is None:
            expected = outcome.delimiters
            result.header_delimiters = expected
        elif outcome.delimiters != expected:
            raise DelimiterCountError(expected, outcome.delimiters, line_number, path)

    return result


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def convert_file(
    src: Path,
    dst: Path,
    opts: ConvertOptions,
    *,
    on_progress: Optional[ProgressFn] = None,
) -> FileResult:
    src = src.expanduser()
    dst = dst.expanduser()
    if not src.exists():
        raise FileNotFoundError(f"Input not found: {src}")
    if not src.is_file():
        raise ValueError(f"Input must be a file: {src}")
    if src.resolve() == dst.resolve():
        raise ValueError(f"Output would overwrite input: {src} (use in-place mode)")

    dst.parent.mkdir(parents=True, exist_ok=True)
    with src.open("r", encoding=opts.encoding, newline="") as f_in:
        f_out = dst.open("w", encoding=opts.encoding, newline="")
        # from here on dst is ours to clean up
        try:
            with f_out:
                result = convert_stream(f_in, f_out, opts, on_progress=on_progress, path=src)
        except (DelimiterCountError, OSError, UnicodeError):
            # never leave a half-converted file that looks finished
            _discard(dst)
            raise

    result.dst = dst
    return result


def convert_in_place(
    path: Path,
    opts: ConvertOptions,
    *,
    keep_original: bool = False,
    on_progress: Optional[ProgressFn] = None,
) -> FileResult:
    """
    Rewrite `path` itself. Conversion goes to a hidden sibling temp file which
    replaces the original only after the whole file converted cleanly.
    """
    path = path.expanduser()
    tmp = path.with_name(f".{path.name}.delimswap.tmp")
    result = convert_file(path, tmp, opts, on_progress=on_progress)

    shutil.copymode(path, tmp)
    if keep_original:
        path.replace(path.with_name(path.name + ".bak"))
    tmp.replace(path)

    result.dst = path
    return result
