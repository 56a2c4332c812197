"""
delimswap: rewrite the field delimiter of delimiter-separated text files.

Streams line by line, optionally checks every line has as many delimiters
as the header, and fans directory trees out over worker threads.
"""
from __future__ import annotations

from .config import ConvertOptions, TreeOptions, build_options, decode_separator, load_config
from .convert import (
    DelimiterCountError,
    FileResult,
    convert_file,
    convert_in_place,
    convert_line,
    convert_stream,
    count_delimiters,
)
from .tree import Job, TreeResult, convert_tree, discover, plan_jobs, plan_tree, run_jobs

__all__ = [
    "ConvertOptions",
    "TreeOptions",
    "build_options",
    "decode_separator",
    "load_config",
    "DelimiterCountError",
    "FileResult",
    "convert_file",
    "convert_in_place",
    "convert_line",
    "convert_stream",
    "count_delimiters",
    "Job",
    "TreeResult",
    "convert_tree",
    "discover",
    "plan_jobs",
    "plan_tree",
    "run_jobs",
]
