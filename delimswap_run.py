# delimswap_run.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from delimswap.config import (
    DEFAULT_DIR_SUFFIX,
    DEFAULT_ENCODING,
    DEFAULT_FILE_OUT,
    DEFAULT_INCLUDE,
    DEFAULT_WORKERS,
    TreeOptions,
    build_options,
    load_config,
)
from delimswap.progress import make_reporter
from delimswap.report import write_report
from delimswap.tree import Job, TreeResult, plan_tree, run_jobs


# ----------------------------
# CLI
# ----------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="delimswap",
        description="Swap the field delimiter of CSV/TSV-style files (single file or whole directory).",
    )
    p.add_argument("original_sep", help="Current delimiter (e.g. ';', 'tab', '\\t').")
    p.add_argument("new_sep", help="New delimiter, a single character (e.g. ',', 'pipe').")
    p.add_argument("path", type=Path, help="Input file or directory.")

    p.add_argument("-c", "--check", action="store_true", default=None,
                   help="Fail a file when a line has a different delimiter count than its header.")
    p.add_argument("--out", type=Path, default=None,
                   help=f"Output file (file input, default: {DEFAULT_FILE_OUT}) or directory "
                        f"(directory input, default: <path>{DEFAULT_DIR_SUFFIX}).")
    p.add_argument("--encoding", default=None, help=f"Text encoding for read + write (default: {DEFAULT_ENCODING}).")

    p.add_argument("--workers", type=int, default=None, help=f"Parallel files for directory input (default: {DEFAULT_WORKERS}).")
    p.add_argument("--include", action="append", default=None,
                   help=f"Filename glob to convert in directory mode (repeatable, default: {' '.join(DEFAULT_INCLUDE)}).")
    p.add_argument("--no-recursive", action="store_true", help="Only convert files directly inside the directory.")

    p.add_argument("--in-place", action="store_true", help="Rewrite input file(s) instead of writing new ones.")
    p.add_argument("--keep-original", action="store_true", help="With --in-place, keep originals as <name>.bak.")

    p.add_argument("--report", type=Path, default=None, help="Write a JSON summary of the run to this path.")
    p.add_argument("--config", type=Path, default=None, help="JSON file with defaults (encoding/check/workers/include/out).")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress display.")
    p.add_argument("--dry-run", action="store_true", help="Print planned src -> dst mappings and exit.")
    return p


def _pick(cli_value: Any, cfg: Dict[str, Any], key: str, default: Any) -> Any:
    if cli_value is not None:
        return cli_value
    return cfg.get(key, default)


def _plan(args: argparse.Namespace, cfg: Dict[str, Any], tree_opts: TreeOptions) -> List[Job]:
    src: Path = args.path.expanduser()
    out_value = _pick(args.out, cfg, "out", None)

    if src.is_file():
        dst = src if args.in_place else Path(out_value) if out_value else DEFAULT_FILE_OUT
        return [Job(src=src, dst=dst, size=src.stat().st_size)]

    if args.in_place:
        out_root: Optional[Path] = None
    elif out_value:
        out_root = Path(out_value)
    else:
        # resolve first: "." and ".." have no usable name
        resolved = src.resolve()
        out_root = resolved.with_name(resolved.name + DEFAULT_DIR_SUFFIX)

    return plan_tree(src, out_root, tree_opts)


def _print_results(result: TreeResult) -> None:
    for r in result.results:
        if r.ok:
            extra = f", {r.header_delimiters} delimiters/line" if r.header_delimiters is not None else ""
            print(f"✅ Wrote: {r.dst} ({r.lines} lines{extra})")
        else:
            print(f"❌ Failed: {r.src}: {r.error}")

    if len(result.results) > 1:
        print(f"Done: {len(result.ok)} ok, {len(result.failed)} failed, {result.total_bytes} bytes read")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config) if args.config else {}
        opts = build_options(
            args.original_sep,
            args.new_sep,
            check=bool(_pick(args.check, cfg, "check", False)),
            encoding=_pick(args.encoding, cfg, "encoding", DEFAULT_ENCODING),
        )
        tree_opts = TreeOptions(
            include=_pick(args.include, cfg, "include", list(DEFAULT_INCLUDE)),
            workers=_pick(args.workers, cfg, "workers", DEFAULT_WORKERS),
            recursive=not args.no_recursive,
        )
        if tree_opts.workers < 1:
            raise ValueError("--workers must be >= 1")
        if args.keep_original and not args.in_place:
            raise ValueError("--keep-original only makes sense with --in-place")
        if not args.path.expanduser().exists():
            raise FileNotFoundError(f"Input not found: {args.path}")

        jobs = _plan(args, cfg, tree_opts)
    except (ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if not jobs:
        print(f"Nothing to convert in {args.path} (include: {' '.join(tree_opts.include)})")
        return 0

    if args.dry_run:
        for job in jobs:
            print(f"{job.src} -> {job.dst}")
        return 0

    reporter = make_reporter(enabled=not args.no_progress)
    result = run_jobs(
        jobs,
        opts,
        workers=tree_opts.workers,
        reporter=reporter,
        keep_original=args.keep_original,
    )
    _print_results(result)

    if args.report:
        report_path = write_report(args.report, result.results)
        print(f"🧾 Report: {report_path}")

    return 1 if result.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
