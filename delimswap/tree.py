# delimswap/tree.py
from __future__ import annotations

import fnmatch
import queue
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .config import ConvertOptions, TreeOptions
from .convert import FileResult, convert_file, convert_in_place
from .progress import NullProgress, ProgressReporter


@dataclass(frozen=True)
class Job:
    src: Path
    dst: Path
    size: int


@dataclass
class TreeResult:
    results: List[FileResult] = field(default_factory=list)

    @property
    def ok(self) -> List[FileResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[FileResult]:
        return [r for r in self.results if not r.ok]

    @property
    def total_bytes(self) -> int:
        return sum(r.bytes_read for r in self.results)


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def _walk(root: Path, recursive: bool) -> Iterator[Path]:
    for p in root.iterdir():
        if p.name.startswith("."):
            continue
        if p.is_dir():
            # symlinked dirs can loop back into the tree
            if recursive and not p.is_symlink():
                yield from _walk(p, recursive)
        elif p.is_file():
            yield p


def discover(root: Path, tree_opts: TreeOptions, *, exclude: Optional[Path] = None) -> List[Path]:
    root = root.expanduser()
    if not root.is_dir():
        raise ValueError(f"Input must be a directory: {root}")

    excluded = exclude.expanduser().resolve() if exclude is not None else None
    # only an output dir nested inside the input tree needs skipping
    if excluded is not None and not _is_within(excluded, root.resolve()):
        excluded = None
    found: List[Path] = []
    for p in _walk(root, tree_opts.recursive):
        if excluded is not None and _is_within(p.resolve(), excluded):
            continue
        if any(fnmatch.fnmatch(p.name, pat) for pat in tree_opts.include):
            found.append(p)
    return sorted(found)


def plan_jobs(root: Path, out_root: Optional[Path], files: List[Path]) -> List[Job]:
    """
    Map each file to the same relative path under `out_root`.
    out_root=None means in-place: dst == src.
    """
    jobs: List[Job] = []
    for src in files:
        dst = src if out_root is None else out_root / src.relative_to(root)
        jobs.append(Job(src=src, dst=dst, size=src.stat().st_size))
    return jobs


def plan_tree(root: Path, out_root: Optional[Path], tree_opts: TreeOptions) -> List[Job]:
    """Discover files under `root` and map them under `out_root` (None = in-place)."""
    root = root.expanduser()
    if out_root is not None and out_root.expanduser().resolve() == root.resolve():
        raise ValueError(f"Output directory must differ from input directory: {root}")

    files = discover(root, tree_opts, exclude=out_root)
    return plan_jobs(root, out_root, files)


def _run_one(job_id: int, job: Job, opts: ConvertOptions, reporter: ProgressReporter, keep_original: bool) -> FileResult:
    reporter.file_started(job_id, job.src.name, job.size)

    def on_progress(n: int) -> None:
        reporter.advance(job_id, n)

    try:
        if job.dst == job.src:
            result = convert_in_place(job.src, opts, keep_original=keep_original, on_progress=on_progress)
        else:
            result = convert_file(job.src, job.dst, opts, on_progress=on_progress)
    except (OSError, ValueError) as e:
        result = FileResult(src=job.src, dst=job.dst, ok=False, error=str(e))

    reporter.file_finished(job_id, result.ok)
    return result


def run_jobs(
    jobs: List[Job],
    opts: ConvertOptions,
    *,
    workers: int,
    reporter: Optional[ProgressReporter] = None,
    keep_original: bool = False,
) -> TreeResult:
    reporter = reporter or NullProgress()
    if not jobs:
        return TreeResult()

    n_workers = max(1, min(workers, len(jobs)))
    todo: "queue.Queue[Tuple[int, Job]]" = queue.Queue()
    for item in enumerate(jobs):
        todo.put(item)

    slots: List[Optional[FileResult]] = [None] * len(jobs)

    def worker() -> None:
        while True:
            try:
                job_id, job = todo.get_nowait()
            except queue.Empty:
                return
            # each slot has exactly one writer
            slots[job_id] = _run_one(job_id, job, opts, reporter, keep_original)

    reporter.start(sum(j.size for j in jobs), len(jobs))
    try:
        threads = [threading.Thread(target=worker, name=f"delimswap-{i}", daemon=True) for i in range(n_workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
    finally:
        reporter.stop()

    return TreeResult(results=[r for r in slots if r is not None])


def convert_tree(
    root: Path,
    out_root: Optional[Path],
    opts: ConvertOptions,
    tree_opts: TreeOptions,
    *,
    reporter: Optional[ProgressReporter] = None,
    keep_original: bool = False,
) -> TreeResult:
    jobs = plan_tree(root, out_root, tree_opts)
    return run_jobs(jobs, opts, workers=tree_opts.workers, reporter=reporter, keep_original=keep_original)
