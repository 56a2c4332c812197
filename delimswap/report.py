# delimswap/report.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .convert import FileResult


def _path_str(p: Optional[Path]) -> Optional[str]:
    return str(p) if p is not None else None


def summarize(results: Iterable[FileResult]) -> Dict[str, Any]:
    rows: List[Dict[str, Any]] = []
    for r in results:
        rows.append(
            {
                "src": _path_str(r.src),
                "dst": _path_str(r.dst),
                "lines": r.lines,
                "bytes": r.bytes_read,
                "header_delimiters": r.header_delimiters,
                "ok": r.ok,
                "error": r.error,
            }
        )

    return {
        "files": len(rows),
        "ok": sum(1 for r in rows if r["ok"]),
        "failed": sum(1 for r in rows if not r["ok"]),
        "lines": sum(r["lines"] for r in rows),
        "bytes": sum(r["bytes"] for r in rows),
        "results": rows,
    }


def write_report(path: Path, results: Iterable[FileResult]) -> Path:
    path = path.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = summarize(results)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
