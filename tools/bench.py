#!/usr/bin/env python3
"""Compress/decompress benchmark across thread counts.

Runs compress -> verify -> decompress -> compare, collecting timing and peak RSS.

Usage example:
  python tools/bench.py /path/in.txt --threads 1,4,16 --iters 3

Notes:
- Uses internal APIs (no subprocess). Run inside repo venv.
- By default uses temp output/restore locations.
- CPython threads share the GIL: expect modest speedups, the point is to
  check that every thread count round-trips and to compare wall time.
"""

from __future__ import annotations

import argparse
import json
import resource
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any


def _peak_rss_kb() -> int:
    # Linux: ru_maxrss is KB
    return int(resource.getrusage(resource.RUSAGE_SELF).ru_maxrss)


def _parse_threads(s: str) -> list[int]:
    out: list[int] = []
    for part in s.split(","):
        part = part.strip()
        if part:
            out.append(int(part))
    if not out:
        raise argparse.ArgumentTypeError("--threads: lista vuota")
    return out


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="bench.py", description="plzw benchmark")
    ap.add_argument("input", type=Path)
    ap.add_argument("--threads", type=_parse_threads, default=[1, 2, 4, 8, 16])
    ap.add_argument("--byteorder", default="native")
    ap.add_argument("--iters", type=int, default=3)
    ap.add_argument(
        "--workdir", type=Path, default=None, help="Optional work dir (wiped each iter)"
    )
    ap.add_argument("--full-verify", action="store_true", help="Run verify --full")
    ns = ap.parse_args(argv)

    from plzw.archive import packfile, unpackdir
    from plzw.engine.dispatch import validate_workers
    from plzw.verify import verify_packed_dir

    inp = ns.input.resolve()
    if not inp.is_file():
        raise SystemExit(f"input non valido: {inp}")
    for w in ns.threads:
        validate_workers(w)

    original = inp.read_bytes()
    work = (ns.workdir or Path(tempfile.mkdtemp(prefix="plzw_bench_"))).resolve()
    out = work / "out"
    rst = work / "restore.bin"

    rows: list[dict[str, Any]] = []
    t0_all = time.perf_counter()

    for threads in ns.threads:
        for i in range(int(ns.iters)):
            if out.exists():
                shutil.rmtree(out)
            rst.unlink(missing_ok=True)

            rss0 = _peak_rss_kb()
            t0 = time.perf_counter()
            rep = packfile(inp, out, workers=threads, byteorder=ns.byteorder)
            t_pack = time.perf_counter() - t0

            t1 = time.perf_counter()
            verify_packed_dir(out, full=bool(ns.full_verify), workers=threads)
            t_verify = time.perf_counter() - t1

            t2 = time.perf_counter()
            unpackdir(out, rst, workers=threads)
            t_unpack = time.perf_counter() - t2
            rss1 = _peak_rss_kb()

            same = rst.read_bytes() == original
            row = {
                "iter": i + 1,
                "threads": int(threads),
                "total_in": rep.total_in,
                "total_out": rep.total_out,
                "ratio": rep.ratio,
                "times_sec": {
                    "compress": t_pack,
                    "verify": t_verify,
                    "decompress": t_unpack,
                    "total": t_pack + t_verify + t_unpack,
                },
                "peak_rss_kb": {"before": rss0, "after": rss1},
                "roundtrip_ok": bool(same),
            }
            rows.append(row)
            print(json.dumps(row, ensure_ascii=False))
            if not same:
                raise SystemExit("diff mismatch: roundtrip non lossless")

    total = time.perf_counter() - t0_all
    by_threads: dict[str, float] = {}
    for w in ns.threads:
        rr = [r["times_sec"]["total"] for r in rows if r["threads"] == w]
        by_threads[str(w)] = (sum(rr) / len(rr)) if rr else 0.0
    summary = {
        "schema": "plzw.bench.v1",
        "iters": int(ns.iters),
        "avg_total_sec_by_threads": by_threads,
        "wall_total_sec": total,
        "max_peak_rss_kb": max((r["peak_rss_kb"]["after"] for r in rows), default=0),
    }
    print(json.dumps(summary, ensure_ascii=False))
    if ns.workdir is None:
        shutil.rmtree(work, ignore_errors=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
