"""plzw CLI.

This is the stable CLI entrypoint (console-script: ``plzw``).

UX policy:
  - results (OK, timing, sizes, per-chunk summary) go to stdout
  - diagnostics go to stderr, prefixed with ``[plzw]``
  - exit codes come from plzw.errors (docs/exit_codes.md)
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from plzw.core.artifact import BYTEORDERS
from plzw.errors import ChunkFailures, PLZWError
from plzw.run_spec import RunSpecV1, load_run_spec


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_run_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Worker threads: 1, 2, 4, 8 or 16 (default: config or 1)",
    )
    p.add_argument(
        "--byteorder",
        choices=sorted(BYTEORDERS),
        default=None,
        help="Artifact byte order (default: config, pack report, or native)",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Run config JSON (plzw.run.v1). Use '@file.json' or inline JSON.",
    )


def _size_kb(p: Path) -> int:
    if p.is_dir():
        return sum(q.stat().st_size for q in p.rglob("*") if q.is_file()) // 1024
    return p.stat().st_size // 1024


def _resolve_run(config: str | None, threads: int | None, byteorder: str | None) -> RunSpecV1:
    base = load_run_spec(config) if config else RunSpecV1()
    return base.resolve(workers=threads, byteorder=byteorder)


def _cmd_compress(input_path: Path, output_dir: Path, run: RunSpecV1) -> int:
    from plzw.archive import packfile

    t0 = time.perf_counter()
    rep = packfile(
        input_path, output_dir, workers=run.workers, byteorder=run.compress_byteorder()
    )
    dt = time.perf_counter() - t0

    print(f"Compression complete. Compressed files are saved in directory: {output_dir}")
    print(f"time: {dt:.6f}")
    print(f"input file size: {_size_kb(input_path)}KB")
    print(f"output file size: {_size_kb(output_dir)}KB")
    print(f"chunks: {rep.chunks} threads: {rep.workers} ratio: {rep.ratio:.3f}")
    return 0


def _cmd_decompress(input_dir: Path, output_path: Path, run: RunSpecV1) -> int:
    from plzw.archive import STATUS_EMPTY, unpackdir

    t0 = time.perf_counter()
    res = unpackdir(input_dir, output_path, workers=run.workers, byteorder=run.byteorder)
    dt = time.perf_counter() - t0

    print(f"Decompression complete. Decompressed data is saved in: {output_path}")
    print(f"time: {dt:.6f}")
    print(f"input compressed file size: {_size_kb(input_dir)}KB")
    print(f"output file size: {_size_kb(output_path)}KB")
    empty = [oc.index for oc in res.outcomes if res.status(oc.index) == STATUS_EMPTY]
    if empty:
        print(f"empty chunks: {', '.join(map(str, empty))}")
    return 0


def _cmd_verify(input_dir: Path, *, full: bool, threads: int | None) -> int:
    from plzw.verify import verify_packed_dir

    verify_packed_dir(input_dir, full=full, workers=1 if threads is None else threads)
    print("OK")
    return 0


def _cmd_config_validate(spec_arg: str) -> int:
    # load is the validation
    load_run_spec(spec_arg)
    print("OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="plzw", description="Parallel chunked LZW compressor")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_c = sub.add_parser("compress", help="Compress a file into 16 chunk artifacts")
    p_c.add_argument("input", type=Path)
    p_c.add_argument("output_dir", type=Path)
    _add_run_args(p_c)
    _add_common_args(p_c)

    p_d = sub.add_parser("decompress", help="Restore a file from a directory of artifacts")
    p_d.add_argument("input_dir", type=Path)
    p_d.add_argument("output", type=Path)
    _add_run_args(p_d)
    _add_common_args(p_d)

    p_v = sub.add_parser("verify", help="Verify a compressed output directory")
    p_v.add_argument("input_dir", type=Path)
    p_v.add_argument("--full", action="store_true", help="Decode every chunk")
    p_v.add_argument("--threads", type=int, default=None, help="Worker threads for --full")
    _add_common_args(p_v)

    p_cv = sub.add_parser("config-validate", help="Validate a run config (plzw.run.v1)")
    p_cv.add_argument("config", help="Run config JSON (@file.json or inline JSON)")
    _add_common_args(p_cv)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "compress":
            run = _resolve_run(ns.config, ns.threads, ns.byteorder)
            return _cmd_compress(ns.input, ns.output_dir, run)
        if ns.cmd == "decompress":
            run = _resolve_run(ns.config, ns.threads, ns.byteorder)
            return _cmd_decompress(ns.input_dir, ns.output, run)
        if ns.cmd == "verify":
            return _cmd_verify(ns.input_dir, full=bool(ns.full), threads=ns.threads)
        if ns.cmd == "config-validate":
            return _cmd_config_validate(str(ns.config))
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except ChunkFailures as e:
        if getattr(ns, "debug", False):
            raise
        for line in e.summary:
            print(line)
        for f in e.failures:
            print(f"[plzw] {f}", file=sys.stderr)
        print(f"[plzw] {len(e.failures)} chunk(s) failed", file=sys.stderr)
        return int(e.exit_code)
    except PLZWError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[plzw] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", 10) or 10)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[plzw] error: {e}", file=sys.stderr)
        return 10


if __name__ == "__main__":
    raise SystemExit(main())
