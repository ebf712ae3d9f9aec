#!/usr/bin/env python3
"""Run the LOW -> ORCH import check outside pytest (CI pre-step, pre-commit).

Exit codes: 0 ok, 2 violations, 3 tool error.
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path


def _load_checker(repo_root: Path):
    path = repo_root / "tests" / "test_arch_boundaries.py"
    if not path.is_file():
        raise FileNotFoundError(path)
    spec = importlib.util.spec_from_file_location("plzw_arch_boundaries", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot load {path}")
    mod = importlib.util.module_from_spec(spec)
    # dataclasses resolve annotations through sys.modules[cls.__module__]
    sys.modules[spec.name] = mod
    spec.loader.exec_module(mod)
    return mod


def main() -> int:
    repo_root = Path(__file__).resolve().parents[1]
    try:
        mod = _load_checker(repo_root)
    except Exception as e:
        print(f"[plzw] cannot load boundary check: {e}", file=sys.stderr)
        return 3

    src_dir = repo_root / "src"
    edges = list(mod._iter_import_edges(src_dir))
    try:
        mod.test_no_low_level_imports_orchestrator()
    except AssertionError as e:
        print(str(e), file=sys.stderr)
        return 2
    print(f"OK: architecture boundaries respected ({len(edges)} internal imports checked).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
