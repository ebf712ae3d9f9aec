#!/usr/bin/env python3
"""Keep docs/exit_codes.md in sync with plzw.errors.EXIT_CODES.

  python scripts/gen_exit_codes_md.py           # rewrite the doc
  python scripts/gen_exit_codes_md.py --check   # exit 1 if the doc is stale
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO = Path(__file__).resolve().parents[1]
DOC = REPO / "docs" / "exit_codes.md"


def _render() -> str:
    sys.path.insert(0, str(REPO / "src"))
    from plzw.errors import render_exit_codes_markdown  # noqa: E402

    return render_exit_codes_markdown()


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Render the plzw exit code table")
    ap.add_argument("--check", action="store_true", help="Compare only, do not write")
    ns = ap.parse_args(argv)

    want = _render()
    have = DOC.read_text(encoding="utf-8") if DOC.is_file() else None

    if ns.check:
        if have != want:
            print(f"[plzw] {DOC.relative_to(REPO)} is stale; rerun without --check", file=sys.stderr)
            return 1
        print(f"[plzw] {DOC.relative_to(REPO)} up to date")
        return 0

    if have == want:
        print(f"[plzw] {DOC.relative_to(REPO)} unchanged")
        return 0
    DOC.parent.mkdir(parents=True, exist_ok=True)
    DOC.write_text(want, encoding="utf-8")
    print(f"[plzw] wrote {DOC.relative_to(REPO)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
