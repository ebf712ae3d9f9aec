from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

pytestmark = [pytest.mark.p2]


if os.environ.get("RUN_P2_SMOKE") != "1":
    pytest.skip("set RUN_P2_SMOKE=1 to enable P2 bench smoke test", allow_module_level=True)

REPO = Path(__file__).resolve().parents[1]


def _run(cmd: list[str]) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(REPO / "src"), env.get("PYTHONPATH", "")])
    return subprocess.run(cmd, cwd=str(REPO), env=env, text=True, capture_output=True)


def test_bench_runs_every_thread_count(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    inp.write_text("lorem ipsum dolor sit amet\n" * 200, encoding="utf-8")

    r = _run(
        [
            sys.executable,
            "tools/bench.py",
            str(inp),
            "--threads",
            "1,4,16",
            "--iters",
            "1",
            "--workdir",
            str(tmp_path / "work"),
            "--full-verify",
        ]
    )
    assert r.returncode == 0, f"bench failed\nstdout:\n{r.stdout}\nstderr:\n{r.stderr}"

    rows = [json.loads(line) for line in r.stdout.splitlines() if line.strip()]
    iters = [row for row in rows if "iter" in row]
    assert [row["threads"] for row in iters] == [1, 4, 16]
    assert all(row["roundtrip_ok"] for row in iters)
    assert rows[-1]["schema"] == "plzw.bench.v1"
