"""Pack report for `plzw compress` (pack_report.json + pack_report.txt).

Determinism note:
The report sits next to the artifacts and is covered by
`tests/test_p1_determinism.py`. The serialized report MUST be deterministic
across runs given the same input content and settings.

Concretely, we DO NOT embed:
- timestamps / elapsed times
- absolute paths
Timing belongs to the CLI output, not to the report.

The report is also read back by decompress/verify: it tells which chunks are
legitimately empty, the byte order of the artifacts and the expected decoded
length per chunk. It carries no checksums.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from plzw.core.artifact import BYTEORDERS
from plzw.errors import CorruptStream, UnsupportedVersion

SCHEMA_V1 = "plzw.pack_report.v1"
REPORT_JSON = "pack_report.json"
REPORT_TXT = "pack_report.txt"


@dataclass(frozen=True)
class ChunkStat:
    index: int
    artifact: str
    bytes_in: int
    codes: int
    bytes_out: int

    @property
    def empty(self) -> bool:
        return self.codes == 0


@dataclass(frozen=True)
class PackReport:
    chunks: int
    workers: int
    byteorder: str
    total_in: int
    total_out: int
    chunk_stats: tuple[ChunkStat, ...]

    def stat(self, index: int) -> ChunkStat | None:
        for st in self.chunk_stats:
            if st.index == index:
                return st
        return None

    @property
    def ratio(self) -> float:
        return (self.total_out / self.total_in) if self.total_in else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema": SCHEMA_V1,
            "chunks": int(self.chunks),
            "workers": int(self.workers),
            "byteorder": str(self.byteorder),
            "total_in": int(self.total_in),
            "total_out": int(self.total_out),
            "ratio": float(self.ratio),
            "chunk_stats": [
                {
                    "index": st.index,
                    "artifact": st.artifact,
                    "bytes_in": st.bytes_in,
                    "codes": st.codes,
                    "bytes_out": st.bytes_out,
                }
                for st in self.chunk_stats
            ],
        }


def build_pack_report(
    stats: Sequence[ChunkStat], *, workers: int, byteorder: str
) -> PackReport:
    ordered = tuple(sorted(stats, key=lambda s: s.index))
    return PackReport(
        chunks=len(ordered),
        workers=int(workers),
        byteorder=str(byteorder),
        total_in=sum(s.bytes_in for s in ordered),
        total_out=sum(s.bytes_out for s in ordered),
        chunk_stats=ordered,
    )


def _bytes_h(n: int) -> str:
    if n < 0:
        return str(n)
    units = ["B", "KiB", "MiB", "GiB"]
    f = float(n)
    u = 0
    while f >= 1024.0 and u < len(units) - 1:
        f /= 1024.0
        u += 1
    return f"{int(f)} {units[u]}" if u == 0 else f"{f:.2f} {units[u]}"


def render_pack_report_text(rep: PackReport) -> str:
    # Deterministic text: no timestamps, no paths.
    lines: list[str] = []
    lines.append("plzw pack - mini-report\n")
    lines.append(f"chunks={rep.chunks} workers={rep.workers} byteorder={rep.byteorder}\n")
    lines.append(
        f"total_in={_bytes_h(rep.total_in)} total_out={_bytes_h(rep.total_out)} ratio={rep.ratio:.3f}\n\n"
    )
    for st in rep.chunk_stats:
        tag = " (empty)" if st.empty else ""
        lines.append(
            f"  chunk[{st.index:02d}] {st.artifact:24s} in={_bytes_h(st.bytes_in)} codes={st.codes} out={_bytes_h(st.bytes_out)}{tag}\n"
        )
    return "".join(lines)


def write_pack_report(output_dir: Path, rep: PackReport) -> Path:
    out = Path(output_dir)
    p_json = out / REPORT_JSON
    p_json.write_text(
        json.dumps(rep.to_dict(), ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    (out / REPORT_TXT).write_text(render_pack_report_text(rep), encoding="utf-8")
    return p_json


def _as_int(v: Any, *, where: str) -> int:
    if isinstance(v, bool):
        raise CorruptStream(where)
    try:
        return int(v)
    except Exception as err:
        raise CorruptStream(where) from err


def load_pack_report(input_dir: Path) -> PackReport | None:
    """Load pack_report.json if present. Missing report -> None (artifact-only mode)."""
    p = Path(input_dir) / REPORT_JSON
    if not p.is_file():
        return None
    try:
        obj = json.loads(p.read_text(encoding="utf-8"))
    except Exception as e:
        raise CorruptStream(f"{REPORT_JSON}: JSON non valido: {e}") from e
    if not isinstance(obj, dict):
        raise CorruptStream(f"{REPORT_JSON}: deve essere un oggetto")
    if obj.get("schema") != SCHEMA_V1:
        raise UnsupportedVersion(
            f"{REPORT_JSON}: schema non supportato: {obj.get('schema')!r} (atteso {SCHEMA_V1!r})"
        )

    byteorder = str(obj.get("byteorder") or "")
    if byteorder not in BYTEORDERS:
        raise CorruptStream(f"{REPORT_JSON}: byteorder non valido: {byteorder!r}")

    rows = obj.get("chunk_stats")
    if not isinstance(rows, list):
        raise CorruptStream(f"{REPORT_JSON}: 'chunk_stats' mancante")
    stats: list[ChunkStat] = []
    for r in rows:
        if not isinstance(r, dict):
            raise CorruptStream(f"{REPORT_JSON}: riga chunk non valida")
        stats.append(
            ChunkStat(
                index=_as_int(r.get("index"), where=f"{REPORT_JSON}: index"),
                artifact=str(r.get("artifact") or ""),
                bytes_in=_as_int(r.get("bytes_in"), where=f"{REPORT_JSON}: bytes_in"),
                codes=_as_int(r.get("codes"), where=f"{REPORT_JSON}: codes"),
                bytes_out=_as_int(r.get("bytes_out"), where=f"{REPORT_JSON}: bytes_out"),
            )
        )

    rep = build_pack_report(
        stats,
        workers=_as_int(obj.get("workers", 1), where=f"{REPORT_JSON}: workers"),
        byteorder=byteorder,
    )
    if rep.chunks != _as_int(obj.get("chunks"), where=f"{REPORT_JSON}: chunks"):
        raise CorruptStream(f"{REPORT_JSON}: 'chunks' non coerente con chunk_stats")
    # one row per chunk, indexes 0..chunks-1, no duplicates
    if [st.index for st in rep.chunk_stats] != list(range(rep.chunks)):
        raise CorruptStream(f"{REPORT_JSON}: indici chunk_stats non validi (attesi 0..{rep.chunks - 1})")
    return rep
