"""Verification of a compressed output directory.

Policy: light by default, --full decodes every chunk.

Light:
  - pack_report.json present and readable (schema v1, 16 chunks)
  - every artifact present, size == report bytes_out, size % 4 == 0
Full:
  - light checks
  - decode every chunk (same dispatcher as decompress) and compare lengths

No checksums are involved: the format has none.
"""

from __future__ import annotations

from pathlib import Path

from plzw.archive import restore_dir
from plzw.core.artifact import CODE_SIZE, artifact_name
from plzw.core.chunking import N_CHUNKS
from plzw.engine.dispatch import validate_workers
from plzw.errors import (
    ArtifactIOError,
    ChunkFailure,
    ChunkFailures,
    CorruptStream,
    EmptyArtifact,
    MissingArtifact,
    TruncatedArtifact,
)
from plzw.pack_report import REPORT_JSON, PackReport, load_pack_report


def _check_light(input_dir: Path, rep: PackReport) -> list[ChunkFailure]:
    fails: list[ChunkFailure] = []
    for i in range(N_CHUNKS):
        name = artifact_name(i)
        st = rep.stat(i)
        p = input_dir / name
        try:
            if st is None:
                raise CorruptStream(f"{REPORT_JSON}: chunk {i} mancante")
            if st.artifact != name:
                raise CorruptStream(f"{REPORT_JSON}: chunk {i} punta a {st.artifact!r}")
            if not p.is_file():
                raise MissingArtifact(f"artifact not found: {name}")
            size = p.stat().st_size
            if size % CODE_SIZE:
                raise TruncatedArtifact(f"{name}: length {size} is not a multiple of {CODE_SIZE}")
            if size == 0 and not st.empty:
                raise EmptyArtifact(f"artifact vuoto: {name}")
            if size != st.bytes_out:
                raise CorruptStream(f"{name}: size {size}, report says {st.bytes_out}")
        except (CorruptStream, ArtifactIOError, OSError) as e:
            fails.append(ChunkFailure.from_exc(i, e))
    return fails


def verify_packed_dir(input_dir: Path, *, full: bool = False, workers: int = 1) -> PackReport:
    """Verify a directory produced by `plzw compress`. Returns the loaded report."""
    w = validate_workers(workers)
    src = Path(input_dir)
    if not src.is_dir():
        raise ArtifactIOError(f"input dir not found: {src}")

    rep = load_pack_report(src)
    if rep is None:
        raise MissingArtifact(f"{REPORT_JSON} not found in {src}")
    if rep.chunks != N_CHUNKS:
        raise CorruptStream(f"{REPORT_JSON}: attesi {N_CHUNKS} chunk, trovati {rep.chunks}")

    fails = _check_light(src, rep)
    if fails:
        raise ChunkFailures(fails)

    if full:
        res = restore_dir(src, workers=w)
        if not res.ok:
            raise ChunkFailures(res.failures)
        if sum(len(oc.value or b"") for oc in res.outcomes) != rep.total_in:
            raise CorruptStream(f"decoded total differs from {REPORT_JSON} total_in={rep.total_in}")

    return rep
