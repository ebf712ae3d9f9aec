"""Compress/decompress orchestration.

Compress:
  input file -> split_chunks (16) -> run_chunks (W threads) -> encode_codes
  -> one artifact per chunk -> pack_report.json

Decompress:
  dir of 16 artifacts (+ optional pack_report.json) -> run_chunks -> read_artifact
  + decode_codes -> index-ordered slots -> concatenation

Settings are validated before any chunk work. Per-chunk I/O and corruption
errors are collected after the join and raised as ChunkFailures.

Behaviour change vs the historical tool: a missing or zero-length artifact is a
failure of that chunk, not an empty slot. A zero-length artifact is accepted
only when the pack report says the chunk had zero codes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from plzw.core.artifact import (
    BYTEORDER_DEFAULT,
    artifact_name,
    read_artifact,
    validate_byteorder,
    write_artifact,
)
from plzw.core.chunking import N_CHUNKS, split_chunks
from plzw.core.lzw import decode_codes, encode_codes
from plzw.engine.dispatch import (
    ChunkOutcome,
    failures_of,
    run_chunks,
    validate_workers,
    values_or_raise,
)
from plzw.errors import (
    ArtifactIOError,
    ChunkFailure,
    ChunkFailures,
    CorruptStream,
    EmptyArtifact,
    UsageError,
)
from plzw.pack_report import (
    REPORT_JSON,
    REPORT_TXT,
    ChunkStat,
    PackReport,
    build_pack_report,
    load_pack_report,
    write_pack_report,
)

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"


# ---------------
# In-memory API
# ---------------


def compress_bytes(data: bytes, *, workers: int = 1) -> list[list[int]]:
    """Split + encode in memory. Returns 16 code lists, index-ordered."""
    w = validate_workers(workers)
    chunks = split_chunks(bytes(data), N_CHUNKS)
    return values_or_raise(run_chunks(lambda i: encode_codes(chunks[i]), workers=w))


def decompress_codes(code_lists: Sequence[Sequence[int]], *, workers: int = 1) -> bytes:
    """Inverse of compress_bytes. An empty code list is an empty chunk."""
    w = validate_workers(workers)
    if len(code_lists) != N_CHUNKS:
        raise UsageError(f"attesi {N_CHUNKS} chunk, ricevuti {len(code_lists)}")

    def _one(i: int) -> bytes:
        codes = code_lists[i]
        return decode_codes(codes) if len(codes) else b""

    return b"".join(values_or_raise(run_chunks(_one, workers=w)))


# ---------------
# Filesystem API
# ---------------


def packfile(
    input_path: Path,
    output_dir: Path,
    *,
    workers: int = 1,
    byteorder: str = BYTEORDER_DEFAULT,
) -> PackReport:
    """Compress input_path into output_dir (16 artifacts + pack report)."""
    w = validate_workers(workers)
    bo = validate_byteorder(byteorder)

    src = Path(input_path)
    out = Path(output_dir)
    try:
        data = src.read_bytes()
    except OSError as e:
        raise ArtifactIOError(f"cannot read input {src}: {e}") from e
    try:
        out.mkdir(parents=True, exist_ok=True)
        # a stale report would describe someone else's artifacts
        (out / REPORT_JSON).unlink(missing_ok=True)
        (out / REPORT_TXT).unlink(missing_ok=True)
    except OSError as e:
        raise ArtifactIOError(f"cannot prepare output dir {out}: {e}") from e

    chunks = split_chunks(data, N_CHUNKS)

    def _pack_one(i: int) -> ChunkStat:
        name = artifact_name(i)
        codes = encode_codes(chunks[i])
        n_out = write_artifact(out / name, codes, bo)
        return ChunkStat(
            index=i, artifact=name, bytes_in=len(chunks[i]), codes=len(codes), bytes_out=n_out
        )

    stats = values_or_raise(run_chunks(_pack_one, workers=w))
    rep = build_pack_report(stats, workers=w, byteorder=bo)
    try:
        write_pack_report(out, rep)
    except OSError as e:
        raise ArtifactIOError(f"cannot write {REPORT_JSON}: {e}") from e
    return rep


@dataclass(frozen=True)
class RestoreResult:
    """Per-chunk outcome of a decompress run, in chunk index order."""

    outcomes: tuple[ChunkOutcome[bytes], ...]
    report: PackReport | None = None

    @property
    def failures(self) -> list[ChunkFailure]:
        return failures_of(self.outcomes)

    @property
    def ok(self) -> bool:
        return not self.failures

    def status(self, index: int) -> str:
        oc = self.outcomes[index]
        if not oc.ok:
            return STATUS_FAILED
        return STATUS_EMPTY if not oc.value else STATUS_OK

    @property
    def data(self) -> bytes:
        """Concatenated output. Raises ChunkFailures if any chunk failed."""
        return b"".join(values_or_raise(self.outcomes))

    def summary_lines(self) -> list[str]:
        lines: list[str] = []
        for oc in self.outcomes:
            st = self.status(oc.index)
            if st == STATUS_FAILED:
                assert oc.failure is not None
                lines.append(f"chunk[{oc.index:02d}] FAILED {oc.failure.kind}: {oc.failure.message}")
            else:
                lines.append(f"chunk[{oc.index:02d}] {st} {len(oc.value or b'')} B")
        return lines


def restore_dir(
    input_dir: Path,
    *,
    workers: int = 1,
    byteorder: str | None = None,
) -> RestoreResult:
    """Decode every artifact in input_dir. Never raises for chunk-local problems."""
    w = validate_workers(workers)
    bo_arg = validate_byteorder(byteorder) if byteorder is not None else None

    src = Path(input_dir)
    if not src.is_dir():
        raise ArtifactIOError(f"input dir not found: {src}")

    rep = load_pack_report(src)
    if rep is not None and rep.chunks != N_CHUNKS:
        raise CorruptStream(f"{REPORT_JSON}: attesi {N_CHUNKS} chunk, trovati {rep.chunks}")
    # precedence: explicit byteorder > report > default
    bo = bo_arg or (rep.byteorder if rep is not None else BYTEORDER_DEFAULT)

    def _restore_one(i: int) -> bytes:
        name = artifact_name(i)
        codes = read_artifact(src / name, bo)
        st = rep.stat(i) if rep is not None else None
        if not codes:
            if st is not None and st.empty:
                return b""
            raise EmptyArtifact(f"artifact vuoto: {name}")
        if st is not None and st.codes != len(codes):
            raise CorruptStream(f"{name}: {len(codes)} codes, report says {st.codes}")
        data = decode_codes(codes)
        if st is not None and len(data) != st.bytes_in:
            raise CorruptStream(f"{name}: decoded {len(data)} bytes, report says {st.bytes_in}")
        return data

    return RestoreResult(outcomes=tuple(run_chunks(_restore_one, workers=w)), report=rep)


def unpackdir(
    input_dir: Path,
    output_path: Path,
    *,
    workers: int = 1,
    byteorder: str | None = None,
) -> RestoreResult:
    """Decompress input_dir into output_path. Nothing is written if a chunk failed."""
    res = restore_dir(input_dir, workers=workers, byteorder=byteorder)
    if not res.ok:
        raise ChunkFailures(res.failures, summary=res.summary_lines())
    out = Path(output_path)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(res.data)
    except OSError as e:
        raise ArtifactIOError(f"cannot write output {out}: {e}") from e
    return res
