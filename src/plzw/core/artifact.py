"""Artifact codec: one chunk's code list <-> flat binary blob.

Layout:
  [code0][code1]...[codeN-1]

Each code is a 32-bit signed integer. No header, no length prefix, no
checksum: end of data is the only terminator. An empty chunk is a zero-length
blob.

Byte order defaults to the host's ("native"), like the historical tool.
"little" / "big" pin it explicitly for artifacts that move between machines;
the chosen order is recorded in the pack report, not in the blob.
"""

from __future__ import annotations

import struct
from collections.abc import Sequence
from pathlib import Path

from plzw.errors import ArtifactIOError, ConfigurationError, MissingArtifact, TruncatedArtifact

ARTIFACT_NAME_FMT = "compressed_part_{index}.bin"
CODE_SIZE = 4

BYTEORDERS: dict[str, str] = {"native": "=", "little": "<", "big": ">"}
BYTEORDER_DEFAULT = "native"

_I32_MIN = -(1 << 31)
_I32_MAX = (1 << 31) - 1


def artifact_name(index: int) -> str:
    return ARTIFACT_NAME_FMT.format(index=int(index))


def validate_byteorder(byteorder: str) -> str:
    bo = str(byteorder).strip().lower()
    if bo not in BYTEORDERS:
        raise ConfigurationError(
            f"byteorder non supportato: {byteorder!r} (ammessi: {', '.join(BYTEORDERS)})"
        )
    return bo


def pack_codes(codes: Sequence[int], byteorder: str = BYTEORDER_DEFAULT) -> bytes:
    prefix = BYTEORDERS[validate_byteorder(byteorder)]
    for c in codes:
        if not (_I32_MIN <= c <= _I32_MAX):
            raise ValueError(f"code {c} does not fit in 32 bits")
    return struct.pack(f"{prefix}{len(codes)}i", *codes)


def unpack_codes(raw: bytes, byteorder: str = BYTEORDER_DEFAULT) -> list[int]:
    prefix = BYTEORDERS[validate_byteorder(byteorder)]
    b = bytes(raw)
    if len(b) % CODE_SIZE:
        raise TruncatedArtifact(
            f"artifact length {len(b)} is not a multiple of {CODE_SIZE}"
        )
    return list(struct.unpack(f"{prefix}{len(b) // CODE_SIZE}i", b))


def write_artifact(path: Path, codes: Sequence[int], byteorder: str = BYTEORDER_DEFAULT) -> int:
    """Write one artifact. Returns the number of bytes written."""
    blob = pack_codes(codes, byteorder)
    p = Path(path)
    try:
        p.write_bytes(blob)
    except OSError as e:
        raise ArtifactIOError(f"cannot write artifact {p}: {e}") from e
    return len(blob)


def read_artifact(path: Path, byteorder: str = BYTEORDER_DEFAULT) -> list[int]:
    """Read one artifact. A zero-length file yields []; the caller decides if that is legit."""
    p = Path(path)
    if not p.is_file():
        raise MissingArtifact(f"artifact not found: {p.name}")
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise ArtifactIOError(f"cannot read artifact {p.name}: {e}") from e
    return unpack_codes(raw, byteorder)
