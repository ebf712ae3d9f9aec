"""LZW encode/decode for a single chunk.

Both sides rebuild the same dictionary step by step, so nothing but the codes
is ever stored. The dictionary is a local of each call.

Codes are plain ints with no width limit and no dictionary reset.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from plzw.core.dictionary import SEED_SIZE, DecodeDictionary, EncodeDictionary
from plzw.errors import CorruptStream


def encode_codes(data: bytes) -> list[int]:
    """Encode one chunk. Empty input -> empty code list."""
    d = EncodeDictionary()
    out: list[int] = []
    prefix = b""
    for b in bytes(data):
        sym = bytes((b,))
        cand = prefix + sym
        if cand in d:
            prefix = cand
            continue
        out.append(d.code(prefix))
        d.add(cand)
        prefix = sym
    if prefix:
        out.append(d.code(prefix))
    return out


def decode_codes(codes: Sequence[int] | Iterable[int]) -> bytes:
    """Decode one chunk's code list.

    Raises:
      ValueError: empty code list (callers decide what an empty chunk means).
      CorruptStream: a code that is neither known nor the next code to assign.
    """
    it = iter(codes)
    try:
        first = int(next(it))
    except StopIteration:
        raise ValueError("decode_codes: lista di codici vuota") from None

    if not (0 <= first < SEED_SIZE):
        raise CorruptStream(f"first code {first} is not a seed code (0..{SEED_SIZE - 1})")

    d = DecodeDictionary()
    prev = d.get(first)
    assert prev is not None
    out = bytearray(prev)

    for pos, raw in enumerate(it, start=1):
        code = int(raw)
        cur = d.get(code)
        if cur is None:
            if code != d.next_code():
                raise CorruptStream(
                    f"invalid code {code} at position {pos} (dictionary size {len(d)})"
                )
            # KwKwK: code not yet in the dictionary
            cur = prev + prev[:1]
        out += cur
        d.add(prev + cur[:1])
        prev = cur

    return bytes(out)
