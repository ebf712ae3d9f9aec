from __future__ import annotations

import pytest

from plzw.core.chunking import N_CHUNKS, split_chunks


def test_sixteen_chunks_cover_input() -> None:
    data = bytes(range(256)) * 3 + b"tail!"
    chunks = split_chunks(data)
    assert N_CHUNKS == 16
    assert len(chunks) == 16
    assert b"".join(chunks) == data
    size = len(data) // 16
    assert all(len(c) == size for c in chunks[:-1])
    assert len(chunks[-1]) == size + len(data) % 16


def test_exact_multiple() -> None:
    data = b"x" * 160
    assert [len(c) for c in split_chunks(data)] == [10] * 16


def test_empty_input_gives_sixteen_empty_chunks() -> None:
    assert split_chunks(b"") == [b""] * 16


@pytest.mark.parametrize("n", [1, 5, 15])
def test_short_input_is_degenerate(n: int) -> None:
    data = bytes(range(n))
    chunks = split_chunks(data)
    assert chunks[:-1] == [b""] * 15
    assert chunks[-1] == data


def test_custom_chunk_count() -> None:
    chunks = split_chunks(b"abcdefg", 3)
    assert chunks == [b"ab", b"cd", b"efg"]


def test_invalid_chunk_count() -> None:
    with pytest.raises(ValueError):
        split_chunks(b"abc", 0)
