from __future__ import annotations

N_CHUNKS = 16


def split_chunks(data: bytes, n_chunks: int = N_CHUNKS) -> list[bytes]:
    """
    Split in n_chunks fette contigue.

    Ogni chunk ha len(data) // n_chunks byte, l'ultimo prende anche il resto.
    Con len(data) < n_chunks i primi chunk sono vuoti e l'ultimo ha tutto:
    e' voluto, i worker devono gestire chunk vuoti.
    """
    if n_chunks <= 0:
        raise ValueError(f"n_chunks must be > 0, got {n_chunks}")
    b = bytes(data)
    size = len(b) // n_chunks
    chunks = [b[i * size : (i + 1) * size] for i in range(n_chunks - 1)]
    chunks.append(b[(n_chunks - 1) * size :])
    return chunks
