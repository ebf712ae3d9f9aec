"""Parallel chunk dispatcher.

One wave of worker threads per call:
  - worker k owns the contiguous chunk range [k*per, (k+1)*per), per = n_chunks // workers
  - no chunk is touched by two workers, so there are no locks
  - the executor exit is the only barrier; results are placed by chunk index,
    never by completion order

A failing chunk becomes a ChunkOutcome with a ChunkFailure; siblings keep going.
Anything that is not a PLZWError/OSError is a bug and propagates after the join.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generic, TypeVar

from plzw.core.chunking import N_CHUNKS
from plzw.errors import ChunkFailure, ChunkFailures, ConfigurationError, PLZWError

T = TypeVar("T")

LEGAL_WORKERS: tuple[int, ...] = (1, 2, 4, 8, 16)


@dataclass(frozen=True)
class ChunkOutcome(Generic[T]):
    index: int
    value: T | None = None
    failure: ChunkFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def validate_workers(workers: int, n_chunks: int = N_CHUNKS) -> int:
    try:
        w = int(workers)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"numero di thread non valido: {workers!r}") from e
    if w not in LEGAL_WORKERS or n_chunks % w:
        raise ConfigurationError(
            f"numero di thread non supportato: {w} (ammessi: {', '.join(map(str, LEGAL_WORKERS))})"
        )
    return w


def worker_ranges(n_chunks: int, workers: int) -> list[range]:
    w = validate_workers(workers, n_chunks)
    per = n_chunks // w
    return [range(k * per, (k + 1) * per) for k in range(w)]


def _run_range(rng: range, fn: Callable[[int], T]) -> list[ChunkOutcome[T]]:
    out: list[ChunkOutcome[T]] = []
    for i in rng:
        try:
            out.append(ChunkOutcome(index=i, value=fn(i)))
        except (PLZWError, OSError, ValueError) as e:
            out.append(ChunkOutcome(index=i, failure=ChunkFailure.from_exc(i, e)))
    return out


def run_chunks(
    fn: Callable[[int], T], *, workers: int = 1, n_chunks: int = N_CHUNKS
) -> list[ChunkOutcome[T]]:
    """Run fn(index) for every chunk index; return outcomes in index order."""
    ranges = worker_ranges(n_chunks, workers)

    if len(ranges) == 1:
        batches = [_run_range(ranges[0], fn)]
    else:
        with ThreadPoolExecutor(max_workers=len(ranges), thread_name_prefix="plzw") as ex:
            futs = [ex.submit(_run_range, rng, fn) for rng in ranges]
        # executor exit joined every worker
        batches = [fut.result() for fut in futs]

    slots: list[ChunkOutcome[T] | None] = [None] * n_chunks
    for batch in batches:
        for oc in batch:
            slots[oc.index] = oc
    missing = [i for i, s in enumerate(slots) if s is None]
    if missing:
        raise AssertionError(f"dispatch: chunk senza esito: {missing}")
    return [s for s in slots if s is not None]


def failures_of(outcomes: Sequence[ChunkOutcome[T]]) -> list[ChunkFailure]:
    return [oc.failure for oc in outcomes if oc.failure is not None]


def values_or_raise(outcomes: Sequence[ChunkOutcome[T]]) -> list[T]:
    """Index-ordered values, or ChunkFailures listing every failed chunk."""
    fails = failures_of(outcomes)
    if fails:
        raise ChunkFailures(fails)
    return [oc.value for oc in outcomes]  # type: ignore[misc]
