from __future__ import annotations

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def iter_batches(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Consecutive fixed-size chunks in input order; the last may be shorter."""
    if size <= 0:
        raise ValueError(f"batch size must be > 0, got {size}")
    for i in range(0, len(items), size):
        yield list(items[i : i + size])


def batch_count(n_items: int, size: int) -> int:
    return (n_items + size - 1) // size
