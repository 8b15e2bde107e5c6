"""Ordered thread-pool mapping."""

from __future__ import annotations

from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Deque, Iterable, Iterator, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def ordered_map(func: Callable[[T], R], items: Iterable[T], max_workers: int) -> Iterator[R]:
    """Apply ``func`` to ``items`` and yield results in input order.

    With ``max_workers == 1`` items run inline one after another. Otherwise at
    most ``2 * max_workers`` calls are in flight, so the input is still read
    lazily and each result is yielded as soon as everything before it is done.
    """
    if max_workers <= 1:
        for it in items:
            yield func(it)
        return

    window = max_workers * 2
    pending: Deque[Future] = deque()
    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        for it in items:
            pending.append(ex.submit(func, it))
            if len(pending) >= window:
                yield pending.popleft().result()
        while pending:
            yield pending.popleft().result()
