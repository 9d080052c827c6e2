"""Bounded-concurrency scheduler over an ordered execution plan."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkCursor:
    """Shared index into the plan; each index is claimed exactly once."""

    def __init__(self, size: int) -> None:
        self._size = size
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> int | None:
        with self._lock:
            if self._next >= self._size:
                return None
            index = self._next
            self._next += 1
            return index


class FailureCounter:
    """Thread-safe count of non-zero outcomes."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def run_with_concurrency(
    items: Sequence[T],
    limit: int,
    work: Callable[[T], int],
) -> int:
    """Run ``work`` on every item with at most ``limit`` in flight; return failure count.

    Workers claim items greedily in plan order, so with ``limit == 1`` the
    execution order is exactly the plan order. With a higher limit only the
    start order follows the plan.
    """

    if not items:
        return 0

    cursor = WorkCursor(len(items))
    failures = FailureCounter()
    error_holder: list[Exception] = []
    error_lock = threading.Lock()

    def _worker() -> None:
        while (index := cursor.claim()) is not None:
            try:
                status = work(items[index])
            except Exception as exc:  # noqa: BLE001
                with error_lock:
                    error_holder.append(exc)
                return
            if status != 0:
                failures.increment()

    worker_count = min(max(1, limit), len(items))
    logger.debug("Starting %d worker(s) for %d item(s)", worker_count, len(items))
    threads = [
        threading.Thread(target=_worker, daemon=True, name=f"workspaces-run-{number}")
        for number in range(worker_count)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    logger.debug("All workers finished: failures=%d", failures.value)

    if error_holder:
        raise error_holder[0]
    return failures.value
