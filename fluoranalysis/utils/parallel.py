"""Pixel partitioning and executor helpers.

Every parallelised routine in the package is written as one function that
processes a contiguous range ``[start, stop)`` of row-major flat pixel
indices. Sequential mode runs a single partition covering every pixel in the
calling process; parallel mode splits the range into one partition per
worker. Results are always returned in partition order, so the outcome does
not depend on which worker finishes first.
"""

import logging
import multiprocessing
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

Partition = Tuple[int, int]


def resolve_workers(n_workers: Optional[int] = None) -> int:
    """Return the number of workers to use (default: CPU count - 1)."""
    if n_workers is None:
        n_workers = max(1, multiprocessing.cpu_count() - 1)
    return max(1, int(n_workers))


def partition_range(length: int, n_parts: int) -> List[Partition]:
    """Split ``range(length)`` into at most ``n_parts`` contiguous partitions.

    Partition sizes differ by at most one element. Empty partitions are not
    returned.

    Args:
        length: Number of items to split
        n_parts: Requested number of partitions

    Returns:
        List of (start, stop) tuples covering ``range(length)`` in order
    """
    n_parts = max(1, min(n_parts, length))
    base, extra = divmod(length, n_parts)
    partitions = []
    start = 0
    for i in range(n_parts):
        stop = start + base + (1 if i < extra else 0)
        if stop > start:
            partitions.append((start, stop))
        start = stop
    return partitions


@contextmanager
def pixel_executor(
    parallel: bool,
    n_workers: Optional[int] = None,
    use_processes: bool = True
) -> Iterator[Optional[Executor]]:
    """Yield an executor for parallel mode, or None for sequential mode.

    The pool is shut down (joined) when the context exits.
    """
    if not parallel:
        yield None
        return

    workers = resolve_workers(n_workers)
    pool_cls = ProcessPoolExecutor if use_processes else ThreadPoolExecutor
    logger.debug(f"Starting {pool_cls.__name__} with {workers} workers")
    with pool_cls(max_workers=workers) as executor:
        yield executor


def map_partitions(
    func: Callable[..., Any],
    length: int,
    executor: Optional[Executor],
    n_parts: int,
    *args: Any
) -> List[Any]:
    """Apply ``func(*args, start, stop)`` over partitions of ``range(length)``.

    Args:
        func: Module-level callable (must be picklable for process pools)
        length: Total number of flat pixel indices
        executor: Executor from ``pixel_executor``, or None for sequential
        n_parts: Number of partitions used in parallel mode
        *args: Leading positional arguments passed to every call

    Returns:
        Results in partition order
    """
    if executor is None:
        return [func(*args, 0, length)] if length > 0 else []

    partitions = partition_range(length, n_parts)
    results: List[Any] = [None] * len(partitions)

    future_to_index = {
        executor.submit(func, *args, start, stop): i
        for i, (start, stop) in enumerate(partitions)
    }
    for future in as_completed(future_to_index):
        results[future_to_index[future]] = future.result()

    return results
