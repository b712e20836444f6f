"""
Batch dispatch to device workers.

Runs one worker thread per execution target (device serial, emulator name,
...). Each worker pulls batches from the shared queue and hands them to
run_batch until the queue is exhausted.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Hashable, List, Sequence

from ..models import TestClass
from .work_queue import TestClassQueue

logger = logging.getLogger(__name__)

BatchRunner = Callable[[Hashable, List[TestClass]], None]


def _drain(queue: TestClassQueue, target: Hashable, run_batch: BatchRunner, batch_size: int) -> List[TestClass]:
    handled: List[TestClass] = []
    batch = queue.take_batch(batch_size)
    while batch is not None:
        logger.debug("%s: running %d classes", target, len(batch))
        run_batch(target, batch)
        handled.extend(batch)
        batch = queue.take_batch(batch_size)
    return handled


def dispatch_batches(
    queue: TestClassQueue,
    targets: Sequence[Hashable],
    run_batch: BatchRunner,
    batch_size: int,
) -> Dict[Hashable, List[TestClass]]:
    """
    Drain a work queue across concurrent targets.

    Args:
        queue: Work queue for this node
        targets: Execution targets, one worker each
        run_batch: Called as run_batch(target, batch) for every batch handed out
        batch_size: Classes per batch

    Returns:
        Mapping of target to the classes it was handed, in handout order

    Raises:
        The first exception raised by run_batch, after all workers have stopped.
        Classes still queued at that point are not reassigned.
    """
    if not targets:
        raise ValueError("At least one execution target is required")
    if len(set(targets)) != len(targets):
        dupes = sorted({str(t) for t in targets if list(targets).count(t) > 1})
        raise ValueError(f"Duplicate execution targets: {dupes}")
    if batch_size < 1:
        raise ValueError(f"Batch size must be positive, got {batch_size}")

    handled: Dict[Hashable, List[TestClass]] = {}
    first_error = None

    with ThreadPoolExecutor(max_workers=len(targets)) as pool:
        futures = {
            pool.submit(_drain, queue, target, run_batch, batch_size): target
            for target in targets
        }
        for future in as_completed(futures):
            target = futures[future]
            try:
                handled[target] = future.result()
            except Exception as e:
                logger.error("Worker for %s failed: %s", target, e)
                if first_error is None:
                    first_error = e

    if first_error is not None:
        raise first_error

    return handled
