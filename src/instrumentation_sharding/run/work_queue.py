"""
Work queue handing a node's test classes to concurrent device workers.

Workers call take_one() or take_batch(n) until they get None. Every class is
handed out exactly once, lowest class name first. Classes taken by a worker
that stops responding are not handed to anyone else.
"""

import threading
from collections import deque
from typing import Iterable, Iterator, List, Optional

from ..models import TestClass


class TestClassQueue:
    """
    Thread-safe FIFO over a sorted set of test classes.

    Example:
        queue = TestClassQueue(descriptor.owned_classes)
        batch = queue.take_batch(descriptor.batch_size)
        while batch is not None:
            run_on_device(batch)
            batch = queue.take_batch(descriptor.batch_size)
    """

    __test__ = False  # not a pytest test class

    def __init__(self, test_classes: Iterable[TestClass]):
        self._classes = deque(sorted(test_classes))
        self._lock = threading.Lock()

    def size(self) -> int:
        """Number of classes not yet handed out."""
        with self._lock:
            return len(self._classes)

    def __len__(self) -> int:
        return self.size()

    def take_one(self) -> Optional[TestClass]:
        """Remove and return the next class, or None when the queue is exhausted."""
        with self._lock:
            if self._classes:
                return self._classes.popleft()
            return None

    def take_batch(self, count: int) -> Optional[List[TestClass]]:
        """
        Remove and return up to count classes from the head of the queue.

        Args:
            count: Maximum batch size (positive)

        Returns:
            Between 1 and count classes in order, or None when the queue is exhausted
        """
        if count < 1:
            raise ValueError(f"Batch size must be positive, got {count}")

        with self._lock:
            batch = []
            while len(batch) < count and self._classes:
                batch.append(self._classes.popleft())
        return batch or None

    def __iter__(self) -> Iterator[TestClass]:
        """Drain the queue one class at a time."""
        return iter(self.take_one, None)


def class_names(test_classes: Optional[Iterable[TestClass]]) -> Optional[List[str]]:
    """Class names of a batch, or None for a missing or empty batch."""
    if not test_classes:
        return None
    return [tc.class_name for tc in test_classes]
