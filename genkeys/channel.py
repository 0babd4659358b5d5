"""
Thread-safe handoff queue between workers and the coordinator.
"""

import threading
from collections import deque
from typing import Any, Optional


class ResultChannel:
    """Unbounded multi-producer / single-consumer mailbox.

    push() never blocks. Items come out in push order for any single
    producer; ordering across producers is whatever the lock decides.
    Every pushed item is returned by exactly one pop.
    """

    def __init__(self):
        self._items = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)

    def push(self, item: Any):
        """Append an item and wake one waiting consumer."""
        with self._not_empty:
            self._items.append(item)
            self._not_empty.notify()

    def pop(self, timeout: Optional[float] = None) -> Optional[Any]:
        """Remove and return the oldest item.

        Blocks until an item is available. With a timeout, returns None if
        nothing arrived in time (nothing is consumed).
        """
        with self._not_empty:
            if not self._not_empty.wait_for(lambda: self._items, timeout=timeout):
                return None
            return self._items.popleft()

    def try_pop(self) -> Optional[Any]:
        """Remove and return the oldest item, or None if the channel is empty."""
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    def empty(self) -> bool:
        # May be stale as soon as it returns; diagnostics only
        with self._lock:
            return not self._items

    def __len__(self):
        with self._lock:
            return len(self._items)
