from __future__ import annotations

import heapq
from collections import deque
from itertools import count
from typing import Callable, Deque, List, Optional, Tuple


class ReadyContainer:
    """
    Processes waiting for a core.

    With no ``key`` the container is plain FIFO. With a ``key`` (the remaining
    burst of a pid) it hands out the smallest key first; equal keys come out
    in insertion order. Keys are read once, at insertion, so a pid's key must
    not change while it waits.
    """

    def __init__(self, key: Optional[Callable[[str], int]] = None) -> None:
        self._key = key
        self._fifo: Deque[str] = deque()
        self._heap: List[Tuple[int, int, str]] = []
        self._seq = count()

    def insert(self, pid: str) -> None:
        if self._key is None:
            self._fifo.append(pid)
        else:
            heapq.heappush(self._heap, (self._key(pid), next(self._seq), pid))

    def take_next(self) -> str:
        if self.is_empty():
            raise IndexError("take_next from an empty ready container")
        if self._key is None:
            return self._fifo.popleft()
        return heapq.heappop(self._heap)[2]

    def peek(self) -> Optional[str]:
        if self._key is None:
            return self._fifo[0] if self._fifo else None
        return self._heap[0][2] if self._heap else None

    def is_empty(self) -> bool:
        return not (self._fifo or self._heap)

    def __len__(self) -> int:
        return len(self._fifo) + len(self._heap)
